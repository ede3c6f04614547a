"""Permission catalog: the flat, immutable set of known ``resource.action`` names.

Loaded once per session (from the ``permissions`` table or the constants) and
never mutated afterwards.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from portal.errors import UnknownPermission

DEFAULT_CATEGORY = 'General'


@dataclass(frozen=True)
class Permission:
    name: str
    category: str = DEFAULT_CATEGORY
    description: Optional[str] = None

    @property
    def resource(self) -> str:
        return self.name.split('.', 1)[0]

    @property
    def action(self) -> str:
        return self.name.split('.', 1)[1]


def split_permission_name(name: str) -> Tuple[str, str]:
    if not isinstance(name, str) or '.' not in name:
        raise ValueError(f"Permission name '{name}' missing RESOURCE.ACTION pattern")
    resource, action = name.split('.', 1)
    if not resource or not action:
        raise ValueError(f"Permission name '{name}' missing RESOURCE.ACTION pattern")
    return resource, action


class PermissionCatalog:
    def __init__(self, permissions: Iterable[Permission]):
        ordered: List[Permission] = []
        by_name: Dict[str, Permission] = {}
        for p in permissions:
            split_permission_name(p.name)
            if p.name in by_name:
                continue
            by_name[p.name] = p
            ordered.append(p)
        self._ordered: Tuple[Permission, ...] = tuple(ordered)
        self._by_name: Mapping[str, Permission] = by_name
        by_resource: Dict[str, set] = {}
        for p in ordered:
            by_resource.setdefault(p.resource, set()).add(p)
        self._by_resource = {r: frozenset(ps) for r, ps in by_resource.items()}
        self._names = frozenset(by_name)

    @classmethod
    def from_rows(cls, rows: Iterable) -> 'PermissionCatalog':
        """Build from ``(name, category)`` pairs, dicts or objects with ``name``/``category``."""
        perms = []
        for row in rows:
            if isinstance(row, Permission):
                perms.append(row)
            elif isinstance(row, tuple):
                name, category = row[0], row[1] if len(row) > 1 else None
                perms.append(Permission(name=name, category=category or DEFAULT_CATEGORY))
            elif isinstance(row, dict):
                perms.append(Permission(
                    name=row['name'],
                    category=row.get('category') or DEFAULT_CATEGORY,
                    description=row.get('description'),
                ))
            else:
                perms.append(Permission(
                    name=row.name,
                    category=getattr(row, 'category', None) or DEFAULT_CATEGORY,
                    description=getattr(row, 'description', None),
                ))
        return cls(perms)

    def __contains__(self, name) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._ordered)

    @property
    def names(self) -> FrozenSet[str]:
        return self._names

    def list_all(self) -> Tuple[Permission, ...]:
        return self._ordered

    def by_resource(self, resource: str) -> FrozenSet[Permission]:
        return self._by_resource.get(resource, frozenset())

    def resources(self) -> List[str]:
        return sorted(self._by_resource)

    def exists(self, name: str) -> bool:
        return name in self._names

    def get(self, name: str) -> Permission:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownPermission(name) from None

    def require(self, names: Iterable[str]) -> FrozenSet[str]:
        """Return ``names`` as a frozenset, raising UnknownPermission for the first unknown one."""
        out = frozenset(names)
        for name in sorted(out):
            if name not in self._names:
                raise UnknownPermission(name)
        return out

    def grouped(self, aggregate_for=None) -> Dict[str, Dict[str, List[Permission]]]:
        """Group for display: category -> resource -> permissions.

        Categories and resources sort alphabetically. Within a resource the
        aggregate action sorts first, then the rest alphabetically by action.
        ``aggregate_for`` maps a resource name to its aggregate action
        (defaults to ``'all'``).
        """
        aggregate_for = aggregate_for or (lambda resource: 'all')
        grouped: Dict[str, Dict[str, List[Permission]]] = {}
        for p in self._ordered:
            grouped.setdefault(p.category or DEFAULT_CATEGORY, {}).setdefault(p.resource, []).append(p)
        out: Dict[str, Dict[str, List[Permission]]] = {}
        for category in sorted(grouped):
            resources = grouped[category]
            out[category] = {}
            for resource in sorted(resources):
                aggregate = aggregate_for(resource)
                out[category][resource] = sorted(
                    resources[resource],
                    key=lambda p: (p.action != aggregate, p.action),
                )
        return out


def catalog_from_constants() -> PermissionCatalog:
    from portal.constants.permissions import iter_catalog_rows
    return PermissionCatalog.from_rows(iter_catalog_rows())


def load_catalog(session=None) -> PermissionCatalog:
    """Load the catalog from the ``permissions`` table."""
    from sqlalchemy import select
    from portal.models.authz import Permission as PermissionRow
    if session is None:
        from portal import get_db
        session = get_db()
    rows = session.execute(select(PermissionRow).order_by(PermissionRow.id.asc())).scalars().all()
    return PermissionCatalog.from_rows(rows)


__all__ = [
    'Permission', 'PermissionCatalog', 'split_permission_name', 'catalog_from_constants',
    'load_catalog', 'DEFAULT_CATEGORY',
]

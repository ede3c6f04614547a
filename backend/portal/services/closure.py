"""Closure resolver for role permission sets.

A permission set is *closed* when, for every resource whose aggregate
permission exists in the catalog::

    aggregate in S  <=>  every catalogued child of that resource is in S

Children missing from the catalog are treated as present, so a resource that
only defines ``x.all`` and ``x.read`` closes over the pair it has.

Usage:
    rules = DecompositionRules.from_constants()
    resolver = ClosureResolver(catalog, rules)
    perms = resolver.apply(frozenset(), 'shops.read', True)
    perms = resolver.apply(perms, 'shops.write', True)   # adds shops.all
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set, Tuple

from portal.errors import UnknownPermission
from portal.services.catalog import PermissionCatalog, split_permission_name


@dataclass(frozen=True)
class DecompositionRule:
    aggregate: str
    children: Tuple[str, str]

    def __post_init__(self):
        if len(self.children) != 2 or self.aggregate in self.children:
            raise ValueError(f'Invalid decomposition rule {self.aggregate} -> {self.children}')

    def role_of(self, action: str) -> Optional[str]:
        if action == self.aggregate:
            return 'aggregate'
        if action in self.children:
            return 'child'
        return None


class DecompositionRules:
    """Resource name -> DecompositionRule, with a documented default."""

    def __init__(self, default: DecompositionRule, overrides: Optional[Mapping[str, DecompositionRule]] = None):
        self.default = default
        self.overrides: Dict[str, DecompositionRule] = dict(overrides or {})

    @classmethod
    def from_constants(cls) -> 'DecompositionRules':
        from portal.constants.permissions import DEFAULT_DECOMPOSITION, DECOMPOSITION_OVERRIDES
        agg, children = DEFAULT_DECOMPOSITION
        return cls(
            DecompositionRule(agg, tuple(children)),
            {r: DecompositionRule(a, tuple(c)) for r, (a, c) in DECOMPOSITION_OVERRIDES.items()},
        )

    def for_resource(self, resource: str) -> DecompositionRule:
        return self.overrides.get(resource, self.default)

    def aggregate_for(self, resource: str) -> str:
        return self.for_resource(resource).aggregate


class ClosureResolver:
    def __init__(self, catalog: PermissionCatalog, rules: Optional[DecompositionRules] = None):
        self.catalog = catalog
        self.rules = rules or DecompositionRules.from_constants()

    # --- names ---
    def _family(self, resource: str) -> Tuple[str, Tuple[str, str]]:
        rule = self.rules.for_resource(resource)
        return f'{resource}.{rule.aggregate}', tuple(f'{resource}.{c}' for c in rule.children)

    def _catalogued_children(self, resource: str) -> Tuple[str, ...]:
        _, children = self._family(resource)
        return tuple(c for c in children if c in self.catalog)

    # --- boundary ---
    @staticmethod
    def coerce(raw) -> FrozenSet[str]:
        """Normalize a permissions payload (list, single string, None) into a frozenset."""
        if raw is None:
            return frozenset()
        if isinstance(raw, str):
            return frozenset([raw]) if raw else frozenset()
        return frozenset(p for p in raw if isinstance(p, str) and p)

    def normalize(self, raw) -> FrozenSet[str]:
        """Coerce and drop names the catalog does not know (stored rows may predate the catalog)."""
        return frozenset(p for p in self.coerce(raw) if p in self.catalog)

    # --- resolution ---
    def apply(self, current: Iterable[str], permission: str, turn_on: bool) -> FrozenSet[str]:
        """Return the closed set after setting ``permission`` to ``turn_on``."""
        if permission not in self.catalog:
            raise UnknownPermission(permission)
        result: Set[str] = set(current)
        resource, action = split_permission_name(permission)
        rule = self.rules.for_resource(resource)
        kind = rule.role_of(action)
        aggregate, children = self._family(resource)

        if kind == 'aggregate':
            family = {aggregate, *children}
            if turn_on:
                result |= {p for p in family if p in self.catalog}
            else:
                result -= family
        elif kind == 'child':
            if turn_on:
                result.add(permission)
                if aggregate in self.catalog and all(c in result for c in self._catalogued_children(resource)):
                    result.add(aggregate)
            else:
                result.discard(permission)
                result.discard(aggregate)
        elif turn_on:
            result.add(permission)
        else:
            result.discard(permission)
        return frozenset(result)

    def toggle(self, current: Iterable[str], permission: str) -> FrozenSet[str]:
        """Flip ``permission`` based on its current membership (a checkbox click)."""
        current = frozenset(current)
        return self.apply(current, permission, permission not in current)

    def apply_many(self, current: Iterable[str], edits: Iterable[Tuple[str, bool]]) -> FrozenSet[str]:
        result = frozenset(current)
        for permission, turn_on in edits:
            result = self.apply(result, permission, turn_on)
        return result

    def close_requested(self, requested: Iterable[str]) -> FrozenSet[str]:
        """Build a closed set by switching on every requested permission in turn."""
        names = self.coerce(requested)
        return self.apply_many(frozenset(), ((p, True) for p in sorted(names)))

    # --- checks ---
    def violations(self, permissions: Iterable[str]) -> Set[str]:
        """Resources for which ``permissions`` breaks the closure invariant."""
        perms = frozenset(permissions)
        bad: Set[str] = set()
        for resource in self._resources_with_aggregate():
            aggregate, _ = self._family(resource)
            children = self._catalogued_children(resource)
            if not children:
                continue
            if (aggregate in perms) != all(c in perms for c in children):
                bad.add(resource)
        return bad

    def is_closed(self, permissions: Iterable[str]) -> bool:
        return not self.violations(permissions)

    def _resources_with_aggregate(self) -> Set[str]:
        return {r for r in self.catalog.resources() if self._family(r)[0] in self.catalog}


__all__ = ['DecompositionRule', 'DecompositionRules', 'ClosureResolver']

"""Route authorization engine.

Holds the ordered route table (portal groups concatenated, first path match
wins) and decides, per principal, which routes are reachable.

``authority`` on a route mixes role names and permission names; a principal
passes if it holds ANY of them, as a role name or as an effective permission.
An empty authority list admits any authenticated principal.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from portal.constants.roles import LEGACY_ALIASES
from portal.errors import RouteNotFound, RouteTableError

log = logging.getLogger(__name__)

PUBLIC_PORTAL = 'public'

DENIED_NOT_FOUND = 'not_found'
DENIED_FORBIDDEN = 'forbidden'
DENIED_UNAUTHENTICATED = 'unauthenticated'


def split_path(path: str) -> Tuple[str, ...]:
    """Segments of a request path; query string, fragment and empty segments dropped."""
    path = (path or '').split('?', 1)[0].split('#', 1)[0]
    return tuple(s for s in path.split('/') if s)


def normalize_path(path: str) -> str:
    return '/' + '/'.join(split_path(path))


def _is_param(segment: str) -> bool:
    return segment.startswith(':')


@dataclass(frozen=True)
class RouteDescriptor:
    key: str
    path: str
    component: Optional[str] = None
    authority: Tuple[str, ...] = ()
    meta: Mapping = field(default_factory=dict, compare=False, hash=False)
    portal: Optional[str] = None

    @property
    def segments(self) -> Tuple[str, ...]:
        return split_path(self.path)

    @property
    def is_parameterized(self) -> bool:
        return any(_is_param(s) for s in self.segments)

    @property
    def is_public(self) -> bool:
        return self.portal == PUBLIC_PORTAL

    def match(self, path) -> Optional[Dict[str, str]]:
        """Return the extracted parameters if ``path`` matches, else None."""
        segments = split_path(path) if isinstance(path, str) else tuple(path)
        pattern = self.segments
        if len(segments) != len(pattern):
            return None
        params: Dict[str, str] = {}
        for want, got in zip(pattern, segments):
            if _is_param(want):
                params[want[1:]] = got
            elif want != got:
                return None
        return params

    def shadows(self, other: 'RouteDescriptor') -> bool:
        """True if every path ``other`` can match is also matched by this pattern."""
        mine, theirs = self.segments, other.segments
        if len(mine) != len(theirs):
            return False
        for a, b in zip(mine, theirs):
            if _is_param(a):
                continue
            if _is_param(b) or a != b:
                return False
        return True

    def to_dict(self) -> dict:
        return {
            'key': self.key,
            'path': self.path,
            'component': self.component,
            'authority': list(self.authority),
            'meta': dict(self.meta or {}),
            'portal': self.portal,
        }


def route(key: str, path: str, component: Optional[str] = None, authority: Iterable[str] = (), meta: Optional[Mapping] = None) -> RouteDescriptor:
    return RouteDescriptor(key=key, path=path, component=component, authority=tuple(authority), meta=dict(meta or {}))


class RouteTable:
    """Immutable ordered sequence of route descriptors."""

    def __init__(self, routes: Sequence[RouteDescriptor]):
        self._routes: Tuple[RouteDescriptor, ...] = tuple(routes)
        self._by_key = {r.key: r for r in self._routes}

    def __iter__(self):
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __getitem__(self, key: str) -> RouteDescriptor:
        return self._by_key[key]

    def get(self, key: str) -> Optional[RouteDescriptor]:
        return self._by_key.get(key)

    @property
    def routes(self) -> Tuple[RouteDescriptor, ...]:
        return self._routes

    def portals(self) -> List[str]:
        seen: List[str] = []
        for r in self._routes:
            if r.portal not in seen:
                seen.append(r.portal)
        return seen


class RouteTableBuilder:
    """Concatenates portal groups in order and validates the result.

    Rejected at build time:
      - malformed patterns (no leading '/', empty ':' parameter names)
      - duplicate keys
      - duplicate paths
      - a route declared after an earlier pattern that matches every path it could
        match (a parameterized route declared before the literal it shadows)
    """

    def __init__(self):
        self._groups: List[Tuple[str, List[RouteDescriptor]]] = []

    def add_group(self, portal: str, routes: Iterable[RouteDescriptor]) -> 'RouteTableBuilder':
        self._groups.append((portal, list(routes)))
        return self

    def build(self) -> RouteTable:
        ordered: List[RouteDescriptor] = []
        for portal, routes in self._groups:
            for r in routes:
                ordered.append(RouteDescriptor(
                    key=r.key, path=r.path, component=r.component,
                    authority=tuple(r.authority), meta=r.meta, portal=portal,
                ))
        self.validate(ordered)
        return RouteTable(ordered)

    @staticmethod
    def validate(routes: Sequence[RouteDescriptor]) -> None:
        keys = set()
        for r in routes:
            if not r.path.startswith('/'):
                raise RouteTableError(f"Route '{r.key}' path must start with '/': {r.path}")
            if any(s == ':' for s in r.segments):
                raise RouteTableError(f"Route '{r.key}' has an unnamed parameter: {r.path}")
            if r.key in keys:
                raise RouteTableError(f"Duplicate route key '{r.key}'")
            keys.add(r.key)
        for i, later in enumerate(routes):
            for earlier in routes[:i]:
                if earlier.segments == later.segments:
                    raise RouteTableError(
                        f"Route '{later.key}' duplicates path {later.path} of '{earlier.key}'"
                    )
                if earlier.shadows(later):
                    raise RouteTableError(
                        f"Route '{earlier.key}' ({earlier.path}) shadows later route "
                        f"'{later.key}' ({later.path}); declare the literal route first"
                    )


@dataclass(frozen=True)
class Allowed:
    route: RouteDescriptor
    params: Mapping = field(default_factory=dict, compare=False, hash=False)

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Denied:
    path: str
    reason: str
    redirect_to: str
    route: Optional[RouteDescriptor] = None

    def __bool__(self) -> bool:
        return False


def role_names_with_aliases(principal, aliases: Optional[Mapping[str, str]] = None) -> set:
    """Role names plus the current name of every legacy role the principal holds."""
    aliases = LEGACY_ALIASES if aliases is None else aliases
    names = set(principal.role_names)
    names.update(aliases[n] for n in principal.role_names if n in aliases)
    return names


def has_authority(principal, authority: Iterable[str], aliases: Optional[Mapping[str, str]] = None) -> bool:
    """OR semantics across role names and effective permissions."""
    authority = tuple(authority or ())
    if not authority:
        return principal is not None
    if principal is None:
        return False
    names = role_names_with_aliases(principal, aliases)
    return any(a in names or a in principal.permissions for a in authority)


class RouteAuthorizer:
    def __init__(
        self,
        table: RouteTable,
        access_denied_path: str = '/access-denied',
        sign_in_path: str = '/sign-in',
        home_paths: Optional[Mapping[str, str]] = None,
        role_precedence: Optional[Sequence[str]] = None,
        legacy_aliases: Optional[Mapping[str, str]] = None,
        default_home_path: Optional[str] = None,
    ):
        from portal.constants import roles as role_consts
        self.table = table
        self.access_denied_path = access_denied_path
        self.sign_in_path = sign_in_path
        self.home_paths = dict(home_paths if home_paths is not None else role_consts.ROLE_HOME_PATHS)
        self.role_precedence = list(role_precedence if role_precedence is not None else role_consts.ROLE_PRECEDENCE)
        self.legacy_aliases = dict(legacy_aliases if legacy_aliases is not None else role_consts.LEGACY_ALIASES)
        self.default_home_path = default_home_path or role_consts.DEFAULT_HOME_PATH

    def is_authorized(self, principal, route: RouteDescriptor) -> bool:
        if route.is_public:
            return True
        return has_authority(principal, route.authority, self.legacy_aliases)

    def match_route(self, path: str) -> Optional[RouteDescriptor]:
        segments = split_path(path)
        for r in self.table:
            if r.match(segments) is not None:
                return r
        return None

    def require_route(self, path: str) -> RouteDescriptor:
        found = self.match_route(path)
        if found is None:
            raise RouteNotFound(normalize_path(path))
        return found

    def accessible_routes(self, principal) -> List[RouteDescriptor]:
        if principal is None:
            return []
        return [r for r in self.table if not r.is_public and self.is_authorized(principal, r)]

    def authorize(self, principal, path: str):
        normalized = normalize_path(path)
        found = self.match_route(normalized)
        if found is None:
            log.info('route.not_found path=%s user=%s', normalized, _who(principal))
            return Denied(path=normalized, reason=DENIED_NOT_FOUND, redirect_to=self.access_denied_path)
        if found.is_public:
            return Allowed(route=found, params=found.match(normalized) or {})
        if principal is None:
            log.info('route.unauthenticated key=%s path=%s', found.key, normalized)
            return Denied(path=normalized, reason=DENIED_UNAUTHENTICATED, redirect_to=self.sign_in_path, route=found)
        if not self.is_authorized(principal, found):
            log.warning('route.denied key=%s path=%s user=%s', found.key, normalized, _who(principal))
            return Denied(path=normalized, reason=DENIED_FORBIDDEN, redirect_to=self.access_denied_path, route=found)
        log.debug('route.allowed key=%s path=%s', found.key, normalized)
        return Allowed(route=found, params=found.match(normalized) or {})

    def guard(self, principal, path: str, redirect: Callable[[str], None]):
        """Authorize and hand any denial's target to the navigation sink."""
        decision = self.authorize(principal, path)
        if not decision:
            redirect(decision.redirect_to)
        return decision

    def highest_role(self, principal) -> Optional[str]:
        if principal is None:
            return None
        names = role_names_with_aliases(principal, self.legacy_aliases)
        for name in self.role_precedence:
            if name in names:
                return name
        return None

    def home_path(self, principal) -> str:
        role = self.highest_role(principal)
        if role is None:
            return self.default_home_path
        return self.home_paths.get(role, self.default_home_path)


def _who(principal) -> str:
    if principal is None:
        return '-'
    return f'{principal.user_id}@{principal.tenant_id or "platform"}'


__all__ = [
    'RouteDescriptor', 'RouteTable', 'RouteTableBuilder', 'RouteAuthorizer', 'Allowed', 'Denied',
    'route', 'has_authority', 'role_names_with_aliases', 'split_path', 'normalize_path', 'PUBLIC_PORTAL',
    'DENIED_NOT_FOUND', 'DENIED_FORBIDDEN', 'DENIED_UNAUTHENTICATED',
]

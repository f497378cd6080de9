from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

import yaml

from bulwark.domain.models import MenuItem, Role, RouteDecision
from bulwark.exceptions import ConfigError

logger = logging.getLogger(__name__)

_ALL_ROLES = (Role.HQ, Role.DIV, Role.BN)

_DEFAULT_PAGE_ACCESS: dict[str, tuple[Role, ...]] = {
    "/dashboard": _ALL_ROLES,
    "/forecast": _ALL_ROLES,
    "/chatbot": _ALL_ROLES,
    "/reports": _ALL_ROLES,
    "/admin/notice": (Role.HQ, Role.DIV),
    "/admin/schedule": _ALL_ROLES,
    "/data": (Role.HQ,),
    "/admin/users": (Role.HQ, Role.DIV),
    "/admin/settings": (Role.HQ,),
    "/admin/chatbot-starter": (Role.HQ,),
}

_DEFAULT_MENU_ACCESS: dict[str, tuple[Role, ...]] = {
    "dashboard": _ALL_ROLES,
    "forecast": _ALL_ROLES,
    "chatbot": _ALL_ROLES,
    "reports": _ALL_ROLES,
    "notice": (Role.HQ, Role.DIV),
    "schedule": _ALL_ROLES,
    "data": (Role.HQ,),
    "users": (Role.HQ, Role.DIV),
    "settings": (Role.HQ,),
}

_DEFAULT_MENU_ITEMS: list[dict[str, Any]] = [
    {"id": "dashboard", "label": "Dashboard", "path": "/dashboard"},
    {"id": "forecast", "label": "Forecast Analysis", "path": "/forecast"},
    {"id": "chatbot", "label": "Chatbot", "path": "/chatbot"},
    {"id": "reports", "label": "Reports", "path": "/reports"},
    {"id": "data", "label": "Data Management", "path": "/data", "roles": ["ROLE_HQ"]},
    {"id": "users", "label": "User Management", "path": "/admin/users", "roles": ["ROLE_HQ", "ROLE_DIV"]},
    {"id": "settings", "label": "System Settings", "path": "/admin/settings", "roles": ["ROLE_HQ"]},
]


def _freeze_table(table: Mapping[str, Iterable[Any]], *, source: str) -> Mapping[str, frozenset[Role]]:
    frozen: dict[str, frozenset[Role]] = {}
    for key, roles in table.items():
        resolved = set()
        for raw in roles or ():
            role = Role.coerce(raw)
            if role is None:
                raise ConfigError(f"Unknown role {raw!r} for {source} entry {key!r}")
            resolved.add(role)
        frozen[str(key)] = frozenset(resolved)
    return MappingProxyType(frozen)


class AccessPolicy:
    """
    Static page and menu reachability tables.

    Both tables are immutable once built. Routes match exactly or by the
    longest table key that is a `/`-segment prefix of the path, so a narrow
    entry like /admin/settings is never shadowed by a broader /admin.
    Paths and menus absent from the tables are ungated (default allow) unless
    default_allow_unmapped is switched off.
    """

    def __init__(
        self,
        page_access: Optional[Mapping[str, Iterable[Any]]] = None,
        menu_access: Optional[Mapping[str, Iterable[Any]]] = None,
        menu_items: Optional[list[Mapping[str, Any]]] = None,
        default_allow_unmapped: bool = True,
        denied_redirect: str = "/dashboard",
        login_redirect: str = "/login",
    ):
        self.page_access = _freeze_table(
            _DEFAULT_PAGE_ACCESS if page_access is None else page_access, source="page"
        )
        self.menu_access = _freeze_table(
            _DEFAULT_MENU_ACCESS if menu_access is None else menu_access, source="menu"
        )
        raw_items = _DEFAULT_MENU_ITEMS if menu_items is None else menu_items
        self.menu_items = tuple(MenuItem.model_validate(dict(item)) for item in raw_items)
        self.default_allow_unmapped = default_allow_unmapped
        self.denied_redirect = denied_redirect
        self.login_redirect = login_redirect
        # Longest keys first for prefix matching.
        self._page_keys = tuple(sorted(self.page_access, key=len, reverse=True))

    def match_page_key(self, path: str) -> Optional[str]:
        if path in self.page_access:
            return path
        for key in self._page_keys:
            if path == key or path.startswith(key + "/"):
                return key
        return None

    def can_access_page(self, role: Any, path: str) -> bool:
        resolved = Role.coerce(role)
        if resolved is None:
            return False
        key = self.match_page_key(path)
        if key is None:
            logger.debug(f"No page access entry for {path!r}, default allow={self.default_allow_unmapped}")
            return self.default_allow_unmapped
        return resolved in self.page_access[key]

    def can_access_menu(self, role: Any, menu_id: str) -> bool:
        resolved = Role.coerce(role)
        if resolved is None:
            return False
        roles = self.menu_access.get(menu_id)
        if roles is None:
            logger.debug(f"No menu access entry for {menu_id!r}, default allow={self.default_allow_unmapped}")
            return self.default_allow_unmapped
        return resolved in roles

    def visible_menu_items(self, role: Any) -> list[MenuItem]:
        resolved = Role.coerce(role)
        if resolved is None:
            return []
        visible = []
        for item in self.menu_items:
            if item.roles is not None and resolved not in item.roles:
                continue
            if not self.can_access_menu(resolved, item.id):
                continue
            visible.append(item)
        return visible

    def resolve_route(self, role: Any, path: str) -> RouteDecision:
        """Route guard outcome: unauthenticated sessions go to login, denied ones to the dashboard."""
        if Role.coerce(role) is None:
            return RouteDecision(path=path, allowed=False, redirect_to=self.login_redirect)
        if self.can_access_page(role, path):
            return RouteDecision(path=path, allowed=True)
        return RouteDecision(path=path, allowed=False, redirect_to=self.denied_redirect)

    @classmethod
    def load(cls, path: Optional[Path] = None, **options: Any) -> "AccessPolicy":
        """
        Build a policy from an optional YAML file with `pages`, `menus` and
        `menu_items` keys. Missing keys keep the built-in tables.
        """
        if not path or not path.exists():
            return cls(**options)

        try:
            payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Failed to read access policy from {path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise ConfigError(f"Access policy file {path} must contain a mapping")

        pages = payload.get("pages")
        menus = payload.get("menus")
        items = payload.get("menu_items")
        for name, value, expected in (("pages", pages, dict), ("menus", menus, dict), ("menu_items", items, list)):
            if value is not None and not isinstance(value, expected):
                raise ConfigError(f"`{name}` in {path} must be a {expected.__name__}")

        logger.info(f"Loaded access policy from {path}")
        return cls(page_access=pages, menu_access=menus, menu_items=items, **options)

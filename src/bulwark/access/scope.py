from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional, TypeVar

from bulwark.domain.models import ALL_UNITS, AccessScope, Role, SelectableUnits, SessionIdentity, Unit
from bulwark.org.tree import OrgTree

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScopeResolver:
    """
    Single authority for "which units may this session see".

    Scope is self-inclusive and follows the tree downwards only:
    HQ sees every unit, DIV its home unit and everything below it,
    BN its home unit alone. Any missing or unknown input yields an empty scope.
    """

    def __init__(self, tree: OrgTree):
        self.tree = tree

    def _home_unit(self, role: Any, home_unit_id: Optional[str]) -> tuple[Optional[Role], Optional[Unit]]:
        resolved_role = Role.coerce(role)
        if resolved_role is None:
            logger.debug(f"Empty scope: unknown or missing role {role!r}")
            return None, None
        home = self.tree.get_unit_by_id(home_unit_id)
        if home is None:
            logger.debug(f"Empty scope: unknown home unit {home_unit_id!r}")
            return resolved_role, None
        return resolved_role, home

    def get_accessible_unit_ids(self, role: Any, home_unit_id: Optional[str]) -> list[str]:
        resolved_role, home = self._home_unit(role, home_unit_id)
        if resolved_role is None or home is None:
            return []
        if resolved_role is Role.HQ:
            return self.tree.all_unit_ids()
        if resolved_role is Role.DIV:
            return self.tree.get_subordinate_unit_ids(home.id)
        return [home.id]

    def get_accessible_units(self, role: Any, home_unit_id: Optional[str]) -> list[Unit]:
        units = (self.tree.get_unit_by_id(uid) for uid in self.get_accessible_unit_ids(role, home_unit_id))
        return [unit for unit in units if unit is not None]

    def can_access_unit(self, role: Any, home_unit_id: Optional[str], target_unit_id: Optional[str]) -> bool:
        if not target_unit_id:
            return False
        return target_unit_id in self.get_accessible_unit_ids(role, home_unit_id)

    def get_selectable_units_for_role(self, role: Any, home_unit_id: Optional[str]) -> SelectableUnits:
        resolved_role, home = self._home_unit(role, home_unit_id)
        if resolved_role is None or home is None:
            return SelectableUnits(units=[], is_fixed=True)
        if resolved_role is Role.BN:
            return SelectableUnits(units=[home], is_fixed=True)
        return SelectableUnits(units=self.get_accessible_units(resolved_role, home.id), is_fixed=False)

    def resolve(self, session: SessionIdentity) -> AccessScope:
        unit_ids = self.get_accessible_unit_ids(session.role, session.home_unit_id)
        return AccessScope(
            role=session.role,
            home_unit_id=session.home_unit_id,
            unit_ids=tuple(unit_ids),
        )

    def filter_by_unit(
        self,
        records: Iterable[T],
        unit_id: Optional[str],
        key: Callable[[T], Optional[str]],
    ) -> list[T]:
        """
        Keep records belonging to unit_id or any unit below it.
        An empty filter or "all" keeps every record.
        """
        items = list(records)
        if not unit_id or unit_id == ALL_UNITS:
            return items
        allowed = {unit_id, *(unit.id for unit in self.tree.get_all_descendants(unit_id))}
        return [item for item in items if key(item) in allowed]

from __future__ import annotations

import logging
from typing import Callable, Optional

from bulwark.access.scope import ScopeResolver
from bulwark.domain.models import ALL_UNITS, ALL_UNITS_LABEL, SelectorLevel, SessionIdentity, Unit
from bulwark.exceptions import SelectionError
from bulwark.org.tree import OrgTree

logger = logging.getLogger(__name__)

OnChange = Callable[[str], None]


def _noop(_unit_id: str) -> None:
    return None


class CascadingUnitSelector:
    """
    State behind a row of dependent "pick a unit" controls.

    The state is the selection path, one unit id per level, from the first
    level down to the deepest pick. Level 0 offers the children of root_id
    (the top-level units when root_id is None); each further level offers the
    children of the pick above it. Every pick or clear reports the deepest
    selected id through on_change.

    Unless the selector is fixed, level 0 also accepts ALL_UNITS, which stands
    for "no unit filter" and offers no further levels.
    """

    def __init__(
        self,
        tree: OrgTree,
        on_change: Optional[OnChange] = None,
        root_id: Optional[str] = None,
        value: Optional[str] = None,
        is_fixed: bool = False,
    ):
        self.tree = tree
        self.root_id = root_id or None
        self.on_change = on_change or _noop
        self.is_fixed = is_fixed
        self._selections: list[str] = []
        self.set_value(value)

    @classmethod
    def for_scope(
        cls,
        resolver: ScopeResolver,
        session: SessionIdentity,
        on_change: Optional[OnChange] = None,
        value: Optional[str] = None,
    ) -> "CascadingUnitSelector":
        """Selector limited to the units the session may pick; fixed for BN sessions."""
        selectable = resolver.get_selectable_units_for_role(session.role, session.home_unit_id)
        tree = resolver.tree.subtree(unit.id for unit in selectable.units)
        if selectable.is_fixed and value is None:
            value = session.home_unit_id if session.home_unit_id in tree else None
        return cls(tree, on_change=on_change, value=value, is_fixed=selectable.is_fixed)

    @property
    def selections(self) -> list[str]:
        return list(self._selections)

    @property
    def value(self) -> str:
        return self._selections[-1] if self._selections else ""

    @property
    def all_selected(self) -> bool:
        return self._selections == [ALL_UNITS]

    def set_value(self, value: Optional[str]) -> None:
        """Re-sync the path with an externally held value. Does not notify."""
        if not value:
            self._selections = []
            return
        if value == ALL_UNITS:
            self._selections = [] if self.is_fixed else [ALL_UNITS]
            return
        path = list(reversed(self.tree.get_parent_unit_chain(value)))
        if self.root_id:
            if self.root_id not in path:
                logger.debug(f"Value {value!r} is outside selector root {self.root_id!r}")
                self._selections = []
                return
            path = path[path.index(self.root_id) + 1:]
        self._selections = path

    def options_for(self, level: int) -> list[Unit]:
        if level < 0:
            return []
        if level == 0:
            return self.tree.get_child_units(self.root_id)
        if level > len(self._selections) or self.all_selected:
            return []
        return self.tree.get_child_units(self._selections[level - 1])

    @property
    def visible_level_count(self) -> int:
        if not self._selections or self.all_selected:
            return 1
        has_children = bool(self.tree.get_child_units(self._selections[-1]))
        return len(self._selections) + (1 if has_children else 0)

    def levels(self) -> list[SelectorLevel]:
        rendered: list[SelectorLevel] = []
        for index in range(self.visible_level_count):
            options = self.options_for(index)
            if index > 0 and not options:
                break
            selected = self._selections[index] if index < len(self._selections) else ""
            rendered.append(
                SelectorLevel(
                    index=index,
                    options=options,
                    selected=selected,
                    allows_all=index == 0 and not self.is_fixed,
                )
            )
        return rendered

    def select(self, level: int, unit_id: str) -> None:
        if self.is_fixed:
            raise SelectionError("Selector is fixed to the session's own unit")
        if level < 0 or level > len(self._selections):
            raise SelectionError(f"Cannot select at level {level} with {len(self._selections)} levels chosen")
        if level == 0 and unit_id == ALL_UNITS:
            self._selections = [ALL_UNITS]
            self.on_change(ALL_UNITS)
            return
        if unit_id not in {unit.id for unit in self.options_for(level)}:
            raise SelectionError(f"Unit {unit_id!r} is not an option at level {level}")
        self._selections = [*self._selections[:level], unit_id]
        self.on_change(unit_id)

    def clear(self, level: int) -> None:
        if self.is_fixed:
            raise SelectionError("Selector is fixed to the session's own unit")
        if level < 0:
            raise SelectionError(f"Cannot clear level {level}")
        if level == 0:
            self._selections = []
            self.on_change("")
            return
        self._selections = self._selections[:level]
        self.on_change(self._selections[-1] if self._selections else "")

    def display_path(self, separator: str = " > ") -> str:
        if self.all_selected:
            return ALL_UNITS_LABEL
        names = []
        for unit_id in self._selections:
            unit = self.tree.get_unit_by_id(unit_id)
            if unit and unit.name:
                names.append(unit.name)
        return separator.join(names)

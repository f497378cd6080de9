from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from bulwark.domain.models import Unit
from bulwark.exceptions import OrgTreeError

logger = logging.getLogger(__name__)

UnitLike = Union[Unit, Mapping[str, Any]]


class OrgTree:
    """
    Read-only organization tree stored as a flat list of units with parent pointers.

    Lookups never raise: unknown ids yield None or empty collections.
    Structural problems (duplicate ids, cycles, and in strict mode a missing/extra
    root or a dangling parent) are rejected at construction time, so every walk
    below terminates. The tree is never mutated; build a new one to replace it.
    """

    def __init__(self, units: Iterable[UnitLike], strict: bool = True):
        records = tuple(u if isinstance(u, Unit) else Unit.model_validate(u) for u in units)
        by_id: dict[str, Unit] = {}
        for unit in records:
            if unit.id in by_id:
                raise OrgTreeError(f"Duplicate unit id: {unit.id}")
            by_id[unit.id] = unit

        self.strict = strict
        self._units = records
        self._by_id = by_id
        self._children: Optional[dict[Optional[str], tuple[Unit, ...]]] = None
        self._validate()

    # ----- construction checks -----
    def _validate(self) -> None:
        roots = [u.id for u in self._units if u.is_root]
        dangling = [u.id for u in self._units if u.parent_id and u.parent_id not in self._by_id]

        if self.strict:
            if len(roots) != 1:
                raise OrgTreeError(f"Organization tree must have exactly one root, found {len(roots)}: {roots}")
            if dangling:
                raise OrgTreeError(f"Units reference unknown parents: {dangling}")
        elif dangling:
            logger.warning(f"Organization tree has units with unknown parents: {dangling}")

        verified: set[str] = set()
        for unit in self._units:
            trail: list[str] = []
            current: Optional[Unit] = unit
            while current is not None and current.id not in verified:
                if current.id in trail:
                    raise OrgTreeError(f"Cycle detected in organization tree at unit {current.id}")
                trail.append(current.id)
                current = self._by_id.get(current.parent_id) if current.parent_id else None
            verified.update(trail)

    @property
    def _child_index(self) -> dict[Optional[str], tuple[Unit, ...]]:
        if self._children is None:
            index: dict[Optional[str], list[Unit]] = {}
            for unit in self._units:
                index.setdefault(unit.parent_id, []).append(unit)
            self._children = {key: tuple(value) for key, value in index.items()}
        return self._children

    # ----- container protocol -----
    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[Unit]:
        return iter(self._units)

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self._by_id

    @property
    def units(self) -> tuple[Unit, ...]:
        return self._units

    @property
    def root(self) -> Optional[Unit]:
        top = self._child_index.get(None, ())
        return top[0] if top else None

    def all_unit_ids(self) -> list[str]:
        return [unit.id for unit in self._units]

    # ----- lookups -----
    def get_unit_by_id(self, unit_id: Optional[str]) -> Optional[Unit]:
        if not unit_id:
            return None
        return self._by_id.get(unit_id)

    def get_child_units(self, parent_id: Optional[str] = None) -> list[Unit]:
        """Children of parent_id in source order; top-level units when parent_id is empty."""
        return list(self._child_index.get(parent_id or None, ()))

    # ----- traversal -----
    def get_subordinate_unit_ids(self, unit_id: Optional[str]) -> list[str]:
        """
        unit_id followed by all of its descendants, depth-first pre-order
        with siblings in source order.
        """
        if not unit_id or unit_id not in self._by_id:
            return []
        ordered: list[str] = []
        stack = [unit_id]
        while stack:
            current = stack.pop()
            ordered.append(current)
            children = self._child_index.get(current, ())
            stack.extend(child.id for child in reversed(children))
        return ordered

    def get_all_descendants(self, unit_id: Optional[str]) -> list[Unit]:
        """Descendant records of unit_id, excluding the unit itself."""
        return [self._by_id[uid] for uid in self.get_subordinate_unit_ids(unit_id)[1:]]

    def get_parent_unit_chain(self, unit_id: Optional[str]) -> list[str]:
        """unit_id followed by each ancestor up to the root. Stops at a stale parent reference."""
        chain: list[str] = []
        current = self.get_unit_by_id(unit_id)
        while current is not None:
            chain.append(current.id)
            if not current.parent_id:
                break
            parent = self._by_id.get(current.parent_id)
            if parent is None:
                logger.debug(f"Ancestor chain of {unit_id} stops at missing parent {current.parent_id}")
                break
            current = parent
        return chain

    def get_unit_path(self, unit_id: Optional[str]) -> list[Unit]:
        """Unit records from the root down to unit_id."""
        return [self._by_id[uid] for uid in reversed(self.get_parent_unit_chain(unit_id))]

    def get_unit_full_name(self, unit_id: Optional[str], separator: str = " > ") -> str:
        return separator.join(unit.name for unit in self.get_unit_path(unit_id))

    # ----- derived trees -----
    def subtree(self, unit_ids: Iterable[str]) -> "OrgTree":
        """
        Non-strict tree over a subset of units. Units whose parent is outside the
        subset become top-level, so a scoped selector starts at the scope's top.
        """
        wanted = set(unit_ids)
        picked: list[Unit] = []
        for unit in self._units:
            if unit.id not in wanted:
                continue
            if unit.parent_id and unit.parent_id not in wanted:
                unit = unit.model_copy(update={"parent_id": None})
            picked.append(unit)
        return OrgTree(picked, strict=False)

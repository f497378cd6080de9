from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from bulwark.api.deps import get_access_scope, get_tree
from bulwark.config import settings
from bulwark.domain.models import AccessScope, Unit
from bulwark.org.tree import OrgTree

router = APIRouter(prefix="/units", tags=["units"])


def _visible_unit(unit_id: str, tree: OrgTree, scope: AccessScope) -> Unit:
    unit = tree.get_unit_by_id(unit_id)
    if unit is None:
        raise HTTPException(status_code=404, detail=f"Unknown unit: {unit_id}")
    if not scope.can_access(unit.id):
        raise HTTPException(status_code=403, detail="Access denied for requested unit")
    return unit


def _dump(units: list[Unit]) -> list[dict]:
    return [unit.model_dump() for unit in units]


@router.get("")
def list_units(
    tree: OrgTree = Depends(get_tree),
    scope: AccessScope = Depends(get_access_scope),
):
    return {"rows": _dump([unit for unit in tree if scope.can_access(unit.id)])}


@router.get("/top-level")
def top_level_units(
    tree: OrgTree = Depends(get_tree),
    scope: AccessScope = Depends(get_access_scope),
):
    # Top of the caller's own subtree; rows keep their real parent_id.
    tops = tree.subtree(scope.unit_ids).get_child_units(None)
    return {"rows": _dump([tree.get_unit_by_id(unit.id) for unit in tops])}


@router.get("/{unit_id}")
def get_unit(
    unit_id: str,
    tree: OrgTree = Depends(get_tree),
    scope: AccessScope = Depends(get_access_scope),
):
    unit = _visible_unit(unit_id, tree, scope)
    payload = unit.model_dump()
    payload["level_label"] = unit.level_label
    payload["unit_type_label"] = unit.unit_type_label
    payload["full_name"] = tree.get_unit_full_name(unit.id, separator=settings.access.path_separator)
    return payload


@router.get("/{unit_id}/children")
def child_units(
    unit_id: str,
    tree: OrgTree = Depends(get_tree),
    scope: AccessScope = Depends(get_access_scope),
):
    _visible_unit(unit_id, tree, scope)
    return {"rows": _dump([unit for unit in tree.get_child_units(unit_id) if scope.can_access(unit.id)])}


@router.get("/{unit_id}/chain")
def parent_chain(
    unit_id: str,
    tree: OrgTree = Depends(get_tree),
    scope: AccessScope = Depends(get_access_scope),
):
    _visible_unit(unit_id, tree, scope)
    return {"unit_id": unit_id, "chain": tree.get_parent_unit_chain(unit_id)}


@router.get("/{unit_id}/subordinates")
def subordinate_ids(
    unit_id: str,
    tree: OrgTree = Depends(get_tree),
    scope: AccessScope = Depends(get_access_scope),
):
    _visible_unit(unit_id, tree, scope)
    ids = [uid for uid in tree.get_subordinate_unit_ids(unit_id) if scope.can_access(uid)]
    return {"unit_id": unit_id, "unit_ids": ids}


@router.get("/{unit_id}/descendants")
def descendants(
    unit_id: str,
    tree: OrgTree = Depends(get_tree),
    scope: AccessScope = Depends(get_access_scope),
):
    _visible_unit(unit_id, tree, scope)
    return {"rows": _dump([unit for unit in tree.get_all_descendants(unit_id) if scope.can_access(unit.id)])}


@router.get("/{unit_id}/full-name")
def full_name(
    unit_id: str,
    tree: OrgTree = Depends(get_tree),
    scope: AccessScope = Depends(get_access_scope),
):
    _visible_unit(unit_id, tree, scope)
    return {
        "unit_id": unit_id,
        "full_name": tree.get_unit_full_name(unit_id, separator=settings.access.path_separator),
    }

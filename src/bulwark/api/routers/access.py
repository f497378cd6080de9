from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from bulwark.access.policy import AccessPolicy
from bulwark.access.scope import ScopeResolver
from bulwark.api.deps import get_access_scope, get_current_session, get_policy, get_resolver
from bulwark.domain.models import ROLE_LABELS, ROLE_SCOPE_LABELS, AccessScope, SessionIdentity

router = APIRouter(prefix="/access", tags=["access"])


@router.get("/scope")
def access_scope(
    session: SessionIdentity = Depends(get_current_session),
    scope: AccessScope = Depends(get_access_scope),
):
    return {
        "role": session.role.value if session.role else None,
        "role_label": ROLE_LABELS.get(session.role) if session.role else None,
        "scope_label": ROLE_SCOPE_LABELS.get(session.role) if session.role else None,
        "home_unit_id": session.home_unit_id,
        "unit_ids": list(scope.unit_ids),
    }


@router.get("/selectable")
def selectable_units(
    session: SessionIdentity = Depends(get_current_session),
    resolver: ScopeResolver = Depends(get_resolver),
):
    return resolver.get_selectable_units_for_role(session.role, session.home_unit_id).model_dump()


@router.get("/units/{unit_id}")
def unit_access(
    unit_id: str,
    scope: AccessScope = Depends(get_access_scope),
):
    return {"unit_id": unit_id, "allowed": scope.can_access(unit_id)}


@router.get("/pages")
def page_access(
    path: str = Query(..., min_length=1, description="Route path, e.g. /admin/users"),
    session: SessionIdentity = Depends(get_current_session),
    policy: AccessPolicy = Depends(get_policy),
):
    decision = policy.resolve_route(session.role, path)
    payload = decision.model_dump()
    payload["matched"] = policy.match_page_key(path)
    return payload


@router.get("/menus")
def visible_menus(
    session: SessionIdentity = Depends(get_current_session),
    policy: AccessPolicy = Depends(get_policy),
):
    return {"rows": [item.model_dump() for item in policy.visible_menu_items(session.role)]}


@router.get("/menus/{menu_id}")
def menu_access(
    menu_id: str,
    session: SessionIdentity = Depends(get_current_session),
    policy: AccessPolicy = Depends(get_policy),
):
    return {"menu_id": menu_id, "allowed": policy.can_access_menu(session.role, menu_id)}

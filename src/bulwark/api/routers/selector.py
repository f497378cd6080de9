from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from bulwark.access.scope import ScopeResolver
from bulwark.api.deps import get_current_session, get_resolver
from bulwark.config import settings
from bulwark.domain.models import ALL_UNITS, SessionIdentity
from bulwark.exceptions import SelectionError
from bulwark.selector.cascade import CascadingUnitSelector

router = APIRouter(prefix="/selector", tags=["selector"])


class SelectorPick(BaseModel):
    level: int = Field(ge=0)
    unit_id: str = ""


class SelectorRequest(BaseModel):
    value: Optional[str] = None
    pick: Optional[SelectorPick] = None


@router.post("/levels")
def selector_levels(
    body: SelectorRequest,
    session: SessionIdentity = Depends(get_current_session),
    resolver: ScopeResolver = Depends(get_resolver),
):
    """
    Stateless round-trip of the cascading selector: rebuild the path from `value`,
    apply an optional pick (an empty unit_id clears that level, "all" at level 0 drops the
    unit filter) and return the levels to render.
    """
    if body.value and body.value != ALL_UNITS and not resolver.can_access_unit(session.role, session.home_unit_id, body.value):
        raise HTTPException(status_code=403, detail="Access denied for requested unit")

    changes: list[str] = []
    selector = CascadingUnitSelector.for_scope(resolver, session, on_change=changes.append, value=body.value)
    if body.pick is not None:
        try:
            if body.pick.unit_id:
                selector.select(body.pick.level, body.pick.unit_id)
            else:
                selector.clear(body.pick.level)
        except SelectionError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    return {
        "value": selector.value,
        "selections": selector.selections,
        "is_fixed": selector.is_fixed,
        "visible_levels": selector.visible_level_count,
        "levels": [level.model_dump() for level in selector.levels()],
        "display_path": selector.display_path(separator=settings.access.path_separator),
        "changed": changes[-1] if changes else None,
    }

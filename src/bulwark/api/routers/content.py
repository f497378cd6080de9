from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bulwark.access import ownership
from bulwark.api.deps import get_current_session
from bulwark.domain.models import ContentKind, SessionIdentity

router = APIRouter(prefix="/content", tags=["content"])


class ContentPermissionRequest(BaseModel):
    kind: ContentKind
    author_name: Optional[str] = None


@router.post("/permissions")
def content_permissions(
    body: ContentPermissionRequest,
    session: SessionIdentity = Depends(get_current_session),
):
    role, user_name = session.role, session.user_name
    return {
        "kind": body.kind.value,
        "can_create": ownership.can_create_content(role, body.kind),
        "is_own": ownership.is_own_content(role, body.author_name, user_name),
        "can_edit": ownership.can_edit_content(role, body.author_name, user_name),
        "can_delete": ownership.can_delete_content(role, body.author_name, user_name),
    }


@router.get("/role-change")
def role_change_permission(session: SessionIdentity = Depends(get_current_session)):
    return {"allowed": ownership.can_change_user_role(session.role)}

from __future__ import annotations

from typing import Any, Optional

from bulwark.domain.models import ContentKind, Role

# Which roles may create each kind of content.
_CREATE_ACCESS: dict[ContentKind, frozenset[Role]] = {
    ContentKind.NOTICE: frozenset({Role.HQ, Role.DIV}),
    ContentKind.USER: frozenset({Role.HQ, Role.DIV}),
    ContentKind.SCHEDULE: frozenset({Role.HQ, Role.DIV, Role.BN}),
    ContentKind.REPORT: frozenset({Role.HQ, Role.DIV, Role.BN}),
}


def is_own_content(role: Any, author_name: Optional[str], current_user_name: Optional[str]) -> bool:
    """
    HQ owns everything; anyone else owns an item only when the author's display
    name equals their own. Matching is by display name, so two users sharing a
    name are indistinguishable here.
    """
    resolved = Role.coerce(role)
    if resolved is Role.HQ:
        return True
    if resolved is None or not current_user_name:
        return False
    return author_name == current_user_name


def can_edit_content(role: Any, author_name: Optional[str], current_user_name: Optional[str]) -> bool:
    return is_own_content(role, author_name, current_user_name)


def can_delete_content(role: Any, author_name: Optional[str], current_user_name: Optional[str]) -> bool:
    return can_edit_content(role, author_name, current_user_name)


def can_change_user_role(role: Any) -> bool:
    return Role.coerce(role) is Role.HQ


def can_create_content(role: Any, content_kind: Any) -> bool:
    resolved = Role.coerce(role)
    if resolved is None:
        return False
    if isinstance(content_kind, ContentKind):
        kind = content_kind
    else:
        try:
            kind = ContentKind(str(content_kind or "").strip().lower())
        except ValueError:
            return False
    return resolved in _CREATE_ACCESS[kind]

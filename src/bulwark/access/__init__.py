from bulwark.access.ownership import (
    can_change_user_role,
    can_create_content,
    can_delete_content,
    can_edit_content,
    is_own_content,
)
from bulwark.access.policy import AccessPolicy
from bulwark.access.scope import ScopeResolver

__all__ = [
    "AccessPolicy",
    "ScopeResolver",
    "can_change_user_role",
    "can_create_content",
    "can_delete_content",
    "can_edit_content",
    "is_own_content",
]

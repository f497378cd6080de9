from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from bulwark.access.policy import AccessPolicy
from bulwark.access.scope import ScopeResolver
from bulwark.config import settings
from bulwark.domain.models import AccessScope, SessionIdentity
from bulwark.org.loader import load_org_tree
from bulwark.org.tree import OrgTree

# Global/Cached instances. The tree is replaced wholesale, never edited in place.
_tree_instance: Optional[OrgTree] = None
_policy_instance: Optional[AccessPolicy] = None


def get_tree() -> OrgTree:
    global _tree_instance
    if _tree_instance is None:
        _tree_instance = load_org_tree(settings.paths.org_units_path, strict=settings.access.strict_tree)
    return _tree_instance


def set_tree(tree: Optional[OrgTree]) -> None:
    global _tree_instance
    _tree_instance = tree


def get_policy() -> AccessPolicy:
    global _policy_instance
    if _policy_instance is None:
        _policy_instance = AccessPolicy.load(
            settings.paths.access_policy_path,
            default_allow_unmapped=settings.access.default_allow_unmapped,
            denied_redirect=settings.access.denied_redirect,
            login_redirect=settings.access.login_redirect,
        )
    return _policy_instance


def set_policy(policy: Optional[AccessPolicy]) -> None:
    global _policy_instance
    _policy_instance = policy


def get_resolver(tree: OrgTree = Depends(get_tree)) -> ScopeResolver:
    return ScopeResolver(tree)


def get_current_session(
    request: Request,
    authorization: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role"),
    x_unit_id: Optional[str] = Header(None, alias="X-Unit-Id"),
    x_user_name: Optional[str] = Header(None, alias="X-User-Name"),
) -> SessionIdentity:
    grants = settings.security.sessions
    if authorization and grants:
        token = authorization.split(" ", 1)[1].strip() if " " in authorization else authorization.strip()
        grant = grants.get(token)
        if grant is None:
            raise HTTPException(status_code=401, detail="Invalid session token", headers={"WWW-Authenticate": "Bearer"})
        identity = SessionIdentity(role=grant.role, home_unit_id=grant.unit_id, user_name=grant.name)
    elif settings.security.trust_identity_headers and (x_user_role or x_unit_id):
        identity = SessionIdentity(role=x_user_role, home_unit_id=x_unit_id, user_name=x_user_name)
    else:
        # No claim at all: an anonymous session, which every check treats as denied.
        identity = SessionIdentity()

    if settings.security.require_session and not identity.is_authenticated:
        raise HTTPException(status_code=401, detail="Missing session", headers={"WWW-Authenticate": "Bearer"})

    # Read back by the request logging middleware.
    request.state.session = identity
    return identity


def get_access_scope(
    session: SessionIdentity = Depends(get_current_session),
    resolver: ScopeResolver = Depends(get_resolver),
) -> AccessScope:
    return resolver.resolve(session)

from bulwark.access import AccessPolicy, ScopeResolver
from bulwark.domain.models import AccessScope, Role, SessionIdentity, Unit
from bulwark.org import OrgTree, load_org_tree
from bulwark.selector import CascadingUnitSelector

__all__ = [
    "AccessPolicy",
    "AccessScope",
    "CascadingUnitSelector",
    "OrgTree",
    "Role",
    "ScopeResolver",
    "SessionIdentity",
    "Unit",
    "load_org_tree",
]

from bulwark.org.loader import build_org_tree, default_units, load_org_tree
from bulwark.org.tree import OrgTree

__all__ = [
    "OrgTree",
    "build_org_tree",
    "default_units",
    "load_org_tree",
]

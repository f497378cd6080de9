import logging

from fastapi import APIRouter, Depends

from bulwark.api.deps import get_tree
from bulwark.config import settings
from bulwark.org.tree import OrgTree

logger = logging.getLogger("bulwark.api.system")
router = APIRouter()


@router.get("/health")
def health(tree: OrgTree = Depends(get_tree)):
    root = tree.root
    return {
        "status": "ok",
        "version": settings.app.version,
        "units": len(tree),
        "root": root.id if root else None,
    }

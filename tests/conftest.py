import pytest

from bulwark.access.policy import AccessPolicy
from bulwark.access.scope import ScopeResolver
from bulwark.org.loader import build_org_tree, default_units
from bulwark.org.tree import OrgTree


@pytest.fixture
def three_level_tree():
    """hq -> div-1 -> bn-1-1"""
    return OrgTree(
        [
            {"id": "hq", "name": "HQ", "level": "hq"},
            {"id": "div-1", "name": "1st Division", "parent_id": "hq", "level": "division"},
            {"id": "bn-1-1", "name": "1st Battalion", "parent_id": "div-1", "level": "battalion"},
        ]
    )


@pytest.fixture
def drill_tree():
    """hq -> {div-1, div-3}, div-1 -> {bn-1-1, bn-1-2}"""
    return OrgTree(
        [
            {"id": "hq", "name": "HQ"},
            {"id": "div-1", "name": "1st Division", "parent_id": "hq"},
            {"id": "div-3", "name": "3rd Division", "parent_id": "hq"},
            {"id": "bn-1-1", "name": "1st Battalion", "parent_id": "div-1"},
            {"id": "bn-1-2", "name": "2nd Battalion", "parent_id": "div-1"},
        ]
    )


@pytest.fixture
def seed_tree():
    return build_org_tree(default_units())


@pytest.fixture
def resolver(seed_tree):
    return ScopeResolver(seed_tree)


@pytest.fixture
def policy():
    return AccessPolicy()

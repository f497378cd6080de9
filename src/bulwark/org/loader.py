from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from bulwark.exceptions import ConfigError, OrgTreeError
from bulwark.org.tree import OrgTree

logger = logging.getLogger(__name__)

# Seed organization used when no units file is configured.
_DEFAULT_UNITS: list[dict[str, Any]] = [
    {"id": "hq", "name": "Army Headquarters", "level": "hq", "region": "Gyeryong", "risk": 22},
    {"id": "goc", "name": "Ground Operations Command", "parent_id": "hq", "level": "command", "region": "Yongin", "risk": 31},
    {"id": "corps-1", "name": "1st Corps", "parent_id": "goc", "level": "corps", "region": "Goyang", "risk": 38},
    {"id": "div-1", "name": "1st Infantry Division", "parent_id": "corps-1", "level": "division", "unit_type": "infantry", "region": "Paju", "risk": 45},
    {"id": "reg-11", "name": "11th Regiment", "parent_id": "div-1", "level": "regiment", "unit_type": "infantry", "region": "Paju", "risk": 52},
    {"id": "bn-1-1", "name": "1st Battalion", "parent_id": "reg-11", "level": "battalion", "unit_type": "infantry", "region": "Paju", "risk": 61},
    {"id": "bn-1-2", "name": "2nd Battalion", "parent_id": "reg-11", "level": "battalion", "unit_type": "infantry", "region": "Munsan", "risk": 27},
    {"id": "div-3", "name": "3rd Infantry Division", "parent_id": "corps-1", "level": "division", "unit_type": "infantry", "region": "Cheorwon", "risk": 56},
    {"id": "swc", "name": "Special Warfare Command", "parent_id": "hq", "level": "command", "unit_type": "special_forces", "region": "Icheon", "risk": 34},
    {"id": "bde-sf-1", "name": "1st Special Forces Brigade", "parent_id": "swc", "level": "brigade", "unit_type": "special_forces", "region": "Gimpo", "risk": 48},
]

# Front-end payloads use camelCase keys.
_KEY_ALIASES = {
    "parentId": "parent_id",
    "parent": "parent_id",
    "unitType": "unit_type",
}


def _normalize_record(raw: dict[str, Any]) -> dict[str, Any]:
    record: dict[str, Any] = {}
    for key, value in raw.items():
        record[_KEY_ALIASES.get(str(key), str(key))] = value
    return record


def default_units() -> list[dict[str, Any]]:
    return [dict(u) for u in _DEFAULT_UNITS]


def build_org_tree(records: list[Any], strict: bool = True) -> OrgTree:
    units = []
    for index, raw in enumerate(records):
        if not isinstance(raw, dict):
            logger.warning(f"Skipping unit entry #{index}: expected a mapping, got {type(raw).__name__}")
            continue
        units.append(_normalize_record(raw))
    try:
        return OrgTree(units, strict=strict)
    except ValidationError as exc:
        raise ConfigError(f"Invalid unit record: {exc}") from exc


def load_org_tree(path: Optional[Path] = None, strict: bool = True) -> OrgTree:
    """
    Build the organization tree from a YAML file with a top-level `units` list.
    A missing path or file falls back to the built-in seed organization.
    """
    if not path or not path.exists():
        logger.info("No organization units file found, using built-in seed organization")
        return build_org_tree(default_units(), strict=strict)

    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to read organization units from {path}: {exc}") from exc

    records = payload.get("units") if isinstance(payload, dict) else payload
    if not isinstance(records, list):
        raise ConfigError(f"{path} must contain a `units` list")

    try:
        tree = build_org_tree(records, strict=strict)
    except OrgTreeError as exc:
        raise OrgTreeError(f"{path}: {exc}") from exc
    logger.info(f"Loaded {len(tree)} organization units from {path}")
    return tree

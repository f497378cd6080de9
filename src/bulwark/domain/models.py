from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    """
    Closed set of authorization levels.
    HQ sees the whole army, DIV its own subtree, BN only its own unit.
    """
    HQ = "ROLE_HQ"
    DIV = "ROLE_DIV"
    BN = "ROLE_BN"

    @classmethod
    def coerce(cls, value: Any) -> Optional["Role"]:
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        token = str(value).strip().upper()
        if not token:
            return None
        aliases = {
            "ROLE_HQ": cls.HQ,
            "HQ": cls.HQ,
            "TOP": cls.HQ,
            "ROLE_DIV": cls.DIV,
            "DIV": cls.DIV,
            "MID": cls.DIV,
            "ROLE_BN": cls.BN,
            "BN": cls.BN,
            "LEAF": cls.BN,
        }
        return aliases.get(token)


ROLE_LABELS: dict[Role, str] = {
    Role.HQ: "Super Admin",
    Role.DIV: "Admin",
    Role.BN: "User",
}

ROLE_SCOPE_LABELS: dict[Role, str] = {
    Role.HQ: "Entire army",
    Role.DIV: "Subordinate units",
    Role.BN: "Own unit",
}

LEVEL_LABELS: dict[str, str] = {
    "hq": "Headquarters",
    "command": "Command",
    "corps": "Corps",
    "division": "Division",
    "brigade": "Brigade",
    "regiment": "Regiment",
    "battalion": "Battalion",
}

UNIT_TYPE_LABELS: dict[str, str] = {
    "infantry": "Infantry",
    "armor": "Armor",
    "mechanized": "Mechanized",
    "artillery": "Artillery",
    "special_forces": "Special Forces",
    "engineer": "Engineer",
}

# Level-0 selector value meaning "no unit filter".
ALL_UNITS = "all"
ALL_UNITS_LABEL = "All units"


class ContentKind(str, Enum):
    NOTICE = "notice"
    REPORT = "report"
    SCHEDULE = "schedule"
    USER = "user"


class Unit(BaseModel):
    """
    A node of the organization tree, stored flat with a parent pointer.
    Attributes beyond the structural ones are carried through untouched.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    id: str = Field(min_length=1)
    name: str
    parent_id: Optional[str] = None
    level: Optional[str] = None
    unit_type: Optional[str] = None
    region: Optional[str] = None
    risk: Any = None

    @field_validator("id", "name", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> str:
        return str(value or "").strip()

    @field_validator("parent_id", mode="before")
    @classmethod
    def _empty_parent_is_root(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def level_label(self) -> str:
        return LEVEL_LABELS.get(self.level or "", self.level or "")

    @property
    def unit_type_label(self) -> str:
        return UNIT_TYPE_LABELS.get(self.unit_type or "", self.unit_type or "")


class SessionIdentity(BaseModel):
    """
    Runtime claim of an authenticated session. Never persisted.
    """
    role: Optional[Role] = None
    home_unit_id: Optional[str] = None
    user_name: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> Optional[Role]:
        # Unknown role strings fail closed instead of rejecting the session.
        return Role.coerce(value)

    @property
    def is_authenticated(self) -> bool:
        return self.role is not None and bool(self.home_unit_id)


class AccessScope(BaseModel):
    """
    Resolved, immutable view of what a session may see.
    Threaded through callers instead of module-level session state.
    """
    model_config = ConfigDict(frozen=True)

    role: Optional[Role] = None
    home_unit_id: Optional[str] = None
    unit_ids: tuple[str, ...] = ()

    def can_access(self, unit_id: Optional[str]) -> bool:
        return bool(unit_id) and unit_id in self.unit_ids

    @property
    def is_empty(self) -> bool:
        return not self.unit_ids


class SelectableUnits(BaseModel):
    units: list[Unit] = Field(default_factory=list)
    is_fixed: bool = False


class MenuItem(BaseModel):
    id: str
    label: str
    path: str
    roles: Optional[list[Role]] = None


class RouteDecision(BaseModel):
    path: str
    allowed: bool
    redirect_to: Optional[str] = None


class SelectorLevel(BaseModel):
    index: int
    options: list[Unit] = Field(default_factory=list)
    selected: str = ""
    allows_all: bool = False

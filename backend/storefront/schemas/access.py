import enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire (the storefront API shape)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Admin action restrictions ───────────────────────────────

class AdminActionBlock(str, enum.Enum):
    PRODUCT_CREATE = "PRODUCT_CREATE"
    PRODUCT_EDIT = "PRODUCT_EDIT"
    PRODUCT_DELETE = "PRODUCT_DELETE"
    INVENTORY_REQUEST_DECIDE = "INVENTORY_REQUEST_DECIDE"
    USER_ACCESS_MANAGE = "USER_ACCESS_MANAGE"
    APPROVAL_REVIEW = "APPROVAL_REVIEW"
    STAFF_RULE_MANAGE = "STAFF_RULE_MANAGE"


class AdminRestrictionMode(str, enum.Enum):
    ACCOUNT = "ACCOUNT"              # whole account; handled by the backend
    ADMIN_ACTIONS = "ADMIN_ACTIONS"  # scoped set of admin actions


class AccessControlRecord(CamelModel):
    """One row of the operator's active access controls, as the API returns it."""
    id: Any = None
    is_active: Any = None
    reason: Any = None
    note: Any = None
    starts_at: Any = None  # ISO string or epoch number, relayed as-is
    ends_at: Any = None
    metadata: Any = None
    raw: Any = None


class AdminActionControl(CamelModel):
    id: Any = None
    reason: Any = None
    note: Any = None
    starts_at: Any = None
    ends_at: Any = None
    actions: list[AdminActionBlock]


class AdminCapabilityState(CamelModel):
    blocked_actions: set[AdminActionBlock]
    active_controls: list[AdminActionControl]

    def is_blocked(self, action: AdminActionBlock | str) -> bool:
        return action in self.blocked_actions


class AdminCapabilityOut(AdminCapabilityState):
    """Capability state plus the tooltip text for every blocked action."""
    tooltips: dict[str, str]


# ── Dashboard routes ────────────────────────────────────────

DashboardRole = Literal["admin", "manager", "salesperson"]
DashboardAccessReason = Literal["invalid-path", "invalid-role", "invalid-user"]


class DashboardAccessResult(CamelModel):
    allowed: bool
    redirect_to: str
    reason: DashboardAccessReason | None = None


class DashboardRouteCheck(CamelModel):
    pathname: str
    role: DashboardRole
    user_id: str

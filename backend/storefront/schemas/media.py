import enum
from typing import Any

from storefront.schemas.access import CamelModel


class MediaVisibilityPreset(str, enum.Enum):
    # Public-facing
    PUBLIC = "PUBLIC"
    TOP_SHELF = "TOP_SHELF"
    USER_TIER = "USER_TIER"
    TARGETED_USER = "TARGETED_USER"
    PRIVATE = "PRIVATE"
    # Role-facing
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    SALES = "SALES"


class MediaAudience(str, enum.Enum):
    PUBLIC = "PUBLIC"
    TARGETED = "TARGETED"
    ADMIN_ONLY = "ADMIN_ONLY"
    ROLE_BASED = "ROLE_BASED"
    PRIVATE = "PRIVATE"


class MediaSection(str, enum.Enum):
    PRODUCT_PAGE = "PRODUCT_PAGE"
    TOP_SHELF = "TOP_SHELF"
    VIP = "VIP"
    PRIVATE = "PRIVATE"


class MediaRole(str, enum.Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    SALES = "SALES"


class CustomerTier(str, enum.Enum):
    REGULAR = "REGULAR"
    VIP = "VIP"
    ULTRA_VIP = "ULTRA_VIP"


class TargetUser(CamelModel):
    user_id: str


class VisibilityFields(CamelModel):
    """The raw visibility tuple stored on a media row."""
    audience: MediaAudience | None = None
    visibility_sections: list[MediaSection] = []
    allowed_roles: list[MediaRole] = []
    min_customer_tier: CustomerTier | None = None
    target_users: list[TargetUser] = []


class VisibilityQuery(CamelModel):
    """Loosely typed visibility fields as they arrive from forms or the API."""
    visibility_preset: Any = None
    audience: Any = None
    visibility_sections: Any = None
    allowed_roles: Any = None
    min_customer_tier: Any = None
    target_users: Any = None


class VisibilityResolution(CamelModel):
    visibility_preset: MediaVisibilityPreset | None
    family: str | None  # "public" | "role"


class MediaRecord(CamelModel):
    id: str
    type: str
    url: str
    mime_type: str
    size_bytes: int
    product_id: str | None = None
    uploaded_by_user_id: str | None = None
    created_at: str

from typing import Any, Literal

from pydantic import ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

from storefront.schemas.access import CamelModel

OnboardingMode = Literal["setup-user", "bootstrap-admin"]
ONBOARDING_MODES: tuple[OnboardingMode, ...] = ("setup-user", "bootstrap-admin")


class SetupUserPayload(CamelModel):
    """Optional profile fields attached to a new account."""
    display_name: str | None = None
    phone: str | None = None
    line_id: str | None = None
    preferred_language: str | None = None
    city: str | None = None

    def to_body(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


class SignupPrecheckRequest(SetupUserPayload):
    email: EmailStr


class SignupPrecheckResponse(CamelModel):
    """Precheck answer from the API. Unknown keys are kept for mode resolution."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    eligible: bool | None = None
    message: str | None = None
    onboarding_mode: Any = None
    bootstrap_enabled: Any = None
    bootstrap_admin: Any = None
    should_bootstrap_admin: Any = None
    is_bootstrap_admin: Any = None
    requires_bootstrap_admin: Any = None
    role: Any = None
    next_endpoint: Any = None
    target_endpoint: Any = None


class PendingSetupProfile(CamelModel):
    email: str
    payload: SetupUserPayload
    onboarding_mode: OnboardingMode | None = None


class PendingSetupMatch(CamelModel):
    payload: SetupUserPayload
    onboarding_mode: OnboardingMode

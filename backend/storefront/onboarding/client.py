"""HTTP client for the signup precheck and account setup endpoints.

Endpoints (storefront API):
  POST /api/v1/auth/precheck-signup  : is this email allowed to sign up, and how?
  POST /api/v1/auth/setup-user       : attach profile fields to a new account
  POST /api/v1/auth/bootstrap-admin  : promote the very first account to admin

Setup calls are authenticated with the identity provider's bearer token.
Repeating a setup call for an already provisioned account is safe; the API
deduplicates, not this client.

Every failure raises OnboardingError with a message fit for display. Nothing
is retried here.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from storefront.config import settings
from storefront.middleware.exceptions import OnboardingError
from storefront.schemas.onboarding import (
    OnboardingMode,
    SetupUserPayload,
    SignupPrecheckRequest,
    SignupPrecheckResponse,
)

logger = logging.getLogger(__name__)

PRECHECK_SIGNUP_ENDPOINT = "/api/v1/auth/precheck-signup"
SETUP_USER_ENDPOINT = "/api/v1/auth/setup-user"
BOOTSTRAP_ADMIN_ENDPOINT = "/api/v1/auth/bootstrap-admin"

# Precheck fields that may name the onboarding flow, in precedence order.
MODE_STRING_KEYS: tuple[str, ...] = ("onboardingMode", "nextEndpoint", "targetEndpoint", "role")
# Precheck flags that request the bootstrap flow when exactly True.
BOOTSTRAP_FLAG_KEYS: tuple[str, ...] = (
    "bootstrapAdmin",
    "shouldBootstrapAdmin",
    "isBootstrapAdmin",
    "requiresBootstrapAdmin",
    "bootstrapEnabled",
)
_BOOTSTRAP_MARKERS = ("bootstrap-admin", "bootstrap_admin", "bootstrap", "super_admin", "superadmin")
_SETUP_MARKERS = ("setup-user", "setup_user", "setup", "customer")


# ── Onboarding mode resolution ──────────────────────────────

def parse_onboarding_mode(value: str) -> OnboardingMode | None:
    normalized = value.strip().lower()
    if not normalized:
        return None
    if any(marker in normalized for marker in _BOOTSTRAP_MARKERS):
        return "bootstrap-admin"
    if any(marker in normalized for marker in _SETUP_MARKERS):
        return "setup-user"
    return None


def resolve_onboarding_mode(
    precheck_response: SignupPrecheckResponse | Mapping[str, Any] | None,
) -> OnboardingMode:
    """Pick the setup flow a precheck answer asks for (default: setup-user)."""
    if isinstance(precheck_response, BaseModel):
        data = precheck_response.model_dump(by_alias=True)
    elif isinstance(precheck_response, Mapping):
        data = precheck_response
    else:
        return "setup-user"

    for key in MODE_STRING_KEYS:
        candidate = data.get(key)
        if not isinstance(candidate, str):
            continue
        parsed = parse_onboarding_mode(candidate)
        if parsed:
            return parsed

    if any(data.get(key) is True for key in BOOTSTRAP_FLAG_KEYS):
        return "bootstrap-admin"

    return "setup-user"


# ── Client ──────────────────────────────────────────────────

def _message_from(response: httpx.Response, fallback: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return fallback


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


class OnboardingClient:
    """Thin async wrapper around the storefront onboarding endpoints.

    Usage:
        async with httpx.AsyncClient(base_url=settings.api_base_url) as http:
            client = OnboardingClient(http)
            await client.setup_user(session.access_token, payload)
    """

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    @classmethod
    def from_settings(cls) -> "OnboardingClient":
        return cls(
            httpx.AsyncClient(
                base_url=settings.api_base_url,
                timeout=settings.http_timeout_seconds,
            )
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    async def precheck_signup(
        self, email: str, payload: SetupUserPayload | None = None
    ) -> SignupPrecheckResponse:
        """Ask the API whether `email` may sign up. Raises unless eligible."""
        try:
            body = SignupPrecheckRequest(email=email, **(payload or SetupUserPayload()).model_dump())
        except ValidationError as e:
            raise OnboardingError("A valid email address is required.", status_code=422) from e

        try:
            response = await self.http.post(
                PRECHECK_SIGNUP_ENDPOINT,
                json=body.model_dump(by_alias=True, exclude_none=True, mode="json"),
            )
        except httpx.HTTPError as e:
            logger.warning(f"Signup precheck unreachable: {e}")
            raise OnboardingError(f"Unable to reach signup precheck endpoint. {e}") from e

        data = _json_or_none(response)
        message = (
            data["message"]
            if isinstance(data, dict) and isinstance(data.get("message"), str)
            else "Signup precheck failed."
        )

        if response.is_error:
            raise OnboardingError(message, status_code=response.status_code)

        if not isinstance(data, dict) or data.get("eligible") is not True:
            raise OnboardingError(message, status_code=response.status_code)

        return SignupPrecheckResponse.model_validate(data)

    async def _call_onboarding_endpoint(
        self,
        endpoint: str,
        access_token: str,
        payload: SetupUserPayload | None,
    ) -> Any:
        try:
            response = await self.http.post(
                endpoint,
                json=(payload or SetupUserPayload()).to_body(),
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as e:
            logger.warning(f"Account setup endpoint {endpoint} unreachable: {e}")
            raise OnboardingError(f"Unable to reach account setup endpoint. {e}") from e

        if response.is_error:
            message = _message_from(response, "Failed to setup user.")
            logger.warning(f"Account setup via {endpoint} failed: HTTP {response.status_code} - {message}")
            raise OnboardingError(message, status_code=response.status_code)

        return _json_or_none(response)

    async def setup_user(self, access_token: str, payload: SetupUserPayload | None = None) -> Any:
        return await self._call_onboarding_endpoint(SETUP_USER_ENDPOINT, access_token, payload)

    async def bootstrap_admin(self, access_token: str, payload: SetupUserPayload | None = None) -> Any:
        return await self._call_onboarding_endpoint(BOOTSTRAP_ADMIN_ENDPOINT, access_token, payload)

    async def complete_setup(
        self,
        access_token: str,
        payload: SetupUserPayload | None,
        onboarding_mode: OnboardingMode,
    ) -> Any:
        """Run the setup flow selected by `onboarding_mode`."""
        if onboarding_mode == "bootstrap-admin":
            return await self.bootstrap_admin(access_token, payload)
        return await self.setup_user(access_token, payload)

"""Single-slot storage for a pending account-setup profile.

A profile is stored when signup (or the pre-login precheck) cannot provision
the account immediately, e.g. because the user still has to confirm their
email. The first session whose email matches consumes it.

Storage format, under PENDING_SETUP_STORAGE_KEY:
    {"email": "user@example.com", "payload": {...}, "onboardingMode": "setup-user"}

Only one profile exists at a time (last write wins). Anything unreadable in
the slot is treated as "nothing pending".
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from storefront.schemas.onboarding import (
    OnboardingMode,
    PendingSetupMatch,
    PendingSetupProfile,
    SetupUserPayload,
)
from storefront.storage import KeyValueStore

logger = logging.getLogger(__name__)

PENDING_SETUP_STORAGE_KEY = "pending_user_setup_profile"
DEFAULT_ONBOARDING_MODE: OnboardingMode = "setup-user"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _lenient_payload(payload: dict) -> dict:
    """Stringify numeric profile fields and drop values that are not text."""
    cleaned = {}
    for key, value in payload.items():
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            value = str(value)
        if isinstance(value, str):
            cleaned[key] = value
    return cleaned


class PendingSetupStore:
    def __init__(self, store: KeyValueStore):
        self.store = store

    async def _read(self) -> PendingSetupProfile | None:
        raw = await self.store.get(PENDING_SETUP_STORAGE_KEY)
        if not raw:
            return None

        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unparseable pending setup profile")
            return None

        if not isinstance(parsed, dict) or not isinstance(parsed.get("email"), str):
            return None
        if not isinstance(parsed.get("payload"), dict):
            return None
        parsed["payload"] = _lenient_payload(parsed["payload"])
        if parsed.get("onboardingMode") not in ("setup-user", "bootstrap-admin"):
            parsed["onboardingMode"] = None

        try:
            return PendingSetupProfile.model_validate(parsed)
        except ValidationError:
            logger.warning("Discarding malformed pending setup profile")
            return None

    async def _read_for_email(self, email: str) -> PendingSetupProfile | None:
        profile = await self._read()
        if profile is None:
            return None
        if not isinstance(email, str) or profile.email != normalize_email(email):
            return None
        return profile

    async def store_profile(
        self,
        email: str,
        payload: SetupUserPayload,
        onboarding_mode: OnboardingMode = DEFAULT_ONBOARDING_MODE,
    ) -> None:
        """Persist the profile, replacing whatever was pending before."""
        value = PendingSetupProfile(
            email=normalize_email(email),
            payload=payload,
            onboarding_mode=onboarding_mode,
        )
        await self.store.set(
            PENDING_SETUP_STORAGE_KEY,
            json.dumps(value.model_dump(by_alias=True, exclude_none=True)),
        )

    async def get_payload_for_email(self, email: str) -> SetupUserPayload | None:
        profile = await self._read_for_email(email)
        return profile.payload if profile else None

    async def get_profile_for_email(self, email: str) -> PendingSetupMatch | None:
        profile = await self._read_for_email(email)
        if profile is None:
            return None
        return PendingSetupMatch(
            payload=profile.payload,
            onboarding_mode=profile.onboarding_mode or DEFAULT_ONBOARDING_MODE,
        )

    async def clear(self) -> None:
        await self.store.delete(PENDING_SETUP_STORAGE_KEY)

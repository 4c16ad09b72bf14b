"""Finish a deferred account setup once the user has a session.

Flow (one pass per page load):
  1. Resolve a session: from the redirect URL's credential fragment when
     there is one, otherwise the session the provider already holds.
  2. Look up the pending setup profile for the session's email.
  3. Call the setup endpoint picked by the stored onboarding mode
     (bootstrap-admin or setup-user), once.
  4. On success clear the pending slot. On failure keep it and raise, so the
     next page load retries.

States:
  no session / nothing pending  → no-op
  session + matching profile    → reconciling → reconciled (slot empty)
                                              ↘ error (slot kept)
"""

from __future__ import annotations

import enum
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from pydantic import BaseModel

from storefront.middleware.exceptions import OnboardingError
from storefront.onboarding.client import OnboardingClient
from storefront.onboarding.pending import PendingSetupStore
from storefront.onboarding.session import (
    Session,
    SessionError,
    SessionProvider,
    UrlHistory,
    extract_fragment,
    fragment_has_credentials,
    strip_fragment,
)
from storefront.schemas.onboarding import OnboardingMode
from storefront.storage import get_store

logger = logging.getLogger(__name__)

INVALID_REFRESH_TOKEN_MARKER = "invalid refresh token"


class ReconcileStatus(str, enum.Enum):
    NO_SESSION = "no_session"
    NO_PENDING_PROFILE = "no_pending_profile"
    RECONCILED = "reconciled"


class ReconcileResult(BaseModel):
    status: ReconcileStatus
    onboarding_mode: OnboardingMode | None = None
    response: Any = None


class SetupReconciler:
    def __init__(
        self,
        pending: PendingSetupStore,
        client: OnboardingClient,
        sessions: SessionProvider,
    ):
        self.pending = pending
        self.client = client
        self.sessions = sessions

    async def reconcile(self, session: Session | None) -> ReconcileResult:
        """Complete the pending setup for `session`, if there is one."""
        if session is None or not session.access_token:
            return ReconcileResult(status=ReconcileStatus.NO_SESSION)

        match = await self.pending.get_profile_for_email(session.email) if session.email else None
        if match is None:
            return ReconcileResult(status=ReconcileStatus.NO_PENDING_PROFILE)

        # Raises OnboardingError; the pending slot is left for the next attempt.
        response = await self.client.complete_setup(
            session.access_token, match.payload, match.onboarding_mode
        )

        await self.pending.clear()
        logger.info(f"Completed pending account setup ({match.onboarding_mode})")
        return ReconcileResult(
            status=ReconcileStatus.RECONCILED,
            onboarding_mode=match.onboarding_mode,
            response=response,
        )

    async def _current_session(self) -> Session | None:
        try:
            return await self.sessions.get_session()
        except SessionError as e:
            if INVALID_REFRESH_TOKEN_MARKER in e.message.lower():
                logger.info("Stored refresh token rejected; signing out")
                await self.sessions.sign_out()
                return None
            raise OnboardingError(e.message) from e

    async def sync_after_callback(self) -> ReconcileResult:
        """Reconcile using the session the identity provider already holds."""
        return await self.reconcile(await self._current_session())

    async def sync_from_callback_url(self, url: str, history: UrlHistory) -> ReconcileResult:
        """Reconcile after a cross-origin identity redirect.

        The credential fragment is removed from the visible URL whether or not
        reconciliation succeeds.
        """
        fragment = extract_fragment(url)
        carries_credentials = fragment_has_credentials(fragment)

        try:
            session: Session | None = None
            if carries_credentials:
                try:
                    session = await self.sessions.exchange_hash_fragment(fragment)
                except SessionError as e:
                    logger.warning(f"Could not exchange callback fragment for a session: {e.message}")
            if session is None:
                session = await self._current_session()
            return await self.reconcile(session)
        finally:
            if carries_credentials:
                history.replace_url(strip_fragment(url))


@asynccontextmanager
async def open_setup_reconciler(sessions: SessionProvider) -> AsyncIterator[SetupReconciler]:
    """Reconciler wired to the configured store and API; closes its HTTP client on exit.

    Usage:
        async with open_setup_reconciler(provider) as reconciler:
            await reconciler.sync_from_callback_url(url, history)
    """
    client = OnboardingClient.from_settings()
    try:
        pending = PendingSetupStore(await get_store())
        yield SetupReconciler(pending, client, sessions)
    finally:
        await client.aclose()

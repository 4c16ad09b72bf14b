"""Identity-provider session contract and callback URL helpers.

The identity provider is a black box. Reconciliation only needs to:
  - read the current session (if any),
  - turn the credential fragment of a redirect URL into a session,
  - sign out when the stored refresh token is no longer accepted.
"""

from __future__ import annotations

from typing import Protocol
from urllib.parse import parse_qs, urldefrag

from pydantic import BaseModel

# Fragment keys that mean "this URL carries credentials".
CREDENTIAL_FRAGMENT_KEYS: tuple[str, ...] = ("access_token", "refresh_token", "code")


class Session(BaseModel):
    access_token: str
    email: str | None = None
    user_id: str | None = None


class SessionError(Exception):
    """Raised by a SessionProvider when the provider reports an error."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SessionProvider(Protocol):
    async def get_session(self) -> Session | None: ...

    async def exchange_hash_fragment(self, fragment: str) -> Session | None: ...

    async def sign_out(self) -> None: ...


class UrlHistory(Protocol):
    """Whatever owns the visible URL (browser history, a redirect response, ...)."""

    def replace_url(self, url: str) -> None: ...


def extract_fragment(url: str) -> str:
    return urldefrag(url).fragment


def strip_fragment(url: str) -> str:
    return urldefrag(url).url


def fragment_has_credentials(fragment: str) -> bool:
    if not fragment:
        return False
    params = parse_qs(fragment.lstrip("#"), keep_blank_values=False)
    return any(params.get(key) for key in CREDENTIAL_FRAGMENT_KEYS)

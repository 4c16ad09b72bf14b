"""Upstream storefront API access for the BFF routes.

Dependencies:
  get_upstream_client()  → shared httpx.AsyncClient (override in tests)
  upstream_url(...)      → absolute URL on API_BASE_URL, validated
"""

from typing import AsyncGenerator

import httpx
from fastapi import Request

from storefront.config import settings
from storefront.middleware.exceptions import ConfigurationError


async def get_upstream_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        yield client


def upstream_url(path: str, request: Request | None = None) -> str:
    """Join `path` onto API_BASE_URL.

    Raises ConfigurationError when the base URL is unset, unparseable, or
    points back at this service (which would proxy to itself forever).
    """
    base = settings.api_base_url.strip()
    if not base:
        raise ConfigurationError("API base URL is not configured. Set API_BASE_URL.")

    target = f"{base.rstrip('/')}{path}"
    try:
        parsed = httpx.URL(target)
    except httpx.InvalidURL as e:
        raise ConfigurationError(f"Invalid API base URL: {base}") from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigurationError(f"Invalid API base URL: {base}")

    if request is not None:
        own = request.base_url
        if (parsed.scheme, parsed.host, parsed.port) == (own.scheme, own.hostname, own.port):
            raise ConfigurationError(
                "API_BASE_URL points to this service's own origin. "
                "Point it to the storefront API origin."
            )

    return target

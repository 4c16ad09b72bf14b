"""Onboarding proxy routes in front of the storefront API.

Route overview:
  POST /precheck-signup  : forward the signup precheck; tell the browser
                           which onboarding flow to use
  POST /bootstrap-admin  : forward the first-admin bootstrap with the
                           server-held bootstrap secret attached

The bootstrap secret never reaches the browser; only this service adds it.
"""

import json
import logging

import httpx
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response

from storefront.auth.deps import require_authorization_header
from storefront.config import settings
from storefront.middleware.exceptions import ConfigurationError, StorefrontException, UpstreamError
from storefront.upstream import get_upstream_client, upstream_url

logger = logging.getLogger(__name__)

router = APIRouter()

PRECHECK_SIGNUP_PATH = "/api/v1/auth/precheck-signup"
BOOTSTRAP_ADMIN_PATH = "/api/v1/auth/bootstrap-admin"
BOOTSTRAP_SECRET_HEADER = "x-bootstrap-secret"


# ── POST /precheck-signup ───────────────────────────────────

@router.post("/precheck-signup")
async def precheck_signup(
    request: Request,
    client: httpx.AsyncClient = Depends(get_upstream_client),
):
    """Forward the precheck and fill in `bootstrapEnabled` / `onboardingMode`.

    Upstream values win; the defaults only fill gaps. Non-JSON or non-object
    upstream bodies are relayed untouched.
    """
    target_url = upstream_url(PRECHECK_SIGNUP_PATH, request)
    body = await request.body()

    try:
        upstream = await client.post(
            target_url,
            content=body,
            headers={"Content-Type": "application/json"},
        )
    except httpx.HTTPError as e:
        logger.warning(f"Signup precheck upstream unreachable: {e}")
        raise UpstreamError(
            f"Unable to reach upstream signup precheck endpoint ({target_url}). {e}"
        ) from e

    content_type = upstream.headers.get("content-type", "application/json")

    if "application/json" in content_type.lower():
        try:
            parsed = json.loads(upstream.text)
        except ValueError:
            parsed = None

        if isinstance(parsed, dict):
            bootstrap_enabled = settings.bootstrap_enabled
            if not isinstance(parsed.get("bootstrapEnabled"), bool):
                parsed["bootstrapEnabled"] = bootstrap_enabled
            if not isinstance(parsed.get("onboardingMode"), str):
                parsed["onboardingMode"] = "bootstrap-admin" if bootstrap_enabled else "setup-user"
            return JSONResponse(parsed, status_code=upstream.status_code)

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=content_type,
    )


# ── POST /bootstrap-admin ───────────────────────────────────

@router.post("/bootstrap-admin")
async def bootstrap_admin(
    request: Request,
    client: httpx.AsyncClient = Depends(get_upstream_client),
):
    """Forward the first-admin bootstrap call with the bootstrap secret."""
    missing = [
        name
        for name, value in (
            ("API_BASE_URL", settings.api_base_url.strip()),
            ("SUPER_ADMIN_BOOTSTRAP_SECRET", settings.super_admin_bootstrap_secret.strip()),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(f"Missing required server env var(s): {', '.join(missing)}.")

    authorization = require_authorization_header(request)

    try:
        payload = await request.json()
    except ValueError as e:
        raise StorefrontException(
            "Request body must be valid JSON.",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="INVALID_JSON",
        ) from e

    target_url = upstream_url(BOOTSTRAP_ADMIN_PATH, request)

    try:
        upstream = await client.post(
            target_url,
            json=payload,
            headers={
                "Authorization": authorization,
                BOOTSTRAP_SECRET_HEADER: settings.super_admin_bootstrap_secret,
            },
        )
    except httpx.HTTPError as e:
        logger.warning(f"Bootstrap-admin upstream unreachable: {e}")
        raise UpstreamError(f"Unable to reach upstream bootstrap-admin endpoint. {e}") from e

    try:
        response_body = upstream.json()
    except ValueError as e:
        raise UpstreamError("Upstream bootstrap-admin endpoint did not return valid JSON.") from e
    if response_body is None:
        raise UpstreamError("Upstream bootstrap-admin endpoint did not return valid JSON.")

    return JSONResponse(response_body, status_code=upstream.status_code)

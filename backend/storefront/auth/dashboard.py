"""Dashboard route scoping.

Every dashboard page lives under `/{role}/dashboard/{user_id}/...`. A signed-in
user may only browse their own subtree; anything else is redirected to the
canonical base path for the (role, user) pair resolved from their session.
"""

from __future__ import annotations

from storefront.schemas.access import DashboardAccessResult, DashboardRole

DASHBOARD_SEGMENT = "dashboard"

BACKEND_TO_DASHBOARD_ROLE: dict[str, DashboardRole] = {
    "ADMIN": "admin",
    "MANAGER": "manager",
    "SALES": "salesperson",
}


def map_backend_role_to_dashboard_role(role: str | None) -> DashboardRole | None:
    """Map an API role (`ADMIN`, `MANAGER`, `SALES`) to its dashboard prefix."""
    if not role:
        return None
    return BACKEND_TO_DASHBOARD_ROLE.get(role.strip().upper())


def get_dashboard_base_path(role: DashboardRole, user_id: str) -> str:
    return f"/{role}/{DASHBOARD_SEGMENT}/{user_id}"


def check_dashboard_route_access(
    pathname: str,
    role: DashboardRole,
    user_id: str,
) -> DashboardAccessResult:
    canonical_path = get_dashboard_base_path(role, user_id)
    segments = [segment for segment in pathname.split("/") if segment]

    if len(segments) < 3:
        return DashboardAccessResult(
            allowed=False, redirect_to=canonical_path, reason="invalid-path"
        )

    path_role, dashboard_segment, path_user_id = segments[:3]

    if dashboard_segment != DASHBOARD_SEGMENT:
        return DashboardAccessResult(
            allowed=False, redirect_to=canonical_path, reason="invalid-path"
        )

    if path_role != role:
        return DashboardAccessResult(
            allowed=False, redirect_to=canonical_path, reason="invalid-role"
        )

    if path_user_id != user_id:
        return DashboardAccessResult(
            allowed=False, redirect_to=canonical_path, reason="invalid-user"
        )

    return DashboardAccessResult(allowed=True, redirect_to=canonical_path)

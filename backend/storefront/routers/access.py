"""Access derivations over HTTP, for clients that cannot run them locally.

  POST /capabilities     → blocked admin actions from active access controls
  POST /dashboard-route  → may this (role, user) open this dashboard path?

Both are pure computations on caller-supplied data. Results are advisory;
the storefront API still enforces every restriction.
"""

from typing import Any

from fastapi import APIRouter, Body

from storefront.auth.capabilities import (
    build_admin_capability_state,
    get_admin_action_restriction_tooltip,
)
from storefront.auth.dashboard import check_dashboard_route_access
from storefront.schemas.access import (
    AdminCapabilityOut,
    DashboardAccessResult,
    DashboardRouteCheck,
)

router = APIRouter()


@router.post("/capabilities", response_model=AdminCapabilityOut, response_model_by_alias=True)
async def admin_capabilities(active_access_controls: Any = Body(default=None)):
    """Accepts the raw `activeAccessControls` list; anything malformed derives nothing."""
    state = build_admin_capability_state(active_access_controls)
    return AdminCapabilityOut(
        blocked_actions=state.blocked_actions,
        active_controls=state.active_controls,
        tooltips={
            action.value: get_admin_action_restriction_tooltip(action)
            for action in sorted(state.blocked_actions, key=lambda a: a.value)
        },
    )


@router.post("/dashboard-route", response_model=DashboardAccessResult, response_model_by_alias=True)
async def dashboard_route(body: DashboardRouteCheck):
    return check_dashboard_route_access(body.pathname, body.role, body.user_id)

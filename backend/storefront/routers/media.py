"""Media visibility resolution.

  POST /visibility → canonical preset (and its family) for raw visibility fields
"""

from fastapi import APIRouter

from storefront.media.visibility import derive_visibility_preset, visibility_preset_family
from storefront.schemas.media import VisibilityQuery, VisibilityResolution

router = APIRouter()


@router.post("/visibility", response_model=VisibilityResolution, response_model_by_alias=True)
async def resolve_visibility(body: VisibilityQuery):
    preset = derive_visibility_preset(
        visibility_preset=body.visibility_preset,
        audience=body.audience,
        visibility_sections=body.visibility_sections,
        allowed_roles=body.allowed_roles,
        min_customer_tier=body.min_customer_tier,
        target_users=body.target_users,
    )
    return VisibilityResolution(
        visibility_preset=preset,
        family=visibility_preset_family(preset),
    )

"""Tests for media visibility preset resolution."""

import pytest

from storefront.media.visibility import (
    CUSTOMER_TIER_OPTIONS,
    build_visibility_fields,
    derive_visibility_preset,
    is_public_visibility_preset,
    is_role_visibility_preset,
    normalize_visibility_preset,
    parse_target_user_ids_input,
    to_role_visibility_preset,
    visibility_preset_family,
)
from storefront.schemas.media import (
    CustomerTier,
    MediaAudience,
    MediaRole,
    MediaSection,
    MediaVisibilityPreset,
)


def _derive_from(fields) -> MediaVisibilityPreset | None:
    return derive_visibility_preset(
        audience=fields.audience,
        visibility_sections=fields.visibility_sections,
        allowed_roles=fields.allowed_roles,
        min_customer_tier=fields.min_customer_tier,
        target_users=fields.target_users,
    )


@pytest.mark.unit
class TestDeriveVisibilityPreset:

    @pytest.mark.parametrize("preset", [p for p in MediaVisibilityPreset if p is not MediaVisibilityPreset.USER_TIER])
    def test_built_fields_derive_back_to_preset(self, preset):
        fields = build_visibility_fields(preset, target_user_ids=["u1", "u2"])
        assert _derive_from(fields) is preset

    @pytest.mark.parametrize("tier", CUSTOMER_TIER_OPTIONS)
    def test_user_tier_round_trip(self, tier):
        fields = build_visibility_fields(MediaVisibilityPreset.USER_TIER, min_customer_tier=tier)
        assert fields.min_customer_tier is tier
        assert _derive_from(fields) is MediaVisibilityPreset.USER_TIER

    def test_targeted_user_without_ids_round_trips(self):
        fields = build_visibility_fields("TARGETED_USER")
        assert fields.target_users == []
        assert _derive_from(fields) is MediaVisibilityPreset.TARGETED_USER

    def test_explicit_preset_wins_over_fields(self):
        preset = derive_visibility_preset(
            visibility_preset="private",
            audience="PUBLIC",
            visibility_sections=["TOP_SHELF"],
        )
        assert preset is MediaVisibilityPreset.PRIVATE

    def test_unrecognized_explicit_preset_falls_back_to_fields(self):
        preset = derive_visibility_preset(visibility_preset="everyone", audience="public")
        assert preset is MediaVisibilityPreset.PUBLIC

    @pytest.mark.parametrize("value", ["top-shelf", " Top Shelf ", "TOP_SHELF", "top - shelf"])
    def test_explicit_preset_separators(self, value):
        assert derive_visibility_preset(visibility_preset=value) is MediaVisibilityPreset.TOP_SHELF

    def test_role_priority(self):
        preset = derive_visibility_preset(audience="ROLE_BASED", allowed_roles=["sales", "MANAGER"])
        assert preset is MediaVisibilityPreset.MANAGER
        preset = derive_visibility_preset(audience="role_based", allowed_roles=["SALES", "ADMIN", "MANAGER"])
        assert preset is MediaVisibilityPreset.ADMIN

    @pytest.mark.parametrize("roles", [[], ["CUSTOMER"], None, "ADMIN"])
    def test_role_based_without_known_role(self, roles):
        assert derive_visibility_preset(audience="ROLE_BASED", allowed_roles=roles) is None

    def test_public_without_top_shelf(self):
        preset = derive_visibility_preset(audience="PUBLIC", visibility_sections=["PRODUCT_PAGE", "VIP"])
        assert preset is MediaVisibilityPreset.PUBLIC

    def test_targeted_users_win_over_tier(self):
        preset = derive_visibility_preset(
            audience="TARGETED",
            min_customer_tier="VIP",
            target_users=[{"userId": "u9"}],
        )
        assert preset is MediaVisibilityPreset.TARGETED_USER

    def test_blank_target_users_are_ignored(self):
        preset = derive_visibility_preset(
            audience="TARGETED",
            min_customer_tier="ultra_vip",
            target_users=[{"userId": "  "}, {"user_id": None}, {}],
        )
        assert preset is MediaVisibilityPreset.USER_TIER

    def test_null_camel_case_id_falls_back_to_snake_case(self):
        preset = derive_visibility_preset(
            audience="TARGETED",
            min_customer_tier="VIP",
            target_users=[{"userId": None, "user_id": "u4"}],
        )
        assert preset is MediaVisibilityPreset.TARGETED_USER

    def test_targeted_with_unknown_tier(self):
        assert derive_visibility_preset(audience="TARGETED", min_customer_tier="GOLD") is (
            MediaVisibilityPreset.TARGETED_USER
        )

    @pytest.mark.parametrize("audience", [None, "", "ADMIN_ONLY", "EVERYONE"])
    def test_unresolvable_audience(self, audience):
        assert derive_visibility_preset(audience=audience) is None


@pytest.mark.unit
class TestBuildVisibilityFields:

    def test_public(self):
        fields = build_visibility_fields("public")
        assert fields.audience is MediaAudience.PUBLIC
        assert fields.visibility_sections == [MediaSection.PRODUCT_PAGE]

    def test_role_preset(self):
        fields = build_visibility_fields(MediaVisibilityPreset.SALES)
        assert fields.audience is MediaAudience.ROLE_BASED
        assert fields.allowed_roles == [MediaRole.SALES]

    def test_targeted_user(self):
        fields = build_visibility_fields(
            MediaVisibilityPreset.TARGETED_USER,
            target_user_ids=parse_target_user_ids_input("u1, u2 u1"),
        )
        assert [row.user_id for row in fields.target_users] == ["u1", "u2"]

    def test_camel_case_dump(self):
        fields = build_visibility_fields("USER_TIER", min_customer_tier=CustomerTier.VIP)
        assert fields.model_dump(by_alias=True, mode="json") == {
            "audience": "TARGETED",
            "visibilitySections": [],
            "allowedRoles": [],
            "minCustomerTier": "VIP",
            "targetUsers": [],
        }

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            build_visibility_fields("EVERYONE")

    def test_user_tier_requires_tier(self):
        with pytest.raises(ValueError):
            build_visibility_fields(MediaVisibilityPreset.USER_TIER)


@pytest.mark.unit
class TestPresetHelpers:

    def test_families(self):
        for preset in ("PUBLIC", "TOP_SHELF", "USER_TIER", "TARGETED_USER", "PRIVATE"):
            assert is_public_visibility_preset(MediaVisibilityPreset(preset))
            assert visibility_preset_family(MediaVisibilityPreset(preset)) == "public"
        for preset in ("ADMIN", "MANAGER", "SALES"):
            assert is_role_visibility_preset(MediaVisibilityPreset(preset))
            assert visibility_preset_family(MediaVisibilityPreset(preset)) == "role"
        assert visibility_preset_family(None) is None
        assert not is_public_visibility_preset(None)
        assert not is_role_visibility_preset(MediaVisibilityPreset.PUBLIC)

    @pytest.mark.parametrize("value, expected", [
        ("admin", MediaVisibilityPreset.ADMIN),
        (MediaRole.SALES, MediaVisibilityPreset.SALES),
        (" Manager ", MediaVisibilityPreset.MANAGER),
        ("CUSTOMER", None),
        (None, None),
    ])
    def test_to_role_visibility_preset(self, value, expected):
        assert to_role_visibility_preset(value) is expected

    @pytest.mark.parametrize("value, expected", [
        ("", []),
        ("  ,, ", []),
        ("u1", ["u1"]),
        ("u1,u2\nu3  u2", ["u1", "u2", "u3"]),
        ("b, a, b, c", ["b", "a", "c"]),
    ])
    def test_parse_target_user_ids_input(self, value, expected):
        assert parse_target_user_ids_input(value) == expected

    @pytest.mark.parametrize("value", [None, 3, "", "shelf", ["PUBLIC"]])
    def test_normalize_rejects_unknown(self, value):
        assert normalize_visibility_preset(value) is None

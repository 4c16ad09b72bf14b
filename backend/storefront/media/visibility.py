"""Media visibility presets.

A media row stores its visibility as a tuple of raw fields (audience,
sections, allowed roles, minimum customer tier, target users). Forms and
filters work with a single preset instead. This module maps between the two:

  derive_visibility_preset()  raw fields → preset (explicit preset wins)
  build_visibility_fields()   preset → raw fields the upload forms submit

Forward derivation of anything build_visibility_fields() produces returns
the preset it was built from.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Mapping
from typing import Any, Iterable

from storefront.schemas.media import (
    CustomerTier,
    MediaAudience,
    MediaRole,
    MediaSection,
    MediaVisibilityPreset,
    TargetUser,
    VisibilityFields,
)

PUBLIC_MEDIA_VISIBILITY_PRESETS: tuple[MediaVisibilityPreset, ...] = (
    MediaVisibilityPreset.PUBLIC,
    MediaVisibilityPreset.TOP_SHELF,
    MediaVisibilityPreset.USER_TIER,
    MediaVisibilityPreset.TARGETED_USER,
    MediaVisibilityPreset.PRIVATE,
)

ROLE_MEDIA_VISIBILITY_PRESETS: tuple[MediaVisibilityPreset, ...] = (
    MediaVisibilityPreset.ADMIN,
    MediaVisibilityPreset.MANAGER,
    MediaVisibilityPreset.SALES,
)

CUSTOMER_TIER_OPTIONS: tuple[CustomerTier, ...] = tuple(CustomerTier)

# Highest role first: a row visible to several roles is labelled by the top one.
ROLE_PRIORITY: tuple[str, ...] = ("ADMIN", "MANAGER", "SALES")

_PRESET_VALUES = {preset.value for preset in MediaVisibilityPreset}
_TIER_VALUES = {tier.value for tier in CustomerTier}
_SEPARATORS = re.compile(r"[\s-]+")
_TARGET_USER_SPLIT = re.compile(r"[\s,]+")


def _text(value: Any) -> str:
    """Normalize any scalar to trimmed upper-case text ("" for None)."""
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        value = value.value
    return str(value).strip().upper()


def _text_list(values: Any) -> list[str]:
    if not isinstance(values, (list, tuple, set, frozenset)):
        return []
    return [_text(value) for value in values]


def _target_user_id(row: Any) -> str:
    if isinstance(row, Mapping):
        value = row.get("userId") or row.get("user_id")
    else:
        value = getattr(row, "user_id", None)
    return str(value or "").strip()


def is_public_visibility_preset(preset: MediaVisibilityPreset | str | None) -> bool:
    return bool(preset) and preset in PUBLIC_MEDIA_VISIBILITY_PRESETS


def is_role_visibility_preset(preset: MediaVisibilityPreset | str | None) -> bool:
    return bool(preset) and preset in ROLE_MEDIA_VISIBILITY_PRESETS


def visibility_preset_family(preset: MediaVisibilityPreset | None) -> str | None:
    if is_public_visibility_preset(preset):
        return "public"
    if is_role_visibility_preset(preset):
        return "role"
    return None


def to_role_visibility_preset(value: MediaRole | str | None) -> MediaVisibilityPreset | None:
    normalized = _text(value)
    if normalized in ROLE_PRIORITY:
        return MediaVisibilityPreset(normalized)
    return None


def parse_target_user_ids_input(value: str) -> list[str]:
    """Split a free-text list of user ids on whitespace and commas, de-duplicated."""
    ids: list[str] = []
    for entry in _TARGET_USER_SPLIT.split(value or ""):
        entry = entry.strip()
        if entry and entry not in ids:
            ids.append(entry)
    return ids


def normalize_visibility_preset(value: Any) -> MediaVisibilityPreset | None:
    normalized = _SEPARATORS.sub("_", _text(value))
    if normalized in _PRESET_VALUES:
        return MediaVisibilityPreset(normalized)
    return None


def derive_visibility_preset(
    *,
    visibility_preset: Any = None,
    audience: Any = None,
    visibility_sections: Any = None,
    allowed_roles: Any = None,
    min_customer_tier: Any = None,
    target_users: Any = None,
) -> MediaVisibilityPreset | None:
    """Resolve the single preset describing a media row's visibility.

    An explicit, recognizable preset always wins over the raw fields, even
    when they disagree. Returns None when nothing can be derived.
    """
    explicit = normalize_visibility_preset(visibility_preset)
    if explicit is not None:
        return explicit

    normalized_audience = _text(audience)

    if normalized_audience == MediaAudience.ROLE_BASED.value:
        roles = _text_list(allowed_roles)
        for role in ROLE_PRIORITY:
            if role in roles:
                return MediaVisibilityPreset(role)
        return None

    if normalized_audience == MediaAudience.PRIVATE.value:
        return MediaVisibilityPreset.PRIVATE

    if normalized_audience == MediaAudience.PUBLIC.value:
        if MediaSection.TOP_SHELF.value in _text_list(visibility_sections):
            return MediaVisibilityPreset.TOP_SHELF
        return MediaVisibilityPreset.PUBLIC

    if normalized_audience == MediaAudience.TARGETED.value:
        rows = target_users if isinstance(target_users, (list, tuple)) else []
        if any(_target_user_id(row) for row in rows):
            return MediaVisibilityPreset.TARGETED_USER
        if _text(min_customer_tier) in _TIER_VALUES:
            return MediaVisibilityPreset.USER_TIER
        return MediaVisibilityPreset.TARGETED_USER

    return None


def build_visibility_fields(
    preset: MediaVisibilityPreset | str,
    *,
    min_customer_tier: CustomerTier | str | None = None,
    target_user_ids: Iterable[str] = (),
) -> VisibilityFields:
    """Raw visibility fields for a preset, as the upload and catalog forms send them.

    Raises ValueError for an unknown preset, or for USER_TIER without a tier.
    """
    resolved = normalize_visibility_preset(preset)
    if resolved is None:
        raise ValueError(f"Unknown visibility preset: {preset!r}")

    if resolved in ROLE_MEDIA_VISIBILITY_PRESETS:
        return VisibilityFields(
            audience=MediaAudience.ROLE_BASED,
            allowed_roles=[MediaRole(resolved.value)],
        )

    if resolved is MediaVisibilityPreset.PRIVATE:
        return VisibilityFields(
            audience=MediaAudience.PRIVATE,
            visibility_sections=[MediaSection.PRIVATE],
        )

    if resolved is MediaVisibilityPreset.TOP_SHELF:
        return VisibilityFields(
            audience=MediaAudience.PUBLIC,
            visibility_sections=[MediaSection.TOP_SHELF],
        )

    if resolved is MediaVisibilityPreset.USER_TIER:
        tier = _text(min_customer_tier)
        if tier not in _TIER_VALUES:
            raise ValueError("USER_TIER visibility needs a customer tier")
        return VisibilityFields(
            audience=MediaAudience.TARGETED,
            min_customer_tier=CustomerTier(tier),
        )

    if resolved is MediaVisibilityPreset.TARGETED_USER:
        return VisibilityFields(
            audience=MediaAudience.TARGETED,
            target_users=[TargetUser(user_id=user_id) for user_id in target_user_ids],
        )

    return VisibilityFields(
        audience=MediaAudience.PUBLIC,
        visibility_sections=[MediaSection.PRODUCT_PAGE],
    )

"""Admin capability state derived from active access controls.

Design:
  - The backend returns the operator's active access controls as loosely
    typed records. Account-wide restrictions are enforced upstream; here we
    only care about controls in ADMIN_ACTIONS mode, which block a scoped set
    of admin actions.
  - The restriction mode and the action list live in `metadata` or, for
    older rows, in `raw`, under one of several legacy key names. Each
    logical attribute has an ordered tuple of candidate keys, tried in
    `metadata` first and then in `raw`; the first usable value wins.
  - Malformed data derives nothing. The result is advisory UI state, so a
    broken record fails open (action not blocked) and the backend still
    rejects the action if it is really restricted.

Invariant: `blocked_actions` is exactly the union of `actions` across
`active_controls`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Iterable

from pydantic import ValidationError

from storefront.schemas.access import (
    AccessControlRecord,
    AdminActionBlock,
    AdminActionControl,
    AdminCapabilityState,
    AdminRestrictionMode,
)

logger = logging.getLogger(__name__)


# ── Candidate keys (order = precedence) ─────────────────────

RESTRICTION_MODE_KEYS: tuple[str, ...] = ("restrictionMode",)
ACTION_BLOCK_KEYS: tuple[str, ...] = ("adminActionBlocks", "actionBlocks")

ADMIN_ACTION_BLOCKS: tuple[AdminActionBlock, ...] = tuple(AdminActionBlock)
_ACTION_BLOCK_VALUES = {action.value for action in AdminActionBlock}

ACTION_RESTRICTION_TOOLTIPS: dict[AdminActionBlock, str] = {
    AdminActionBlock.PRODUCT_CREATE: "You are restricted from creating products.",
    AdminActionBlock.PRODUCT_EDIT: "You are restricted from editing products.",
    AdminActionBlock.PRODUCT_DELETE: "You are restricted from deleting products.",
    AdminActionBlock.INVENTORY_REQUEST_DECIDE: "You are restricted from deciding inventory requests.",
    AdminActionBlock.USER_ACCESS_MANAGE: "You are restricted from managing user access.",
    AdminActionBlock.APPROVAL_REVIEW: "You are restricted from reviewing approval requests.",
    AdminActionBlock.STAFF_RULE_MANAGE: "You are restricted from managing staff rules.",
}
DEFAULT_RESTRICTION_TOOLTIP = "This action is currently restricted."


# ── Normalization helpers ───────────────────────────────────

def _as_mapping(value: Any) -> Mapping[str, Any] | None:
    return value if isinstance(value, Mapping) else None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _first_candidate(
    sources: Iterable[Mapping[str, Any] | None],
    keys: tuple[str, ...],
) -> Any:
    """Return the first non-blank value for `keys`, scanning sources in order."""
    for source in sources:
        if source is None:
            continue
        for key in keys:
            value = source.get(key)
            if not _is_blank(value):
                return value
    return None


def normalize_restriction_mode(value: Any) -> AdminRestrictionMode | None:
    if not isinstance(value, str):
        return None
    try:
        return AdminRestrictionMode(value.strip().upper())
    except ValueError:
        return None


def normalize_action_block(value: Any) -> AdminActionBlock | None:
    if not isinstance(value, str):
        return None
    normalized = value.strip().upper()
    if normalized not in _ACTION_BLOCK_VALUES:
        return None
    return AdminActionBlock(normalized)


def parse_admin_action_blocks(value: Any) -> list[AdminActionBlock]:
    """Parse a list or comma-delimited string into known, de-duplicated actions."""
    if isinstance(value, (list, tuple)):
        raw_values = list(value)
    elif isinstance(value, str):
        raw_values = value.split(",")
    else:
        return []

    actions: list[AdminActionBlock] = []
    for raw in raw_values:
        action = normalize_action_block(raw)
        if action is not None and action not in actions:
            actions.append(action)
    return actions


def _coerce_record(control: Any) -> AccessControlRecord | None:
    if isinstance(control, AccessControlRecord):
        return control
    if isinstance(control, Mapping):
        try:
            return AccessControlRecord.model_validate(control)
        except ValidationError:
            logger.debug("Dropping malformed access control record")
            return None
    return None


# ── Derivation ──────────────────────────────────────────────

def create_empty_capability_state() -> AdminCapabilityState:
    return AdminCapabilityState(blocked_actions=set(), active_controls=[])


def build_admin_capability_state(
    active_access_controls: Iterable[AccessControlRecord | Mapping[str, Any]] | None,
) -> AdminCapabilityState:
    """Derive the blocked admin actions from the operator's active controls.

    Never raises: absent, non-list, or malformed input yields the empty state.
    """
    state = create_empty_capability_state()

    if not isinstance(active_access_controls, (list, tuple)):
        return state

    for item in active_access_controls:
        control = _coerce_record(item)
        if control is None or control.is_active is not True:
            continue

        sources = (_as_mapping(control.metadata), _as_mapping(control.raw))

        mode = normalize_restriction_mode(_first_candidate(sources, RESTRICTION_MODE_KEYS))
        if mode is not AdminRestrictionMode.ADMIN_ACTIONS:
            continue

        actions = parse_admin_action_blocks(_first_candidate(sources, ACTION_BLOCK_KEYS))
        if not actions:
            logger.debug(f"Access control {control.id} blocks no known actions")
            continue

        state.blocked_actions.update(actions)
        state.active_controls.append(
            AdminActionControl(
                id=control.id,
                reason=control.reason,
                note=control.note,
                starts_at=control.starts_at,
                ends_at=control.ends_at,
                actions=actions,
            )
        )

    return state


def get_admin_action_restriction_tooltip(action: AdminActionBlock | str) -> str:
    """Human-readable explanation shown next to a disabled admin control."""
    normalized = normalize_action_block(action)
    if normalized is None:
        return DEFAULT_RESTRICTION_TOOLTIP
    return ACTION_RESTRICTION_TOOLTIPS[normalized]

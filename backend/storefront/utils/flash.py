"""One-shot flash message for the admin products page.

Set before a redirect, consumed (read + deleted) on the next render.
"""

from __future__ import annotations

import json
from typing import Literal

from pydantic import BaseModel

from storefront.storage import KeyValueStore

ADMIN_PRODUCTS_FLASH_KEY = "admin-products-flash"

FlashTone = Literal["success", "info", "error"]


class DashboardFlashMessage(BaseModel):
    tone: FlashTone
    message: str


def normalize_flash(value: object) -> DashboardFlashMessage | None:
    if not isinstance(value, dict):
        return None
    tone = value.get("tone")
    message = value.get("message")
    if tone not in ("success", "info", "error") or not isinstance(message, str):
        return None
    message = message.strip()
    if not message:
        return None
    return DashboardFlashMessage(tone=tone, message=message)


async def set_admin_products_flash(store: KeyValueStore, flash: DashboardFlashMessage) -> None:
    await store.set(ADMIN_PRODUCTS_FLASH_KEY, flash.model_dump_json())


async def consume_admin_products_flash(store: KeyValueStore) -> DashboardFlashMessage | None:
    raw = await store.get(ADMIN_PRODUCTS_FLASH_KEY)
    if not raw:
        return None

    await store.delete(ADMIN_PRODUCTS_FLASH_KEY)

    try:
        return normalize_flash(json.loads(raw))
    except ValueError:
        return None

"""Media upload: presign → upload → record.

  1. POST /api/v1/media/presign  {contentType, sizeBytes, productId?}
       → {uploadUrl, key}
  2. PUT  <uploadUrl>            raw bytes, Content-Type = file type
  3. POST /api/v1/media          {key, mimeType, sizeBytes, productId?}
       → media record (bare, or wrapped as {"media": {...}})

Files are validated locally first (type + size caps). Any failing step raises
MediaUploadError naming the file; batches stop at the first failure.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from storefront.middleware.exceptions import MediaUploadError
from storefront.schemas.media import MediaRecord

logger = logging.getLogger(__name__)

MEDIA_PRESIGN_ENDPOINT = "/api/v1/media/presign"
MEDIA_CREATE_ENDPOINT = "/api/v1/media"

IMAGE_PDF_MAX_BYTES = 50 * 1024 * 1024
VIDEO_MAX_BYTES = 500 * 1024 * 1024


@dataclass(frozen=True)
class MediaFile:
    name: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def _to_mb(size_bytes: int) -> int:
    return size_bytes // (1024 * 1024)


def resolve_media_type(mime_type: str) -> str | None:
    normalized = mime_type.strip().lower()
    if normalized.startswith("image/"):
        return "IMAGE"
    if normalized.startswith("video/"):
        return "VIDEO"
    if normalized == "application/pdf":
        return "PDF"
    return None


def validate_media_file_for_upload(name: str, content_type: str, size_bytes: int) -> str | None:
    """Return a user-facing error for an unacceptable file, or None."""
    media_type = resolve_media_type(content_type)
    if media_type is None:
        return (
            f'"{name}" has an unsupported file type. '
            "Only image/*, video/*, and application/pdf are allowed."
        )

    max_size = VIDEO_MAX_BYTES if media_type == "VIDEO" else IMAGE_PDF_MAX_BYTES
    if size_bytes > max_size:
        type_label = {"VIDEO": "videos", "PDF": "PDF files"}.get(media_type, "images")
        return f'"{name}" exceeds the {_to_mb(max_size)} MB limit for {type_label}.'

    return None


def build_api_error_message(payload: Any, fallback: str) -> str:
    """`message (code: X, reason: Y)` from an API error body."""
    if not isinstance(payload, Mapping):
        return fallback

    message = payload.get("message") if isinstance(payload.get("message"), str) else fallback
    code = payload.get("code") if isinstance(payload.get("code"), str) else ""
    reason = payload.get("reason") if isinstance(payload.get("reason"), str) else ""

    if code and reason:
        return f"{message} (code: {code}, reason: {reason})"
    if code:
        return f"{message} (code: {code})"
    if reason:
        return f"{message} (reason: {reason})"
    return message


def normalize_media_record(payload: Any) -> MediaRecord | None:
    if not isinstance(payload, Mapping):
        return None
    media = payload.get("media") if isinstance(payload.get("media"), Mapping) else payload

    def _str(key: str) -> str:
        value = media.get(key)
        return value if isinstance(value, str) else ""

    def _optional_str(key: str) -> str | None:
        value = media.get(key)
        return value if isinstance(value, str) else None

    record_id, url, mime_type, created_at = _str("id"), _str("url"), _str("mimeType"), _str("createdAt")
    if not record_id or not url or not mime_type or not created_at:
        return None

    size_bytes = media.get("sizeBytes")
    if isinstance(size_bytes, bool) or not isinstance(size_bytes, (int, float)) or size_bytes < 0:
        return None
    if isinstance(size_bytes, float) and not size_bytes.is_integer():
        return None

    return MediaRecord(
        id=record_id,
        type=_str("type"),
        url=url,
        mime_type=mime_type,
        size_bytes=int(size_bytes),
        product_id=_optional_str("productId"),
        uploaded_by_user_id=_optional_str("uploadedByUserId"),
        created_at=created_at,
    )


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


async def upload_single_media_file(
    client: httpx.AsyncClient,
    *,
    file: MediaFile,
    access_token: str,
    product_id: str | None = None,
) -> MediaRecord:
    validation_error = validate_media_file_for_upload(file.name, file.content_type, file.size)
    if validation_error:
        raise MediaUploadError(validation_error, status_code=422)

    auth_headers = {"Authorization": f"Bearer {access_token}"}
    product = {"productId": product_id} if product_id else {}

    # 1. Presign
    try:
        presign_response = await client.post(
            MEDIA_PRESIGN_ENDPOINT,
            json={"contentType": file.content_type, "sizeBytes": file.size, **product},
            headers=auth_headers,
        )
    except httpx.HTTPError as e:
        raise MediaUploadError(f'Unable to request upload URL for "{file.name}". {e}') from e

    presign_payload = _json_or_none(presign_response)
    if presign_response.is_error:
        raise MediaUploadError(
            build_api_error_message(presign_payload, f'Failed to request upload URL for "{file.name}".'),
            status_code=presign_response.status_code,
        )

    upload_url = presign_payload.get("uploadUrl") if isinstance(presign_payload, Mapping) else None
    key = presign_payload.get("key") if isinstance(presign_payload, Mapping) else None
    if not isinstance(upload_url, str) or not upload_url or not isinstance(key, str) or not key:
        raise MediaUploadError(f'Invalid upload URL response for "{file.name}".')

    # 2. Upload to storage (presigned URL, no bearer token)
    try:
        upload_response = await client.put(
            upload_url,
            content=file.content,
            headers={"Content-Type": file.content_type},
        )
    except httpx.HTTPError as e:
        raise MediaUploadError(f'Unable to upload "{file.name}" to storage. {e}') from e

    if upload_response.is_error:
        raise MediaUploadError(
            f'Failed to upload "{file.name}" to storage (status {upload_response.status_code}).',
            status_code=upload_response.status_code,
        )

    # 3. Record
    try:
        create_response = await client.post(
            MEDIA_CREATE_ENDPOINT,
            json={"key": key, "mimeType": file.content_type, "sizeBytes": file.size, **product},
            headers=auth_headers,
        )
    except httpx.HTTPError as e:
        raise MediaUploadError(f'Unable to create media record for "{file.name}". {e}') from e

    create_payload = _json_or_none(create_response)
    if create_response.status_code not in (200, 201):
        raise MediaUploadError(
            build_api_error_message(create_payload, f'Failed to create media record for "{file.name}".'),
            status_code=create_response.status_code,
        )

    record = normalize_media_record(create_payload)
    if record is None:
        raise MediaUploadError(f'Invalid media record response for "{file.name}".')

    logger.info(f"Uploaded media {record.id} ({file.content_type}, {file.size} bytes)")
    return record


async def upload_media_files(
    client: httpx.AsyncClient,
    *,
    files: list[MediaFile],
    access_token: str,
    product_id: str | None = None,
) -> list[MediaRecord]:
    """Upload files one after another; the first failure aborts the rest."""
    uploaded: list[MediaRecord] = []
    for file in files:
        uploaded.append(
            await upload_single_media_file(
                client, file=file, access_token=access_token, product_id=product_id
            )
        )
    return uploaded

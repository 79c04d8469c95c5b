# voucher_api/services/logo_upload.py
from __future__ import annotations

import base64
import binascii
import logging
import time
from io import BytesIO
from pathlib import PurePosixPath
from typing import Optional

import requests
from fastapi import HTTPException
from PIL import Image, UnidentifiedImageError
from sqlalchemy.orm import Session

from voucher_api.core.config import settings
from voucher_api.db.models.agency import Agency

logger = logging.getLogger(__name__)

# content-type -> default extension
ALLOWED_CONTENT_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}
# extension -> Pillow format name (svg is checked separately)
EXTENSION_FORMATS = {"png": "PNG", "jpg": "JPEG", "jpeg": "JPEG", "webp": "WEBP"}
ALLOWED_EXTENSIONS = set(EXTENSION_FORMATS) | {"svg"}


def normalize_content_type(content_type: Optional[str]) -> str:
    ct = (content_type or "").split(";")[0].strip().lower()
    if ct == "image/jpg":
        ct = "image/jpeg"
    if ct not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Only PNG, JPEG, WebP or SVG logos are allowed")
    return ct


def decode_base64_payload(data: str, limit: Optional[int] = None) -> bytes:
    """Decode plain base64 or a data: URL, refusing anything over ``limit`` bytes."""
    limit = settings.LOGO_MAX_BYTES if limit is None else limit
    raw = (data or "").strip()
    if raw.startswith("data:") and "," in raw:
        raw = raw.split(",", 1)[1]
    raw = "".join(raw.split())
    if not raw:
        raise HTTPException(status_code=400, detail="Empty upload")

    # cheap upper bound before decoding anything big
    if (len(raw) * 3) // 4 - raw.count("=") > limit:
        raise HTTPException(status_code=400, detail=f"File too large (>{limit} bytes)")

    try:
        decoded = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Invalid base64 payload")

    if not decoded:
        raise HTTPException(status_code=400, detail="Empty upload")
    if len(decoded) > limit:
        raise HTTPException(status_code=400, detail=f"File too large (>{limit} bytes)")
    return decoded


def logo_extension(file_name: Optional[str], content_type: str) -> str:
    suffix = PurePosixPath(file_name or "").suffix.lower().lstrip(".")
    if suffix in ALLOWED_EXTENSIONS:
        return suffix
    return ALLOWED_CONTENT_TYPES[content_type]


def _validate_image(raw: bytes, content_type: str) -> None:
    if content_type == "image/svg+xml":
        # prolog and comments may precede the root element
        if b"<svg" not in raw.lower():
            raise HTTPException(status_code=400, detail="Unsupported or corrupted image")
        return

    try:
        im = Image.open(BytesIO(raw))
        im.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError):
        raise HTTPException(status_code=400, detail="Unsupported or corrupted image")

    expected = {"image/png": "PNG", "image/jpeg": "JPEG", "image/webp": "WEBP"}[content_type]
    if im.format != expected:
        raise HTTPException(
            status_code=400,
            detail=f"Image content does not match {content_type} (got {im.format})",
        )


def logo_object_path(agency_id: str, ext: str) -> str:
    return f"agencies/{agency_id}/logo.{ext}"


def public_logo_url(object_path: str) -> str:
    base = (settings.STORAGE_URL or "").rstrip("/")
    return f"{base}/storage/v1/object/public/{settings.STORAGE_BUCKET}/{object_path}"


def _put_object(object_path: str, data: bytes, content_type: str) -> None:
    base = (settings.STORAGE_URL or "").rstrip("/")
    key = settings.STORAGE_SERVICE_KEY or ""
    url = f"{base}/storage/v1/object/{settings.STORAGE_BUCKET}/{object_path}"

    try:
        r = requests.post(
            url,
            data=data,
            headers={
                "Authorization": f"Bearer {key}",
                "apikey": key,
                "content-type": content_type,
                "x-upsert": "true",  # same path every time: replace the previous logo
                "cache-control": "3600",
            },
            timeout=settings.STORAGE_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logger.error("Logo upload to storage failed: %s", e)
        raise HTTPException(status_code=502, detail="Logo storage unavailable")

    if r.status_code >= 400:
        logger.error("Storage rejected logo upload %s: %s %s", object_path, r.status_code, r.text[:500])
        raise HTTPException(status_code=502, detail="Logo storage rejected the upload")


def save_agency_logo(
    db: Session,
    agency: Agency,
    *,
    file_name: Optional[str],
    content_type: Optional[str],
    data_base64: str,
) -> Agency:
    # everything client-side is checked before the storage call
    ct = normalize_content_type(content_type)
    raw = decode_base64_payload(data_base64)
    _validate_image(raw, ct)

    if not settings.storage_configured:
        raise HTTPException(status_code=503, detail="Logo upload unavailable")

    object_path = logo_object_path(agency.id, logo_extension(file_name, ct))
    _put_object(object_path, raw, ct)

    # ?v= busts CDN/browser caches since the object path never changes
    agency.logo_url = f"{public_logo_url(object_path)}?v={int(time.time())}"
    db.commit()
    db.refresh(agency)
    logger.info("Logo uploaded for agency %s (%d bytes, %s)", agency.id, len(raw), ct)
    return agency

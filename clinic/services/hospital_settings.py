"""
Hospital name and logo.

There is a single settings row; reading it creates the default row when
the table is empty.
"""
from __future__ import annotations

import logging
import os
import uuid
from typing import Optional

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import DatabaseError
from django.utils import timezone

from clinic.models import HospitalSettings
from clinic.services.repository import KIND_VALIDATION, Result
from clinic.services.transforms import HOSPITAL_SETTINGS

logger = logging.getLogger(__name__)

SETTINGS_NOT_FOUND = 'Settings not found'
LOGO_FOLDER = 'hospital-logos'

_UNSET = object()


def _current() -> Optional[HospitalSettings]:
    return HospitalSettings.objects.order_by('created_at').first()


def get_settings() -> Result:
    try:
        row = _current()
        if row is None:
            row = HospitalSettings.objects.create()
            logger.info("created default hospital settings %s", row.pk)
        return Result.ok(HOSPITAL_SETTINGS.from_row(row))
    except DatabaseError as exc:
        logger.error("loading hospital settings failed: %s", exc)
        return Result.fail(str(exc))


def update_settings(hospital_name: Optional[str] = None, logo_url=_UNSET) -> Result:
    """Change the name (when non-empty) and/or the logo URL.

    Leaving ``logo_url`` out means "unchanged"; ``None`` clears it.
    Returns a failed result with :data:`SETTINGS_NOT_FOUND` when no row
    exists yet.
    """
    try:
        row = _current()
        if row is None:
            return Result.fail(SETTINGS_NOT_FOUND, KIND_VALIDATION)
        if hospital_name:
            row.hospital_name = hospital_name
        if logo_url is not _UNSET:
            row.logo_url = logo_url
        row.updated_at = timezone.now()
        row.save()
        return Result.ok(HOSPITAL_SETTINGS.from_row(row))
    except DatabaseError as exc:
        logger.error("updating hospital settings failed: %s", exc)
        return Result.fail(str(exc))


def _max_upload_bytes() -> int:
    return int(getattr(settings, 'UPLOAD_MAX_MB', 5)) * 1024 * 1024


def _allowed_type(content_type: str) -> bool:
    allowed = getattr(settings, 'ALLOWED_UPLOAD_TYPES', ('image/',))
    return any(content_type.startswith(prefix) for prefix in allowed)


def upload_logo(upload) -> Result:
    """Store an uploaded logo and point the settings row at it."""
    content_type = getattr(upload, 'content_type', '') or ''
    if not _allowed_type(content_type):
        return Result.fail('Please upload an image file', KIND_VALIDATION)
    if upload.size > _max_upload_bytes():
        return Result.fail('File too large', KIND_VALIDATION)

    ext = os.path.splitext(upload.name)[1].lower() or '.png'
    name = default_storage.save(f"{LOGO_FOLDER}/logo-{uuid.uuid4().hex}{ext}", upload)
    url = default_storage.url(name)
    result = get_settings()
    if result.success:
        result = update_settings(logo_url=url)
    if not result.success:
        default_storage.delete(name)
    return result

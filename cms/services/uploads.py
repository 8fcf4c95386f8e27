"""
Image uploads to the configured object storage.

Files go through Django's ``default_storage`` (local filesystem in
development, any storage backend in production).  The returned URL is
what gets written back onto the record.  The stored extension is taken
from the format Pillow detects in the bytes, never from the client's
filename.
"""
from __future__ import annotations

import logging
import os
import uuid
from typing import Optional

from django.conf import settings
from django.core.files.storage import default_storage
from PIL import Image, UnidentifiedImageError

from cms.errors import UploadRejected

logger = logging.getLogger(__name__)

UPLOAD_FIELDS = ('file', 'photo', 'image')

# Pillow format name -> stored extension
IMAGE_FORMATS = {
    'PNG': '.png',
    'JPEG': '.jpg',
    'GIF': '.gif',
    'WEBP': '.webp',
}
ALLOWED_EXTENSIONS = {'', '.png', '.jpg', '.jpeg', '.gif', '.webp'}


def pick_upload(files) -> Optional[object]:
    for name in UPLOAD_FIELDS:
        f = files.get(name)
        if f is not None:
            return f
    return None


def _detect_format(upload) -> Optional[str]:
    try:
        upload.seek(0)
        with Image.open(upload) as image:
            image.verify()
            return image.format
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return None
    finally:
        upload.seek(0)


def validate_image(upload) -> str:
    """Check size, declared type and actual content; return the extension to store under."""
    if upload is None:
        raise UploadRejected('no file was sent (expected one of: file, photo, image)')
    max_bytes = int(getattr(settings, 'UPLOAD_MAX_MB', 5)) * 1024 * 1024
    if upload.size > max_bytes:
        raise UploadRejected(f'file is larger than {settings.UPLOAD_MAX_MB} MB')
    allowed = getattr(settings, 'ALLOWED_UPLOAD_TYPES', ['image/'])
    content_type = upload.content_type or ''
    if not any(content_type.startswith(prefix) for prefix in allowed):
        raise UploadRejected(f'unsupported file type "{content_type}"')
    if os.path.splitext(upload.name or '')[1].lower() not in ALLOWED_EXTENSIONS:
        raise UploadRejected(f'unsupported file name "{upload.name}"')
    ext = IMAGE_FORMATS.get(_detect_format(upload))
    if ext is None:
        raise UploadRejected('file is not a PNG, JPEG, GIF or WebP image')
    return ext


def store_image(kind: str, pk: str, upload) -> str:
    """Save an image for one record under ``<kind>/<pk>/`` and return its URL."""
    ext = validate_image(upload)
    key = f'{kind}/{pk}/{uuid.uuid4().hex}{ext}'
    saved = default_storage.save(key, upload)
    logger.info("stored upload kind=%s pk=%s key=%s size=%s", kind, pk, saved, upload.size)
    return default_storage.url(saved)


def store_logo(upload) -> str:
    """Save the site logo as ``logos/logo<ext>``, replacing any earlier file."""
    ext = validate_image(upload)
    key = f'logos/logo{ext}'
    if default_storage.exists(key):
        default_storage.delete(key)
    saved = default_storage.save(key, upload)
    logger.info("stored logo key=%s size=%s", saved, upload.size)
    return default_storage.url(saved)

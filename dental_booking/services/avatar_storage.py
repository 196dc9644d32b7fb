import logging
from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile

from dental_booking.core.config import settings
from dental_booking.core.exceptions import ValidationFailed

logger = logging.getLogger(__name__)

ALLOWED_AVATAR_EXTENSIONS = {".jpg", ".jpeg", ".png"}
UPLOADS_URL_PREFIX = "/uploads"


def avatar_extension(filename: str | None) -> str:
    ext = Path(filename or "").suffix.lower()
    if ext not in ALLOWED_AVATAR_EXTENSIONS:
        raise ValidationFailed("Avatar must be a .jpg, .jpeg or .png file")
    return ext


async def save_avatar(upload: UploadFile, upload_dir: str | None = None) -> str:
    """Store an uploaded avatar and return the public path it is served from."""
    ext = avatar_extension(upload.filename)
    target_dir = Path(upload_dir or settings.upload_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    stem = Path(upload.filename or "avatar").stem.lower()[:40] or "avatar"
    filename = f"{uuid4().hex[:12]}-{stem}{ext}"
    content = await upload.read()
    (target_dir / filename).write_bytes(content)
    logger.info("Stored avatar %s (%d bytes)", filename, len(content))
    return f"{UPLOADS_URL_PREFIX}/{filename}"

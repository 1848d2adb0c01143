"""
File storage service for admin uploads.

Stores files on local disk under UPLOAD_BASE_DIR/{logos|backgrounds|templates}/,
named {epoch_ms}-{random}{ext} so concurrent uploads never collide.
Returns the path relative to UPLOAD_BASE_DIR (for DB).
"""
import logging
import random
import time
from pathlib import Path

from fastapi import UploadFile

from app.config import settings
from app.errors import ValidationError, StorageError

logger = logging.getLogger(__name__)

IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}
ZIP_TYPES = {"application/zip", "application/x-zip-compressed"}

# Upload purpose → (subdirectory, accepted content types)
UPLOAD_PURPOSES = {
    "logo": ("logos", IMAGE_TYPES),
    "background": ("backgrounds", IMAGE_TYPES),
    "template": ("templates", ZIP_TYPES),
}


def unique_filename(original_name: str | None) -> str:
    suffix = Path(original_name or "").suffix.lower()
    return f"{int(time.time() * 1000)}-{random.randint(0, 999_999_999)}{suffix}"


def validate_upload(purpose: str, upload_file: UploadFile, file_content: bytes) -> None:
    """Reject unknown purposes, disallowed content types and oversized files."""
    if purpose not in UPLOAD_PURPOSES:
        raise ValueError(f"Unknown upload purpose: {purpose}")

    _, allowed_types = UPLOAD_PURPOSES[purpose]
    if upload_file.content_type not in allowed_types:
        raise ValidationError(
            f"Invalid file type for {purpose}. Allowed types: {', '.join(sorted(allowed_types))}"
        )

    if len(file_content) > settings.max_upload_size_bytes:
        raise ValidationError(f"Upload error: {purpose} exceeds {settings.max_upload_size_mb}MB limit")


async def save_upload(purpose: str, upload_file: UploadFile) -> str:
    """
    Read, validate and persist an uploaded file.

    Args:
        purpose: One of "logo", "background", "template"
        upload_file: FastAPI UploadFile

    Returns:
        Relative path of the stored file
    """
    file_content = await upload_file.read()
    validate_upload(purpose, upload_file, file_content)
    return write_upload(purpose, upload_file.filename, file_content)


def write_upload(purpose: str, original_name: str | None, file_content: bytes) -> str:
    subdir, _ = UPLOAD_PURPOSES[purpose]
    base_dir = Path(settings.upload_base_dir)
    full_dir = base_dir / subdir
    filename = unique_filename(original_name)

    try:
        full_dir.mkdir(parents=True, exist_ok=True)
        (full_dir / filename).write_bytes(file_content)
    except OSError as e:
        logger.error("Failed to store %s upload %s: %s", purpose, filename, e)
        raise StorageError("Failed to store uploaded file")

    relative_path = f"{subdir}/{filename}"
    logger.info("Stored %s upload at %s (%d bytes)", purpose, relative_path, len(file_content))
    return relative_path


def get_absolute_path(relative_path: str) -> Path:
    """Resolve a relative file path to absolute using UPLOAD_BASE_DIR."""
    return Path(settings.upload_base_dir) / relative_path


def delete_upload(relative_path: str) -> None:
    """Remove a stored file. Missing files are ignored."""
    try:
        get_absolute_path(relative_path).unlink(missing_ok=True)
    except OSError as e:
        logger.error("Failed to remove upload %s: %s", relative_path, e)

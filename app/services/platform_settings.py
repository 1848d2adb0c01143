"""Singleton platform settings: DB row when one exists, config defaults otherwise."""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import StorageError
from app.models.platform_settings import PlatformSettings

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "platform_name",
    "contact_phone",
    "contact_email",
    "tiktok_url",
    "facebook_url",
    "whatsapp_number",
    "instagram_url",
)


def default_settings() -> Dict[str, Any]:
    return {
        "platform_name": settings.default_platform_name,
        "contact_phone": settings.default_contact_phone,
        "contact_email": settings.default_contact_email,
    }


def get_platform_settings(db: Session) -> Optional[PlatformSettings]:
    return db.query(PlatformSettings).first()


def update_platform_settings(
    db: Session,
    values: Dict[str, Optional[str]],
    logo_path: Optional[str] = None,
) -> PlatformSettings:
    """
    Create the settings row on first write, update it afterwards.

    Only fields present (not None) in values change; the logo is replaced
    only when a new one was uploaded.
    """
    row = get_platform_settings(db)
    created = row is None
    if created:
        row = PlatformSettings()
        db.add(row)

    for field_name in EDITABLE_FIELDS:
        value = values.get(field_name)
        if value is not None:
            setattr(row, field_name, value)

    if logo_path is not None:
        row.logo_path = logo_path

    try:
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to save platform settings: %s", e)
        raise StorageError("Failed to update settings")

    logger.info("Platform settings %s", "created" if created else "updated")
    return row

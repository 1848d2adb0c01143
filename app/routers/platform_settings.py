"""Platform settings: public read, admin write (with logo upload)."""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_admin
from app.database import get_db
from app.models.admin import Admin
from app.schemas.envelope import ApiResponse
from app.schemas.platform_settings import PlatformSettingsResponse
from app.services.file_storage import save_upload
from app.services.platform_settings import (
    default_settings,
    get_platform_settings,
    update_platform_settings,
)

router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("", response_model=ApiResponse[PlatformSettingsResponse])
def get_settings(db: Session = Depends(get_db)):
    row = get_platform_settings(db)
    if not row:
        return ApiResponse(data=PlatformSettingsResponse(**default_settings()))
    return ApiResponse(data=PlatformSettingsResponse.model_validate(row))


@router.post("", response_model=ApiResponse[PlatformSettingsResponse])
async def update_settings(
    platform_name: Optional[str] = Form(None),
    contact_phone: Optional[str] = Form(None),
    contact_email: Optional[str] = Form(None),
    tiktok_url: Optional[str] = Form(None),
    facebook_url: Optional[str] = Form(None),
    whatsapp_number: Optional[str] = Form(None),
    instagram_url: Optional[str] = Form(None),
    logo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    _: Admin = Depends(get_current_admin),
):
    """Update platform settings. Only provided fields are changed."""
    logo_path = await save_upload("logo", logo) if logo is not None else None

    row = update_platform_settings(
        db,
        {
            "platform_name": platform_name,
            "contact_phone": contact_phone,
            "contact_email": contact_email,
            "tiktok_url": tiktok_url,
            "facebook_url": facebook_url,
            "whatsapp_number": whatsapp_number,
            "instagram_url": instagram_url,
        },
        logo_path=logo_path,
    )
    return ApiResponse(
        message="Settings updated successfully",
        data=PlatformSettingsResponse.model_validate(row),
    )

"""Schemas for platform settings API."""
from typing import Optional
from pydantic import BaseModel


class PlatformSettingsResponse(BaseModel):
    platform_name: Optional[str] = None
    logo_url: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    tiktok_url: Optional[str] = None
    facebook_url: Optional[str] = None
    whatsapp_number: Optional[str] = None
    instagram_url: Optional[str] = None

    class Config:
        from_attributes = True

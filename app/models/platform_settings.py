from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from .base import Base


class PlatformSettings(Base):
    __tablename__ = "platform_settings"

    id = Column(Integer, primary_key=True, index=True)
    platform_name = Column(String(255), nullable=True)
    logo_path = Column(String(500), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    contact_email = Column(String(255), nullable=True)
    tiktok_url = Column(String(500), nullable=True)
    facebook_url = Column(String(500), nullable=True)
    whatsapp_number = Column(String(50), nullable=True)
    instagram_url = Column(String(500), nullable=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    @property
    def logo_url(self):
        if not self.logo_path:
            return None
        return f"/uploads/{self.logo_path}"

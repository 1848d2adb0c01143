from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Numeric
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base


class Template(Base):
    """A downloadable website template. Soft-deleted via is_active, never removed."""
    __tablename__ = "templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    background_path = Column(String(500), nullable=True)
    zip_file_path = Column(String(500), nullable=False)
    preview_html = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    downloads_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    purchase_links = relationship("PurchaseTemplate", back_populates="template")

    @property
    def background_url(self):
        if not self.background_path:
            return None
        return f"/uploads/{self.background_path}"

from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from typing import Optional


class TemplateResponse(BaseModel):
    id: int
    name: str
    description: str
    price: Decimal
    background_url: Optional[str] = None
    preview_html: Optional[str] = None
    is_active: bool
    downloads_count: int
    created_at: datetime

    class Config:
        from_attributes = True


class TemplateCreated(BaseModel):
    template_id: int

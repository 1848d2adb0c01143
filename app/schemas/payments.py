from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional


class MpesaPaymentRequest(BaseModel):
    """Checkout request from the storefront"""
    phone: str = Field(..., min_length=1, max_length=20)
    amount: Decimal = Field(..., gt=0, description="Must equal the sum of the selected templates' prices")
    template_ids: List[int] = Field(..., min_length=1)
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: EmailStr


class PaymentResult(BaseModel):
    transaction_id: str
    receipt: Optional[str] = None
    download_url: Optional[str] = None
    amount: Optional[Decimal] = None


class PaymentStatusResponse(BaseModel):
    transaction_id: str
    status: str
    found: bool
    amount: Optional[Decimal] = None
    receipt: Optional[str] = None
    download_url: Optional[str] = None
    message: Optional[str] = None

    class Config:
        from_attributes = True


class RecentPaymentResponse(BaseModel):
    id: int
    transaction_id: str
    amount: Decimal
    phone_number: str
    mpesa_receipt: Optional[str] = None
    status: str
    download_url: Optional[str] = None
    payment_date: datetime
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None


class FailedPaymentResponse(BaseModel):
    id: int
    transaction_id: str
    phone_number: str
    amount: Decimal
    error_message: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

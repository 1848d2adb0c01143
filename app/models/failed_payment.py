from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric
from sqlalchemy.sql import func

from .base import Base


class FailedPayment(Base):
    """Append-only audit trail of declined charges. Not joined to purchases."""
    __tablename__ = "failed_payments"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String(64), nullable=False, index=True)
    phone_number = Column(String(20), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

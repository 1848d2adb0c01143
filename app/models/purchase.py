import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Numeric, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base


class PurchaseStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Purchase(Base):
    """
    One checkout. A completed purchase always carries an M-Pesa receipt
    and a download reference.
    """
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String(64), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    phone_number = Column(String(20), nullable=False)
    mpesa_receipt = Column(String(64), nullable=True)
    status = Column(Enum(PurchaseStatus), nullable=False, default=PurchaseStatus.PENDING)
    download_url = Column(String(255), nullable=True)
    payment_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    user = relationship("User", back_populates="purchases")
    items = relationship(
        "PurchaseTemplate",
        back_populates="purchase",
        order_by="PurchaseTemplate.position",
        cascade="all, delete-orphan",
    )


class PurchaseTemplate(Base):
    """Line item: one purchased template within a (possibly multi-item) order"""
    __tablename__ = "purchase_templates"
    __table_args__ = (
        UniqueConstraint("purchase_id", "template_id", name="uq_purchase_template"),
    )

    id = Column(Integer, primary_key=True, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=False, index=True)
    template_id = Column(Integer, ForeignKey("templates.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    purchase = relationship("Purchase", back_populates="items")
    template = relationship("Template", back_populates="purchase_links")

"""
Admin dashboard: aggregate statistics and payment history.
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_admin
from app.database import get_db
from app.models.admin import Admin
from app.models.failed_payment import FailedPayment
from app.models.purchase import Purchase, PurchaseStatus
from app.models.template import Template
from app.models.user import User
from app.schemas.envelope import ApiResponse
from app.schemas.payments import FailedPaymentResponse, RecentPaymentResponse
from app.schemas.stats import DashboardStats

router = APIRouter(prefix="/api", tags=["Admin"])

RECENT_PAYMENTS_LIMIT = 10


@router.get("/stats", response_model=ApiResponse[DashboardStats])
def get_stats(
    db: Session = Depends(get_db),
    _: Admin = Depends(get_current_admin),
):
    total_templates = db.query(func.count(Template.id)).filter(Template.is_active.is_(True)).scalar()
    total_sales = db.query(func.coalesce(func.sum(Purchase.amount), 0)).filter(
        Purchase.status == PurchaseStatus.COMPLETED
    ).scalar()
    successful_payments = db.query(func.count(Purchase.id)).filter(
        Purchase.status == PurchaseStatus.COMPLETED
    ).scalar()
    failed_payments = db.query(func.count(FailedPayment.id)).scalar()

    return ApiResponse(data=DashboardStats(
        total_templates=total_templates or 0,
        total_sales=total_sales or 0,
        successful_payments=successful_payments or 0,
        failed_payments=failed_payments or 0,
    ))


@router.get("/payments/recent", response_model=ApiResponse[List[RecentPaymentResponse]])
def recent_payments(
    db: Session = Depends(get_db),
    _: Admin = Depends(get_current_admin),
):
    """Last purchases with the customer's identity"""
    rows = (
        db.query(Purchase, User.email, User.full_name)
        .outerjoin(User, Purchase.user_id == User.id)
        .order_by(Purchase.payment_date.desc(), Purchase.id.desc())
        .limit(RECENT_PAYMENTS_LIMIT)
        .all()
    )
    return ApiResponse(data=[
        RecentPaymentResponse(
            id=purchase.id,
            transaction_id=purchase.transaction_id,
            amount=purchase.amount,
            phone_number=purchase.phone_number,
            mpesa_receipt=purchase.mpesa_receipt,
            status=purchase.status.value,
            download_url=purchase.download_url,
            payment_date=purchase.payment_date,
            customer_email=email,
            customer_name=full_name,
        )
        for purchase, email, full_name in rows
    ])


@router.get("/payments/failed", response_model=ApiResponse[List[FailedPaymentResponse]])
def failed_payments(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    _: Admin = Depends(get_current_admin),
):
    """Declined charges audit trail, most recent first"""
    rows = (
        db.query(FailedPayment)
        .order_by(FailedPayment.created_at.desc(), FailedPayment.id.desc())
        .limit(limit)
        .all()
    )
    return ApiResponse(data=[FailedPaymentResponse.model_validate(r) for r in rows])

"""
Storefront checkout: M-Pesa charge initiation and status polling.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import PaymentDeclinedError
from app.integrations.mpesa import get_gateway
from app.schemas.envelope import ApiResponse
from app.schemas.payments import MpesaPaymentRequest, PaymentResult, PaymentStatusResponse
from app.services.payments import initiate_payment, check_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["Payments"])


@router.post("/mpesa", response_model=ApiResponse[PaymentResult])
def pay_with_mpesa(
    request: MpesaPaymentRequest,
    db: Session = Depends(get_db),
    gateway=Depends(get_gateway),
):
    """
    Charge the customer via M-Pesa for the selected templates.
    A decline answers 400 but keeps the transaction id for audit.
    """
    outcome = initiate_payment(
        db,
        gateway,
        phone=request.phone,
        amount=request.amount,
        template_ids=request.template_ids,
        customer_name=request.customer_name,
        customer_email=request.customer_email,
    )

    if not outcome.success:
        raise PaymentDeclinedError(outcome.message, data={"transaction_id": outcome.transaction_id})

    return ApiResponse(
        message=outcome.message,
        data=PaymentResult(
            transaction_id=outcome.transaction_id,
            receipt=outcome.receipt,
            download_url=outcome.download_url,
            amount=outcome.amount,
        ),
    )


@router.get("/status/{transaction_id}", response_model=ApiResponse[PaymentStatusResponse])
def payment_status(transaction_id: str, db: Session = Depends(get_db)):
    """Polling endpoint; unknown transactions report pending"""
    result = check_status(db, transaction_id)
    return ApiResponse(data=PaymentStatusResponse.model_validate(result))

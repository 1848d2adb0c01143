"""
M-Pesa checkout workflow.

States per transaction: initiated → completed | failed. Both outcomes are
terminal; a declined customer starts over with a new transaction id.

On approval the whole purchase (customer upsert, purchase row, line items,
download counters) is written in a single DB transaction and rolled back as
a unit on any storage failure. On decline only a FailedPayment audit row is
written.
"""
import io
import logging
import re
import secrets
import string
import time
import zipfile
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import ValidationError, NotFoundError, StorageError
from app.integrations.mpesa import ChargeResult
from app.models.failed_payment import FailedPayment
from app.models.purchase import Purchase, PurchaseTemplate, PurchaseStatus
from app.models.template import Template
from app.models.user import User
from app.services.file_storage import get_absolute_path

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
_TXN_ALPHABET = string.ascii_uppercase + string.digits
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9 _.-]+")


@dataclass
class PaymentOutcome:
    success: bool
    transaction_id: str
    amount: Decimal
    phone_number: str
    receipt: Optional[str] = None
    download_url: Optional[str] = None
    message: str = ""


@dataclass
class PaymentStatusResult:
    transaction_id: str
    status: str
    found: bool
    amount: Optional[Decimal] = None
    receipt: Optional[str] = None
    download_url: Optional[str] = None
    message: Optional[str] = None


@dataclass
class DownloadBundle:
    """Archives to hand out for one completed purchase, in purchase order"""
    filename: str
    files: List[Tuple[str, Path]] = field(default_factory=list)

    @property
    def is_single(self) -> bool:
        return len(self.files) == 1


def normalize_phone(phone: Optional[str]) -> str:
    """
    Normalize a Kenyan mobile number to international digits.

    712345678   → 254712345678
    0712345678  → 254712345678
    254712345678 (or +254 712 345 678) passes through.
    """
    cleaned = (phone or "").strip().replace(" ", "").replace("-", "")
    if cleaned.startswith("+"):
        cleaned = cleaned[1:]

    if not cleaned or not (cleaned.isascii() and cleaned.isdigit()):
        raise ValidationError("Invalid phone number")

    country_code = settings.mpesa_country_code
    if len(cleaned) == 9:
        return country_code + cleaned
    if cleaned.startswith("0"):
        return country_code + cleaned[1:]
    return cleaned


def generate_transaction_id() -> str:
    """TXN_<epoch ms>_<9 uppercase alphanumerics>"""
    millis = int(time.time() * 1000)
    tail = "".join(secrets.choice(_TXN_ALPHABET) for _ in range(9))
    return f"{settings.mpesa_transaction_prefix}{millis}_{tail}"


def download_url_for(transaction_id: str) -> str:
    return f"/download/{transaction_id}"


def load_active_templates(db: Session, template_ids: Sequence[int]) -> List[Template]:
    """Fetch the selected templates in request order; all must exist and be active."""
    if not template_ids:
        raise ValidationError("Select at least one template")
    if len(set(template_ids)) != len(template_ids):
        raise ValidationError("Each template can only be purchased once per order")

    try:
        rows = db.query(Template).filter(
            Template.id.in_(list(template_ids)),
            Template.is_active.is_(True),
        ).all()
    except SQLAlchemyError as e:
        logger.error("Failed to load templates %s: %s", list(template_ids), e)
        raise StorageError("Failed to load templates")

    by_id = {t.id: t for t in rows}
    missing = [tid for tid in template_ids if tid not in by_id]
    if missing:
        raise ValidationError(
            "Unknown or unavailable templates",
            data={"template_ids": missing},
        )
    return [by_id[tid] for tid in template_ids]


def order_total(templates: Sequence[Template]) -> Decimal:
    return sum((Decimal(t.price) for t in templates), Decimal("0")).quantize(CENT)


def check_amount(submitted, expected: Decimal) -> None:
    """The client-supplied amount must equal the server-side order total."""
    try:
        submitted_amount = Decimal(str(submitted)).quantize(CENT)
    except (InvalidOperation, ValueError):
        raise ValidationError("Invalid amount")

    if submitted_amount != expected:
        raise ValidationError(
            f"Amount {submitted_amount} does not match order total {expected}",
            data={"expected_amount": str(expected)},
        )


def initiate_payment(
    db: Session,
    gateway,
    *,
    phone: str,
    amount,
    template_ids: Sequence[int],
    customer_name: str,
    customer_email: str,
) -> PaymentOutcome:
    """
    Charge the customer for the selected templates and record the outcome.

    Declines are returned as PaymentOutcome(success=False); only malformed
    input (ValidationError) and storage failures (StorageError) raise.
    """
    formatted_phone = normalize_phone(phone)
    templates = load_active_templates(db, template_ids)
    total = order_total(templates)
    check_amount(amount, total)

    transaction_id = generate_transaction_id()

    try:
        result = gateway.charge(formatted_phone, total, transaction_id)
    except Exception as e:
        logger.error("M-Pesa gateway error for %s: %s", transaction_id, e)
        result = ChargeResult(success=False, error_message="Payment gateway unavailable")

    if result.success and not result.receipt:
        logger.error("M-Pesa gateway approved %s without a receipt", transaction_id)
        result = ChargeResult(success=False, error_message="Payment gateway returned no receipt")

    if not result.success:
        reason = result.error_message or settings.mpesa_decline_message
        _record_failed_payment(db, transaction_id, formatted_phone, total, reason)
        return PaymentOutcome(
            success=False,
            transaction_id=transaction_id,
            amount=total,
            phone_number=formatted_phone,
            message="Payment failed. Please try again.",
        )

    download_url = download_url_for(transaction_id)
    _record_purchase(
        db,
        transaction_id=transaction_id,
        templates=templates,
        total=total,
        phone=formatted_phone,
        receipt=result.receipt,
        download_url=download_url,
        customer_name=customer_name,
        customer_email=customer_email,
    )
    return PaymentOutcome(
        success=True,
        transaction_id=transaction_id,
        amount=total,
        phone_number=formatted_phone,
        receipt=result.receipt,
        download_url=download_url,
        message="Payment successful",
    )


def _record_failed_payment(
    db: Session,
    transaction_id: str,
    phone: str,
    amount: Decimal,
    reason: str,
) -> None:
    try:
        db.add(FailedPayment(
            transaction_id=transaction_id,
            phone_number=phone,
            amount=amount,
            error_message=reason,
        ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to record declined payment %s: %s", transaction_id, e)
        raise StorageError("Payment processing failed", data={"transaction_id": transaction_id})

    logger.info("Payment %s declined (%s): %s", transaction_id, phone, reason)


def _find_customer(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def _create_customer(db: Session, email: str, phone: str, full_name: str) -> User:
    """Insert a customer in a savepoint; a concurrent checkout may have won the insert."""
    try:
        with db.begin_nested():
            user = User(email=email, phone=phone, full_name=full_name)
            db.add(user)
        return user
    except IntegrityError:
        existing = _find_customer(db, email)
        if existing is None:
            raise
        logger.info("Customer %s created concurrently, reusing it", email)
        return existing


def _record_purchase(
    db: Session,
    *,
    transaction_id: str,
    templates: Sequence[Template],
    total: Decimal,
    phone: str,
    receipt: Optional[str],
    download_url: str,
    customer_name: str,
    customer_email: str,
) -> None:
    email = customer_email.strip().lower()
    try:
        user = _find_customer(db, email)
        if user is None:
            user = _create_customer(db, email, phone, customer_name)

        purchase = Purchase(
            transaction_id=transaction_id,
            user_id=user.id,
            amount=total,
            phone_number=phone,
            mpesa_receipt=receipt,
            status=PurchaseStatus.COMPLETED,
            download_url=download_url,
        )
        db.add(purchase)
        db.flush()

        for position, template in enumerate(templates):
            db.add(PurchaseTemplate(
                purchase_id=purchase.id,
                template_id=template.id,
                position=position,
            ))

        db.query(Template).filter(Template.id.in_([t.id for t in templates])).update(
            {Template.downloads_count: Template.downloads_count + 1},
            synchronize_session=False,
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Rolled back purchase %s (receipt %s): %s", transaction_id, receipt, e)
        raise StorageError(
            "Payment processing failed",
            data={"transaction_id": transaction_id, "receipt": receipt},
        )

    logger.info(
        "Payment %s completed: %s KES for templates %s (receipt %s)",
        transaction_id, total, [t.id for t in templates], receipt,
    )


def check_status(db: Session, transaction_id: str) -> PaymentStatusResult:
    """Current state of a transaction. Unknown ids report pending, never raise."""
    try:
        purchase = db.query(Purchase).filter(Purchase.transaction_id == transaction_id).first()
        if purchase is not None:
            completed = purchase.status == PurchaseStatus.COMPLETED
            return PaymentStatusResult(
                transaction_id=transaction_id,
                status=purchase.status.value,
                found=True,
                amount=purchase.amount,
                receipt=purchase.mpesa_receipt if completed else None,
                download_url=purchase.download_url if completed else None,
            )

        failed = db.query(FailedPayment).filter(FailedPayment.transaction_id == transaction_id).first()
    except SQLAlchemyError as e:
        logger.error("Status lookup failed for %s: %s", transaction_id, e)
        raise StorageError("Failed to check payment status", data={"transaction_id": transaction_id})

    if failed is not None:
        return PaymentStatusResult(
            transaction_id=transaction_id,
            status=PurchaseStatus.FAILED.value,
            found=True,
            amount=failed.amount,
            message=failed.error_message,
        )

    return PaymentStatusResult(
        transaction_id=transaction_id,
        status=PurchaseStatus.PENDING.value,
        found=False,
        message="Payment not found or still pending",
    )


def _archive_name(name: str) -> str:
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", name).strip(" ._")
    return f"{cleaned or 'template'}.zip"


def resolve_download(db: Session, transaction_id: str) -> DownloadBundle:
    """Resolve a completed purchase to the archives it paid for."""
    purchase = db.query(Purchase).filter(
        Purchase.transaction_id == transaction_id,
        Purchase.status == PurchaseStatus.COMPLETED,
    ).first()

    if purchase is None or not purchase.items:
        raise NotFoundError("Download not found or expired")

    files = []
    for item in purchase.items:
        template = item.template
        path = get_absolute_path(template.zip_file_path) if template and template.zip_file_path else None
        if path is None or not path.is_file():
            logger.error("Archive missing for template %s in %s", item.template_id, transaction_id)
            raise NotFoundError("Template file not found")
        files.append((_archive_name(template.name), path))

    filename = files[0][0] if len(files) == 1 else f"{transaction_id}.zip"
    return DownloadBundle(filename=filename, files=files)


def build_bundle_archive(bundle: DownloadBundle) -> bytes:
    """Pack several template archives into one zip, numbered in purchase order."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_STORED) as archive:
        for position, (name, path) in enumerate(bundle.files, start=1):
            archive.write(path, arcname=f"{position:02d}-{name}")
    return buffer.getvalue()

"""
M-Pesa charge gateway.

The marketplace runs against a simulator: the charge resolves synchronously
with a configurable success rate and no external call. A real STK-push
gateway would resolve asynchronously through a callback; the
/api/payments/status polling contract already covers that case.
"""
import logging
import random
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass
class ChargeResult:
    """Outcome of a single charge attempt"""
    success: bool
    receipt: Optional[str] = None
    error_message: Optional[str] = None


def generate_receipt_number(rng: Optional[random.Random] = None) -> str:
    """Receipt = prefix + last 6 digits of epoch ms + random integer below 1000."""
    rng = rng or random
    millis = str(int(time.time() * 1000))
    return f"{settings.mpesa_receipt_prefix}{millis[-6:]}{rng.randrange(1000)}"


class SimulatedMpesaGateway:
    def __init__(self, success_rate: Optional[float] = None, rng: Optional[random.Random] = None):
        self.success_rate = settings.mpesa_success_rate if success_rate is None else success_rate
        self.rng = rng or random.Random()

    def charge(self, phone: str, amount: Decimal, transaction_id: str) -> ChargeResult:
        if self.rng.random() < self.success_rate:
            receipt = generate_receipt_number(self.rng)
            logger.info("Simulated M-Pesa charge %s approved: %s KES from %s", transaction_id, amount, phone)
            return ChargeResult(success=True, receipt=receipt)

        logger.info("Simulated M-Pesa charge %s declined for %s", transaction_id, phone)
        return ChargeResult(success=False, error_message=settings.mpesa_decline_message)


_gateway = SimulatedMpesaGateway()


def get_gateway() -> SimulatedMpesaGateway:
    """FastAPI dependency for the charge gateway (overridden in tests)"""
    return _gateway

"""
Domain error taxonomy.

Every error maps to an HTTP status and is rendered by the handlers in main.py
as the standard envelope: {"success": false, "message": ..., "data": ...}.
"""
from typing import Any, Dict, Optional


class MarketplaceError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)


class ValidationError(MarketplaceError):
    status_code = 400
    default_message = "Missing required fields"


class AuthError(MarketplaceError):
    status_code = 401
    default_message = "Authentication required"


class NotFoundError(MarketplaceError):
    status_code = 404
    default_message = "Not found"


class PaymentDeclinedError(MarketplaceError):
    """Simulated M-Pesa decline. The transaction id stays in data for audit."""
    status_code = 400
    default_message = "Payment failed. Please try again."


class StorageError(MarketplaceError):
    status_code = 500
    default_message = "Storage unavailable"

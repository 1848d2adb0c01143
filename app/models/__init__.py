# Database models
from .base import Base
from .template import Template
from .user import User
from .purchase import Purchase, PurchaseTemplate, PurchaseStatus
from .failed_payment import FailedPayment
from .admin import Admin
from .platform_settings import PlatformSettings

__all__ = [
    "Base",
    "Template",
    "User",
    "Purchase",
    "PurchaseTemplate",
    "PurchaseStatus",
    "FailedPayment",
    "Admin",
    "PlatformSettings",
]

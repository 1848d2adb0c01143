from decimal import Decimal
from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_templates: int
    total_sales: Decimal
    successful_payments: int
    failed_payments: int

"""
Report schemas for `GET /reports/*`.

Every report takes a `{from, to}` date range; see
`src.queries.periods.get_date_range`.
"""

from typing import Optional

from pydantic import Field

from src.models.common import ApiDate, ApiModel, Money, Page
from src.models.operations import InventoryMovement
from src.models.reconciliation import ReconciliationStats, ReconciliationStatus


class FinancialRow(ApiModel):
    id: int
    date: Optional[ApiDate] = None
    patient: str
    tests: Optional[str] = None
    amount: Money
    discount_amount: Money = Field(default=0)
    discount_name: Optional[str] = None
    net_amount: Money
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None


class FinancialTotals(ApiModel):
    revenue: Money = Field(default=0)
    discounts: Money = Field(default=0)
    transactions: int = 0


class FinancialReport(Page[FinancialRow]):
    totals: FinancialTotals = Field(default_factory=FinancialTotals)


class InventoryLogReport(Page[InventoryMovement]):
    pass


class AuditLogRow(ApiModel):
    id: int
    timestamp: Optional[str] = None  # preformatted by the server
    user: Optional[str] = None
    user_role: Optional[str] = None
    action: str
    action_category: Optional[str] = None
    details: Optional[str] = None
    severity: Optional[str] = None


class AuditLogReport(Page[AuditLogRow]):
    pass


class LabReportRow(ApiModel):
    id: int
    date: Optional[ApiDate] = None
    transaction_number: Optional[str] = None
    patient: str
    test_name: str
    performed_by: Optional[str] = None
    status: str


class LabReportStats(ApiModel):
    total: int = 0
    pending: int = 0
    processing: int = 0
    completed: int = 0
    released: int = 0


class LabReport(Page[LabReportRow]):
    stats: LabReportStats = Field(default_factory=LabReportStats)


class ReconciliationReportRow(ApiModel):
    id: int
    date: Optional[ApiDate] = None
    cashier: Optional[str] = None
    expected_cash: Money
    actual_cash: Money
    variance: Money
    status: ReconciliationStatus
    transaction_count: int = 0


class ReconciliationReport(Page[ReconciliationReportRow]):
    stats: ReconciliationStats = Field(default_factory=ReconciliationStats)

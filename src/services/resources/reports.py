"""
Report endpoints. Each takes an inclusive `{from, to}` date range.
"""

from datetime import date
from typing import Optional, Union

from src.audit import AuditLogger
from src.models.reports import (
    AuditLogReport,
    FinancialReport,
    InventoryLogReport,
    LabReport,
    ReconciliationReport,
)
from src.queries.periods import DateRange, get_date_range
from src.services.api import ApiClient
from src.services.resources.base import ResourceGateway


Period = Union[str, DateRange]


class ReportGateway(ResourceGateway):
    """
    Reports accept either a period name ("day", "week", "month", "year")
    or an explicit DateRange.
    """

    def __init__(
        self,
        client: ApiClient,
        audit_logger: Optional[AuditLogger] = None,
        today: Optional[date] = None,
    ):
        super().__init__(client, audit_logger)
        self._today = today

    def _range_params(self, period: Period) -> dict[str, str]:
        date_range = period if isinstance(period, DateRange) else get_date_range(period, self._today)
        return date_range.as_params()

    async def financial(self, period: Period = "day") -> FinancialReport:
        return await self._client.get_model(
            "/reports/financial", FinancialReport, params=self._range_params(period),
        )

    async def inventory_log(self, period: Period = "day") -> InventoryLogReport:
        return await self._client.get_model(
            "/reports/inventory-log", InventoryLogReport, params=self._range_params(period),
        )

    async def audit_log(self, period: Period = "day") -> AuditLogReport:
        return await self._client.get_model(
            "/reports/audit-log", AuditLogReport, params=self._range_params(period),
        )

    async def lab_report(self, period: Period = "day") -> LabReport:
        return await self._client.get_model(
            "/reports/lab-report", LabReport, params=self._range_params(period),
        )

    async def reconciliation(self, period: Period = "day") -> ReconciliationReport:
        return await self._client.get_model(
            "/reports/reconciliation", ReconciliationReport, params=self._range_params(period),
        )

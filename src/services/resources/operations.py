"""
Day-to-day screens: dashboard, patients, inventory and the lab queue.
"""

from typing import Optional

from src.models.common import ApiMessage, Page
from src.models.operations import (
    Dashboard,
    InventoryMovement,
    InventoryOverview,
    LabQueueSummary,
    QueuedTest,
)
from src.models.patients import LabTestResult, Patient, PatientDetail, PatientUpdate
from src.queries.periods import PERIODS
from src.services.resources.base import ResourceGateway, clean_filter, clean_search


class DashboardGateway(ResourceGateway):

    async def get(self, period: str = "day") -> Dashboard:
        if period not in PERIODS:
            raise ValueError(f"Unknown period {period!r}; expected one of {', '.join(PERIODS)}")
        return await self._client.get_model("/dashboard", Dashboard, params={"period": period})


class PatientGateway(ResourceGateway):
    """Patient list, profile, edit and ordered-test lookups."""

    async def get(self, patient_id: int) -> PatientDetail:
        return await self._client.get_model(f"/patients/{patient_id}", PatientDetail)

    async def get_test(self, test_id: int) -> LabTestResult:
        return await self._client.get_model(f"/tests/{test_id}", LabTestResult)

    async def update(self, patient_id: int, form: PatientUpdate, is_admin: bool) -> ApiMessage:
        """Save edits; name, age and gender are only sent for admins."""
        response = await self._client.put_model(
            f"/patients/{patient_id}", ApiMessage, json=form.to_payload(is_admin),
        )
        if self._audit_logger:
            await self._audit_logger.log_record_saved(
                entity_type="patient", entity_id=patient_id, created=False,
            )
        return response

    async def list(
        self,
        page: int = 1,
        per_page: int = 15,
        search: Optional[str] = None,
    ) -> Page:
        params = {"page": page, "per_page": per_page, "search": clean_search(search)}
        return await self._client.get_model("/patients", Page[Patient], params=params)


class InventoryGateway(ResourceGateway):

    async def transactions(self) -> Page:
        """Recent stock movements, newest first as the server sends them."""
        return await self._client.get_model("/inventory/transactions", Page[InventoryMovement])

    async def list(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> InventoryOverview:
        """Filtered items plus the unfiltered stock summary."""
        params = {"status": clean_filter(status), "search": clean_search(search)}
        return await self._client.get_model("/inventory", InventoryOverview, params=params)


class LabQueueGateway(ResourceGateway):

    async def summary(self) -> LabQueueSummary:
        return await self._client.get_model("/lab-queue/summary", LabQueueSummary)

    async def tests(
        self,
        status: Optional[str] = "pending",
        page: int = 1,
        per_page: int = 15,
    ) -> Page:
        params = {"status": status, "page": page, "per_page": per_page}
        return await self._client.get_model("/lab-queue/tests", Page[QueuedTest], params=params)

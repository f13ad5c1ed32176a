"""
Cash reconciliation endpoints.

Reconciliations are create-only: there is no update or delete.
"""

from typing import Optional

from src.models.reconciliation import (
    ReconciliationCreateData,
    ReconciliationDetail,
    ReconciliationPage,
    ReconciliationReceipt,
    ReconciliationSubmission,
)
from src.services.resources.base import ResourceGateway, clean_filter, clean_search


class ReconciliationGateway(ResourceGateway):

    async def create_data(self) -> ReconciliationCreateData:
        """Expected cash and transaction count for a new count, as of now."""
        return await self._client.get_model("/reconciliations/create", ReconciliationCreateData)

    async def create(self, submission: ReconciliationSubmission) -> ReconciliationReceipt:
        """Submit one cash count. Exactly one POST per call, never retried."""
        return await self._client.post_model(
            "/reconciliations",
            ReconciliationReceipt,
            json=submission.model_dump(mode="json"),
        )

    async def get(self, reconciliation_id: int) -> ReconciliationDetail:
        return await self._client.get_model(
            f"/reconciliations/{reconciliation_id}", ReconciliationDetail,
        )

    async def list(
        self,
        page: int = 1,
        per_page: int = 20,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> ReconciliationPage:
        """One page, newest first. Admins also get the `stats` block."""
        params = {
            "page": page,
            "per_page": per_page,
            "search": clean_search(search),
            "status": clean_filter(status),
        }
        return await self._client.get_model("/reconciliations", ReconciliationPage, params=params)

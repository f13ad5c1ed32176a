"""
Admin catalogs: lab services, discounts, PhilHealth plans and staff users.
"""

from collections import OrderedDict
from typing import Any, Iterable, Optional

from pydantic import BaseModel

from src.models.auth import StaffAccount, StaffAccountForm, StaffAccountUpdate
from src.models.catalog import (
    SERVICE_CATEGORIES,
    Discount,
    DiscountForm,
    LabService,
    LabServiceForm,
    PhilHealthPlan,
    PhilHealthPlanForm,
)
from src.models.common import Page
from src.services.resources.base import CatalogGateway


def group_by_category(services: Iterable[LabService]) -> "OrderedDict[str, list[LabService]]":
    """
    Group services under their category, keeping server order inside
    each group. Known categories come first in their usual order.
    """
    groups: OrderedDict[str, list[LabService]] = OrderedDict()
    for category in SERVICE_CATEGORIES:
        groups[category] = []
    for service in services:
        groups.setdefault(service.category, []).append(service)
    return OrderedDict((k, v) for k, v in groups.items() if v)


class ServiceGateway(CatalogGateway[LabService, LabServiceForm]):
    path = "/services"
    model = LabService
    entity_type = "service"
    default_per_page = 200

    async def categories(self) -> list[str]:
        payload = await self._client.get(f"{self.path}/categories")
        if isinstance(payload, dict):
            payload = payload.get("data", [])
        return [str(c) for c in payload or []]

    async def list(
        self,
        page: int = 1,
        per_page: Optional[int] = None,
        search: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Page:
        return await super().list(page=page, per_page=per_page, search=search, category=category)


class DiscountGateway(CatalogGateway[Discount, DiscountForm]):
    path = "/discounts"
    model = Discount
    entity_type = "discount"


class PhilHealthPlanGateway(CatalogGateway[PhilHealthPlan, PhilHealthPlanForm]):
    path = "/philhealth-plans"
    model = PhilHealthPlan
    entity_type = "philhealth_plan"


class UserGateway(CatalogGateway[StaffAccount, StaffAccountForm]):
    """Staff accounts. Updates use StaffAccountUpdate (password optional)."""

    path = "/users"
    model = StaffAccount
    entity_type = "user"

    def _payload(self, form: BaseModel) -> dict[str, Any]:
        if isinstance(form, StaffAccountUpdate):
            # no password key at all keeps the current one
            return form.model_dump(mode="json", exclude_none=True)
        return form.model_dump(mode="json")

"""
Resource gateway base classes.

DESIGN DECISION: One gateway per REST resource, each a thin typed
facade over ApiClient. Gateways build query params and bodies from
pydantic forms and parse responses into models; they never hold list
state (that is PaginatedList's job) and never catch ApiError.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from src.audit import AuditLogger
from src.models.common import ApiMessage, Page
from src.services.api import ApiClient


ModelT = TypeVar("ModelT", bound=BaseModel)
FormT = TypeVar("FormT", bound=BaseModel)


def clean_search(search: Optional[str]) -> Optional[str]:
    """Blank search boxes are not sent at all."""
    if search is None:
        return None
    return search.strip() or None


def clean_filter(value: Optional[str], all_value: str = "all") -> Optional[str]:
    """The "all" choice of a filter dropdown means no filter."""
    if not value or value == all_value:
        return None
    return value


class ResourceGateway:
    """Shared plumbing: the client and an optional audit logger."""

    def __init__(self, client: ApiClient, audit_logger: Optional[AuditLogger] = None):
        self._client = client
        self._audit_logger = audit_logger


class CatalogGateway(ResourceGateway, Generic[ModelT, FormT]):
    """
    list / create / update / toggle for admin-maintained catalogs.

    Subclasses set `path`, `model`, `entity_type` and `default_per_page`.
    """

    path: str = ""
    model: type = BaseModel
    entity_type: str = ""
    default_per_page: int = 20

    def _payload(self, form: BaseModel) -> dict[str, Any]:
        return form.model_dump(mode="json")

    async def list(
        self,
        page: int = 1,
        per_page: Optional[int] = None,
        search: Optional[str] = None,
        **filters: Any,
    ) -> Page:
        params = {
            "page": page,
            "per_page": per_page or self.default_per_page,
            "search": clean_search(search),
            **{k: clean_filter(v) for k, v in filters.items()},
        }
        return await self._client.get_model(self.path, Page[self.model], params=params)

    async def create(self, form: FormT) -> ApiMessage:
        response = await self._client.post_model(
            self.path, ApiMessage, json=self._payload(form),
        )
        if self._audit_logger:
            await self._audit_logger.log_record_saved(
                entity_type=self.entity_type, entity_id=None, created=True,
            )
        return response

    async def update(self, record_id: int, form: FormT) -> ApiMessage:
        response = await self._client.put_model(
            f"{self.path}/{record_id}", ApiMessage, json=self._payload(form),
        )
        if self._audit_logger:
            await self._audit_logger.log_record_saved(
                entity_type=self.entity_type, entity_id=record_id, created=False,
            )
        return response

    async def toggle(self, record_id: int) -> ApiMessage:
        """Flip the record's active flag."""
        response = await self._client.post_model(f"{self.path}/{record_id}/toggle", ApiMessage)
        if self._audit_logger:
            await self._audit_logger.log_record_toggled(
                entity_type=self.entity_type, entity_id=record_id,
            )
        return response

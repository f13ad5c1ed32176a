"""
Paginated List State

Holds the rows of one server-paginated list (patients, reconciliations,
lab queue...) and the rules for moving through it:

- refresh() and set_filters() fetch page 1 and REPLACE the rows
- load_more() fetches the next page and APPENDS it
- while a fetch is in flight, load_more() is refused (no double advance)
- rows are kept in server order; nothing here ever sorts
- a failed fetch is logged and remembered, the loaded rows stay put

DESIGN DECISION: Every refresh bumps a generation counter and each
fetch remembers the generation it started in. A response that comes
back after a newer refresh (e.g. the user typed another search term)
is dropped instead of overwriting the newer rows.
"""

from typing import Any, Awaitable, Callable, Generic, Hashable, Optional, TypeVar

import structlog

from src.audit import AuditLogger
from src.models.common import Page
from src.services.api.errors import ApiError


logger = structlog.get_logger(__name__)

T = TypeVar("T")

FetchPage = Callable[..., Awaitable[Page]]


def _row_id(row: Any) -> Optional[Hashable]:
    return getattr(row, "id", None)


class PaginatedList(Generic[T]):
    """
    Client-side state of one paginated collection.

    Args:
        fetch_page: Async callable taking `page`, `per_page` and the filters
            as keyword arguments (a gateway's `list` method fits)
        per_page: Page size sent to the server
        filters: Initial filter/search values
        key: Row identity used to skip rows already shown when a page
            boundary shifts between requests; None disables the check
        audit_logger: Receives a list_fetch_failed event on errors
        resource: Name used in logs
    """

    def __init__(
        self,
        fetch_page: FetchPage,
        per_page: int = 20,
        filters: Optional[dict[str, Any]] = None,
        key: Optional[Callable[[T], Optional[Hashable]]] = _row_id,
        audit_logger: Optional[AuditLogger] = None,
        resource: str = "list",
    ):
        self._fetch_page = fetch_page
        self._per_page = per_page
        self._filters: dict[str, Any] = dict(filters or {})
        self._key = key
        self._audit_logger = audit_logger
        self._resource = resource

        self._items: list[T] = []
        self._current_page = 0
        self._last_page = 0
        self._loaded = False
        self._last_result: Optional[Page] = None
        self._last_error: Optional[ApiError] = None

        self._generation = 0
        self._in_flight: Optional[int] = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def items(self) -> list[T]:
        return list(self._items)

    @property
    def filters(self) -> dict[str, Any]:
        return dict(self._filters)

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def last_page(self) -> int:
        return self._last_page

    @property
    def loading(self) -> bool:
        return self._in_flight is not None

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def has_more(self) -> bool:
        return self._loaded and self._current_page < self._last_page

    @property
    def is_empty(self) -> bool:
        """True once a fetch succeeded and returned no rows at all."""
        return self._loaded and not self._items

    @property
    def last_error(self) -> Optional[ApiError]:
        return self._last_error

    @property
    def last_result(self) -> Optional[Page]:
        """The most recent page object (e.g. for admin stats blocks)."""
        return self._last_result

    @property
    def generation(self) -> int:
        return self._generation

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def refresh(self) -> bool:
        """Fetch page 1 and replace the rows. Supersedes any fetch in flight."""
        self._generation += 1
        return await self._load(1, self._generation, replace=True)

    async def set_filters(self, **filters: Any) -> bool:
        """Change filters (None removes one) and start over from page 1."""
        for name, value in filters.items():
            if value is None:
                self._filters.pop(name, None)
            else:
                self._filters[name] = value
        return await self.refresh()

    async def load_more(self) -> bool:
        """
        Append the next page.

        Returns False without fetching when a fetch is already running,
        when there are no more pages, or before the first load.
        """
        if self.loading or not self.has_more:
            return False
        return await self._load(self._current_page + 1, self._generation, replace=False)

    async def _load(self, page: int, generation: int, replace: bool) -> bool:
        self._in_flight = generation
        try:
            return await self._fetch_and_apply(page, generation, replace)
        finally:
            # Cancelled or crashed fetches must not leave the list stuck loading
            if self._in_flight == generation:
                self._in_flight = None

    async def _fetch_and_apply(self, page: int, generation: int, replace: bool) -> bool:
        try:
            result = await self._fetch_page(page=page, per_page=self._per_page, **self._filters)
        except ApiError as e:
            if generation != self._generation:
                return False
            self._last_error = e
            logger.warning(
                "list_fetch_failed",
                resource=self._resource,
                page=page,
                status_code=e.status_code,
                error=e.message,
            )
            if self._audit_logger:
                await self._audit_logger.log_list_fetch_failed(
                    resource=self._resource,
                    page=page,
                    error_message=e.message,
                )
            return False

        if generation != self._generation:
            logger.debug(
                "stale_page_dropped",
                resource=self._resource,
                page=page,
                generation=generation,
                current_generation=self._generation,
            )
            return False

        self._last_error = None
        self._items = self._merge([] if replace else self._items, result.data)
        self._current_page = page
        self._last_page = result.last_page
        self._last_result = result
        self._loaded = True
        logger.debug(
            "list_page_loaded",
            resource=self._resource,
            page=page,
            last_page=result.last_page,
            rows=len(result.data),
        )
        return True

    def _merge(self, existing: list[T], incoming: list[T]) -> list[T]:
        if self._key is None:
            return existing + list(incoming)
        seen = {self._key(row) for row in existing}
        merged = list(existing)
        for row in incoming:
            row_key = self._key(row)
            if row_key is not None and row_key in seen:
                continue
            seen.add(row_key)
            merged.append(row)
        return merged

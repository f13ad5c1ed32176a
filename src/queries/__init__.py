"""List state and report period helpers."""

from src.queries.paginator import FetchPage, PaginatedList
from src.queries.periods import PERIOD_LABELS, PERIODS, DateRange, get_date_range

__all__ = [
    "DateRange",
    "FetchPage",
    "PERIODS",
    "PERIOD_LABELS",
    "PaginatedList",
    "get_date_range",
]

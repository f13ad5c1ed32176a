"""
Shared schema building blocks.

The back-office API is a Laravel application. Its JSON carries money
as floats, dates in either ``YYYY-MM-DD`` or full ISO timestamps, and
wraps list results in one of three pagination envelopes. Everything in
this module exists so the resource models don't have to care.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any, Generic, Optional, TypeVar

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)


CENT = Decimal("0.01")

# Upper bound for any cash amount; keeps quantizing inside the default
# 28-digit decimal context
MAX_AMOUNT = Decimal("1e15")


def quantize_cents(value: Decimal) -> Decimal:
    """Round an amount to the cent (half-up, like a cashier would)."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _date_prefix(value: Any) -> Any:
    # "2025-01-15T00:00:00.000000Z" -> "2025-01-15"
    if isinstance(value, str) and len(value) > 10 and value[4] == "-":
        return value[:10]
    return value


# Decimal in Python, plain JSON number on the wire
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

ApiDate = Annotated[date, BeforeValidator(_date_prefix)]


class ApiModel(BaseModel):
    """Base for every response schema: tolerate fields we don't use."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class NamedRef(ApiModel):
    """A nested `{id, name}` reference (patient, cashier, performer...)."""

    id: int
    name: str
    email: Optional[str] = None


class ApiMessage(ApiModel):
    """Plain `{message}` acknowledgement returned by write endpoints."""

    message: str = ""


T = TypeVar("T")


class Page(ApiModel, Generic[T]):
    """
    One page of a server-ordered collection.

    Accepts all three envelopes the API uses:
    - ``{data, current_page, last_page, per_page, total}``
    - ``{data, meta: {current_page, ...}}``
    - ``{rows | items, pagination: {current_page, ...}}``

    Unpaginated list payloads come out as a single page.
    """

    data: list[T] = Field(default_factory=list)
    current_page: int = Field(default=1, ge=1)
    last_page: int = Field(default=1, ge=0)
    per_page: Optional[int] = Field(default=None, ge=1)
    total: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def flatten_envelope(cls, value: Any) -> Any:
        if isinstance(value, list):
            return {"data": value}
        if not isinstance(value, dict):
            return value

        flat = dict(value)
        meta = flat.pop("meta", None)
        if meta is None:
            meta = flat.pop("pagination", None)
        if isinstance(meta, dict):
            for key in ("current_page", "last_page", "per_page", "total"):
                if key in meta and meta[key] is not None:
                    flat.setdefault(key, meta[key])

        if "data" not in flat:
            for key in ("rows", "items"):
                if key in flat:
                    flat["data"] = flat.pop(key)
                    break

        return flat

    @property
    def has_more(self) -> bool:
        return self.current_page < self.last_page

    @property
    def is_empty(self) -> bool:
        return not self.data

"""
Cash Reconciliation Models

A reconciliation compares the cash a cashier physically counted against
what the server expects from the day's paid cash transactions.

    variance = actual_cash - expected_cash

The sign of the variance decides the status. The server snapshots
expected_cash and transaction_count at submission time; the record is
immutable afterwards.

DESIGN DECISION: "balanced" means the variance is zero to the cent.
The backend may apply its own tolerance, so a record the server calls
balanced is accepted even with a tiny variance, but an overage or
shortage whose sign contradicts the variance is rejected as corrupt.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from src.models.common import ApiDate, ApiModel, Money, NamedRef, Page, quantize_cents


class ReconciliationStatus(str, Enum):
    """Outcome of a cash count."""
    BALANCED = "balanced"
    OVERAGE = "overage"     # more cash in the drawer than expected
    SHORTAGE = "shortage"   # less cash in the drawer than expected

    @property
    def label(self) -> str:
        return {
            ReconciliationStatus.BALANCED: "Perfectly Balanced",
            ReconciliationStatus.OVERAGE: "Cash Overage",
            ReconciliationStatus.SHORTAGE: "Cash Shortage",
        }[self]


def status_for_variance(variance: Decimal) -> ReconciliationStatus:
    """Map a variance to its status. Zero to the cent is balanced."""
    cents = quantize_cents(variance)
    if cents > 0:
        return ReconciliationStatus.OVERAGE
    if cents < 0:
        return ReconciliationStatus.SHORTAGE
    return ReconciliationStatus.BALANCED


class VarianceResult(BaseModel):
    """Result of classifying one cash count."""

    model_config = ConfigDict(frozen=True)

    expected_cash: Money
    actual_cash: Money
    variance: Money
    status: ReconciliationStatus

    @property
    def is_balanced(self) -> bool:
        return self.status is ReconciliationStatus.BALANCED


class Reconciliation(ApiModel):
    """A submitted reconciliation as listed by `GET /reconciliations`."""

    id: int
    reconciliation_date: Optional[ApiDate] = None
    expected_cash: Money = Field(..., ge=0)
    actual_cash: Money = Field(..., ge=0)
    variance: Money
    status: ReconciliationStatus
    transaction_count: int = Field(default=0, ge=0)
    notes: Optional[str] = None
    cashier: Optional[NamedRef] = None
    created_at: Optional[datetime] = None

    @model_validator(mode='before')
    @classmethod
    def fill_status(cls, data: Any) -> Any:
        """Older payloads only carry `variance_type`; fall back to it."""
        if isinstance(data, dict) and not data.get("status"):
            data = dict(data)
            if data.get("variance_type"):
                data["status"] = data["variance_type"]
            elif data.get("variance") is not None:
                data["status"] = status_for_variance(Decimal(str(data["variance"]))).value
        return data

    @model_validator(mode='after')
    def check_variance(self) -> 'Reconciliation':
        expected = quantize_cents(self.actual_cash - self.expected_cash)
        if quantize_cents(self.variance) != expected:
            raise ValueError(
                f"Variance {self.variance} does not equal actual - expected ({expected})"
            )
        derived = status_for_variance(self.variance)
        if self.status is not ReconciliationStatus.BALANCED and self.status is not derived:
            raise ValueError(
                f"Status '{self.status.value}' contradicts variance {self.variance}"
            )
        return self


class ReconciliationStats(ApiModel):
    """
    Aggregate counts over a set of reconciliations.

    The list endpoint and the report endpoint name these fields
    differently; both spellings are accepted.
    """

    total_reconciliations: int = Field(
        default=0, ge=0,
        validation_alias=AliasChoices("total_reconciliations", "total"),
    )
    balanced_count: int = Field(
        default=0, ge=0,
        validation_alias=AliasChoices("balanced_count", "balanced"),
    )
    overage_count: int = Field(
        default=0, ge=0,
        validation_alias=AliasChoices("overage_count", "overage"),
    )
    shortage_count: int = Field(
        default=0, ge=0,
        validation_alias=AliasChoices("shortage_count", "shortage"),
    )
    total_overage: Money = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("total_overage", "total_overage_amount"),
    )
    total_shortage: Money = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("total_shortage", "total_shortage_amount"),
    )


class ReconciliationPage(Page[Reconciliation]):
    """A page of reconciliations; admins also receive the stats block."""

    stats: Optional[ReconciliationStats] = None


class ReconciliationCreateData(ApiModel):
    """`GET /reconciliations/create`: the server's snapshot for a new count."""

    expected_cash: Money = Field(..., ge=0)
    transaction_count: int = Field(default=0, ge=0)


class ReconciliationSubmission(BaseModel):
    """Body of `POST /reconciliations`."""

    model_config = ConfigDict(str_strip_whitespace=True)

    actual_cash: Money = Field(..., ge=0)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator('notes')
    @classmethod
    def blank_notes_are_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class ReconciliationReceipt(ApiModel):
    """Response of `POST /reconciliations`."""

    message: str = "Reconciliation created successfully"
    reconciliation: Optional[Reconciliation] = None


class CashTransaction(ApiModel):
    """A paid cash transaction included in a reconciliation."""

    id: int
    transaction_number: str
    net_total: Money
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    patient: Optional[NamedRef] = None
    cashier: Optional[NamedRef] = None
    created_at: Optional[datetime] = None


class ReconciliationDetail(ApiModel):
    """`GET /reconciliations/{id}`."""

    reconciliation: Reconciliation
    transactions: list[CashTransaction] = Field(default_factory=list)

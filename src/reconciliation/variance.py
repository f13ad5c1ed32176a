"""
Cash variance classification.

    variance = actual_cash - expected_cash

    variance == 0  ->  balanced   (exact, to the cent)
    variance  > 0  ->  overage
    variance  < 0  ->  shortage

Amounts are Decimals rounded to the cent before comparing, so
5000 vs 5000.001 is balanced and 5000 vs 4999.99 is a shortage.
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Union

from src.models.common import MAX_AMOUNT, quantize_cents
from src.models.reconciliation import (
    Reconciliation,
    ReconciliationStats,
    ReconciliationStatus,
    VarianceResult,
    status_for_variance,
)


Amount = Union[Decimal, int, float, str]


def _to_cents(value: Amount, field_name: str) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be a number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"{field_name} must be a number, got {value!r}")
    if not amount.is_finite():
        raise ValueError(f"{field_name} must be finite")
    if abs(amount) >= MAX_AMOUNT:
        raise ValueError(f"{field_name} is too large")
    amount = quantize_cents(amount)
    if amount < 0:
        raise ValueError(f"{field_name} cannot be negative")
    return amount


def classify_variance(expected_cash: Amount, actual_cash: Amount) -> VarianceResult:
    """
    Compare counted cash against the expected total.

    Raises:
        ValueError: Either amount is not a finite, non-negative number below MAX_AMOUNT
    """
    expected = _to_cents(expected_cash, "expected_cash")
    actual = _to_cents(actual_cash, "actual_cash")
    variance = actual - expected
    return VarianceResult(
        expected_cash=expected,
        actual_cash=actual,
        variance=variance,
        status=status_for_variance(variance),
    )


def summarize(reconciliations: Iterable[Reconciliation]) -> ReconciliationStats:
    """
    Counts per status plus total overage and total shortage.

    Both totals are reported as positive amounts.
    """
    counts = {status: 0 for status in ReconciliationStatus}
    total_overage = Decimal("0.00")
    total_shortage = Decimal("0.00")

    total = 0
    for record in reconciliations:
        total += 1
        counts[record.status] += 1
        if record.status is ReconciliationStatus.OVERAGE:
            total_overage += quantize_cents(record.variance)
        elif record.status is ReconciliationStatus.SHORTAGE:
            total_shortage += -quantize_cents(record.variance)

    return ReconciliationStats(
        total_reconciliations=total,
        balanced_count=counts[ReconciliationStatus.BALANCED],
        overage_count=counts[ReconciliationStatus.OVERAGE],
        shortage_count=counts[ReconciliationStatus.SHORTAGE],
        total_overage=total_overage,
        total_shortage=total_shortage,
    )

"""
Client-side Form Validation

DESIGN DECISION: Every form is checked locally before any request is
sent. A failed check raises FormValidationError carrying one message per
field, and the network is never touched.

Validators are small functions `(value, field_name) -> Optional[str]`
that return an error message or None. `validate_form` runs each field's
validators in order and keeps the first message per field.

IMPORTANT: Validation never silently fixes input. Whitespace is
trimmed, nothing else is changed.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Optional

from src.models.common import MAX_AMOUNT, quantize_cents


Validator = Callable[[Any, str], Optional[str]]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
OTP_PATTERN = re.compile(r"^\d{6}$")

INVALID_CASH_AMOUNT = "Please enter a valid cash amount"
REQUIRED_FIELDS_MISSING = "Please fill in all required fields"


class FormValidationError(ValueError):
    """
    Raised when a form fails its local checks.

    `errors` maps field name to the message to show next to it.
    """

    def __init__(self, message: str, errors: Optional[dict[str, str]] = None):
        self.message = message
        self.errors = errors or {}
        super().__init__(message)


def validate_required(value: Any, field_name: str) -> Optional[str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return f"{field_name} is required"
    if value == "" or value == [] or value == {}:
        return f"{field_name} is required"
    return None


def validate_number(value: Any, field_name: str) -> Optional[str]:
    """Accept any finite, non-negative number (or numeric string)."""
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return f"{field_name} must be a valid number"
    if not number.is_finite():
        return f"{field_name} must be a valid number"
    if number < 0:
        return f"{field_name} cannot be negative"
    return None


def validate_email(value: Any, field_name: str = "Email") -> Optional[str]:
    if not isinstance(value, str) or not EMAIL_PATTERN.match(value.strip()):
        return "Please enter a valid email address"
    return None


def validate_otp(value: Any, field_name: str = "OTP") -> Optional[str]:
    if not isinstance(value, str) or not OTP_PATTERN.match(value.strip()):
        return f"{field_name} must be 6 digits"
    return None


def validate_form(
    fields: Iterable[tuple[Any, str, list[Validator]]],
) -> tuple[bool, dict[str, str]]:
    """
    Run validators per field, stopping at each field's first failure.

    Args:
        fields: (value, field_name, validators) triples

    Returns:
        (is_valid, {field_name: message})
    """
    errors: dict[str, str] = {}
    for value, name, validators in fields:
        for validator in validators:
            message = validator(value, name)
            if message:
                errors[name] = message
                break
    return not errors, errors


def require_form(
    fields: Iterable[tuple[Any, str, list[Validator]]],
    message: str = REQUIRED_FIELDS_MISSING,
) -> None:
    """Like `validate_form`, but raise FormValidationError on failure."""
    is_valid, errors = validate_form(fields)
    if not is_valid:
        raise FormValidationError(message, errors)


def parse_cash_amount(text: Any) -> Decimal:
    """
    Parse the counted cash a cashier typed in.

    Accepts plain numbers with an optional peso sign and thousands
    separators ("₱5,200.50"). The result is rounded to cents.

    Raises:
        FormValidationError: If the input is blank, not a number,
            not finite, negative or too large
    """
    if isinstance(text, bool) or text is None:
        raise FormValidationError(INVALID_CASH_AMOUNT, {"actual_cash": INVALID_CASH_AMOUNT})

    cleaned = str(text).strip().replace(",", "").lstrip("₱").strip()
    try:
        amount = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        raise FormValidationError(INVALID_CASH_AMOUNT, {"actual_cash": INVALID_CASH_AMOUNT})

    if not amount.is_finite() or amount < 0 or amount >= MAX_AMOUNT:
        raise FormValidationError(INVALID_CASH_AMOUNT, {"actual_cash": INVALID_CASH_AMOUNT})

    return quantize_cents(amount)


def get_user_friendly_summary(errors: dict[str, str]) -> str:
    """One message per line, for an alert."""
    if not errors:
        return "✅ All checks passed!"
    return "\n".join(f"❌ {message}" for message in errors.values())

"""Validation package."""

from src.validation.validator import (
    EMAIL_PATTERN,
    INVALID_CASH_AMOUNT,
    REQUIRED_FIELDS_MISSING,
    FormValidationError,
    get_user_friendly_summary,
    parse_cash_amount,
    require_form,
    validate_email,
    validate_form,
    validate_number,
    validate_otp,
    validate_required,
)

__all__ = [
    "EMAIL_PATTERN",
    "INVALID_CASH_AMOUNT",
    "REQUIRED_FIELDS_MISSING",
    "FormValidationError",
    "get_user_friendly_summary",
    "parse_cash_amount",
    "require_form",
    "validate_email",
    "validate_form",
    "validate_number",
    "validate_otp",
    "validate_required",
]

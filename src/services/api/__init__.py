"""
API Services Package

The HTTP client for the back-office REST API and its error types.
"""

from src.services.api.client import PUBLIC_ENDPOINTS, ApiClient, parse_payload
from src.services.api.errors import (
    ApiError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    RequestValidationError,
    ResponseSchemaError,
    ServerError,
    error_for_status,
)

__all__ = [
    # Client
    "ApiClient",
    "PUBLIC_ENDPOINTS",
    "parse_payload",
    # Exceptions
    "ApiError",
    "AuthenticationError",
    "NetworkError",
    "NotFoundError",
    "PermissionDeniedError",
    "RequestValidationError",
    "ResponseSchemaError",
    "ServerError",
    "error_for_status",
]

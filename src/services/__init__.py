"""Services package."""

from src.services.storage import (
    FileTokenStorage,
    MemoryTokenStorage,
    StorageError,
    TokenStorageInterface,
)
from src.services.session import TokenSession
from src.services.api import (
    ApiClient,
    ApiError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    RequestValidationError,
    ResponseSchemaError,
    ServerError,
)
from src.services.auth import AuthService

__all__ = [
    # Storage
    "FileTokenStorage",
    "MemoryTokenStorage",
    "StorageError",
    "TokenStorageInterface",
    # Session
    "TokenSession",
    # API
    "ApiClient",
    "ApiError",
    "AuthenticationError",
    "NetworkError",
    "NotFoundError",
    "PermissionDeniedError",
    "RequestValidationError",
    "ResponseSchemaError",
    "ServerError",
    # Auth
    "AuthService",
]

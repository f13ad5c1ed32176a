"""
Storage Services Package

Persists the authentication token. File-backed by default;
in-memory for tests and throwaway sessions.
"""

from src.services.storage.interface import (
    StorageError,
    TokenStorageInterface,
)
from src.services.storage.token_file import (
    FileTokenStorage,
    MemoryTokenStorage,
)

__all__ = [
    # Interfaces
    "TokenStorageInterface",
    # Exceptions
    "StorageError",
    # Implementations
    "FileTokenStorage",
    "MemoryTokenStorage",
]

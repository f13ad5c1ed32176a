"""
Abstract Token Storage Interface

DESIGN DECISION: The only thing this client persists is the bearer
token. We still put it behind an interface so that:
1. Tests run against an in-memory store
2. The Streamlit front end and a headless script can share one file
3. A keyring-backed store can be dropped in later without touching auth
"""

from abc import ABC, abstractmethod
from typing import Optional


class TokenStorageInterface(ABC):
    """
    Abstract interface for persisting the authentication token.

    Implementations store a single string value under a key.
    """

    @abstractmethod
    async def read(self, key: str) -> Optional[str]:
        """
        Read the stored value for `key`.

        Returns:
            The stored token, or None if nothing is stored

        Raises:
            StorageError: If the backing store is unreadable
        """
        pass

    @abstractmethod
    async def write(self, key: str, value: str) -> None:
        """
        Store `value` under `key`, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """
        Remove `key`. Removing a missing key is not an error.

        Raises:
            StorageError: If the backing store cannot be updated
        """
        pass


class StorageError(Exception):
    """Base exception for token storage operations."""
    pass

"""
Token Session

The one piece of shared mutable state in the client: the current bearer
token. It is an explicit object handed to the request layer, not a
module global. The auth service is the only writer in normal operation;
the API client clears it when the server rejects the token.

Reads are synchronous (the request layer reads it right before every
call). Writes are async because they also persist to storage.
"""

from typing import Callable, Optional

import structlog

from src.services.storage import StorageError, TokenStorageInterface


logger = structlog.get_logger(__name__)


class TokenSession:
    """Holds the current bearer token and mirrors it to storage."""

    def __init__(self, storage: TokenStorageInterface, storage_key: str = "@bp-mobile-token"):
        self._storage = storage
        self._key = storage_key
        self._token: Optional[str] = None
        self._listeners: list[Callable[[Optional[str]], None]] = []

    def get_token(self) -> Optional[str]:
        return self._token

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    def subscribe(self, listener: Callable[[Optional[str]], None]) -> None:
        """Call `listener(new_token)` whenever the token changes."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self._token)

    async def load(self) -> Optional[str]:
        """Pull the persisted token into memory (used when the app starts)."""
        self._token = await self._storage.read(self._key) or None
        self._notify()
        return self._token

    async def set_token(self, token: str) -> None:
        if not token:
            raise ValueError("Token must be a non-empty string")
        # memory first: the next request must see it even if persisting fails
        self._token = token
        self._notify()
        await self._storage.write(self._key, token)

    async def clear_token(self) -> None:
        """Forget the token. Always succeeds in memory; storage errors are logged."""
        self._token = None
        self._notify()
        try:
            await self._storage.remove(self._key)
        except StorageError as e:
            logger.error("token_storage_clear_failed", error=str(e))

"""
Token storage implementations.

FileTokenStorage keeps a small JSON document on disk, keyed like the
mobile app's AsyncStorage (`@bp-mobile-token`). The file is written
atomically and chmod'ed to the owner, since it holds a live credential.
"""

import json
import os
from pathlib import Path
from typing import Optional

import structlog

from src.services.storage.interface import StorageError, TokenStorageInterface


logger = structlog.get_logger(__name__)


class FileTokenStorage(TokenStorageInterface):
    """Persist tokens in a JSON file."""

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            content = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            # A corrupt session file is treated as "signed out"
            logger.warning("token_file_corrupt", path=str(self._path), error=str(e))
            return {}
        except OSError as e:
            raise StorageError(f"Cannot read token file {self._path}: {e}") from e
        if not isinstance(content, dict):
            return {}
        return {k: v for k, v in content.items() if isinstance(v, str)}

    def _dump(self, content: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(content), encoding="utf-8")
            os.chmod(tmp, 0o600)
            os.replace(tmp, self._path)
        except OSError as e:
            raise StorageError(f"Cannot write token file {self._path}: {e}") from e

    async def read(self, key: str) -> Optional[str]:
        return self._load().get(key)

    async def write(self, key: str, value: str) -> None:
        content = self._load()
        content[key] = value
        self._dump(content)

    async def remove(self, key: str) -> None:
        content = self._load()
        if key in content:
            del content[key]
            self._dump(content)


class MemoryTokenStorage(TokenStorageInterface):
    """Process-local storage; nothing survives a restart."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def write(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

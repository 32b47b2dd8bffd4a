"""File-backed token store.

The pair is kept as one JSON document. Writes go to a temporary file in the
same directory which then replaces the document with `os.replace`, so a
reader sees either the previous pair or the new one, never a partial write.
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog

from marketplace_client.core.config.settings import settings
from marketplace_client.core.exceptions import StorageError
from marketplace_client.domain.interfaces.token_store import ITokenStore
from marketplace_client.domain.value_objects.token_pair import TokenPair

logger = structlog.get_logger(__name__)


class FileTokenStore(ITokenStore):
    """Token store persisting the pair to a JSON file.

    Args:
        path: File holding the pair; parent directories are created on save.
        storage_key: Name of the entry the pair is stored under in the file.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None, storage_key: Optional[str] = None):
        self._path = Path(path or settings.TOKEN_STORAGE_PATH)
        self._storage_key = storage_key or settings.TOKEN_STORAGE_KEY
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def save(self, pair: TokenPair) -> None:
        document = {self._storage_key: pair.to_dict()}
        async with self._lock:
            await asyncio.to_thread(self._write, document)
        logger.debug("Token pair saved", backend="file", token=pair.mask_for_logging())

    async def load(self) -> Optional[TokenPair]:
        async with self._lock:
            document = await asyncio.to_thread(self._read)
        if document is None:
            return None
        record = document.get(self._storage_key) if isinstance(document, dict) else None
        if record is None:
            return None
        try:
            return TokenPair.from_dict(record)
        except ValueError as e:
            logger.error("Stored token record is malformed", backend="file", error=str(e))
            raise StorageError("Stored credentials are unreadable") from e

    async def clear(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._remove)
        logger.debug("Token pair cleared", backend="file")

    def _read(self) -> Optional[dict]:
        try:
            with open(self._path, "r", encoding="utf-8") as handle:
                return json.load(handle)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Token file could not be read", path=str(self._path), error=str(e))
            raise StorageError("Stored credentials are unreadable") from e

    def _write(self, document: dict) -> None:
        temp_path = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(prefix=".tokens-", suffix=".tmp", dir=self._path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(temp_path, 0o600)
            os.replace(temp_path, self._path)
        except OSError as e:
            if temp_path and os.path.exists(temp_path):
                os.unlink(temp_path)
            logger.error("Token file could not be written", path=str(self._path), error=str(e))
            raise StorageError("Credentials could not be saved") from e

    def _remove(self) -> None:
        try:
            os.remove(self._path)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.error("Token file could not be removed", path=str(self._path), error=str(e))
            raise StorageError("Stored credentials could not be cleared") from e

"""
JSON File Storage Implementation

DESIGN DECISION: One JSON file per key inside a data directory.
1. Users can open and read their ledger with any text editor
2. No database setup required
3. Easy to back up or move (copy the directory)

TRADEOFFS:
- Whole list rewritten on every save (fine for a group's expenses)
- Single writer only; two processes on one directory will clobber each other

Writes go to a temporary file first and are renamed into place, so a
crash mid-write leaves the previous value intact.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Optional

import structlog
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from splitledger.config import get_settings
from splitledger.services.storage.interface import (
    CorruptDataError,
    KeyValueStoreInterface,
    StorageError,
)


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")

logger = structlog.get_logger(__name__)


class JsonFileKeyValueStore(KeyValueStoreInterface):
    """
    File-backed store: ``<data_dir>/<key>.json``.

    Transient OS errors (locked file, full disk that frees up, network
    share hiccup) are retried with exponential backoff.
    """

    def __init__(
        self,
        directory: Optional[Path] = None,
        retry_attempts: Optional[int] = None,
        retry_wait_seconds: float = 0.5,
    ):
        settings = get_settings()
        self._directory = Path(directory or settings.data_dir)
        self._attempts = retry_attempts or settings.storage_retry_attempts
        self._wait = retry_wait_seconds

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=self._wait, max=5),
            retry=retry_if_exception_type(OSError),
            reraise=False,
        )

    def _run(self, operation: str, key: str, func, *args):
        """Run a file operation under the retry policy."""
        try:
            for attempt in self._retrying():
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            "storage_retry",
                            operation=operation,
                            key=key,
                            attempt=attempt.retry_state.attempt_number,
                        )
                    return func(*args)
        except RetryError as e:
            cause = e.last_attempt.exception()
            raise StorageError(
                f"Failed to {operation} {key!r} after {self._attempts} attempts: {cause}"
            ) from cause

    def _read(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _write(self, path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(text)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _remove(self, path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False

    async def load(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        raw = self._run("read", key, self._read, path)
        if raw is None:
            return None

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Stored value for {key!r} is not valid JSON: {e}") from e

    async def save(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        try:
            text = json.dumps(value, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key!r} is not JSON-serializable: {e}") from e

        self._run("write", key, self._write, path, text)

    async def delete(self, key: str) -> bool:
        path = self._path_for(key)
        return self._run("delete", key, self._remove, path)

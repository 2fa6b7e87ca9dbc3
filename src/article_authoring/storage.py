"""
Local key-value storage backends for draft persistence.

The engine talks to storage through a tiny get/set/remove interface
holding opaque string values, mirroring a browser profile's local storage:
- MemoryStore: in-process dict, with an optional byte quota
- JsonFileStore: a single JSON file on disk, written atomically
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the storage backend cannot be read or written."""
    pass


class QuotaExceededError(StorageError):
    """Raised when a write would exceed the storage quota."""
    pass


@runtime_checkable
class KeyValueStore(Protocol):
    """Persistent string-to-string store."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStore:
    """
    In-memory store.

    If ``quota_bytes`` is set, a write that would make the total size of
    keys and values exceed it raises QuotaExceededError.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None, quota_bytes: Optional[int] = None):
        self._data: dict[str, str] = dict(initial or {})
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Value for '{key}' must be a string, got {type(value).__name__}")
        if self.quota_bytes is not None:
            projected = self._size_without(key) + len(key.encode()) + len(value.encode())
            if projected > self.quota_bytes:
                raise QuotaExceededError(
                    f"Writing '{key}' needs {projected} bytes, quota is {self.quota_bytes}"
                )
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def _size_without(self, key: str) -> int:
        return sum(
            len(k.encode()) + len(v.encode())
            for k, v in self._data.items()
            if k != key
        )


class JsonFileStore:
    """
    Store backed by one JSON object on disk.

    The whole file is rewritten on every set/remove via a temporary file
    and os.replace, so a crash never leaves a half-written file.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Value for '{key}' must be a string, got {type(value).__name__}")
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def keys(self) -> list[str]:
        return list(self._read())

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {self.path}: {e}")
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise StorageError(f"Storage file {self.path} is corrupt: {e}")
        if not isinstance(data, dict):
            raise StorageError(f"Storage file {self.path} does not hold a JSON object")
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}")
        logger.debug(f"Wrote {len(data)} key(s) to {self.path}")

"""Durable client-side key/value storage.

The engine persists the operator's last location and the last uploaded
track document (plus its filename) so both survive a restart.  Values are
strings; callers serialize.  There is no expiry and no size bound.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStore:
    """Process-local store; contents are lost on exit."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Store backed by a single JSON object on disk.

    The file is rewritten atomically (temp file + rename) on every
    mutation, and the in-memory view only changes once the write has
    landed.  A missing file is an empty store; an unreadable or corrupt
    file is logged and treated as empty rather than failing startup.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._data: dict[str, str] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError:
            _logger.warning("Could not read storage file %s", self._path, exc_info=True)
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("Storage file %s is corrupt; starting empty", self._path)
            return {}
        if not isinstance(data, dict):
            _logger.warning("Storage file %s does not hold an object; starting empty", self._path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _flush(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        data = {**self._data, key: value}
        self._flush(data)
        self._data = data

    def remove(self, key: str) -> None:
        if key not in self._data:
            return
        data = {k: v for k, v in self._data.items() if k != key}
        self._flush(data)
        self._data = data

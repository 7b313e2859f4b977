"""Durable named values for session-local preferences.

Everything stored here is convenience data (score, selected region, contact
list), so reads fall back to the caller's default on any problem and writes
never raise.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any
from typing import Protocol

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def read(self, key: str, default: Any) -> Any: ...
    def write(self, key: str, value: Any) -> None: ...


class MemoryStore:
    """In-process store with the same JSON round-trip semantics as JsonFileStore."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        # Values are kept serialized so callers never alias stored state.
        self._raw: dict[str, str] = dict(initial or {})

    def read(self, key: str, default: Any) -> Any:
        raw = self._raw.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            _logger.debug("malformed value for %r; using default", key)
            return default

    def write(self, key: str, value: Any) -> None:
        try:
            self._raw[key] = json.dumps(value)
        except (TypeError, ValueError):
            _logger.warning("value for %r is not JSON-serializable; not stored", key)

    def raw(self, key: str) -> str | None:
        return self._raw.get(key)


class JsonFileStore:
    """Key-value store persisted as one JSON object document on disk.

    Each write rewrites the document through a temp file + replace, so a crash
    mid-write leaves the previous document intact.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._values: dict[str, Any] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except Exception:
            _logger.debug("store file %s is unreadable; starting empty", self._path)
            return
        if not isinstance(payload, dict):
            _logger.debug("store file %s is not a JSON object; starting empty", self._path)
            return
        self._values = payload

    def read(self, key: str, default: Any) -> Any:
        if key not in self._values:
            return default
        # Round-trip so the caller gets its own copy.
        try:
            return json.loads(json.dumps(self._values[key]))
        except (TypeError, ValueError):
            return default

    def write(self, key: str, value: Any) -> None:
        try:
            encoded = json.loads(json.dumps(value))
        except (TypeError, ValueError):
            _logger.warning("value for %r is not JSON-serializable; not stored", key)
            return
        self._values[key] = encoded
        self._save()

    def _save(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
            tmp_path.write_text(json.dumps(self._values, indent=2), encoding="utf-8")
            tmp_path.replace(self._path)
        except Exception:
            _logger.warning("could not write store file %s", self._path, exc_info=True)
            return

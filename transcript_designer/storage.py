"""Keyed text-blob persistence used by the template store and workflow.

The designer never touches a storage medium directly: every component receives
a :class:`StoragePort` and reads or writes JSON-encoded text under string
keys. Two backends ship with the package:

* :class:`MemoryStorage` keeps blobs in a dictionary and backs the tests.
* :class:`JsonFileStorage` persists every key inside one JSON object on disk,
  rewriting the whole file on each save (write-through, last write wins).

Example
-------
>>> storage = MemoryStorage()
>>> storage.save("greeting", '"hello"')
>>> storage.load("greeting")
'"hello"'
>>> storage.load("missing") is None
True
"""

from __future__ import annotations

import json
import logging
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class StoragePort(typ.Protocol):
    """Minimal load/save interface over a keyed blob store."""

    def load(self, key: str) -> str | None:
        """Return the stored blob for ``key`` or ``None`` when absent."""
        ...

    def save(self, key: str, value: str) -> None:
        """Persist ``value`` under ``key``, replacing any previous blob."""
        ...


class MemoryStorage:
    """In-process storage backend."""

    def __init__(self, initial: typ.Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> str | None:
        return self._data.get(key)

    def save(self, key: str, value: str) -> None:
        self._data[key] = value

    def keys(self) -> list[str]:
        """Return the stored keys in insertion order."""
        return list(self._data)


class JsonFileStorage:
    """Storage backend persisting all keys into a single JSON file.

    The file holds one JSON object whose values are the raw blobs. A missing
    file reads as empty; an unreadable or malformed file is logged and also
    reads as empty, so the next save replaces it.
    """

    def __init__(self, path: Path) -> None:
        """Bind the backend to ``path``; the file is created on first save."""
        self.path = path.expanduser()

    def load(self, key: str) -> str | None:
        value = self._read().get(key)
        if value is None:
            return None
        return str(value)

    def save(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def _read(self) -> dict[str, typ.Any]:
        """Return the decoded storage object, or an empty mapping on failure."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            loaded = json.loads(text)
        except json.JSONDecodeError:
            logger.exception("Failed to parse storage file %s", self.path)
            return {}
        if not isinstance(loaded, dict):
            logger.error("Storage file %s does not hold a JSON object", self.path)
            return {}
        return loaded


__all__ = ["JsonFileStorage", "MemoryStorage", "StoragePort"]

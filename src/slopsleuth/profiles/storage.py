"""Durable key-value storage backends for the profile cache."""

from __future__ import annotations

import json
from pathlib import Path

from sleuth_utils import get_logger
from slopsleuth.fileio import atomic_write_text

log = get_logger("slopsleuth.profiles.storage")


class MemoryStorage:
    """Process-local storage. Useful for tests and ephemeral runs."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def __len__(self) -> int:
        return len(self._items)


class JsonFileStorage:
    """String storage persisted as one JSON object on disk.

    The file is read once, lazily. A missing or corrupt file starts empty;
    every write rewrites the file atomically. Write failures propagate so
    the caller can decide to stop persisting.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._items: dict[str, str] | None = None

    def _load(self) -> dict[str, str]:
        if self._items is not None:
            return self._items

        items: dict[str, str] = {}
        try:
            parsed = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            parsed = {}
        except (OSError, ValueError) as e:
            log.warning("storage_unreadable", path=str(self.path), error=str(e))
            parsed = {}

        if isinstance(parsed, dict):
            items = {str(k): v for k, v in parsed.items() if isinstance(v, str)}
        self._items = items
        return items

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        atomic_write_text(self.path, json.dumps(items, ensure_ascii=False, sort_keys=True))

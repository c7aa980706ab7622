# storage/kv_store.py
"""Namespaced JSON key/value storage over pluggable backends."""

from __future__ import annotations

import json
import os
from typing import Any, Protocol

import structlog

from config import settings

logger = structlog.get_logger(__name__)


class StorageBackend(Protocol):
    """Minimal string key/value store, shaped like browser web storage."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryStorage:
    """Session-scoped storage that lives as long as the process."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class JsonFileStorage:
    """Durable storage persisted to a single JSON file."""

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path

    def _load(self) -> dict[str, str]:
        if not os.path.exists(self.file_path):
            return {}
        with open(self.file_path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self.file_path} is not a JSON object")
        return data

    def _save(self, items: dict[str, str]) -> None:
        directory = os.path.dirname(self.file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.file_path, "w", encoding="utf-8") as f:
            json.dump(items, f, ensure_ascii=False, indent=2)

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if items.pop(key, None) is not None:
            self._save(items)

    def keys(self) -> list[str]:
        return list(self._load())


class KeyValueCache:
    """JSON cache under a fixed key prefix.

    Storage and parse failures are logged and swallowed: a broken cache
    behaves like an empty one.
    """

    def __init__(
        self, backend: StorageBackend, prefix: str = settings.CACHE_PREFIX
    ) -> None:
        self.backend = backend
        self.prefix = prefix

    def get(self, key: str) -> Any | None:
        try:
            item = self.backend.get_item(self.prefix + key)
            if item is None:
                return None
            return json.loads(item)
        except Exception as exc:
            logger.error("Error getting item from cache.", key=key, error=str(exc))
            return None

    def set(self, key: str, value: Any) -> None:
        try:
            self.backend.set_item(self.prefix + key, json.dumps(value))
        except Exception as exc:
            logger.error("Error setting item in cache.", key=key, error=str(exc))

    def clear_all(self) -> None:
        """Remove every entry under this cache's prefix."""
        try:
            keys_to_remove = [
                key for key in self.backend.keys() if key.startswith(self.prefix)
            ]
            for key in keys_to_remove:
                self.backend.remove_item(key)
            logger.info("Cache cleared.", prefix=self.prefix, removed=len(keys_to_remove))
        except Exception as exc:
            logger.error("Error clearing cache.", prefix=self.prefix, error=str(exc))

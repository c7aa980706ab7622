# storage/settings_store.py
"""Durable user settings: active model, API key and generation toggles."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any, TypeVar

import structlog

from config import CUSTOM_MODEL_ID, settings
from storage.kv_store import StorageBackend

logger = structlog.get_logger(__name__)

T = TypeVar("T")

SettingsListener = Callable[[str, Any], None]

API_MODEL_KEY = "apiModel"
CUSTOM_MODEL_KEY = "customApiModel"
CUSTOM_API_KEY_KEY = "customApiKey"
HIGH_QUALITY_ART_KEY = "highQualityArt"


class SettingsStore:
    """Reads and writes prefixed settings and notifies listeners on change."""

    def __init__(
        self, backend: StorageBackend, prefix: str = settings.SETTINGS_PREFIX
    ) -> None:
        self.backend = backend
        self.prefix = prefix
        self._listeners: list[SettingsListener] = []

    def add_listener(self, listener: SettingsListener) -> None:
        self._listeners.append(listener)

    def get_setting(self, key: str, default: T) -> T:
        try:
            item = self.backend.get_item(self.prefix + key)
            if item is None:
                return default
            return json.loads(item)
        except Exception as exc:
            logger.error("Error getting setting.", key=key, error=str(exc))
            return default

    def set_setting(self, key: str, value: Any) -> None:
        try:
            self.backend.set_item(self.prefix + key, json.dumps(value))
        except Exception as exc:
            logger.error("Error saving setting.", key=key, error=str(exc))
            return
        for listener in self._listeners:
            listener(key, value)

    def _get_text(self, key: str) -> str:
        """Stripped string setting; anything else stored reads as blank."""
        value = self.get_setting(key, "")
        if not isinstance(value, str):
            logger.warning(
                "Ignoring non-string setting.", key=key, value_type=type(value).__name__
            )
            return ""
        return value.strip()

    def get_api_key(self) -> str | None:
        """User-provided key first, then the ``API_KEY`` environment value."""
        custom_key = self._get_text(CUSTOM_API_KEY_KEY)
        if custom_key:
            return custom_key
        return settings.GEMINI_API_KEY or None

    def get_active_model_id(self) -> str:
        """Selected model id; a blank custom model falls back to the default."""
        selected_model = self._get_text(API_MODEL_KEY) or settings.DEFAULT_MODEL_ID
        if selected_model == CUSTOM_MODEL_ID:
            return self._get_text(CUSTOM_MODEL_KEY) or settings.DEFAULT_MODEL_ID
        return selected_model

    def is_high_quality_art(self) -> bool:
        enabled = self.get_setting(
            HIGH_QUALITY_ART_KEY, settings.HIGH_QUALITY_ART_DEFAULT
        )
        if not isinstance(enabled, bool):
            logger.warning("Ignoring non-boolean setting.", key=HIGH_QUALITY_ART_KEY)
            return settings.HIGH_QUALITY_ART_DEFAULT
        return enabled


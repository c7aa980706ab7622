import storage.settings_store as settings_module
from config import DEFAULT_MODEL_ID
from storage.kv_store import MemoryStorage
from storage.settings_store import (
    API_MODEL_KEY,
    CUSTOM_API_KEY_KEY,
    CUSTOM_MODEL_KEY,
    HIGH_QUALITY_ART_KEY,
    SettingsStore,
)


def test_defaults_without_overrides(monkeypatch):
    monkeypatch.setattr(settings_module.settings, "GEMINI_API_KEY", None)
    store = SettingsStore(MemoryStorage())
    assert store.get_active_model_id() == DEFAULT_MODEL_ID
    assert store.get_api_key() is None
    assert store.is_high_quality_art() is True
    assert store.get_setting("missing", 42) == 42


def test_selected_model_is_active():
    store = SettingsStore(MemoryStorage())
    store.set_setting(API_MODEL_KEY, "gemini-2.5-pro")
    assert store.get_active_model_id() == "gemini-2.5-pro"


def test_custom_model_name_and_blank_fallback():
    store = SettingsStore(MemoryStorage())
    store.set_setting(API_MODEL_KEY, "custom-model")
    store.set_setting(CUSTOM_MODEL_KEY, "   ")
    assert store.get_active_model_id() == DEFAULT_MODEL_ID

    store.set_setting(CUSTOM_MODEL_KEY, " my-tuned-model ")
    assert store.get_active_model_id() == "my-tuned-model"


def test_custom_api_key_wins_over_environment(monkeypatch):
    monkeypatch.setattr(settings_module.settings, "GEMINI_API_KEY", "env-key")
    store = SettingsStore(MemoryStorage())
    assert store.get_api_key() == "env-key"

    store.set_setting(CUSTOM_API_KEY_KEY, "  user-key ")
    assert store.get_api_key() == "user-key"


def test_listeners_receive_changes():
    store = SettingsStore(MemoryStorage())
    seen = []
    store.add_listener(lambda key, value: seen.append((key, value)))
    store.set_setting(HIGH_QUALITY_ART_KEY, False)
    assert seen == [(HIGH_QUALITY_ART_KEY, False)]
    assert store.is_high_quality_art() is False


def test_unreadable_setting_returns_default():
    backend = MemoryStorage()
    backend.set_item("lexiconNexusSettings_apiModel", "{broken")
    store = SettingsStore(backend)
    assert store.get_active_model_id() == DEFAULT_MODEL_ID


def test_null_custom_key_falls_back_to_environment(monkeypatch):
    monkeypatch.setattr(settings_module.settings, "GEMINI_API_KEY", None)
    store = SettingsStore(MemoryStorage())
    store.set_setting(CUSTOM_API_KEY_KEY, None)
    assert store.get_api_key() is None

    monkeypatch.setattr(settings_module.settings, "GEMINI_API_KEY", "env-key")
    assert store.get_api_key() == "env-key"


def test_non_string_custom_model_uses_default():
    store = SettingsStore(MemoryStorage())
    store.set_setting(API_MODEL_KEY, "custom-model")
    store.set_setting(CUSTOM_MODEL_KEY, None)
    assert store.get_active_model_id() == DEFAULT_MODEL_ID

    store.set_setting(API_MODEL_KEY, 42)
    assert store.get_active_model_id() == DEFAULT_MODEL_ID


def test_high_quality_accepts_only_booleans(monkeypatch):
    store = SettingsStore(MemoryStorage())
    store.set_setting(HIGH_QUALITY_ART_KEY, "false")
    assert store.is_high_quality_art() is True

    monkeypatch.setattr(settings_module.settings, "HIGH_QUALITY_ART_DEFAULT", False)
    store.set_setting(HIGH_QUALITY_ART_KEY, 1)
    assert store.is_high_quality_art() is False

    store.set_setting(HIGH_QUALITY_ART_KEY, True)
    assert store.is_high_quality_art() is True

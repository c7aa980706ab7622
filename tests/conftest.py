# tests/conftest.py
import os
import sys

import pytest

# Ensure repository root is on PYTHONPATH for tests
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

# Keep a developer's real key out of the test run
os.environ["API_KEY"] = ""

from core.orchestrator import GenerationOrchestrator  # noqa: E402
from core.retry import RetryExecutor  # noqa: E402
from storage.kv_store import KeyValueCache, MemoryStorage  # noqa: E402
from storage.settings_store import CUSTOM_API_KEY_KEY, SettingsStore  # noqa: E402


class FakeBackend:
    """Scripted backend; each scripted item is a text or an exception."""

    def __init__(self) -> None:
        self.responses: list[object] = []
        self.stream_attempts: list[list[object]] = []
        self.calls: list[dict] = []
        self.stream_calls: list[dict] = []
        self.closed_streams = 0

    async def generate_content(
        self, model_id, contents, api_key, generation_config=None
    ):
        self.calls.append(
            {
                "model_id": model_id,
                "contents": contents,
                "api_key": api_key,
                "generation_config": generation_config,
            }
        )
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def stream_content(
        self, model_id, contents, api_key, generation_config=None
    ):
        self.stream_calls.append(
            {
                "model_id": model_id,
                "contents": contents,
                "api_key": api_key,
                "generation_config": generation_config,
            }
        )
        try:
            for item in self.stream_attempts.pop(0):
                if isinstance(item, BaseException):
                    raise item
                yield item
        finally:
            self.closed_streams += 1


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def retry_executor(sleeps):
    async def fake_sleep(seconds):
        sleeps.append(seconds)

    return RetryExecutor(max_attempts=3, initial_backoff_ms=2000, sleep=fake_sleep)


@pytest.fixture
def settings_store():
    store = SettingsStore(MemoryStorage())
    store.set_setting(CUSTOM_API_KEY_KEY, "test-key")
    return store


@pytest.fixture
def cache():
    return KeyValueCache(MemoryStorage())


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def orchestrator(settings_store, cache, backend, retry_executor):
    return GenerationOrchestrator(settings_store, cache, backend, retry_executor)

# core/orchestrator.py
"""Cache-aware orchestration of definition, ancillary and deep-dive generation."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from core.errors import ConfigurationError, GenerationError, classify
from core.llm_interface import GeminiClient, GenerationBackend, build_contents
from core.response_parsing import (
    ANCILLARY_RESPONSE_SCHEMA,
    DEEP_DIVE_RESPONSE_SCHEMA,
    decode_ancillary,
    decode_deep_dive,
)
from core.retry import RetryExecutor, RetryObserver
from models import (
    AncillaryData,
    ContentChunk,
    DeepDiveData,
    FileAttachment,
    GenerationRequest,
    RetryNotice,
    StreamEvent,
)
from prompt_renderer import ART_PALETTE, render_prompt
from storage.kv_store import KeyValueCache
from storage.settings_store import (
    API_MODEL_KEY,
    CUSTOM_API_KEY_KEY,
    CUSTOM_MODEL_KEY,
    SettingsStore,
)

logger = structlog.get_logger(__name__)

DEFINITION = "definition"
ANCILLARY = "ancillary"
DEEP_DIVE = "deepdive"

NO_THINKING: dict[str, Any] = {"thinkingBudget": 0}
DYNAMIC_THINKING: dict[str, Any] = {"thinkingBudget": -1}


def cache_key(operation_kind: str, model_id: str, topic: str) -> str:
    """Deterministic cache key; topic case is folded."""
    return f"{operation_kind}_{model_id}_{topic.lower()}"


class GenerationOrchestrator:
    """Entry point for the three generation operations.

    Settings and cache are explicit collaborators. Changing the model,
    custom model name or API key through the settings store clears the
    whole cache namespace.
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        cache: KeyValueCache,
        backend: GenerationBackend | None = None,
        retry_executor: RetryExecutor | None = None,
    ) -> None:
        self.settings_store = settings_store
        self.cache = cache
        self.backend: GenerationBackend = backend or GeminiClient()
        self.retry = retry_executor or RetryExecutor()
        settings_store.add_listener(self.handle_setting_changed)

    async def aclose(self) -> None:
        close = getattr(self.backend, "aclose", None)
        if close is not None:
            await close()

    def handle_setting_changed(self, key: str, value: Any) -> None:
        if key in (API_MODEL_KEY, CUSTOM_API_KEY_KEY) or (
            key == CUSTOM_MODEL_KEY and str(value or "").strip()
        ):
            logger.info("Generation settings changed; clearing cache.", setting=key)
            self.cache.clear_all()

    def clear_cache(self) -> None:
        self.cache.clear_all()

    def _require_api_key(self) -> str:
        api_key = self.settings_store.get_api_key()
        if not api_key:
            raise ConfigurationError()
        return api_key

    def _read_cache(self, key: str, model: type[BaseModel]) -> Any | None:
        cached = self.cache.get(key)
        if not cached:
            return None
        try:
            return model.model_validate(cached)
        except ValidationError:
            logger.warning("Discarding malformed cache entry.", key=key)
            return None

    # --- Definitions -----------------------------------------------------

    def get_cached_definition(self, topic: str) -> str | None:
        model_id = self.settings_store.get_active_model_id()
        cached = self.cache.get(cache_key(DEFINITION, model_id, topic))
        return cached if isinstance(cached, str) and cached else None

    def cache_definition(self, topic: str, text: str) -> None:
        """Persist a fully streamed topic definition. File answers are never cached."""
        if not text.strip():
            return
        model_id = self.settings_store.get_active_model_id()
        self.cache.set(cache_key(DEFINITION, model_id, topic), text)

    async def stream_definition(
        self, topic_or_query: str, file: FileAttachment | None = None
    ) -> AsyncIterator[StreamEvent]:
        """Stream a definition (or a document answer when ``file`` is given).

        Yields :class:`ContentChunk` in arrival order. Before each retry a
        :class:`RetryNotice` is yielded; when the failed attempt had already
        produced text, ``partial_discarded`` tells the consumer to reset.
        Stop iterating to cancel.
        """
        request = GenerationRequest(topic=topic_or_query, file=file)
        api_key = self._require_api_key()
        model_id = self.settings_store.get_active_model_id()

        if request.file is not None:
            prompt = render_prompt(
                "file_question.j2",
                {"question": request.topic, "file_name": request.file.name},
            )
        else:
            prompt = render_prompt("definition.j2", {"topic": request.topic})
        contents = build_contents(prompt, request)
        generation_config = {"thinkingConfig": NO_THINKING}
        context = f'generate content for "{topic_or_query}"'

        attempt = 0
        while True:
            emitted = False
            try:
                async with aclosing(
                    self.backend.stream_content(
                        model_id, contents, api_key, generation_config
                    )
                ) as stream:
                    async for text in stream:
                        if text:
                            emitted = True
                            yield ContentChunk(text)
                return
            except Exception as exc:
                error = classify(exc, context)

            if not self.retry.should_retry(error, attempt):
                raise error

            retry_number = attempt + 1
            delay_ms = self.retry.backoff_delay_ms(retry_number)
            logger.info(
                "Rate limit exceeded while streaming. Retrying.",
                attempt=retry_number,
                delay_ms=delay_ms,
            )
            yield RetryNotice(
                attempt=retry_number,
                delay_ms=delay_ms,
                reason=error.message,
                partial_discarded=emitted,
            )
            await self.retry.sleep(delay_ms / 1000)
            attempt += 1

    # --- Structured generations -------------------------------------------

    async def generate_ancillary_data(
        self, topic: str, on_retry: RetryObserver | None = None
    ) -> AncillaryData:
        """ASCII art with hotspots plus related concepts, cache first."""
        model_id = self.settings_store.get_active_model_id()
        key = cache_key(ANCILLARY, model_id, topic)
        cached = self._read_cache(key, AncillaryData)
        if cached is not None:
            logger.debug("Ancillary cache hit.", topic=topic, model=model_id)
            return cached

        async def api_call() -> AncillaryData:
            api_key = self._require_api_key()
            prompt = render_prompt(
                "ancillary.j2", {"topic": topic, "palette": ART_PALETTE}
            )
            generation_config = {
                "responseMimeType": "application/json",
                "responseSchema": ANCILLARY_RESPONSE_SCHEMA,
                "thinkingConfig": (
                    DYNAMIC_THINKING
                    if self.settings_store.is_high_quality_art()
                    else NO_THINKING
                ),
            }
            text = await self.backend.generate_content(
                model_id, build_contents(prompt), api_key, generation_config
            )
            result = decode_ancillary(text)
            self.cache.set(key, result.model_dump(exclude_none=True))
            return result

        return await self.retry.run(
            api_call, on_retry, context=f'generate ancillary data for "{topic}"'
        )

    async def generate_deep_dive(
        self, topic: str, on_retry: RetryObserver | None = None
    ) -> DeepDiveData:
        """Long-form summary and resources, cache first."""
        model_id = self.settings_store.get_active_model_id()
        key = cache_key(DEEP_DIVE, model_id, topic)
        cached = self._read_cache(key, DeepDiveData)
        if cached is not None:
            logger.debug("Deep dive cache hit.", topic=topic, model=model_id)
            return cached

        async def api_call() -> DeepDiveData:
            api_key = self._require_api_key()
            prompt = render_prompt("deep_dive.j2", {"topic": topic})
            generation_config = {
                "responseMimeType": "application/json",
                "responseSchema": DEEP_DIVE_RESPONSE_SCHEMA,
            }
            text = await self.backend.generate_content(
                model_id, build_contents(prompt), api_key, generation_config
            )
            result = decode_deep_dive(text)
            self.cache.set(key, result.model_dump())
            return result

        return await self.retry.run(
            api_call, on_retry, context=f'generate deep dive for "{topic}"'
        )


__all__ = [
    "GenerationOrchestrator",
    "GenerationError",
    "cache_key",
    "DEFINITION",
    "ANCILLARY",
    "DEEP_DIVE",
]

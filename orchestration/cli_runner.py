# orchestration/cli_runner.py
"""Command-line runner for topic generation."""

from __future__ import annotations

import argparse
import asyncio
import base64
import mimetypes
import os
import time

import structlog
from config import CUSTOM_MODEL_ID, settings
from core.errors import GenerationError
from core.orchestrator import GenerationOrchestrator
from models import AncillaryData, FileAttachment
from storage.kv_store import JsonFileStorage, KeyValueCache, MemoryStorage
from storage.settings_store import (
    API_MODEL_KEY,
    CUSTOM_API_KEY_KEY,
    CUSTOM_MODEL_KEY,
    HIGH_QUALITY_ART_KEY,
    SettingsStore,
)
from ui.rich_display import TopicDisplay, create_fallback_art
from utils.logging import setup_logging
from utils.topics import pick_random_topic

logger = structlog.get_logger(__name__)


def build_orchestrator() -> GenerationOrchestrator:
    """Wire storage, settings and the backend client together."""
    settings_store = SettingsStore(JsonFileStorage(settings.SETTINGS_FILE))
    cache_backend = (
        JsonFileStorage(settings.CACHE_FILE) if settings.CACHE_FILE else MemoryStorage()
    )
    return GenerationOrchestrator(settings_store, KeyValueCache(cache_backend))


def load_attachment(path: str) -> FileAttachment:
    mime_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
    with open(path, "rb") as f:
        data = base64.b64encode(f.read()).decode("ascii")
    return FileAttachment(name=os.path.basename(path), data=data, mime_type=mime_type)


def apply_settings(orchestrator: GenerationOrchestrator, args: argparse.Namespace) -> None:
    """Persist settings given on the command line.

    The orchestrator clears its cache in reaction to model and key changes.
    """
    store = orchestrator.settings_store
    if args.model:
        store.set_setting(API_MODEL_KEY, args.model)
    if args.custom_model is not None:
        store.set_setting(CUSTOM_MODEL_KEY, args.custom_model)
        if not args.model:
            store.set_setting(API_MODEL_KEY, CUSTOM_MODEL_ID)
    if args.api_key is not None:
        store.set_setting(CUSTOM_API_KEY_KEY, args.api_key)
    if args.high_quality is not None:
        store.set_setting(HIGH_QUALITY_ART_KEY, args.high_quality)
    if args.clear_cache:
        orchestrator.clear_cache()


async def _generate_art(
    orchestrator: GenerationOrchestrator, display: TopicDisplay, topic: str
) -> AncillaryData | None:
    try:
        return await orchestrator.generate_ancillary_data(topic, display.show_retry)
    except GenerationError as e:
        logger.warning("Falling back to placeholder art.", topic=topic, error=e.message)
        return None


async def run_topic(
    orchestrator: GenerationOrchestrator,
    display: TopicDisplay,
    topic: str,
    file: FileAttachment | None = None,
    deep_dive: bool = False,
) -> None:
    """Generate and render everything requested for one topic."""
    with structlog.contextvars.bound_contextvars(topic=topic, file_query=file is not None):
        await _run_topic(orchestrator, display, topic, file, deep_dive)


async def _run_topic(
    orchestrator: GenerationOrchestrator,
    display: TopicDisplay,
    topic: str,
    file: FileAttachment | None,
    deep_dive: bool,
) -> None:
    display.show_header(topic, orchestrator.settings_store.get_active_model_id())
    started = time.perf_counter()

    art_task = None
    if file is None:
        # Art runs alongside the definition stream.
        art_task = asyncio.create_task(_generate_art(orchestrator, display, topic))

    try:
        cached = None if file is not None else orchestrator.get_cached_definition(topic)
        if cached:
            display.show_definition(cached)
        else:
            text = await display.stream_definition(
                orchestrator.stream_definition(topic, file)
            )
            if file is None:
                orchestrator.cache_definition(topic, text)
    except GenerationError as e:
        display.show_error(e.message)

    if art_task is not None:
        ancillary = await art_task
        if ancillary is None:
            display.show_art(create_fallback_art(topic))
        else:
            display.show_art(ancillary.artData)
            display.show_concepts(ancillary.concepts)

    elapsed = time.perf_counter() - started
    logger.info("Topic generated.", seconds=round(elapsed, 2))
    display.show_generation_time(elapsed)

    if deep_dive:
        try:
            data = await orchestrator.generate_deep_dive(topic, display.show_retry)
            display.show_deep_dive(data)
        except GenerationError as e:
            display.show_error(e.message)


async def _run(orchestrator: GenerationOrchestrator, args: argparse.Namespace) -> None:
    try:
        apply_settings(orchestrator, args)
        topic = args.topic
        if args.random or not topic:
            topic = pick_random_topic(topic)
        file = load_attachment(args.file) if args.file else None
        await run_topic(orchestrator, TopicDisplay(), topic, file, args.deep_dive)
    finally:
        await orchestrator.aclose()


def run(args: argparse.Namespace) -> None:
    """Initialize the orchestrator and run the requested operation."""
    setup_logging()
    orchestrator = build_orchestrator()
    try:
        asyncio.run(_run(orchestrator, args))
    except KeyboardInterrupt:
        logger.info("Shutting down due to KeyboardInterrupt...")
    except Exception as main_err:  # pragma: no cover - entry point catch
        logger.critical(
            "Unhandled exception in CLI runner: %s", main_err, exc_info=True
        )

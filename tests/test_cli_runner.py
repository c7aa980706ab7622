import argparse
import base64
import io
import json

import pytest
from rich.console import Console

from main import build_parser
from models import FileAttachment
from orchestration.cli_runner import apply_settings, load_attachment, run_topic
from storage.settings_store import API_MODEL_KEY
from ui.rich_display import TopicDisplay

NOTES = FileAttachment(
    name="notes.txt",
    data=base64.b64encode(b"hello").decode("ascii"),
    mime_type="text/plain",
)
ANCILLARY_PAYLOAD = json.dumps({"concepts": ["heat", "disorder"], "artData": {"art": "~~~"}})
DEEP_DIVE_PAYLOAD = json.dumps(
    {"summary": "[[Entropy]] is disorder.", "resources": []}
)


def make_display() -> tuple[TopicDisplay, io.StringIO]:
    buffer = io.StringIO()
    return TopicDisplay(Console(file=buffer, width=100, color_system=None)), buffer


def namespace(**overrides) -> argparse.Namespace:
    values = {
        "model": None,
        "custom_model": None,
        "api_key": None,
        "high_quality": None,
        "clear_cache": False,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.mark.asyncio
async def test_art_failure_falls_back_to_boxed_topic(orchestrator, backend):
    backend.stream_attempts = [["Entropy is disorder."]]
    backend.responses = [ValueError("boom")]
    display, buffer = make_display()

    await run_topic(orchestrator, display, "Entropy")

    output = buffer.getvalue()
    assert "| Entropy |" in output
    assert orchestrator.get_cached_definition("Entropy") == "Entropy is disorder."


@pytest.mark.asyncio
async def test_cached_definition_skips_streaming(orchestrator, backend):
    orchestrator.cache_definition("Entropy", "From cache.")
    backend.responses = [ANCILLARY_PAYLOAD, DEEP_DIVE_PAYLOAD]
    display, buffer = make_display()

    await run_topic(orchestrator, display, "Entropy", deep_dive=True)

    output = buffer.getvalue()
    assert backend.stream_calls == []
    assert "From cache." in output
    assert "heat" in output
    assert "Entropy is disorder." in output


@pytest.mark.asyncio
async def test_file_question_skips_art_and_cache(orchestrator, backend, cache):
    backend.stream_attempts = [["It says so."]]
    display, _ = make_display()

    await run_topic(orchestrator, display, "What does it say?", NOTES)

    assert backend.calls == []
    assert cache.backend.keys() == []


@pytest.mark.asyncio
async def test_stream_failure_is_shown_as_error(orchestrator, backend):
    backend.stream_attempts = [[ValueError("bad model")]]
    backend.responses = [ANCILLARY_PAYLOAD]
    display, buffer = make_display()

    await run_topic(orchestrator, display, "Qualia")

    assert 'Could not generate content for "Qualia". bad model' in buffer.getvalue()
    assert orchestrator.get_cached_definition("Qualia") is None


def test_load_attachment_encodes_file(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_bytes(b"hello")

    attachment = load_attachment(str(path))

    assert attachment.name == "notes.txt"
    assert attachment.mime_type == "text/plain"
    assert base64.b64decode(attachment.data) == b"hello"


def test_custom_model_flag_selects_custom_model(orchestrator, cache):
    cache.set("ancillary_x_y", {"artData": {"art": "x"}})

    apply_settings(orchestrator, namespace(custom_model="tuned", high_quality=False))

    store = orchestrator.settings_store
    assert store.get_setting(API_MODEL_KEY, None) == "custom-model"
    assert store.get_active_model_id() == "tuned"
    assert store.is_high_quality_art() is False
    assert cache.get("ancillary_x_y") is None


def test_clear_cache_flag(orchestrator, cache):
    cache.set("definition_m_t", "text")
    apply_settings(orchestrator, namespace(clear_cache=True))
    assert cache.get("definition_m_t") is None


def test_parser_flags():
    args = build_parser().parse_args(
        ["Entropy", "--deep-dive", "--no-high-quality", "--model", "gemini-2.5-pro"]
    )
    assert args.topic == "Entropy"
    assert args.deep_dive is True
    assert args.high_quality is False
    assert args.model == "gemini-2.5-pro"
    assert args.random is False

    defaults = build_parser().parse_args([])
    assert defaults.topic is None
    assert defaults.high_quality is None


@pytest.mark.asyncio
async def test_generation_time_is_reported(orchestrator, backend):
    backend.stream_attempts = [["Entropy is disorder."]]
    backend.responses = [ANCILLARY_PAYLOAD]
    display, buffer = make_display()

    await run_topic(orchestrator, display, "Entropy")

    assert "Generated in " in buffer.getvalue()

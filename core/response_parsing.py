# core/response_parsing.py
"""Repair and decode structured JSON payloads returned by the backend."""

from __future__ import annotations

import json
import re
from typing import Any

import structlog
from pydantic import ValidationError

from core.errors import ValidationFailure
from models import AncillaryData, AsciiArtData, DeepDiveData, Hotspot

logger = structlog.get_logger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)

ANCILLARY_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "concepts": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "An array of 5-7 strings of related concepts.",
        },
        "artData": {
            "type": "OBJECT",
            "properties": {
                "art": {
                    "type": "STRING",
                    "description": "A string containing ASCII art representing the topic.",
                },
                "hotspots": {
                    "type": "ARRAY",
                    "description": "An array of interactive hotspot objects within the art.",
                    "items": {
                        "type": "OBJECT",
                        "properties": {
                            "char": {"type": "STRING"},
                            "x": {"type": "INTEGER"},
                            "y": {"type": "INTEGER"},
                            "concept": {"type": "STRING"},
                        },
                        "required": ["char", "x", "y", "concept"],
                    },
                },
            },
            "required": ["art"],
        },
    },
    "required": ["concepts", "artData"],
}

DEEP_DIVE_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "summary": {
            "type": "STRING",
            "description": (
                "A detailed, multi-paragraph summary. Important, related keywords "
                "within the summary must be wrapped in double square brackets, "
                "e.g., [[keyword]]."
            ),
        },
        "resources": {
            "type": "ARRAY",
            "description": "An array of curated resources for further learning.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "title": {"type": "STRING", "description": "The title of the resource."},
                    "url": {"type": "STRING", "description": "The URL for the resource."},
                    "description": {
                        "type": "STRING",
                        "description": "A brief description of the resource.",
                    },
                },
                "required": ["title", "url", "description"],
            },
        },
    },
    "required": ["summary", "resources"],
}


def strip_code_fence(text: str) -> str:
    """Remove a surrounding triple-backtick fence, optionally tagged ``json``."""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match and match.group(1):
        return match.group(1).strip()
    return stripped


def parse_json_payload(text: str) -> Any:
    """Parse a possibly fenced JSON payload."""
    json_text = strip_code_fence(text)
    try:
        return json.loads(json_text)
    except json.JSONDecodeError as exc:
        logger.warning(
            "Failed to decode JSON payload.", error=str(exc), snippet=json_text[:200]
        )
        raise ValidationFailure(f"Malformed JSON in response: {exc}") from exc


def _normalize_concepts(raw: Any) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("Ignoring non-list concepts value.", value_type=type(raw).__name__)
        return []
    concepts: list[str] = []
    for item in raw:
        if isinstance(item, str):
            concepts.append(item)
        elif isinstance(item, int | float) and not isinstance(item, bool):
            logger.warning("Coercing non-string concept.", concept=repr(item))
            concepts.append(str(item))
        else:
            logger.warning("Dropping non-scalar concept entry.", entry=repr(item)[:80])
    return concepts


def _normalize_hotspots(raw: Any) -> list[Hotspot] | None:
    if raw is None:
        return None
    if not isinstance(raw, list):
        logger.warning("Ignoring non-list hotspots value.", value_type=type(raw).__name__)
        return None
    hotspots: list[Hotspot] = []
    for entry in raw:
        if not isinstance(entry, dict):
            logger.warning("Dropping non-object hotspot entry.", entry=repr(entry)[:80])
            continue
        hotspots.append(Hotspot.model_validate(entry))
    return hotspots



def decode_ancillary(text: str) -> AncillaryData:
    """Decode an ancillary payload; only empty art is a hard failure."""
    data = parse_json_payload(text)
    if not isinstance(data, dict):
        raise ValidationFailure("Ancillary response is not a JSON object")

    art_data = data.get("artData")
    art = art_data.get("art") if isinstance(art_data, dict) else None
    if not isinstance(art, str) or not art.strip():
        raise ValidationFailure("Invalid or empty ASCII art in response")

    return AncillaryData(
        artData=AsciiArtData(
            art=art, hotspots=_normalize_hotspots(art_data.get("hotspots"))
        ),
        concepts=_normalize_concepts(data.get("concepts")),
    )


def decode_deep_dive(text: str) -> DeepDiveData:
    """Decode a deep-dive payload, keeping ``[[keyword]]`` markers intact."""
    data = parse_json_payload(text)
    try:
        return DeepDiveData.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailure(
            f"Deep dive response has an unexpected shape: {exc.error_count()} "
            f"validation error(s), first: {exc.errors()[0]['msg']}"
        ) from exc

"""Central package for Lexicon Nexus data models."""

from .generation_models import (
    AncillaryData,
    AsciiArtData,
    ContentChunk,
    DeepDiveData,
    FileAttachment,
    GenerationRequest,
    Hotspot,
    Resource,
    RetryNotice,
    StreamEvent,
)

__all__ = [
    "FileAttachment",
    "GenerationRequest",
    "Hotspot",
    "AsciiArtData",
    "AncillaryData",
    "Resource",
    "DeepDiveData",
    "ContentChunk",
    "RetryNotice",
    "StreamEvent",
]

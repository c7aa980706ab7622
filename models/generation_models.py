# models/generation_models.py
"""Request, response and stream-event structures for topic generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class FileAttachment(BaseModel):
    """A document uploaded alongside a question."""

    model_config = ConfigDict(frozen=True)

    name: str
    data: str = Field(description="Base64 encoded file payload.")
    mime_type: str


class GenerationRequest(BaseModel):
    """A single topic request; immutable once built."""

    model_config = ConfigDict(frozen=True)

    topic: str
    file: FileAttachment | None = None

    @property
    def is_file_query(self) -> bool:
        return self.file is not None


class Hotspot(BaseModel):
    """An interactive character inside generated ASCII art.

    Fields are kept exactly as the backend returned them, so an off-type
    coordinate survives a cache round trip. Nothing here checks them
    against the art; rendering skips hotspots it cannot place.
    """

    model_config = ConfigDict(extra="allow")

    char: Any = None
    x: Any = None
    y: Any = None
    concept: Any = None



class AsciiArtData(BaseModel):
    art: str
    hotspots: list[Hotspot] | None = None


class AncillaryData(BaseModel):
    """ASCII art plus the related-concept list for a topic."""

    artData: AsciiArtData
    concepts: list[str] = Field(default_factory=list)


class Resource(BaseModel):
    title: str
    url: str | None = None
    description: str


class DeepDiveData(BaseModel):
    """Long-form summary with ``[[keyword]]`` markers and curated resources."""

    summary: str
    resources: list[Resource] = Field(default_factory=list)


@dataclass(frozen=True)
class ContentChunk:
    """A text fragment of a streamed definition."""

    text: str
    kind: Literal["content"] = "content"


@dataclass(frozen=True)
class RetryNotice:
    """Status event emitted before a streamed definition is retried."""

    attempt: int
    delay_ms: int
    reason: str
    partial_discarded: bool = False
    kind: Literal["retry"] = "retry"

    @property
    def message(self) -> str:
        return f"Rate limit exceeded. Retrying in {round(self.delay_ms / 1000)}s..."


StreamEvent = ContentChunk | RetryNotice

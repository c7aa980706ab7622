# utils/text_processing.py
"""Helpers for splitting deep-dive summaries into keyword and text parts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

_SUMMARY_SPLIT_RE = re.compile(r"(\[\[.*?\]\]|\s+)")
_KEYWORD_RE = re.compile(r"\[\[(.*?)\]\]")


@dataclass(frozen=True)
class SummaryPart:
    text: str
    kind: Literal["keyword", "text", "space", "paragraph"]


def split_summary(summary: str) -> list[SummaryPart]:
    """Split a summary on ``[[keyword]]`` markers and whitespace.

    Keyword parts carry the bare keyword; whitespace containing a newline
    becomes a paragraph break.
    """
    parts: list[SummaryPart] = []
    for piece in _SUMMARY_SPLIT_RE.split(summary or ""):
        if not piece:
            continue
        if piece.startswith("[[") and piece.endswith("]]"):
            parts.append(SummaryPart(piece[2:-2], "keyword"))
        elif piece.isspace():
            parts.append(SummaryPart(piece, "paragraph" if "\n" in piece else "space"))
        else:
            parts.append(SummaryPart(piece, "text"))
    return parts


def extract_keywords(summary: str) -> list[str]:
    """Unique keywords in order of first appearance."""
    seen: dict[str, None] = {}
    for keyword in _KEYWORD_RE.findall(summary or ""):
        keyword = keyword.strip()
        if keyword and keyword.lower() not in {k.lower() for k in seen}:
            seen[keyword] = None
    return list(seen)

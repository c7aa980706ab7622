# utils/__init__.py
"""General utility functions for the Lexicon Nexus client."""

from .logging import setup_logging
from .text_processing import SummaryPart, extract_keywords, split_summary
from .topics import UNIQUE_WORDS, pick_random_topic

__all__ = [
    "setup_logging",
    "SummaryPart",
    "split_summary",
    "extract_keywords",
    "UNIQUE_WORDS",
    "pick_random_topic",
]

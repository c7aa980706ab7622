# main.py
"""CLI entry point for the Lexicon Nexus client."""

from __future__ import annotations

import argparse

from orchestration.cli_runner import run


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Define, visualize and explore a topic with Gemini."
    )
    parser.add_argument("topic", nargs="?", default=None, help="Topic to explore")
    parser.add_argument(
        "--random", action="store_true", help="Pick a random curated topic"
    )
    parser.add_argument(
        "--deep-dive", action="store_true", help="Also generate a deep dive"
    )
    parser.add_argument(
        "--file", default=None, help="Answer TOPIC as a question about this document"
    )
    parser.add_argument("--model", default=None, help="Model id to select")
    parser.add_argument(
        "--custom-model", default=None, help="Custom model name (selects custom-model)"
    )
    parser.add_argument("--api-key", default=None, help="API key to store in settings")
    parser.add_argument(
        "--high-quality",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Toggle thinking for art generation",
    )
    parser.add_argument(
        "--clear-cache", action="store_true", help="Clear the session cache first"
    )
    return parser


def main() -> None:
    """Parse command-line arguments and start generation."""
    args = build_parser().parse_args()
    run(args)


if __name__ == "__main__":
    main()

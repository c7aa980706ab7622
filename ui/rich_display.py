from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config import settings
from models import AsciiArtData, ContentChunk, DeepDiveData, RetryNotice, StreamEvent
from utils.text_processing import split_summary


def create_fallback_art(topic: str) -> AsciiArtData:
    """Bordered box around the topic, used when art generation fails."""
    limit = settings.FALLBACK_ART_MAX_TOPIC_CHARS
    displayable_topic = topic if len(topic) <= limit else topic[: limit - 3] + "..."
    padded_topic = f" {displayable_topic} "
    border = f"+{'-' * len(padded_topic)}+"
    return AsciiArtData(art=f"{border}\n|{padded_topic}|\n{border}")


def _coordinate(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def render_art(art_data: AsciiArtData) -> Text:
    """Art text with hotspot characters highlighted.

    Hotspots without integer coordinates or outside the art are skipped.
    """
    lines = art_data.art.split("\n")
    offsets = [0]
    for line in lines[:-1]:
        offsets.append(offsets[-1] + len(line) + 1)
    text = Text(art_data.art, style="cyan")
    for hotspot in art_data.hotspots or []:
        x, y = _coordinate(hotspot.x), _coordinate(hotspot.y)
        if x is None or y is None:
            continue
        if not (0 <= y < len(lines) and 0 <= x < len(lines[y])):
            continue
        start = offsets[y] + x
        text.stylize("bold reverse magenta", start, start + 1)
    return text


def render_summary(summary: str) -> Text:
    text = Text()
    for part in split_summary(summary):
        if part.kind == "keyword":
            text.append(part.text, style="bold underline yellow")
        elif part.kind == "paragraph":
            text.append("\n\n")
        else:
            text.append(part.text)
    return text


class TopicDisplay:
    """Renders generation results to the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def show_header(self, topic: str, model_id: str) -> None:
        self.console.rule(f"[bold]{topic}[/bold] [dim]({model_id})[/dim]")

    def show_retry(self, attempt: int, delay_ms: int) -> None:
        self.console.print(
            f"[yellow]Rate limit exceeded. Retrying in {round(delay_ms / 1000)}s "
            f"(attempt {attempt})...[/yellow]"
        )

    def show_error(self, message: str) -> None:
        self.console.print(Panel(message, title="Error", border_style="red"))

    def show_generation_time(self, seconds: float) -> None:
        self.console.print(f"[dim]Generated in {seconds:.2f}s[/dim]")

    def show_definition(self, text: str) -> None:
        self.console.print(Panel(text, title="Definition", border_style="blue"))

    async def stream_definition(self, events: AsyncIterator[StreamEvent]) -> str:
        """Render a definition as it streams and return the accumulated text."""
        content = Text()
        status = Text("", style="yellow")
        accumulated = ""
        panel = Panel(Group(content, status), title="Definition", border_style="blue")
        with Live(panel, console=self.console, refresh_per_second=8, transient=False):
            async for event in events:
                if isinstance(event, RetryNotice):
                    if event.partial_discarded:
                        accumulated = ""
                        content.plain = ""
                    status.plain = event.message
                elif isinstance(event, ContentChunk):
                    status.plain = ""
                    accumulated += event.text
                    content.append(event.text)
        return accumulated

    def show_art(self, art_data: AsciiArtData, title: str = "Visualization") -> None:
        self.console.print(Panel(render_art(art_data), title=title, expand=False))
        if art_data.hotspots:
            table = Table(title="Hotspots", show_header=True)
            table.add_column("Char")
            table.add_column("Column", justify="right")
            table.add_column("Row", justify="right")
            table.add_column("Concept")
            for hotspot in art_data.hotspots:
                table.add_row(
                    _cell(hotspot.char),
                    _cell(hotspot.x),
                    _cell(hotspot.y),
                    _cell(hotspot.concept),
                )
            self.console.print(table)

    def show_concepts(self, concepts: list[str]) -> None:
        if not concepts:
            return
        self.console.print(
            Text("Related: ", style="bold") + Text(" · ".join(concepts), style="green")
        )

    def show_deep_dive(self, data: DeepDiveData) -> None:
        self.console.print(
            Panel(render_summary(data.summary), title="Deep Dive", border_style="magenta")
        )
        if data.resources:
            table = Table(title="Resources", show_header=True, expand=True)
            table.add_column("Title", style="bold")
            table.add_column("Description")
            table.add_column("URL", style="blue")
            for resource in data.resources:
                table.add_row(resource.title, resource.description, resource.url or "")
            self.console.print(table)

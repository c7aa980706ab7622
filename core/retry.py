# core/retry.py
"""Exponential-backoff retry for non-streaming generation calls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog

from config import settings
from core.errors import GenerationError, classify

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RetryObserver = Callable[[int, int], None]
SleepFunc = Callable[[float], Awaitable[object]]


@dataclass
class RetryState:
    """Book-keeping for one retried call."""

    attempt: int = 0
    last_error: GenerationError | None = None
    delay_ms: int = 0


class RetryExecutor:
    """Run an async operation, retrying only rate-limited failures."""

    def __init__(
        self,
        max_attempts: int | None = None,
        initial_backoff_ms: int | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.max_attempts = (
            max_attempts if max_attempts is not None else settings.LLM_RETRY_ATTEMPTS
        )
        self.initial_backoff_ms = (
            initial_backoff_ms
            if initial_backoff_ms is not None
            else settings.LLM_INITIAL_BACKOFF_MS
        )
        self.sleep = sleep

    def backoff_delay_ms(self, retry_number: int) -> int:
        """Delay before retry ``retry_number`` (1-indexed)."""
        return self.initial_backoff_ms * (2 ** (retry_number - 1))

    def should_retry(self, error: GenerationError, attempt: int) -> bool:
        """``attempt`` is the 0-based index of the attempt that just failed."""
        return error.is_rate_limited and attempt < self.max_attempts - 1

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        on_retry: RetryObserver | None = None,
        context: str = "complete the request",
    ) -> T:
        """Await ``operation`` until it succeeds or retries run out.

        ``on_retry(attempt, delay_ms)`` is called before each backoff sleep.
        Non rate-limited failures are raised on the first attempt; an
        exhausted call raises the last rate-limit error.
        """
        state = RetryState()
        while True:
            try:
                return await operation()
            except Exception as exc:
                state.last_error = classify(exc, context)

            if not self.should_retry(state.last_error, state.attempt):
                raise state.last_error

            retry_number = state.attempt + 1
            state.delay_ms = self.backoff_delay_ms(retry_number)
            if on_retry is not None:
                on_retry(retry_number, state.delay_ms)
            logger.info(
                "Rate limit exceeded. Retrying.",
                context=context,
                attempt=retry_number,
                delay_ms=state.delay_ms,
            )
            await self.sleep(state.delay_ms / 1000)
            state.attempt += 1

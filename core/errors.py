# core/errors.py
"""Error taxonomy for generation calls and the rate-limit classifier."""

from __future__ import annotations

from enum import Enum

import structlog

from config import settings

logger = structlog.get_logger(__name__)

RATE_LIMIT_MESSAGE = "API rate limit exceeded. Please wait a moment and try again."
MISSING_API_KEY_MESSAGE = (
    "API Key is not configured. Please add it in the settings panel."
)
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


class ErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    FATAL = "fatal"


class GenerationError(Exception):
    """Normalized failure carrying a user-presentable message.

    ``detail`` keeps the original diagnostic text for logs; it is not part
    of the message shown to users.
    """

    def __init__(
        self, message: str, kind: ErrorKind = ErrorKind.FATAL, detail: str = ""
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.detail = detail

    @property
    def is_rate_limited(self) -> bool:
        return self.kind is ErrorKind.RATE_LIMITED


class ConfigurationError(GenerationError):
    """Raised when no API credential is available. Never retried."""

    def __init__(self, message: str = MISSING_API_KEY_MESSAGE) -> None:
        super().__init__(message, ErrorKind.FATAL)


class BackendError(Exception):
    """Non-success response from the generative backend."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Backend returned HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class ValidationFailure(ValueError):
    """Backend payload was malformed or missing required content."""


def _is_rate_limited(error: BaseException, text: str) -> bool:
    if isinstance(error, BackendError) and error.status_code == 429:
        return True
    return any(marker in text for marker in settings.RATE_LIMIT_MARKERS)


def classify(error: BaseException, context: str) -> GenerationError:
    """Turn any failure into a :class:`GenerationError`.

    Already-normalized errors are returned unchanged. Rate-limit failures
    get a fixed message; everything else reads ``Could not {context}. ...``.
    """
    if isinstance(error, GenerationError):
        return error

    text = str(error)
    logger.error(
        "Error during generation call.",
        context=context,
        error_type=type(error).__name__,
        detail=text,
    )

    if _is_rate_limited(error, text):
        return GenerationError(RATE_LIMIT_MESSAGE, ErrorKind.RATE_LIMITED, text)

    original_message = text or UNKNOWN_ERROR_MESSAGE
    return GenerationError(
        f"Could not {context}. {original_message}", ErrorKind.FATAL, text
    )

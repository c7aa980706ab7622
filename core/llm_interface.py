# core/llm_interface.py
"""
Handles all direct interactions with the Gemini generative-language REST
API: non-streaming structured calls and server-sent-event streaming.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any, Protocol

import httpx
import structlog

from config import settings
from core.errors import BackendError
from models import GenerationRequest

logger = structlog.get_logger(__name__)


class GenerationBackend(Protocol):
    """What the orchestrator needs from a generative backend."""

    async def generate_content(
        self,
        model_id: str,
        contents: list[dict[str, Any]],
        api_key: str,
        generation_config: dict[str, Any] | None = None,
    ) -> str: ...

    def stream_content(
        self,
        model_id: str,
        contents: list[dict[str, Any]],
        api_key: str,
        generation_config: dict[str, Any] | None = None,
    ) -> AsyncIterator[str]: ...


def build_contents(prompt: str, request: GenerationRequest | None = None) -> list[dict[str, Any]]:
    """Build the ``contents`` array for a prompt and optional attachment."""
    parts: list[dict[str, Any]] = []
    if request is not None and request.file is not None:
        parts.append(
            {
                "inlineData": {
                    "mimeType": request.file.mime_type,
                    "data": request.file.data,
                }
            }
        )
    parts.append({"text": prompt})
    return [{"role": "user", "parts": parts}]


def extract_text(data: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    content = candidates[0].get("content") or {}
    pieces = [
        part["text"]
        for part in content.get("parts") or []
        if isinstance(part.get("text"), str) and not part.get("thought")
    ]
    return "".join(pieces)


class GeminiClient:
    """Thin async client over the Gemini REST endpoints."""

    def __init__(
        self,
        api_base: str = settings.GEMINI_API_BASE,
        timeout: float = settings.HTTPX_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        # Use a single async client for all requests to reuse connections
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._api_base = api_base.rstrip("/")
        self.request_count = 0

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def _url(self, model_id: str, method: str) -> str:
        return f"{self._api_base}/models/{model_id}:{method}"

    @staticmethod
    def _headers(api_key: str) -> dict[str, str]:
        return {"x-goog-api-key": api_key, "Content-Type": "application/json"}

    @staticmethod
    def _payload(
        contents: list[dict[str, Any]], generation_config: dict[str, Any] | None
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"contents": contents}
        if generation_config:
            payload["generationConfig"] = generation_config
        return payload

    async def generate_content(
        self,
        model_id: str,
        contents: list[dict[str, Any]],
        api_key: str,
        generation_config: dict[str, Any] | None = None,
    ) -> str:
        """Send a regular generateContent request and return its text."""
        self.request_count += 1
        logger.debug(
            "Calling generateContent.",
            model=model_id,
            has_config=bool(generation_config),
        )
        response = await self._client.post(
            self._url(model_id, "generateContent"),
            json=self._payload(contents, generation_config),
            headers=self._headers(api_key),
        )
        if response.status_code >= 400:
            raise BackendError(response.status_code, response.text)
        data = response.json()
        text = extract_text(data)
        if not text:
            logger.error(
                "Response missing candidate text despite success status.",
                model=model_id,
                data=str(data)[:200],
            )
        return text

    async def stream_content(
        self,
        model_id: str,
        contents: list[dict[str, Any]],
        api_key: str,
        generation_config: dict[str, Any] | None = None,
    ) -> AsyncIterator[str]:
        """Yield text deltas from a streamGenerateContent SSE response."""
        self.request_count += 1
        logger.debug("Calling streamGenerateContent.", model=model_id)
        async with self._client.stream(
            "POST",
            self._url(model_id, "streamGenerateContent"),
            params={"alt": "sse"},
            json=self._payload(contents, generation_config),
            headers=self._headers(api_key),
        ) as response_stream:
            if response_stream.status_code >= 400:
                body = (await response_stream.aread()).decode("utf-8", "replace")
                raise BackendError(response_stream.status_code, body)
            async for line in response_stream.aiter_lines():
                if not line.startswith("data: "):
                    continue
                data_json_str = line[len("data: ") :].strip()
                if not data_json_str or data_json_str == "[DONE]":
                    continue
                chunk_data = json.loads(data_json_str)
                if "error" in chunk_data:
                    raise BackendError(
                        int(chunk_data["error"].get("code") or 500), data_json_str
                    )
                text = extract_text(chunk_data)
                if text:
                    yield text

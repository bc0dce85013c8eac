"""Script generation over an OpenAI-compatible chat completions API."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any
from urllib import error, request

from pydantic import ValidationError

from reel_pipeline.collaborators.mocks import mock_script
from reel_pipeline.collaborators.models import ScriptResponse
from reel_pipeline.pipeline.errors import ScriptGenerationError
from reel_pipeline.pipeline.models import UserIdea

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a video scriptwriter. Return strictly valid JSON with keys "
    "script.sections[{id,text,duration_s}], "
    "scenes[{id,prompt,duration_s,on_screen_text,voiceover}] and "
    "metadata{title,description,tags}."
)


async def offline_script(idea: UserIdea) -> ScriptResponse:
    logger.warning("script provider=mock reason=missing_api_key topic=%r", idea.topic)
    return mock_script()


class ChatScriptGenerator:
    """Request a structured script; serve the mock script when the provider fails."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str = "deepseek-chat",
        base_url: str = "https://api.deepseek.com",
        timeout_s: float = 30.0,
        max_retries: int = 1,
        backoff_s: float = 0.5,
        fallback_to_mock: bool = True,
    ) -> None:
        if not api_key:
            raise RuntimeError("Script provider API key is missing")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.max_retries = max(0, max_retries)
        self.backoff_s = max(0.0, backoff_s)
        self.fallback_to_mock = fallback_to_mock

    async def __call__(self, idea: UserIdea) -> ScriptResponse:
        try:
            return await asyncio.to_thread(self.generate, idea)
        except Exception as exc:  # noqa: BLE001
            if not self.fallback_to_mock:
                raise
            logger.warning(
                "script provider=chat model=%s action=serve_mock reason=%s",
                self.model,
                exc,
            )
            return mock_script()

    def generate(self, idea: UserIdea) -> ScriptResponse:
        payload = {
            "model": self.model,
            "response_format": {"type": "json_object"},
            "max_tokens": 1200,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": (
                        f"Topic: {idea.topic}. Desired duration: {idea.duration_seconds}s. "
                        f"Brand voice: {idea.brand_voice}."
                    ),
                },
            ],
        }
        response_json = self._request_with_retry(payload)
        content = self._extract_content(response_json)
        try:
            return ScriptResponse.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ScriptGenerationError(f"Script JSON failed validation: {exc}") from exc

    def _request_with_retry(self, payload: dict[str, Any]) -> dict[str, Any]:
        last_error: Exception | None = None
        for attempt in range(self.max_retries + 1):
            try:
                return self._request(payload)
            except (TimeoutError, ValueError, error.URLError) as exc:
                last_error = exc
                logger.warning(
                    "script request failed attempt=%d/%d model=%s reason=%s",
                    attempt + 1,
                    self.max_retries + 1,
                    self.model,
                    exc,
                )
                if attempt < self.max_retries and self.backoff_s > 0:
                    time.sleep(self.backoff_s)
        if last_error is None:
            raise ScriptGenerationError("Script request failed with unknown error")
        raise last_error

    def _request(self, payload: dict[str, Any]) -> dict[str, Any]:
        req = request.Request(
            url=f"{self.base_url}/chat/completions",
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        try:
            with request.urlopen(req, timeout=self.timeout_s) as response:
                body = response.read().decode("utf-8")
        except error.HTTPError as exc:
            message = exc.read().decode("utf-8", errors="replace")
            raise ScriptGenerationError(
                f"Script request failed with status {exc.code}: {message[:400]}"
            ) from exc
        return json.loads(body)

    @staticmethod
    def _extract_content(response_json: dict[str, Any]) -> str:
        choices = response_json.get("choices", [])
        if not choices:
            raise ScriptGenerationError("Script response did not contain choices")
        content = choices[0].get("message", {}).get("content")
        if not isinstance(content, str) or not content.strip():
            raise ScriptGenerationError("Script response missing content")
        return content

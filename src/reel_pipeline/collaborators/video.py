"""Video generation: submit a render task, then poll it to completion."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol
from urllib import error, parse, request

from reel_pipeline.collaborators.mocks import mock_video
from reel_pipeline.collaborators.models import ScriptResponse, VideoArtifact
from reel_pipeline.collaborators.polling import (
    RetryPolicy,
    Sleep,
    TaskStatus,
    poll_until_complete,
)
from reel_pipeline.pipeline.errors import VideoGenerationError

logger = logging.getLogger(__name__)


class VideoTaskClient(Protocol):
    async def submit(self, prompt: str) -> str: ...

    async def fetch_status(self, task_id: str) -> TaskStatus: ...


def build_video_prompt(script: ScriptResponse) -> str:
    return " ".join(f"{scene.prompt} (duration {scene.duration_s:g}s)" for scene in script.scenes)


async def offline_video(script: ScriptResponse) -> VideoArtifact:
    logger.warning("video provider=mock reason=missing_api_key scenes=%d", len(script.scenes))
    return mock_video()


class PollingVideoGenerator:
    """Own the submit/poll/backoff loop; the pipeline just awaits the result."""

    def __init__(
        self,
        client: VideoTaskClient,
        *,
        policy: RetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.client = client
        self.policy = policy or RetryPolicy()
        self.sleep = sleep

    async def __call__(self, script: ScriptResponse) -> VideoArtifact:
        prompt = build_video_prompt(script)
        task_id = await self.client.submit(prompt)
        logger.info("video event=submitted task_id=%s", task_id)
        video_url = await poll_until_complete(
            task_id,
            self.client.fetch_status,
            policy=self.policy,
            sleep=self.sleep,
        )
        return VideoArtifact(provider="kie", task_id=task_id, video_url=video_url, prompt=prompt)


class HttpVideoTaskClient:
    """Task-based render API client (generate + record-detail endpoints)."""

    def __init__(self, *, api_key: str, base_url: str, timeout_s: float = 30.0) -> None:
        if not api_key:
            raise RuntimeError("Video provider API key is missing")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

    async def submit(self, prompt: str) -> str:
        body = {
            "prompt": prompt,
            "duration": 10,
            "quality": "720p",
            "aspectRatio": "16:9",
            "waterMark": "",
        }
        payload = await asyncio.to_thread(self._request, "POST", "/generate", body)
        task_id = _nested(payload, "data", "taskId") or payload.get("taskId")
        if not task_id:
            raise VideoGenerationError("Video provider response missing taskId")
        return str(task_id)

    async def fetch_status(self, task_id: str) -> TaskStatus:
        query = parse.urlencode({"taskId": task_id})
        payload = await asyncio.to_thread(self._request, "GET", f"/record-detail?{query}", None)
        state = _nested(payload, "data", "state") or payload.get("state") or "pending"
        video_url = _nested(payload, "data", "videoInfo", "videoUrl") or _nested(
            payload, "videoInfo", "videoUrl"
        )
        return TaskStatus(state=str(state), video_url=video_url)

    def _request(self, method: str, path: str, body: dict[str, Any] | None) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        data = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            data = json.dumps(body).encode("utf-8")
        req = request.Request(
            url=f"{self.base_url}{path}",
            data=data,
            method=method,
            headers=headers,
        )
        try:
            with request.urlopen(req, timeout=self.timeout_s) as response:
                raw = response.read().decode("utf-8")
        except error.HTTPError as exc:
            message = exc.read().decode("utf-8", errors="replace")
            raise VideoGenerationError(
                f"Video request failed: {exc.code} {message[:400]}"
            ) from exc
        except error.URLError as exc:
            raise VideoGenerationError(f"Video request failed: {exc.reason}") from exc

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise VideoGenerationError("Video provider returned non-JSON response") from exc
        if not isinstance(parsed, dict):
            raise VideoGenerationError("Video provider returned an unexpected payload")
        return parsed


def _nested(payload: dict[str, Any], *keys: str) -> Any:
    current: Any = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current

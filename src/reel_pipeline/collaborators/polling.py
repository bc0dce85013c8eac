"""Exponential-backoff polling for long-running provider tasks."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from reel_pipeline.pipeline.errors import VideoGenerationError, VideoGenerationTimeoutError

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 20
    base_delay_s: float = 2.0
    multiplier: float = 1.3

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_s < 0:
            raise ValueError("base_delay_s must be >= 0")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")

    def delay_for(self, attempt: int) -> float:
        """Delay after the zero-based ``attempt``."""
        return self.base_delay_s * self.multiplier**attempt

    def delays(self) -> list[float]:
        return [self.delay_for(attempt) for attempt in range(self.max_attempts)]


@dataclass(frozen=True)
class TaskStatus:
    state: str
    video_url: str | None = None


async def poll_until_complete(
    task_id: str,
    fetch_status: Callable[[str], Awaitable[TaskStatus]],
    *,
    policy: RetryPolicy | None = None,
    sleep: Sleep = asyncio.sleep,
) -> str:
    """Poll ``fetch_status`` until the task succeeds; return its video URL."""
    policy = policy or RetryPolicy()
    for attempt in range(policy.max_attempts):
        status = await fetch_status(task_id)
        if status.state == "success":
            if not status.video_url:
                raise VideoGenerationError("Video task succeeded without a video URL")
            return status.video_url
        if status.state == "fail":
            raise VideoGenerationError("Video generation failed")

        delay = policy.delay_for(attempt)
        logger.debug(
            "video poll task_id=%s state=%s attempt=%d delay_s=%.2f",
            task_id,
            status.state,
            attempt + 1,
            delay,
        )
        await sleep(delay)
    raise VideoGenerationTimeoutError(task_id, policy.max_attempts)

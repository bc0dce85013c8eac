"""Single-stage execution with status bookkeeping."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from reel_pipeline.pipeline.models import (
    ErrorStage,
    JobRecord,
    ReadyStage,
    RunningStage,
    StageName,
)
from reel_pipeline.storage.base import JobStore

T = TypeVar("T")
logger = logging.getLogger(__name__)


class StageRunner:
    """Run one stage function and record every transition in the store."""

    def __init__(self, store: JobStore) -> None:
        self.store = store

    async def run(
        self,
        job: JobRecord,
        stage: StageName,
        stage_fn: Callable[[], Awaitable[T]],
    ) -> T:
        job.stages.set(stage, RunningStage())
        self.store.update(job)
        logger.info("stage event=started job_id=%s stage=%s", job.id, stage)

        try:
            result = await stage_fn()
        except Exception as exc:
            message = error_message(exc)
            job.stages.set(stage, ErrorStage(error=message))
            self.store.update(job)
            logger.error(
                "stage event=failed job_id=%s stage=%s error=%s",
                job.id,
                stage,
                message,
            )
            raise

        job.stages.set(stage, ReadyStage())
        self.store.update(job)
        logger.info("stage event=ready job_id=%s stage=%s", job.id, stage)
        return result


def error_message(exc: BaseException) -> str:
    """Human-readable message for a failure, never empty."""
    message = str(exc).strip()
    return message or type(exc).__name__

"""Public job API: create, run, look up and manually publish jobs."""

from __future__ import annotations

import asyncio
import logging

from reel_pipeline.collaborators.models import Collaborators
from reel_pipeline.pipeline.errors import (
    JobNotFoundError,
    PublishAlreadyRunningError,
    UpstreamNotReadyError,
)
from reel_pipeline.pipeline.executor import JobExecutor
from reel_pipeline.pipeline.models import (
    UPSTREAM_STAGES,
    JobRecord,
    UserIdea,
    new_job_record,
)
from reel_pipeline.pipeline.runner import StageRunner, error_message
from reel_pipeline.storage.base import JobStore

logger = logging.getLogger(__name__)


class JobOrchestrator:
    """Entry point used by the HTTP layer and the CLI.

    Usage:
        orchestrator = JobOrchestrator(store=InMemoryJobStore(), collaborators=...)

        # Returns the pending record immediately; poll for progress.
        job = orchestrator.start_job(idea)

        # Or wait for the whole run (failures propagate).
        job = await orchestrator.run_job_sync(idea, auto_publish=True)
    """

    def __init__(
        self,
        *,
        store: JobStore,
        collaborators: Collaborators,
        default_auto_publish: bool = False,
    ) -> None:
        self.store = store
        self.default_auto_publish = default_auto_publish
        self.runner = StageRunner(store)
        self.executor = JobExecutor(
            store=store,
            collaborators=collaborators,
            runner=self.runner,
        )
        # Strong references keep detached tasks alive until they finish.
        self._in_flight: set[asyncio.Task[None]] = set()

    def _resolve_auto_publish(self, auto_publish: bool | None) -> bool:
        return self.default_auto_publish if auto_publish is None else auto_publish

    def _create_job(self, idea: UserIdea, auto_publish: bool | None) -> JobRecord:
        job = new_job_record(idea, auto_publish=self._resolve_auto_publish(auto_publish))
        self.store.save(job)
        logger.info("job event=created job_id=%s topic=%r", job.id, idea.topic)
        return job

    def start_job(self, idea: UserIdea, *, auto_publish: bool | None = None) -> JobRecord:
        """Create a job and execute it in the background.

        Must be called from inside a running event loop. Returns a snapshot of
        the ``pending`` record; progress and stage failures are only visible by
        polling the store.
        """
        job = self._create_job(idea, auto_publish)
        snapshot = job.model_copy(deep=True)
        task = asyncio.create_task(self._execute_detached(job), name=f"job-{job.id}")
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return snapshot

    async def _execute_detached(self, job: JobRecord) -> None:
        try:
            await self.executor.execute(job)
        except Exception as exc:  # noqa: BLE001
            # The failing stage already persisted its error state.
            self.store.update(job)
            logger.error(
                "job event=failed job_id=%s status=%s error=%s",
                job.id,
                job.status,
                error_message(exc),
            )

    async def run_job_sync(
        self,
        idea: UserIdea,
        *,
        auto_publish: bool | None = None,
    ) -> JobRecord:
        job = self._create_job(idea, auto_publish)
        await self.executor.execute(job)
        return job

    def get_job_by_id(self, job_id: str) -> JobRecord | None:
        return self.store.get(job_id)

    def list_all_jobs(self) -> list[JobRecord]:
        return self.store.list()

    async def trigger_publish(self, job_id: str) -> JobRecord:
        """Manually publish a job whose upstream stages are all ready."""
        job = self.store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)

        pending = [name for name in UPSTREAM_STAGES if not job.stages.get(name).ready]
        if pending:
            raise UpstreamNotReadyError(job_id, pending)

        publish_state = job.stages.publish
        if publish_state.status == "running":
            raise PublishAlreadyRunningError(job_id)
        if publish_state.ready:
            logger.info("publish event=noop job_id=%s reason=already_ready", job_id)
            return job

        logger.info("publish event=manual_trigger job_id=%s", job_id)
        await self.executor.publish(job)
        return job

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    async def drain(self) -> None:
        """Wait for every detached job started so far to finish."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

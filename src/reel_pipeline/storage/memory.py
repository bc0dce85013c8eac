"""In-memory job store; lives for the process lifetime."""

from __future__ import annotations

from datetime import UTC, datetime

from reel_pipeline.pipeline.models import JobRecord


class InMemoryJobStore:
    """Keyed map of job records.

    Records are held by reference: callers mutate a job in place and then call
    ``update`` so the stored copy and ``updated_at`` stay current. No locking is
    needed because every write happens between asyncio suspension points.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, JobRecord] = {}

    def save(self, job: JobRecord) -> None:
        self._jobs[job.id] = job

    def get(self, job_id: str) -> JobRecord | None:
        return self._jobs.get(job_id)

    def list(self) -> list[JobRecord]:
        # sorted() is stable, so equal timestamps keep insertion order.
        return sorted(
            self._jobs.values(),
            key=lambda job: job.created_at.isoformat(),
            reverse=True,
        )

    def update(self, job: JobRecord) -> JobRecord:
        job.updated_at = datetime.now(UTC)
        self._jobs[job.id] = job
        return job

    def clear(self) -> None:
        self._jobs.clear()

    def __len__(self) -> int:
        return len(self._jobs)

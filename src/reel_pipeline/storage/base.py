"""Storage interface for pipeline jobs."""

from __future__ import annotations

from typing import Protocol

from reel_pipeline.pipeline.models import JobRecord


class JobStore(Protocol):
    def save(self, job: JobRecord) -> None: ...

    def get(self, job_id: str) -> JobRecord | None: ...

    def list(self) -> list[JobRecord]: ...

    def update(self, job: JobRecord) -> JobRecord: ...

    def clear(self) -> None: ...

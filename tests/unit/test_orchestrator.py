from __future__ import annotations

import asyncio

import pytest

from reel_pipeline.pipeline.errors import (
    JobNotFoundError,
    PublishAlreadyRunningError,
    UpstreamNotReadyError,
)
from reel_pipeline.pipeline.models import (
    AWAITING_MANUAL_TRIGGER,
    ReadyStage,
    RunningStage,
    UserIdea,
    new_job_record,
)
from reel_pipeline.pipeline.orchestrator import JobOrchestrator
from reel_pipeline.storage.memory import InMemoryJobStore


def _orchestrator(collaborators, store=None, *, default_auto_publish: bool = False) -> JobOrchestrator:
    return JobOrchestrator(
        store=store if store is not None else InMemoryJobStore(),
        collaborators=collaborators.build(),
        default_auto_publish=default_auto_publish,
    )


def test_run_job_sync_with_auto_publish_completes(idea: UserIdea, fake_collaborators) -> None:
    orchestrator = _orchestrator(fake_collaborators)

    job = asyncio.run(orchestrator.run_job_sync(idea, auto_publish=True))

    assert job.status == "completed"
    assert job.stages.publish.ready is True
    assert job.artifacts.publish.status == "uploaded"
    assert fake_collaborators.calls == ["script", "video", "audio", "captions", "publish"]


def test_run_job_sync_without_auto_publish_waits_for_trigger(
    idea: UserIdea, fake_collaborators
) -> None:
    orchestrator = _orchestrator(fake_collaborators)

    job = asyncio.run(orchestrator.run_job_sync(idea, auto_publish=False))

    assert job.status == "awaiting_publish"
    for name in ("script", "video", "audio", "captions"):
        assert job.stages.get(name).ready is True
    assert job.stages.publish.model_dump(exclude_none=True) == {
        "status": "idle",
        "ready": False,
        "reason": AWAITING_MANUAL_TRIGGER,
    }
    assert job.artifacts.publish is None
    assert "publish" not in fake_collaborators.calls


def test_publish_stays_locked_until_upstream_ready(
    idea: UserIdea, fake_collaborators, recording_store
) -> None:
    orchestrator = _orchestrator(fake_collaborators, recording_store)

    asyncio.run(orchestrator.run_job_sync(idea, auto_publish=True))

    assert recording_store.snapshots
    for snapshot in recording_store.snapshots:
        if not snapshot.upstream_ready():
            assert snapshot.publish.status == "locked"


def test_video_failure_stops_later_stages(idea: UserIdea, make_collaborators) -> None:
    collaborators = make_collaborators(fail_stage="video")
    orchestrator = _orchestrator(collaborators)

    with pytest.raises(RuntimeError, match="video provider exploded"):
        asyncio.run(orchestrator.run_job_sync(idea, auto_publish=True))

    [job] = orchestrator.list_all_jobs()
    assert job.status == "error"
    assert job.stages.video.status == "error"
    assert job.stages.video.error == "video provider exploded"
    assert job.stages.audio.status == "idle"
    assert job.stages.captions.status == "idle"
    assert job.stages.publish.status == "locked"
    assert job.artifacts.script is not None
    assert job.artifacts.video is None
    assert collaborators.calls == ["script", "video"]


def test_start_job_returns_pending_and_runs_detached(idea: UserIdea, fake_collaborators) -> None:
    orchestrator = _orchestrator(fake_collaborators)

    async def scenario():
        created = orchestrator.start_job(idea)
        assert created.status == "pending"
        assert orchestrator.in_flight == 1
        await orchestrator.drain()
        return created

    created = asyncio.run(scenario())

    stored = orchestrator.get_job_by_id(created.id)
    assert stored.status == "awaiting_publish"
    assert orchestrator.in_flight == 0


def test_start_job_swallows_detached_failure(
    idea: UserIdea, make_collaborators, caplog: pytest.LogCaptureFixture
) -> None:
    orchestrator = _orchestrator(make_collaborators(fail_stage="captions"))

    async def scenario():
        created = orchestrator.start_job(idea, auto_publish=True)
        await orchestrator.drain()
        return created

    created = asyncio.run(scenario())

    stored = orchestrator.get_job_by_id(created.id)
    assert stored.status == "error"
    assert stored.stages.captions.error == "captions provider exploded"
    assert f"job event=failed job_id={created.id}" in caplog.text


def test_concurrent_jobs_interleave_independently(make_collaborators) -> None:
    collaborators = make_collaborators(yield_between=True)
    orchestrator = _orchestrator(collaborators)
    ideas = [UserIdea(topic=f"topic-{index}", duration_seconds=30, brand_voice="bold") for index in range(3)]

    async def scenario():
        for item in ideas:
            orchestrator.start_job(item, auto_publish=True)
        await orchestrator.drain()

    asyncio.run(scenario())

    jobs = orchestrator.list_all_jobs()
    assert len(jobs) == 3
    assert {job.status for job in jobs} == {"completed"}
    # Interleaving: the second job's script starts before the first job publishes.
    assert collaborators.calls.index("publish") > collaborators.calls.index("script", 1)


def test_auto_publish_falls_back_to_default_flag(idea: UserIdea, fake_collaborators) -> None:
    orchestrator = _orchestrator(fake_collaborators, default_auto_publish=True)

    defaulted = asyncio.run(orchestrator.run_job_sync(idea))
    explicit = asyncio.run(orchestrator.run_job_sync(idea, auto_publish=False))

    assert defaulted.options.auto_publish is True
    assert defaulted.status == "completed"
    assert explicit.options.auto_publish is False
    assert explicit.status == "awaiting_publish"


def test_trigger_publish_unknown_job(fake_collaborators) -> None:
    orchestrator = _orchestrator(fake_collaborators)
    with pytest.raises(JobNotFoundError, match="Job not found"):
        asyncio.run(orchestrator.trigger_publish("missing"))


def test_trigger_publish_requires_upstream_ready(idea: UserIdea, fake_collaborators) -> None:
    store = InMemoryJobStore()
    orchestrator = _orchestrator(fake_collaborators, store)
    job = new_job_record(idea, auto_publish=False)
    for name in ("script", "video", "audio"):
        job.stages.set(name, ReadyStage())
    store.save(job)
    before = job.model_dump()

    with pytest.raises(UpstreamNotReadyError, match="Upstream stages are not ready") as exc_info:
        asyncio.run(orchestrator.trigger_publish(job.id))

    assert exc_info.value.pending == ["captions"]
    assert job.model_dump() == before
    assert fake_collaborators.calls == []


def test_trigger_publish_rejects_running_publish(idea: UserIdea, fake_collaborators) -> None:
    store = InMemoryJobStore()
    orchestrator = _orchestrator(fake_collaborators, store)
    job = new_job_record(idea, auto_publish=True)
    for name in ("script", "video", "audio", "captions"):
        job.stages.set(name, ReadyStage())
    job.stages.publish = RunningStage()
    store.save(job)

    with pytest.raises(PublishAlreadyRunningError, match="Publish already running"):
        asyncio.run(orchestrator.trigger_publish(job.id))


def test_trigger_publish_is_idempotent(idea: UserIdea, fake_collaborators) -> None:
    orchestrator = _orchestrator(fake_collaborators)

    async def scenario():
        job = await orchestrator.run_job_sync(idea, auto_publish=False)
        first = await orchestrator.trigger_publish(job.id)
        first_updated_at = first.updated_at
        second = await orchestrator.trigger_publish(job.id)
        return first, first_updated_at, second

    first, first_updated_at, second = asyncio.run(scenario())

    assert first.status == "completed"
    assert first.artifacts.publish.video_id == "vid-T"
    assert second is first
    assert second.updated_at == first_updated_at
    assert fake_collaborators.calls.count("publish") == 1


def test_failed_manual_publish_marks_job_error(idea: UserIdea, make_collaborators) -> None:
    collaborators = make_collaborators(fail_stage="publish")
    orchestrator = _orchestrator(collaborators)

    async def scenario():
        job = await orchestrator.run_job_sync(idea, auto_publish=False)
        with pytest.raises(RuntimeError, match="publish provider exploded"):
            await orchestrator.trigger_publish(job.id)
        return job

    job = asyncio.run(scenario())

    assert job.status == "error"
    assert job.stages.publish.error == "publish provider exploded"
    assert job.artifacts.publish is None

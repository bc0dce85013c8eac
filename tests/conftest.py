from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from reel_pipeline.api.main import create_app
from reel_pipeline.collaborators.mocks import mock_audio, mock_captions, mock_script, mock_video
from reel_pipeline.collaborators.models import (
    AudioArtifact,
    CaptionArtifact,
    Collaborators,
    PublishArtifact,
    ScriptResponse,
    VideoArtifact,
)
from reel_pipeline.config.settings import Settings
from reel_pipeline.faces.store import JsonFaceStore
from reel_pipeline.pipeline.models import JobRecord, StageMap, UserIdea
from reel_pipeline.storage.memory import InMemoryJobStore


class FakeCollaborators:
    """Instant collaborators that record calls and can fail one stage."""

    def __init__(self, *, fail_stage: str | None = None, yield_between: bool = False) -> None:
        self.fail_stage = fail_stage
        self.yield_between = yield_between
        self.calls: list[str] = []

    async def _enter(self, stage: str) -> None:
        self.calls.append(stage)
        if self.yield_between:
            await asyncio.sleep(0)
        if stage == self.fail_stage:
            raise RuntimeError(f"{stage} provider exploded")

    async def generate_script(self, idea: UserIdea) -> ScriptResponse:
        await self._enter("script")
        return mock_script()

    async def generate_video(self, script: ScriptResponse) -> VideoArtifact:
        await self._enter("video")
        return mock_video()

    async def build_audio(
        self,
        idea: UserIdea,
        script: ScriptResponse,
        video: VideoArtifact,
    ) -> AudioArtifact:
        await self._enter("audio")
        return mock_audio("fake audio")

    async def transcribe_captions(self, audio: AudioArtifact) -> CaptionArtifact:
        await self._enter("captions")
        return mock_captions()

    async def publish(
        self,
        idea: UserIdea,
        script: ScriptResponse,
        video: VideoArtifact,
        audio: AudioArtifact,
        captions: CaptionArtifact,
    ) -> PublishArtifact:
        await self._enter("publish")
        return PublishArtifact(status="uploaded", video_id=f"vid-{idea.topic}")

    def build(self) -> Collaborators:
        return Collaborators(
            generate_script=self.generate_script,
            generate_video=self.generate_video,
            build_audio=self.build_audio,
            transcribe_captions=self.transcribe_captions,
            publish=self.publish,
        )


class RecordingJobStore(InMemoryJobStore):
    """Store double that snapshots the stage map on every update."""

    def __init__(self) -> None:
        super().__init__()
        self.snapshots: list[StageMap] = []

    def update(self, job: JobRecord) -> JobRecord:
        self.snapshots.append(job.stages.model_copy(deep=True))
        return super().update(job)


@pytest.fixture
def recording_store() -> RecordingJobStore:
    return RecordingJobStore()


@pytest.fixture
def make_collaborators() -> type[FakeCollaborators]:
    return FakeCollaborators


@pytest.fixture
def idea() -> UserIdea:
    return UserIdea(topic="T", duration_seconds=60, brand_voice="calm")


@pytest.fixture
def fake_collaborators() -> FakeCollaborators:
    return FakeCollaborators()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        auto_publish=False,
        strict_env=False,
        face_data_path=tmp_path / "faces.json",
        upload_dir=tmp_path / "uploads",
    )


@pytest.fixture
def client(fake_collaborators: FakeCollaborators, test_settings: Settings) -> TestClient:
    app = create_app(
        store=InMemoryJobStore(),
        collaborators=fake_collaborators.build(),
        face_store=JsonFaceStore(test_settings.face_data_path),
        settings_override=test_settings,
    )
    with TestClient(app) as test_client:
        yield test_client

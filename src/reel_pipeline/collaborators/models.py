"""Artifact payloads and the collaborator contract consumed by the executor."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, Field

from reel_pipeline.pipeline.models import CamelModel, UserIdea


class ScriptSection(BaseModel):
    id: str
    text: str
    duration_s: float


class Scene(BaseModel):
    id: str
    prompt: str
    duration_s: float
    on_screen_text: str | None = None
    voiceover: str | None = None


class ScriptBody(BaseModel):
    sections: list[ScriptSection]


class ScriptMetadata(BaseModel):
    title: str
    description: str
    tags: list[str] = Field(default_factory=list)


class ScriptResponse(BaseModel):
    """Structured script returned by the script generator."""

    script: ScriptBody
    scenes: list[Scene]
    metadata: ScriptMetadata


class VideoArtifact(CamelModel):
    provider: Literal["kie", "mock"]
    task_id: str | None = None
    video_url: str
    prompt: str


class AudioArtifact(CamelModel):
    voiceover_url: str
    cleaned_url: str | None = None
    mix_url: str
    notes: list[str] = Field(default_factory=list)


class CaptionWord(BaseModel):
    text: str
    start: float
    end: float


class CaptionArtifact(CamelModel):
    transcript: str
    srt: str
    words: list[CaptionWord] = Field(default_factory=list)


class PublishArtifact(CamelModel):
    # "skipped" is a degraded success, not a failure.
    status: Literal["uploaded", "skipped"]
    video_id: str | None = None
    reason: str | None = None


ScriptGenerator = Callable[[UserIdea], Awaitable[ScriptResponse]]
VideoGenerator = Callable[[ScriptResponse], Awaitable[VideoArtifact]]
AudioBuilder = Callable[[UserIdea, ScriptResponse, VideoArtifact], Awaitable[AudioArtifact]]
CaptionTranscriber = Callable[[AudioArtifact], Awaitable[CaptionArtifact]]
Publisher = Callable[
    [UserIdea, ScriptResponse, VideoArtifact, AudioArtifact, CaptionArtifact],
    Awaitable[PublishArtifact],
]


@dataclass(frozen=True)
class Collaborators:
    """External services the executor drives, one per stage."""

    generate_script: ScriptGenerator
    generate_video: VideoGenerator
    build_audio: AudioBuilder
    transcribe_captions: CaptionTranscriber
    publish: Publisher

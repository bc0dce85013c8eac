"""Job, stage and idea models shared by the store, runner, executor and API."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

StageName = Literal["script", "video", "audio", "captions", "publish"]
JobStatus = Literal["pending", "running", "awaiting_publish", "completed", "error"]

STAGE_NAMES: tuple[StageName, ...] = ("script", "video", "audio", "captions", "publish")
UPSTREAM_STAGES: tuple[StageName, ...] = ("script", "video", "audio", "captions")

PUBLISH_LOCKED_REASON = "waiting for upstream readiness"
AWAITING_MANUAL_TRIGGER = "awaiting manual trigger"


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire and snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserIdea(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    topic: str
    duration_seconds: int = Field(gt=0)
    brand_voice: str


class _StageBase(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class IdleStage(_StageBase):
    status: Literal["idle"] = "idle"
    ready: Literal[False] = False
    reason: str | None = None


class RunningStage(_StageBase):
    status: Literal["running"] = "running"
    ready: Literal[False] = False
    detail: str | None = None


class ReadyStage(_StageBase):
    status: Literal["ready"] = "ready"
    ready: Literal[True] = True
    output_ref: str | None = None


class LockedStage(_StageBase):
    status: Literal["locked"] = "locked"
    ready: Literal[False] = False
    reason: str = Field(min_length=1)


class ErrorStage(_StageBase):
    status: Literal["error"] = "error"
    ready: Literal[False] = False
    error: str = Field(min_length=1)


StageState = Annotated[
    Union[IdleStage, RunningStage, ReadyStage, LockedStage, ErrorStage],
    Field(discriminator="status"),
]


class StageMap(CamelModel):
    """Fixed five-stage map; keys can be replaced but never added or removed."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        validate_assignment=True,
    )

    script: StageState = Field(default_factory=IdleStage)
    video: StageState = Field(default_factory=IdleStage)
    audio: StageState = Field(default_factory=IdleStage)
    captions: StageState = Field(default_factory=IdleStage)
    publish: StageState = Field(
        default_factory=lambda: LockedStage(reason=PUBLISH_LOCKED_REASON)
    )

    def get(self, stage: StageName) -> StageState:
        if stage not in STAGE_NAMES:
            raise KeyError(f"Unknown stage: {stage}")
        return getattr(self, stage)

    def set(self, stage: StageName, state: StageState) -> None:
        if stage not in STAGE_NAMES:
            raise KeyError(f"Unknown stage: {stage}")
        setattr(self, stage, state)

    def items(self) -> list[tuple[StageName, StageState]]:
        return [(name, getattr(self, name)) for name in STAGE_NAMES]

    def upstream_ready(self) -> bool:
        return all(self.get(name).ready for name in UPSTREAM_STAGES)


class JobArtifacts(CamelModel):
    """Opaque per-stage payloads; a key is filled only once its stage is ready."""

    script: Any | None = None
    video: Any | None = None
    audio: Any | None = None
    captions: Any | None = None
    publish: Any | None = None


class JobOptions(CamelModel):
    auto_publish: bool = False


def derive_job_status(stages: StageMap) -> JobStatus:
    """Collapse the stage map into the coarse job status."""
    states = [state for _, state in stages.items()]
    if any(state.status == "error" for state in states):
        return "error"
    if all(state.ready for state in states):
        return "completed"
    if stages.upstream_ready() and stages.publish.status in ("idle", "locked"):
        return "awaiting_publish"
    if any(state.status == "running" or state.ready for state in states):
        return "running"
    return "pending"


class JobRecord(CamelModel):
    """Aggregate root for one idea-to-video run."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    id: str = Field(frozen=True)
    idea: UserIdea
    stages: StageMap = Field(default_factory=StageMap)
    artifacts: JobArtifacts = Field(default_factory=JobArtifacts)
    options: JobOptions = Field(default_factory=JobOptions)
    created_at: datetime = Field(frozen=True)
    updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> JobStatus:
        return derive_job_status(self.stages)


def new_job_record(
    idea: UserIdea,
    *,
    auto_publish: bool,
    now: datetime | None = None,
) -> JobRecord:
    timestamp = now or datetime.now(UTC)
    return JobRecord(
        id=str(uuid4()),
        idea=idea,
        stages=StageMap(),
        artifacts=JobArtifacts(),
        options=JobOptions(auto_publish=auto_publish),
        created_at=timestamp,
        updated_at=timestamp,
    )

"""Fixed five-stage job execution."""

from __future__ import annotations

import logging

from reel_pipeline.collaborators.models import (
    AudioArtifact,
    CaptionArtifact,
    Collaborators,
    PublishArtifact,
    ScriptResponse,
    VideoArtifact,
)
from reel_pipeline.pipeline.models import (
    AWAITING_MANUAL_TRIGGER,
    IdleStage,
    JobRecord,
    RunningStage,
)
from reel_pipeline.pipeline.runner import StageRunner
from reel_pipeline.storage.base import JobStore

logger = logging.getLogger(__name__)


class JobExecutor:
    """Drive script -> video -> audio -> captions -> publish for one job.

    Stages run strictly in order. Any stage failure propagates out of
    ``execute`` after the stage runner has recorded it, so later stages never
    start.
    """

    def __init__(
        self,
        *,
        store: JobStore,
        collaborators: Collaborators,
        runner: StageRunner | None = None,
    ) -> None:
        self.store = store
        self.collaborators = collaborators
        self.runner = runner or StageRunner(store)

    async def execute(self, job: JobRecord) -> JobRecord:
        logger.info(
            "job event=started job_id=%s auto_publish=%s",
            job.id,
            job.options.auto_publish,
        )
        self.store.update(job)
        idea = job.idea

        script: ScriptResponse = await self.runner.run(
            job, "script", lambda: self.collaborators.generate_script(idea)
        )
        job.artifacts.script = script
        self.store.update(job)

        video: VideoArtifact = await self.runner.run(
            job, "video", lambda: self.collaborators.generate_video(script)
        )
        job.artifacts.video = video
        self.store.update(job)

        audio: AudioArtifact = await self.runner.run(
            job, "audio", lambda: self.collaborators.build_audio(idea, script, video)
        )
        job.artifacts.audio = audio
        self.store.update(job)

        captions: CaptionArtifact = await self.runner.run(
            job, "captions", lambda: self.collaborators.transcribe_captions(audio)
        )
        job.artifacts.captions = captions
        self.store.update(job)

        if job.stages.upstream_ready():
            if job.options.auto_publish:
                job.stages.publish = RunningStage()
            else:
                job.stages.publish = IdleStage(reason=AWAITING_MANUAL_TRIGGER)
            self.store.update(job)

        if job.options.auto_publish:
            await self.publish(job)
        else:
            logger.info("job event=awaiting_publish job_id=%s", job.id)
        return job

    async def publish(self, job: JobRecord) -> PublishArtifact:
        """Run the publish stage from the artifacts already stored on the job."""
        artifacts = job.artifacts
        result: PublishArtifact = await self.runner.run(
            job,
            "publish",
            lambda: self.collaborators.publish(
                job.idea,
                artifacts.script,
                artifacts.video,
                artifacts.audio,
                artifacts.captions,
            ),
        )
        job.artifacts.publish = result
        self.store.update(job)
        logger.info(
            "job event=completed job_id=%s publish_status=%s",
            job.id,
            getattr(result, "status", None),
        )
        return result

"""Publish collaborator; reports a skipped upload instead of failing."""

from __future__ import annotations

import logging

from reel_pipeline.collaborators.models import (
    AudioArtifact,
    CaptionArtifact,
    PublishArtifact,
    ScriptResponse,
    VideoArtifact,
)
from reel_pipeline.pipeline.models import UserIdea

logger = logging.getLogger(__name__)


class YouTubePublisher:
    def __init__(self, *, client_id: str = "", client_secret: str = "", refresh_token: str = "") -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token)

    async def __call__(
        self,
        idea: UserIdea,
        script: ScriptResponse,
        video: VideoArtifact,
        audio: AudioArtifact,
        captions: CaptionArtifact,
    ) -> PublishArtifact:
        if not self.configured:
            logger.warning("publish provider=youtube action=skip reason=missing_credentials")
            return PublishArtifact(status="skipped", reason="Missing OAuth credentials")

        # TODO: replace with the YouTube Data API resumable upload flow.
        logger.info(
            "publish provider=youtube event=stub topic=%r video_url=%s",
            idea.topic,
            video.video_url,
        )
        return PublishArtifact(status="skipped", reason="Publish integration not yet implemented")

"""Voice track and caption collaborators.

Both run offline: audio synthesis and speech-to-text are placeholders that
return deterministic artifacts, so the pipeline completes without a provider.
"""

from __future__ import annotations

import logging

from reel_pipeline.collaborators.mocks import mock_audio, mock_captions
from reel_pipeline.collaborators.models import (
    AudioArtifact,
    CaptionArtifact,
    ScriptResponse,
    VideoArtifact,
)
from reel_pipeline.pipeline.models import UserIdea

logger = logging.getLogger(__name__)


def voiceover_text(script: ScriptResponse) -> str:
    return " ".join(scene.voiceover for scene in script.scenes if scene.voiceover)


class VoiceTrackBuilder:
    def __init__(self, *, api_key: str = "") -> None:
        self.api_key = api_key

    async def __call__(
        self,
        idea: UserIdea,
        script: ScriptResponse,
        video: VideoArtifact,
    ) -> AudioArtifact:
        text = voiceover_text(script)
        if not self.api_key:
            logger.warning("audio provider=mock reason=missing_api_key topic=%r", idea.topic)
            return mock_audio("Mock audio artifact because ELEVENLABS_API_KEY is missing.")

        logger.info(
            "audio event=synthesis_stub chars=%d video_url=%s brand_voice=%r",
            len(text),
            video.video_url,
            idea.brand_voice,
        )
        return mock_audio("Voice synthesis stub: run isolator + ffmpeg mux for the final mix.")


class CaptionTranscriber:
    def __init__(self, *, api_key: str = "") -> None:
        self.api_key = api_key

    async def __call__(self, audio: AudioArtifact) -> CaptionArtifact:
        if not self.api_key:
            logger.warning("captions provider=mock reason=missing_api_key")
        else:
            logger.info("captions event=transcription_stub audio_url=%s", audio.voiceover_url)
        return mock_captions()

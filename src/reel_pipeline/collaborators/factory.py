"""Pick collaborator implementations from configured credentials."""

from __future__ import annotations

from reel_pipeline.collaborators.media import CaptionTranscriber, VoiceTrackBuilder
from reel_pipeline.collaborators.models import Collaborators
from reel_pipeline.collaborators.polling import RetryPolicy
from reel_pipeline.collaborators.publish import YouTubePublisher
from reel_pipeline.collaborators.script import ChatScriptGenerator, offline_script
from reel_pipeline.collaborators.video import (
    HttpVideoTaskClient,
    PollingVideoGenerator,
    offline_video,
)
from reel_pipeline.config.settings import Settings


def build_collaborators(settings: Settings) -> Collaborators:
    script_key = settings.resolved_script_api_key()
    generate_script = (
        ChatScriptGenerator(
            api_key=script_key,
            model=settings.script_model,
            base_url=settings.script_base_url,
            timeout_s=settings.script_timeout_s,
            max_retries=settings.script_max_retries,
            backoff_s=settings.script_backoff_s,
        )
        if script_key
        else offline_script
    )

    video_key = settings.resolved_video_api_key()
    generate_video = (
        PollingVideoGenerator(
            HttpVideoTaskClient(
                api_key=video_key,
                base_url=settings.video_base_url,
                timeout_s=settings.video_timeout_s,
            ),
            policy=RetryPolicy(
                max_attempts=settings.video_poll_max_attempts,
                base_delay_s=settings.video_poll_base_delay_s,
                multiplier=settings.video_poll_multiplier,
            ),
        )
        if video_key
        else offline_video
    )

    voice_key = settings.resolved_voice_api_key()
    client_id, client_secret, refresh_token = settings.resolved_youtube_credentials()
    return Collaborators(
        generate_script=generate_script,
        generate_video=generate_video,
        build_audio=VoiceTrackBuilder(api_key=voice_key),
        transcribe_captions=CaptionTranscriber(api_key=voice_key),
        publish=YouTubePublisher(
            client_id=client_id,
            client_secret=client_secret,
            refresh_token=refresh_token,
        ),
    )

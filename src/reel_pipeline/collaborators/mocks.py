"""Offline artifacts served when a provider is not configured."""

from __future__ import annotations

from reel_pipeline.collaborators.models import (
    AudioArtifact,
    CaptionArtifact,
    CaptionWord,
    Scene,
    ScriptBody,
    ScriptMetadata,
    ScriptResponse,
    ScriptSection,
    VideoArtifact,
)


def mock_script() -> ScriptResponse:
    return ScriptResponse(
        script=ScriptBody(
            sections=[
                ScriptSection(id="hook", text="Hook line for the topic", duration_s=8),
                ScriptSection(id="body", text="Body content describing the story", duration_s=45),
                ScriptSection(id="cta", text="Call to action wrap-up", duration_s=7),
            ]
        ),
        scenes=[
            Scene(
                id="s1",
                prompt="Close-up cinematic shot of latte art in a calm cafe, warm light",
                duration_s=5,
                on_screen_text="Brand is a feeling",
                voiceover="Brand is the feeling customers remember.",
            )
        ],
        metadata=ScriptMetadata(
            title="How to Brand a Small Cafe in 60 Seconds",
            description="A calm walkthrough for crafting a memorable cafe identity.",
            tags=["branding", "cafe", "identity"],
        ),
    )


def mock_video() -> VideoArtifact:
    return VideoArtifact(
        provider="mock",
        video_url="https://example.com/mock-video.mp4",
        prompt="Mock cinematic cafe shot sequence",
    )


def mock_audio(note: str) -> AudioArtifact:
    return AudioArtifact(
        voiceover_url="https://example.com/mock-voiceover.mp3",
        cleaned_url="https://example.com/mock-cleaned.mp3",
        mix_url="https://example.com/mock-mix.mp4",
        notes=[note],
    )


def mock_captions() -> CaptionArtifact:
    return CaptionArtifact(
        transcript="Brand is the feeling customers remember. Craft every touchpoint with care.",
        srt=(
            "1\n00:00:00,000 --> 00:00:04,000\nBrand is the feeling customers remember.\n\n"
            "2\n00:00:04,000 --> 00:00:08,000\nCraft every touchpoint with care.\n"
        ),
        words=[
            CaptionWord(text="Brand", start=0, end=0.5),
            CaptionWord(text="is", start=0.5, end=0.7),
        ],
    )

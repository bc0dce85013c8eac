from __future__ import annotations

import asyncio

import pytest

from reel_pipeline.collaborators.mocks import mock_script
from reel_pipeline.collaborators.polling import RetryPolicy, TaskStatus, poll_until_complete
from reel_pipeline.collaborators.video import PollingVideoGenerator, build_video_prompt
from reel_pipeline.pipeline.errors import VideoGenerationError, VideoGenerationTimeoutError


class FakeSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ScriptedTaskClient:
    """Video task client that replays a fixed sequence of states."""

    def __init__(self, states: list[TaskStatus]) -> None:
        self.states = list(states)
        self.prompts: list[str] = []
        self.polls = 0

    async def submit(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return "task-1"

    async def fetch_status(self, task_id: str) -> TaskStatus:
        assert task_id == "task-1"
        self.polls += 1
        if len(self.states) > 1:
            return self.states.pop(0)
        return self.states[0]


def test_default_policy_matches_provider_backoff() -> None:
    policy = RetryPolicy()

    assert policy.max_attempts == 20
    assert policy.delay_for(0) == pytest.approx(2.0)
    assert policy.delay_for(1) == pytest.approx(2.6)
    assert policy.delay_for(2) == pytest.approx(3.38)
    assert len(policy.delays()) == 20


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_attempts": 0},
        {"base_delay_s": -1.0},
        {"multiplier": 0.5},
    ],
)
def test_policy_rejects_invalid_values(kwargs) -> None:
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)


def test_poll_returns_url_after_pending_states() -> None:
    client = ScriptedTaskClient(
        [
            TaskStatus(state="wait"),
            TaskStatus(state="generating"),
            TaskStatus(state="success", video_url="https://cdn.example/v.mp4"),
        ]
    )
    sleep = FakeSleep()

    url = asyncio.run(
        poll_until_complete(
            "task-1",
            client.fetch_status,
            policy=RetryPolicy(max_attempts=5, base_delay_s=1.0, multiplier=2.0),
            sleep=sleep,
        )
    )

    assert url == "https://cdn.example/v.mp4"
    assert sleep.delays == [1.0, 2.0]
    assert client.polls == 3


def test_poll_raises_on_failed_task() -> None:
    client = ScriptedTaskClient([TaskStatus(state="fail")])

    with pytest.raises(VideoGenerationError, match="Video generation failed"):
        asyncio.run(poll_until_complete("task-1", client.fetch_status, sleep=FakeSleep()))


def test_poll_rejects_success_without_url() -> None:
    client = ScriptedTaskClient([TaskStatus(state="success")])

    with pytest.raises(VideoGenerationError, match="without a video URL"):
        asyncio.run(poll_until_complete("task-1", client.fetch_status, sleep=FakeSleep()))


def test_poll_times_out_after_max_attempts() -> None:
    client = ScriptedTaskClient([TaskStatus(state="queueing")])
    sleep = FakeSleep()
    policy = RetryPolicy(max_attempts=4, base_delay_s=2.0, multiplier=1.3)

    with pytest.raises(VideoGenerationTimeoutError, match="timed out after 4 attempts") as exc_info:
        asyncio.run(poll_until_complete("task-1", client.fetch_status, policy=policy, sleep=sleep))

    assert exc_info.value.task_id == "task-1"
    assert client.polls == 4
    assert sleep.delays == pytest.approx(policy.delays())


def test_polling_video_generator_builds_artifact_from_task() -> None:
    client = ScriptedTaskClient(
        [
            TaskStatus(state="generating"),
            TaskStatus(state="success", video_url="https://cdn.example/final.mp4"),
        ]
    )
    sleep = FakeSleep()
    generator = PollingVideoGenerator(client, policy=RetryPolicy(max_attempts=3), sleep=sleep)
    script = mock_script()

    artifact = asyncio.run(generator(script))

    assert artifact.provider == "kie"
    assert artifact.task_id == "task-1"
    assert artifact.video_url == "https://cdn.example/final.mp4"
    assert artifact.prompt == build_video_prompt(script)
    assert client.prompts == [artifact.prompt]
    assert sleep.delays == [2.0]


def test_build_video_prompt_joins_scenes() -> None:
    prompt = build_video_prompt(mock_script())
    assert prompt.startswith("Close-up cinematic shot of latte art")
    assert prompt.endswith("(duration 5s)")

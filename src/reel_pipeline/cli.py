from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from reel_pipeline.collaborators.factory import build_collaborators
from reel_pipeline.config.settings import get_settings
from reel_pipeline.logs import configure_logging
from reel_pipeline.pipeline.models import UserIdea
from reel_pipeline.pipeline.orchestrator import JobOrchestrator
from reel_pipeline.storage.memory import InMemoryJobStore

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "How to brand a small cafe"
DEFAULT_BRAND_VOICE = "calm, confident, encouraging"


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Idea-to-video pipeline.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one job to completion and print it.")
    run_parser.add_argument("topic", nargs="?", default=DEFAULT_TOPIC)
    run_parser.add_argument("duration", nargs="?", type=int, default=60, help="Seconds.")
    run_parser.add_argument("--brand-voice", default=DEFAULT_BRAND_VOICE)
    run_parser.add_argument(
        "--auto-publish",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Override the AUTO_PUBLISH default.",
    )

    serve_parser = subparsers.add_parser("serve", help="Serve the HTTP API.")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=None)
    return parser.parse_args(argv)


async def _run_job(args: argparse.Namespace) -> int:
    settings = get_settings()
    orchestrator = JobOrchestrator(
        store=InMemoryJobStore(),
        collaborators=build_collaborators(settings),
        default_auto_publish=settings.resolved_auto_publish(),
    )
    idea = UserIdea(
        topic=args.topic,
        duration_seconds=args.duration if args.duration > 0 else 60,
        brand_voice=args.brand_voice,
    )
    try:
        job = await orchestrator.run_job_sync(idea, auto_publish=args.auto_publish)
    except Exception:  # noqa: BLE001
        logger.exception("cli event=job_failed topic=%r", idea.topic)
        for job in orchestrator.list_all_jobs():
            print(job.model_dump_json(by_alias=True, exclude_none=True, indent=2))
        return 1

    print("\nJob summary:")
    print(json.dumps(job.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2))
    return 0


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    settings = get_settings()
    configure_logging(settings.resolved_log_level())
    settings.assert_env()

    if args.command == "serve":
        import uvicorn

        uvicorn.run(
            "reel_pipeline.api.main:app",
            host=args.host,
            port=args.port or settings.resolved_port(),
        )
        return

    sys.exit(asyncio.run(_run_job(args)))


if __name__ == "__main__":
    main()

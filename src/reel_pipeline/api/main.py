"""FastAPI app entrypoint for reel-pipeline."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field, ValidationInfo, field_validator
from starlette.exceptions import HTTPException as StarletteHTTPException

from reel_pipeline.api.ui import render_homepage
from reel_pipeline.collaborators.factory import build_collaborators
from reel_pipeline.collaborators.models import Collaborators
from reel_pipeline.config.settings import Settings, get_settings
from reel_pipeline.faces.routes import UPLOAD_URL_PREFIX
from reel_pipeline.faces.routes import router as faces_router
from reel_pipeline.faces.store import JsonFaceStore
from reel_pipeline.pipeline.errors import PublishPreconditionError
from reel_pipeline.pipeline.models import CamelModel, JobRecord, UserIdea
from reel_pipeline.pipeline.orchestrator import JobOrchestrator
from reel_pipeline.pipeline.runner import error_message
from reel_pipeline.storage.base import JobStore
from reel_pipeline.storage.memory import InMemoryJobStore

logger = logging.getLogger(__name__)


class CreateJobRequest(CamelModel):
    topic: str = "New idea"
    duration_seconds: int = Field(default=60, gt=0)
    brand_voice: str = "calm, confident, encouraging"
    auto_publish: bool | None = None

    @field_validator("topic", "duration_seconds", "brand_voice", mode="before")
    @classmethod
    def null_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    def to_idea(self) -> UserIdea:
        return UserIdea(
            topic=self.topic,
            duration_seconds=self.duration_seconds,
            brand_voice=self.brand_voice,
        )


class JobListResponse(BaseModel):
    jobs: list[JobRecord]


def create_app(
    *,
    store: JobStore | None = None,
    collaborators: Collaborators | None = None,
    face_store: JsonFaceStore | None = None,
    settings_override: Settings | None = None,
) -> FastAPI:
    settings = settings_override or get_settings()
    settings.assert_env()

    orchestrator = JobOrchestrator(
        store=store if store is not None else InMemoryJobStore(),
        collaborators=(
            collaborators if collaborators is not None else build_collaborators(settings)
        ),
        default_auto_publish=settings.resolved_auto_publish(),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        missing = settings.missing_credentials()
        if missing:
            logger.warning("startup event=mock_providers missing=%s", ",".join(missing))
        logger.info("startup event=ready service=%s", settings.app_name)
        yield
        if orchestrator.in_flight:
            logger.warning("shutdown event=abandon_jobs in_flight=%d", orchestrator.in_flight)

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.orchestrator = orchestrator
    app.state.face_store = (
        face_store if face_store is not None else JsonFaceStore(settings.face_data_path)
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Clients always get {"error": message}, never a raw failure.
    @app.exception_handler(StarletteHTTPException)
    async def http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(status_code=422, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("request event=failed path=%s error=%s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.include_router(faces_router)
    app.mount(
        UPLOAD_URL_PREFIX,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    @app.get("/", response_class=HTMLResponse)
    def home() -> str:
        return render_homepage(app_name=settings.app_name)

    @app.get("/api/health")
    def health() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/jobs", response_model=JobListResponse, response_model_exclude_none=True)
    def list_jobs() -> JobListResponse:
        return JobListResponse(jobs=orchestrator.list_all_jobs())

    @app.get("/api/jobs/{job_id}", response_model=JobRecord, response_model_exclude_none=True)
    def get_job(job_id: str) -> JobRecord:
        job = orchestrator.get_job_by_id(job_id)
        if job is None:
            raise HTTPException(status_code=404, detail="Job not found")
        return job

    @app.post(
        "/api/jobs",
        response_model=JobRecord,
        response_model_exclude_none=True,
        status_code=201,
    )
    async def create_job(payload: CreateJobRequest | None = None) -> JobRecord:
        payload = payload if payload is not None else CreateJobRequest()
        return orchestrator.start_job(payload.to_idea(), auto_publish=payload.auto_publish)

    @app.post(
        "/api/jobs/{job_id}/publish",
        response_model=JobRecord,
        response_model_exclude_none=True,
    )
    async def publish_job(job_id: str) -> JobRecord:
        try:
            return await orchestrator.trigger_publish(job_id)
        except PublishPreconditionError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except Exception as exc:  # noqa: BLE001
            # Stage failures are already recorded on the job.
            logger.error("publish event=failed job_id=%s error=%s", job_id, exc)
            raise HTTPException(status_code=400, detail=error_message(exc)) from exc

    return app


app = create_app()

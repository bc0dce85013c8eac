"""Face registry records and request bodies."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from reel_pipeline.pipeline.models import CamelModel


class FaceRecord(CamelModel):
    id: str
    name: str = Field(min_length=1)
    image_url: str
    # 128-float embedding produced by the browser-side detector.
    descriptor: list[float] = Field(min_length=1)
    created_at: datetime


class UpdateFaceRequest(CamelModel):
    name: str = Field(min_length=1)


class MatchFaceRequest(CamelModel):
    descriptor: list[float] = Field(min_length=1)
    threshold: float = Field(default=0.6, gt=0)


class FaceMatch(CamelModel):
    id: str
    name: str
    distance: float
    confidence: float


class MatchFaceResponse(CamelModel):
    match: FaceMatch | None = None

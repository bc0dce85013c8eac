"""Face registry HTTP routes."""

from __future__ import annotations

import json
import logging
import re
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

from fastapi import APIRouter, File, Form, HTTPException, Request, Response, UploadFile

from reel_pipeline.faces.matching import find_best_match
from reel_pipeline.faces.models import (
    FaceRecord,
    MatchFaceRequest,
    MatchFaceResponse,
    UpdateFaceRequest,
)
from reel_pipeline.faces.store import JsonFaceStore

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = re.compile(r"jpeg|jpg|png")
UPLOAD_URL_PREFIX = "/uploads"

router = APIRouter(prefix="/api/faces", tags=["faces"])

IMAGE_FIELD = File(None)
NAME_FIELD = Form(None)
DESCRIPTOR_FIELD = Form(None)


def _face_store(request: Request) -> JsonFaceStore:
    return request.app.state.face_store


@router.get("", response_model=list[FaceRecord])
def list_faces(request: Request) -> list[FaceRecord]:
    return _face_store(request).list()


@router.get("/{face_id}", response_model=FaceRecord)
def get_face(face_id: str, request: Request) -> FaceRecord:
    face = _face_store(request).get(face_id)
    if face is None:
        raise HTTPException(status_code=404, detail="Face not found")
    return face


@router.post("", response_model=FaceRecord, status_code=201)
def add_face(
    request: Request,
    image: UploadFile | None = IMAGE_FIELD,
    name: str | None = NAME_FIELD,
    descriptor: str | None = DESCRIPTOR_FIELD,
) -> FaceRecord:
    if image is None or not image.filename:
        raise HTTPException(status_code=400, detail="Image file is required")
    if not name or not name.strip():
        raise HTTPException(status_code=400, detail="Name is required")
    if not descriptor:
        raise HTTPException(status_code=400, detail="Face descriptor is required")

    extension = Path(image.filename).suffix.lower()
    if not (
        ALLOWED_IMAGE_TYPES.search(extension)
        and ALLOWED_IMAGE_TYPES.search(image.content_type or "")
    ):
        raise HTTPException(
            status_code=400, detail="Only image files (jpeg, jpg, png) are allowed"
        )
    vector = _parse_descriptor(descriptor)

    settings = request.app.state.settings
    contents = image.file.read(settings.max_upload_bytes + 1)
    if len(contents) > settings.max_upload_bytes:
        raise HTTPException(status_code=400, detail="Image file is too large")

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid4()}{extension}"
    (upload_dir / filename).write_bytes(contents)

    face = FaceRecord(
        id=str(uuid4()),
        name=name.strip(),
        image_url=f"{UPLOAD_URL_PREFIX}/{filename}",
        descriptor=vector,
        created_at=datetime.now(UTC),
    )
    logger.info("faces event=added face_id=%s name=%r", face.id, face.name)
    return _face_store(request).add(face)


@router.post("/match", response_model=MatchFaceResponse)
def match_face(payload: MatchFaceRequest, request: Request) -> MatchFaceResponse:
    match = find_best_match(
        payload.descriptor,
        _face_store(request).list(),
        threshold=payload.threshold,
    )
    return MatchFaceResponse(match=match)


@router.put("/{face_id}", response_model=FaceRecord)
def update_face(face_id: str, payload: UpdateFaceRequest, request: Request) -> FaceRecord:
    updated = _face_store(request).update(face_id, name=payload.name)
    if updated is None:
        raise HTTPException(status_code=404, detail="Face not found")
    return updated


@router.delete("/{face_id}", status_code=204)
def delete_face(face_id: str, request: Request) -> Response:
    if not _face_store(request).delete(face_id):
        raise HTTPException(status_code=404, detail="Face not found")
    logger.info("faces event=deleted face_id=%s", face_id)
    return Response(status_code=204)


def _parse_descriptor(raw: str) -> list[float]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail="Face descriptor must be a JSON array") from exc
    if (
        not isinstance(parsed, list)
        or not parsed
        or not all(isinstance(item, (int, float)) and not isinstance(item, bool) for item in parsed)
    ):
        raise HTTPException(status_code=400, detail="Face descriptor must be a JSON array")
    return [float(item) for item in parsed]

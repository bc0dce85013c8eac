"""JSON-file backed face registry."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from reel_pipeline.faces.models import FaceRecord

logger = logging.getLogger(__name__)

_FACE_LIST = TypeAdapter(list[FaceRecord])


class JsonFaceStore:
    """Keep faces in memory and rewrite the JSON file after every mutation."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        # Route handlers run in the threadpool, so guard map + file writes.
        self._lock = threading.Lock()
        self._faces: dict[str, FaceRecord] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.info("faces event=init path=%s loaded=0 reason=no_file", self.path)
            return
        try:
            faces = _FACE_LIST.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as exc:
            logger.warning("faces event=init path=%s loaded=0 reason=%s", self.path, exc)
            return
        self._faces = {face.id: face for face in faces}
        logger.info("faces event=init path=%s loaded=%d", self.path, len(faces))

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [face.model_dump(mode="json", by_alias=True) for face in self._faces.values()]
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def add(self, face: FaceRecord) -> FaceRecord:
        with self._lock:
            self._faces[face.id] = face
            self._save()
        return face

    def get(self, face_id: str) -> FaceRecord | None:
        return self._faces.get(face_id)

    def list(self) -> list[FaceRecord]:
        return list(self._faces.values())

    def update(self, face_id: str, *, name: str) -> FaceRecord | None:
        with self._lock:
            current = self._faces.get(face_id)
            if current is None:
                return None
            updated = current.model_copy(update={"name": name})
            self._faces[face_id] = updated
            self._save()
        return updated

    def delete(self, face_id: str) -> bool:
        with self._lock:
            if self._faces.pop(face_id, None) is None:
                return False
            self._save()
        return True

"""Nearest-descriptor matching against registered faces."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from reel_pipeline.faces.models import FaceMatch, FaceRecord

DEFAULT_THRESHOLD = 0.6


def euclidean_distance(left: Sequence[float], right: Sequence[float]) -> float:
    if len(left) != len(right):
        raise ValueError(f"Descriptor length mismatch: {len(left)} != {len(right)}")
    return math.sqrt(sum((a - b) ** 2 for a, b in zip(left, right)))


def find_best_match(
    descriptor: Sequence[float],
    faces: Iterable[FaceRecord],
    *,
    threshold: float = DEFAULT_THRESHOLD,
) -> FaceMatch | None:
    """Closest face strictly under ``threshold``; faces of another length are skipped."""
    best: tuple[float, FaceRecord] | None = None
    for face in faces:
        if len(face.descriptor) != len(descriptor):
            continue
        distance = euclidean_distance(descriptor, face.descriptor)
        if distance >= threshold:
            continue
        if best is None or distance < best[0]:
            best = (distance, face)

    if best is None:
        return None
    distance, face = best
    return FaceMatch(
        id=face.id,
        name=face.name,
        distance=round(distance, 6),
        confidence=round(1.0 - distance, 6),
    )

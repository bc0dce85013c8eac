"""Job storage backends."""

from reel_pipeline.storage.base import JobStore
from reel_pipeline.storage.memory import InMemoryJobStore

__all__ = [
    "InMemoryJobStore",
    "JobStore",
]

"""Idea-to-video job orchestration service."""

__version__ = "0.1.0"

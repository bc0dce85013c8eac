"""Runtime configuration."""

from reel_pipeline.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]

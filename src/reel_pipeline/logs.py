from __future__ import annotations

import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Root logging setup for the CLI and server entry points."""
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(level=resolved, format=LOG_FORMAT, force=True)

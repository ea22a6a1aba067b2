from __future__ import annotations

import logging
import sys

from task_tracker.core.config import settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Attach a single stdout handler to the package logger. Safe to call more than once."""
    global _configured

    pkg_logger = logging.getLogger("task_tracker")
    pkg_logger.setLevel((level or settings.LOG_LEVEL or "INFO").upper())
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    pkg_logger.addHandler(handler)
    _configured = True

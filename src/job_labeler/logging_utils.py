from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_DIR_ENV_VAR = "JOB_LABELER_LOG_DIR"
LOG_LEVEL_ENV_VAR = "JOB_LABELER_LOG_LEVEL"

def configure_logging() -> Optional[Path]:
    """
    Configure root logging once per process.

    Logs always go to stderr. When JOB_LABELER_LOG_DIR is set, each run also
    writes a timestamped file there, and its path is returned.
    """
    if getattr(configure_logging, "_configured", False):
        return getattr(configure_logging, "_log_path", None)

    handlers: list = [logging.StreamHandler()]
    log_path: Optional[Path] = None
    log_dir = os.getenv(LOG_DIR_ENV_VAR)
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = Path(log_dir) / f"job_labeler_{timestamp}.log"
        handlers.append(logging.FileHandler(log_path, mode="w", encoding="utf-8"))

    level_name = os.getenv(LOG_LEVEL_ENV_VAR, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=handlers,
        force=True,
    )

    configure_logging._configured = True  # type: ignore[attr-defined]
    configure_logging._log_path = log_path  # type: ignore[attr-defined]
    return log_path

from __future__ import annotations

import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from .lib.env import PATHS

FALLBACK_LOG_NAME = "storagebox-mount.log"


def default_log_path(log_dir: str = PATHS.log_dir) -> str:
    return str(Path(log_dir) / f"mount-{datetime.now():%Y%m%d-%H%M%S}.log")


class SecretScrubberFilter(logging.Filter):
    """Mask ``password=...`` so credentials never reach a log."""

    SECRET_PATTERN = re.compile(r"(password|passwd|pass)=([^\s,]+)", re.IGNORECASE)

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except Exception:
            return True

        cleaned = self.SECRET_PATTERN.sub(r"\1=***", message)
        if cleaned != message:
            record.msg = cleaned
            record.args = ()
        return True


def configure_logging(
    log_path: Optional[str] = None,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    Every run gets its own file under /var/log/hetzner-mount. If that is not
    writable (non-root dry runs, containers) we fall back to a file in the
    working directory.

    Returns the actual file path being used.
    """

    log_path = log_path or default_log_path()
    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_storagebox_configured", False):
        return getattr(logger, "_storagebox_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        chosen_path = str(Path.cwd() / FALLBACK_LOG_NAME)
        file_handler = logging.FileHandler(chosen_path, encoding="utf-8")
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    scrubber = SecretScrubberFilter()
    for h in handlers:
        h.addFilter(scrubber)
        logger.addHandler(h)

    setattr(logger, "_storagebox_configured", True)
    setattr(logger, "_storagebox_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from .lib.env import PATHS

DEFAULT_LOG_PATH = PATHS.log_default


def configure_logging(
    log_path: Optional[str] = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> Optional[str]:
    """Configure root logging once for the process.

    Tries the requested log file first; if it cannot be opened, falls back to
    a file in the working directory. ``log_path=None`` logs to the console
    only. Returns the file path actually in use, or None when no file could
    be opened.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_grut_bootstrap_configured", False):
        return getattr(logger, "_grut_bootstrap_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    if log_path is not None:
        file_handler: Optional[logging.Handler] = None
        try:
            Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
        except OSError:
            fallback = str(Path.cwd() / "grut-bootstrap.log")
            try:
                file_handler = logging.FileHandler(fallback)
                chosen_path = fallback
            except OSError:
                # Nowhere writable: console only.
                chosen_path = None
        if file_handler is not None:
            file_handler.setFormatter(fmt)
            handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(fmt="%(levelname)s: %(message)s"))
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_grut_bootstrap_configured", True)
    setattr(logger, "_grut_bootstrap_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path

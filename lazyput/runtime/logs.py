"""File logging setup.

The TUI owns the terminal, so log records go to a file under the user log
directory instead of stderr.
"""

from __future__ import annotations

import logging
from pathlib import Path

from platformdirs import user_log_dir

from .config import APP_NAME

LOG_FILENAME = f"{APP_NAME}.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def configure_logging(log_file: Path | None = None, verbose: bool = False) -> Path | None:
    """Route the root logger to ``log_file`` (or the default location).

    Returns the path in use, or ``None`` when the file could not be opened, in
    which case records are discarded rather than written over the UI.
    """
    path = log_file if log_file is not None else default_log_path()
    level = logging.DEBUG if verbose else logging.INFO
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
        resolved = None
    else:
        resolved = path
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level, handlers=[handler], force=True)
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return resolved

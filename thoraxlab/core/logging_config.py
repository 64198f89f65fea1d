"""
Logging setup for ThoraxLab.

One console handler at the configured level, an optional DEBUG file handler
under ``THORAXLAB_LOG_FILE_DIR``, and per-package levels so that request
handling stays chatty while the database driver stays quiet.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

from thoraxlab.server.core.config import settings

LOG_LEVEL = settings.logging.level.upper()
LOG_FORMAT = settings.logging.format
LOG_FILE_DIR = settings.logging.file_dir
ENABLE_FILE_LOGGING = settings.logging.enable_file_logging

LOG_FILE_NAME = "thoraxlab.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SIMPLE_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
DETAILED_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d %(funcName)s): %(message)s"
JSON_FORMAT = (
    '{"ts": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"at": "%(filename)s:%(lineno)d", "msg": "%(message)s"}'
)

_FORMATS: Dict[str, str] = {
    "simple": SIMPLE_FORMAT,
    "detailed": DETAILED_FORMAT,
    "json": JSON_FORMAT,
}

MODULE_LOG_LEVELS: Dict[str, str] = {
    "thoraxlab": "INFO",
    "thoraxlab.server.api": "DEBUG",
    "thoraxlab.server.services": "DEBUG",
    # Presence churn on every socket would drown the console.
    "thoraxlab.server.services.realtime": "INFO",
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "aiosqlite": "WARNING",
    "httpx": "WARNING",
    "sse_starlette": "WARNING",
    "uvicorn.error": "INFO",
    "uvicorn.access": "INFO",
}


def _console_handler(level: str, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _file_handler(formatter: logging.Formatter) -> logging.Handler:
    directory = Path(LOG_FILE_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(directory / LOG_FILE_NAME, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = True,
) -> None:
    """
    (Re)configure the root logger.

    Safe to call more than once: previously installed handlers are dropped
    before the new ones are attached. Unknown format names fall back to the
    detailed layout.

    Args:
        log_level: Console level; defaults to ``THORAXLAB_LOG_LEVEL``.
        log_format: ``simple``, ``detailed`` or ``json``; defaults to ``THORAXLAB_LOG_FORMAT``.
        enable_file: Allow the file handler. It is only attached when
            ``THORAXLAB_ENABLE_FILE_LOGGING`` is also on.
    """
    level = (log_level or LOG_LEVEL).upper()
    format_name = log_format or LOG_FORMAT
    formatter = logging.Formatter(_FORMATS.get(format_name, DETAILED_FORMAT), datefmt=DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for existing in list(root.handlers):
        root.removeHandler(existing)

    root.addHandler(_console_handler(level, formatter))
    write_file = enable_file and ENABLE_FILE_LOGGING
    if write_file:
        root.addHandler(_file_handler(formatter))

    for name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(name).setLevel(module_level)

    root.info("ThoraxLab logging ready (level=%s, format=%s, file=%s)", level, format_name, write_file)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name``, usually the caller's ``__name__``."""
    return logging.getLogger(name)

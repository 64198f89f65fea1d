"""
Logfire tracing for the ThoraxLab server.

Opt-in: nothing leaves the process unless ``LOGFIRE_ENABLED`` is true and
``LOGFIRE_TOKEN`` is set. Until :func:`initialize_logfire` succeeds, the
``log_*`` helpers below write DEBUG records to the standard logger instead.
"""

import logging
import os
from typing import Any, Optional

import logfire
from fastapi import FastAPI

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "1", "yes", "on")


LOGFIRE_ENABLED = _env_flag("LOGFIRE_ENABLED", "false")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "thoraxlab-server")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.1.0")

LOGFIRE_TRACE_SQLALCHEMY = _env_flag("LOGFIRE_TRACE_SQLALCHEMY", "true")
LOGFIRE_TRACE_HTTPX = _env_flag("LOGFIRE_TRACE_HTTPX", "true")
LOGFIRE_TRACE_FASTAPI = _env_flag("LOGFIRE_TRACE_FASTAPI", "true")

_configured = False


def is_logfire_configured() -> bool:
    return _configured


def initialize_logfire(app: Optional[FastAPI] = None) -> bool:
    """
    Configure logfire and switch on the enabled instrumentations.

    FastAPI routes are only instrumented when ``app`` is passed in.

    Returns:
        Whether logfire is now active.
    """
    global _configured

    if not LOGFIRE_ENABLED:
        logger.info("Logfire disabled (LOGFIRE_ENABLED is not set)")
        return False
    if not LOGFIRE_TOKEN:
        logger.warning("LOGFIRE_ENABLED is on but LOGFIRE_TOKEN is empty; tracing stays off")
        return False

    logfire.configure(
        token=LOGFIRE_TOKEN,
        service_name=LOGFIRE_SERVICE_NAME,
        service_version=LOGFIRE_SERVICE_VERSION,
        environment=LOGFIRE_ENVIRONMENT,
    )
    _configured = True

    enabled = []
    if LOGFIRE_TRACE_SQLALCHEMY:
        logfire.instrument_sqlalchemy()
        enabled.append("sqlalchemy")
    if LOGFIRE_TRACE_HTTPX:
        logfire.instrument_httpx()
        enabled.append("httpx")
    if LOGFIRE_TRACE_FASTAPI and app is not None:
        logfire.instrument_fastapi(app)
        enabled.append("fastapi")

    logger.info(
        "Logfire tracing %s@%s in %s (instrumented: %s)",
        LOGFIRE_SERVICE_NAME,
        LOGFIRE_SERVICE_VERSION,
        LOGFIRE_ENVIRONMENT,
        ", ".join(enabled) or "none",
    )
    return True


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    if not _configured:
        logger.debug("%s %s -> %d in %.2fms", method, path, status_code, duration_ms)
        return
    logfire.info(
        "API request completed",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
    )


def log_consensus_reached(project_id: str, discussion_id: str, level: str, decision_id: Optional[str]) -> None:
    """Trace a discussion whose votes produced an automatic decision."""
    if not _configured:
        logger.debug(
            "Discussion %s in project %s reached %s consensus (decision %s)",
            discussion_id,
            project_id,
            level,
            decision_id,
        )
        return
    logfire.info(
        "Consensus reached",
        project_id=project_id,
        discussion_id=discussion_id,
        level=level,
        decision_id=decision_id,
    )


def log_error(error_type: str, error_message: str, context: Optional[dict[str, Any]] = None) -> None:
    """Trace an unexpected error; ``context`` entries become span attributes."""
    if not _configured:
        logger.debug("%s: %s %s", error_type, error_message, context or "")
        return
    logfire.error(
        "{error_type}: {error_message}",
        error_type=error_type,
        error_message=error_message,
        **(context or {}),
    )

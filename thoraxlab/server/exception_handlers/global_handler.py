"""
Exception Handlers for the FastAPI Application.

Domain errors raised by the services (``ThoraxLabError`` subclasses) are
rendered as ``{"detail": message, "code": code}`` with their own status code.
Anything else that escapes a route reaches the global handler, which logs the
request context under an error ID and returns a generic 500 response.
"""

import traceback
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from thoraxlab.core.errors import ThoraxLabError
from thoraxlab.core.logging_config import get_logger
from thoraxlab.core.monitoring import log_error

logger = get_logger(__name__)


async def thoraxlab_error_handler(request: Request, exc: ThoraxLabError) -> JSONResponse:
    """
    Render a domain error.

    Args:
        request: The HTTP request that failed
        exc: The domain error raised by a service

    Returns:
        JSONResponse with ``detail`` and ``code``
    """
    level = logger.warning if exc.status_code >= 500 else logger.info
    level(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    content = {"detail": exc.message, "code": exc.code}
    if exc.details is not None:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.
    It logs the full error context and returns a JSON response with an error ID
    that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = uuid.uuid4().hex[:12]

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )
    log_error(type(exc).__name__, str(exc), {"error_id": error_id, "path": request.url.path})

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(ThoraxLabError, thoraxlab_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")

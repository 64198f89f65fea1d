"""
Request timing middleware.

Every HTTP request is reported through :func:`log_api_request` (a logfire
span when logfire is enabled, a log line otherwise), gets an
``X-Process-Time`` header in milliseconds, and is flagged when it runs
past ``THORAXLAB_SLOW_REQUEST_MS``. WebSocket and SSE traffic bypass
``BaseHTTPMiddleware`` timing in practice, since the stream outlives the
handler call.
"""

import time
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from thoraxlab.core.logging_config import get_logger
from thoraxlab.core.monitoring import log_api_request
from thoraxlab.server.core.config import settings

logger = get_logger(__name__)

PROCESS_TIME_HEADER = "X-Process-Time"


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class LogfireMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, slow_request_ms: Optional[float] = None) -> None:
        super().__init__(app)
        if slow_request_ms is None:
            slow_request_ms = settings.slow_request_ms
        self.slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        request.state.start_time = time.time()
        route = f"{request.method} {request.url.path}"

        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed = _elapsed_ms(started)
            logger.error(
                "Unhandled error while serving %s after %.2fms: %s",
                route,
                elapsed,
                exc,
                exc_info=True,
            )
            self._record(request, 500, elapsed)
            raise

        elapsed = _elapsed_ms(started)
        self._record(request, response.status_code, elapsed)
        response.headers[PROCESS_TIME_HEADER] = f"{elapsed:.2f}"

        if elapsed > self.slow_request_ms:
            logger.warning(
                "Slow API request: %s returned %d in %.2fms (threshold %.0fms)",
                route,
                response.status_code,
                elapsed,
                self.slow_request_ms,
            )
        return response

    @staticmethod
    def _record(request: Request, status_code: int, elapsed: float) -> None:
        log_api_request(
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=elapsed,
        )

"""
Unit tests for server exception handlers.

Tests cover domain error rendering, the global 500 handler and the
registration of both on an application.
"""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from thoraxlab.core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ThoraxLabError,
    ValidationError,
)
from thoraxlab.server.exception_handlers import (
    global_exception_handler,
    setup_exception_handlers,
    thoraxlab_error_handler,
)

HANDLER_MODULE = "thoraxlab.server.exception_handlers.global_handler"


@pytest.fixture
def mock_request():
    request = Mock(spec=Request)
    request.method = "GET"
    request.url.path = "/api/v1/projects/p1"
    request.query_params = {"page": "1"}
    request.client = Mock()
    request.client.host = "127.0.0.1"
    return request


@pytest.mark.asyncio
class TestThoraxLabErrorHandler:
    """Domain errors keep their status code and expose a stable code."""

    @pytest.mark.parametrize(
        "exc,status,code",
        [
            (ValidationError("bad"), 400, "VALIDATION_ERROR"),
            (AuthenticationError("who?", code="NO_SESSION"), 401, "NO_SESSION"),
            (PermissionDeniedError("no"), 403, "FORBIDDEN"),
            (NotFoundError("Project", "p1"), 404, "NOT_FOUND"),
            (ConflictError("again"), 409, "CONFLICT"),
            (ValidationError("tpl", code="UNKNOWN_TEMPLATE", status_code=422), 422, "UNKNOWN_TEMPLATE"),
        ],
    )
    async def test_status_and_code(self, mock_request, exc, status, code):
        with patch(f"{HANDLER_MODULE}.logger"):
            response = await thoraxlab_error_handler(mock_request, exc)

        body = json.loads(response.body)
        assert response.status_code == status
        assert body == {"detail": exc.message, "code": code}

    async def test_details_included_when_present(self, mock_request):
        exc = ThoraxLabError("bad input", details={"field": "fio2"})

        with patch(f"{HANDLER_MODULE}.logger"):
            response = await thoraxlab_error_handler(mock_request, exc)

        assert json.loads(response.body)["details"] == {"field": "fio2"}

    async def test_not_found_message(self, mock_request):
        with patch(f"{HANDLER_MODULE}.logger") as mock_logger:
            response = await thoraxlab_error_handler(mock_request, NotFoundError("Project", "p1"))

        assert json.loads(response.body)["detail"] == "Project p1 not found"
        mock_logger.info.assert_called_once()


@pytest.mark.asyncio
class TestGlobalExceptionHandler:
    """Test suite for the global exception handler."""

    async def test_logs_error_with_context(self, mock_request):
        with patch(f"{HANDLER_MODULE}.logger") as mock_logger:
            await global_exception_handler(mock_request, ValueError("Test error"))

        mock_logger.error.assert_called_once()
        call_args = mock_logger.error.call_args
        assert "Unhandled exception" in call_args[0][0]
        assert call_args[1]["extra"]["error_type"] == "ValueError"
        assert call_args[1]["extra"]["query_params"] == {"page": "1"}
        assert call_args[1]["exc_info"] is True

    async def test_returns_500_with_error_id(self, mock_request):
        with patch(f"{HANDLER_MODULE}.logger"):
            response = await global_exception_handler(mock_request, RuntimeError("boom"))

        body = json.loads(response.body)
        assert response.status_code == 500
        assert body["detail"] == "Internal server error"
        assert body["error_type"] == "RuntimeError"
        assert len(body["error_id"]) == 12

    async def test_error_ids_are_unique(self, mock_request):
        with patch(f"{HANDLER_MODULE}.logger"):
            first = await global_exception_handler(mock_request, RuntimeError("a"))
            second = await global_exception_handler(mock_request, RuntimeError("b"))

        assert json.loads(first.body)["error_id"] != json.loads(second.body)["error_id"]

    async def test_missing_client(self, mock_request):
        mock_request.client = None

        with patch(f"{HANDLER_MODULE}.logger") as mock_logger:
            await global_exception_handler(mock_request, KeyError("k"))

        assert mock_logger.error.call_args[1]["extra"]["client"] == "unknown"

    async def test_forwards_to_monitoring(self, mock_request):
        with patch(f"{HANDLER_MODULE}.logger"), patch(f"{HANDLER_MODULE}.log_error") as mock_log_error:
            await global_exception_handler(mock_request, ValueError("boom"))

        mock_log_error.assert_called_once()
        assert mock_log_error.call_args[0][:2] == ("ValueError", "boom")


class TestSetupExceptionHandlers:
    def test_registers_handlers(self):
        app = FastAPI()

        setup_exception_handlers(app)

        assert app.exception_handlers[ThoraxLabError] is thoraxlab_error_handler
        assert app.exception_handlers[Exception] is global_exception_handler

    def test_end_to_end(self):
        app = FastAPI()
        setup_exception_handlers(app)

        @app.get("/missing")
        async def missing():
            raise NotFoundError("Discussion", "d1")

        @app.get("/crash")
        async def crash():
            raise RuntimeError("kaboom")

        with patch(f"{HANDLER_MODULE}.logger"):
            client = TestClient(app, raise_server_exceptions=False)
            missing_response = client.get("/missing")
            crash_response = client.get("/crash")

        assert missing_response.status_code == 404
        assert missing_response.json() == {"detail": "Discussion d1 not found", "code": "NOT_FOUND"}
        assert crash_response.status_code == 500
        assert crash_response.json()["error_type"] == "RuntimeError"

"""Error types for the ThoraxLab service layer.

Purpose:
- Provide typed exceptions raised by services when a request cannot be served.
- Carry an HTTP status code and a stable machine-readable ``code`` so the API
  layer can render a consistent ``{"detail": ..., "code": ...}`` envelope.

Usage:
- Raise ``NotFoundError("Project", project_id)`` for missing rows.
- Raise ``PermissionDeniedError`` when the caller lacks the needed team role.
- Catch ``ThoraxLabError`` to handle every domain failure at once.
"""

from __future__ import annotations

from typing import Any, Optional


class ThoraxLabError(Exception):
    """Base error for domain failures.

    Args:
        message: Human-readable error description.
        code: Stable error code exposed to clients.
        status_code: HTTP status code associated with the failure.
        details: Optional structured payload for diagnosis.
    """

    status_code: int = 400
    code: str = "BAD_REQUEST"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ValidationError(ThoraxLabError):
    """Raised when input is syntactically valid but breaks a domain rule."""

    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(ThoraxLabError):
    """Raised when a bearer session is missing, unknown or expired."""

    status_code = 401
    code = "INVALID_SESSION"


class PermissionDeniedError(ThoraxLabError):
    """Raised when the caller is not allowed to perform the operation."""

    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(ThoraxLabError):
    """Raised when a requested entity does not exist.

    Args:
        entity: Entity name, e.g. ``"Project"``.
        entity_id: The identifier that was looked up.
    """

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(ThoraxLabError):
    """Raised when the operation conflicts with the current state."""

    status_code = 409
    code = "CONFLICT"

"""
Exception handlers for the ThoraxLab server.

This package contains custom exception handlers for different error types
and a setup function to register them with the FastAPI application.
"""

from .global_handler import (
    global_exception_handler,
    setup_exception_handlers,
    thoraxlab_error_handler,
)

__all__ = ["global_exception_handler", "setup_exception_handlers", "thoraxlab_error_handler"]

"""
ThoraxLab Server Package.

This package contains the web server implementation for the ThoraxLab platform.
It includes the API definition, configuration, the service layer and the
realtime broadcast hub.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Server configuration and constants.
    exception_handlers: Error envelopes for domain and unhandled errors.
    middleware: Request tracing middleware.
    services: Business logic used by the API endpoints.
"""

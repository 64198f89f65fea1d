"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request tracing), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from thoraxlab.core.database import init_db
from thoraxlab.core.logging_config import get_logger, setup_logging
from thoraxlab.core.monitoring import initialize_logfire

from .api.v1 import (
    analytics,
    auth,
    comments,
    decisions,
    discussions,
    evidence,
    health,
    medical,
    notifications,
    projects,
    realtime,
    search,
    templates,
    users,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Configures logging and creates missing tables on startup.
    """
    setup_logging(settings.logging.level, settings.logging.format, settings.logging.enable_file_logging)
    try:
        logger.info("Starting up ThoraxLab Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down ThoraxLab Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    ThoraxLab Server API

    Backend of the ThoraxLab respiratory research platform. Clinicians and industry
    partners run research projects together: discussions with team voting and
    consensus, evidence links, decisions, notifications and realtime updates.
    """,
    version=constant.API_VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

initialize_logfire(app)

app.add_middleware(LogfireMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_V1_STR}/auth")
app.include_router(users.router, prefix=f"{constant.API_V1_STR}/users")
app.include_router(projects.router, prefix=f"{constant.API_V1_STR}/projects", tags=["projects"])
app.include_router(discussions.router, prefix=constant.API_V1_STR, tags=["discussions"])
app.include_router(comments.router, prefix=constant.API_V1_STR, tags=["comments"])
app.include_router(evidence.router, prefix=constant.API_V1_STR, tags=["evidence"])
app.include_router(decisions.router, prefix=constant.API_V1_STR, tags=["decisions"])
app.include_router(notifications.router, prefix=f"{constant.API_V1_STR}/notifications")
app.include_router(search.router, prefix=f"{constant.API_V1_STR}/search")
app.include_router(templates.router, prefix=f"{constant.API_V1_STR}/templates")
app.include_router(analytics.router, prefix=f"{constant.API_V1_STR}/analytics")
app.include_router(medical.router, prefix=f"{constant.API_V1_STR}/medical")
app.include_router(realtime.router, prefix=constant.API_V1_STR)


def run() -> None:
    """Run the server with uvicorn (``thoraxlab-server``)."""
    uvicorn.run("thoraxlab.server.main:app", host=settings.server_host, port=settings.server_port)


if __name__ == "__main__":
    run()

from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession


@pytest_asyncio.fixture(name="client")
async def client_fixture(session_maker, hub) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client bound to the test database and hub.

    ASGITransport does not run the lifespan, so no tables are created on the
    application's own engine.
    """
    from thoraxlab.core.database import get_session
    from thoraxlab.server.main import app
    from thoraxlab.server.services.realtime import get_hub

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_hub] = lambda: hub

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()

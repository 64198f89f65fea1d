from __future__ import annotations

import os
from pathlib import Path

import httpx
import pytest
from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent / ".env", override=False)

from test.settings import test_settings  # noqa: E402

# thoraxlab reads its settings on import, so this has to run before any test
# module imports the package.
for _name, _value in test_settings.app_environment().items():
    os.environ.setdefault(_name, _value)

# ASGITransport and the Starlette TestClient only ever talk to these hosts.
LOCAL_URL_PREFIXES = (
    "/",
    "http://localhost",
    "http://testserver",
    "ws://testserver",
    "http://127.0.0.1",
)


def _local_only(original, is_async: bool):
    def check(url) -> None:
        target = str(url)
        if not target.startswith(LOCAL_URL_PREFIXES):
            raise RuntimeError(f"Test tried to reach the network: {target}")

    if is_async:

        async def request(self, method, url, *args, **kwargs):
            check(url)
            return await original(self, method, url, *args, **kwargs)

    else:

        def request(self, method, url, *args, **kwargs):
            check(url)
            return original(self, method, url, *args, **kwargs)

    return request


@pytest.fixture(autouse=True)
def _no_network(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(httpx.Client, "request", _local_only(httpx.Client.request, is_async=False))
    monkeypatch.setattr(httpx.AsyncClient, "request", _local_only(httpx.AsyncClient.request, is_async=True))

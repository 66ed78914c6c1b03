"""Pytest configuration and shared fixtures"""

import os
from datetime import UTC, datetime, timedelta

import httpx
import jwt
import pytest

from nps_mcp.config import Config

TEST_SIGNING_KEY = "nps-mcp-test-signing-key-0123456789abcdef"
ROLE_CLAIM = "http://schemas.microsoft.com/ws/2008/06/identity/claims/role"
NAME_CLAIM = "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/name"

# Fixed "now" for clock injection
NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=UTC)


def make_token(expires_in: timedelta | None = timedelta(hours=1), **claims) -> str:
    """Mint a signed JWT the way NPS would issue one"""
    payload = dict(claims)
    if expires_in is not None:
        payload["exp"] = int((NOW + expires_in).timestamp())
    return jwt.encode(payload, TEST_SIGNING_KEY, algorithm="HS256")


def make_config(**overrides) -> Config:
    """Config that ignores the developer's .env file"""
    values = {"url": "https://nps.test:6500"}
    values.update(overrides)
    return Config(_env_file=None, **values)


class FakeNps:
    """Scripted NPS endpoints for httpx.MockTransport.

    Each route holds a queue of (status, body) pairs; the last one repeats.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], list[tuple[int, str]]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *responses: tuple[int, str]) -> None:
        self.routes.setdefault((method, path), []).extend(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, text=f"no route {request.url.path}")
        status, body = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(status, text=body)

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


class FakeSleep:
    """Records backoff delays instead of waiting"""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_nps():
    return FakeNps()


@pytest.fixture
def http_client(fake_nps):
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_nps))


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture(autouse=True)
def clean_env():
    """Fixture that temporarily clears NPS_* environment variables.

    This ensures tests see the true defaults without interference from
    environment variables that might be set in the user's shell.
    """
    nps_vars = {
        key: value for key, value in os.environ.items() if key.startswith("NPS_")
    }

    for key in nps_vars:
        os.environ.pop(key, None)

    try:
        yield
    finally:
        for key in [k for k in os.environ if k.startswith("NPS_")]:
            os.environ.pop(key, None)
        for key, value in nps_vars.items():
            os.environ[key] = value


@pytest.fixture
def clean_config(clean_env):
    """Config instance with clean environment and no .env file."""
    return Config(_env_file=None)

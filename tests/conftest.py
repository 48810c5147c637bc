import pytest
import httpx
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.services.error_log import ErrorLog
from app.services.upstream import UpstreamClient
from app.utils.caching import TTLCache
from main import create_app

UPSTREAM_BASE_URL = "https://upstream.test/v3.1"
TEST_CACHE_TTL = 60


class FakeClock:
    """Manually advanced clock usable as both a monotonic and a wall clock."""

    def __init__(self, start: datetime):
        self.current = start

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)

    def now(self) -> datetime:
        return self.current

    def monotonic(self) -> float:
        return self.current.timestamp()


class FakeUpstream:
    """Answers upstream GETs from a path -> (status, body) table and records calls.

    A table value may also be an exception class from httpx, which is raised
    instead of answering.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path.removeprefix("/v3.1")
        answer = self.routes.get(path)
        if answer is None:
            return httpx.Response(404, json={"status": 404, "message": "Not Found"})
        if isinstance(answer, type) and issubclass(answer, Exception):
            raise answer("simulated failure", request=request)
        status_code, body = answer
        return httpx.Response(status_code, json=body)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def error_log_path(tmp_path):
    return str(tmp_path / "error_log.json")


@pytest.fixture
def settings(error_log_path):
    return Settings(
        ERROR_LOG_PATH=error_log_path,
        UPSTREAM_BASE_URL=UPSTREAM_BASE_URL,
        CACHE_TTL=TEST_CACHE_TTL,
    )


@pytest.fixture
def fake_upstream():
    return FakeUpstream()


@pytest.fixture
def cache(clock):
    return TTLCache(default_ttl=TEST_CACHE_TTL, clock=clock.monotonic)


@pytest.fixture
def error_log(error_log_path, clock):
    return ErrorLog(error_log_path, clock=clock.now)


@pytest.fixture
def app(settings, cache, error_log, fake_upstream):
    upstream = UpstreamClient(
        settings.UPSTREAM_BASE_URL,
        timeout=settings.UPSTREAM_TIMEOUT,
        transport=httpx.MockTransport(fake_upstream.handler),
    )
    return create_app(settings, cache=cache, error_log=error_log, upstream=upstream)


@pytest.fixture
def client(app):
    """TestClient with the lifespan (error log initialization) running."""
    with TestClient(app) as test_client:
        yield test_client

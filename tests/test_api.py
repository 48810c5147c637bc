import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.services.upstream import UpstreamClient
from main import create_app


def test_unknown_route_returns_error_body(client, error_log):
    response = client.get("/planets/mars")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}
    assert error_log.total_requests == 0


def test_unhandled_exception_is_recorded(app, error_log):
    def explode(now=None):
        raise RuntimeError("health reporter broke")

    app.state.health.snapshot = explode

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/health")

    assert response.status_code == 500
    assert response.json() == {"error": "Something went wrong!"}
    assert [e.message for e in error_log.events] == ["health reporter broke"]


def test_swagger_docs_are_served(client):
    assert client.get("/api-docs").status_code == 200

    schema = client.get("/openapi.json").json()
    assert schema["info"]["title"] == "REST Countries API"
    for path in [
        "/independent",
        "/all",
        "/name/{name}",
        "/alpha/{code}",
        "/currency/{currency}",
        "/lang/{language}",
        "/capital/{capital}",
        "/region/{region}",
        "/health",
    ]:
        assert "get" in schema["paths"][path]

    alpha_params = schema["paths"]["/alpha/{code}"]["get"]["parameters"]
    assert [(p["name"], p["in"]) for p in alpha_params] == [("code", "path")]


def test_rate_limit_when_enabled(settings, cache, error_log, fake_upstream):
    limited = settings.model_copy(update={"RATE_LIMIT_ENABLED": True, "RATE_LIMIT": "2/minute"})
    app = create_app(limited, cache=cache, error_log=error_log)

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert client.get("/health").status_code == 200
        response = client.get("/health")

    assert response.status_code == 429
    assert response.json() == {"error": "Too many requests."}


def test_rate_limit_covers_proxied_routes(settings, cache, error_log, fake_upstream):
    fake_upstream.routes["/alpha/us"] = (200, {"name": "United States"})
    limited = settings.model_copy(update={"RATE_LIMIT_ENABLED": True, "RATE_LIMIT": "1/minute"})
    upstream = UpstreamClient(
        limited.UPSTREAM_BASE_URL, transport=httpx.MockTransport(fake_upstream.handler)
    )
    app = create_app(limited, cache=cache, error_log=error_log, upstream=upstream)

    with TestClient(app) as client:
        assert client.get("/alpha/us").status_code == 200
        response = client.get("/alpha/us")

    assert response.status_code == 429
    assert error_log.total_requests == 1


def test_upstream_timeout_setting_reaches_client(settings, cache, error_log):
    configured = settings.model_copy(update={"UPSTREAM_TIMEOUT": 3.5})
    app = create_app(configured, cache=cache, error_log=error_log)

    upstream = app.state.upstream
    assert upstream.timeout == 3.5
    assert upstream.base_url == "https://upstream.test/v3.1"
    assert upstream.client.timeout == httpx.Timeout(3.5)


def test_app_serves_upstream_after_restart(app, fake_upstream):
    fake_upstream.routes["/alpha/us"] = (200, {"name": "United States"})

    with TestClient(app) as client:
        assert client.get("/alpha/us").status_code == 200

    app.state.cache.clear()
    with TestClient(app) as client:
        response = client.get("/alpha/us")

    assert response.status_code == 200
    assert response.json() == {"name": "United States"}
    assert len(fake_upstream.calls) == 2


def test_each_country_route_has_its_own_operation(client):
    schema = client.get("/openapi.json").json()
    operation_ids = [
        operation["operationId"]
        for path in schema["paths"].values()
        for operation in path.values()
    ]
    assert len(operation_ids) == len(set(operation_ids)) == 9


@pytest.mark.parametrize(
    "raw, expected",
    [("120", 120), ("not-a-number", 3600), ("0", 3600), ("-5", 3600)],
)
def test_cache_ttl_falls_back_to_default(monkeypatch, raw, expected):
    monkeypatch.setenv("CACHE_TTL", raw)
    assert Settings().CACHE_TTL == expected


def test_port_defaults_and_fallback(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    assert Settings().PORT == 3000

    monkeypatch.setenv("PORT", "eighty")
    assert Settings().PORT == 3000

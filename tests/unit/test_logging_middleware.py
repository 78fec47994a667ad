from __future__ import annotations

from fastapi import FastAPI

from shared.logging import CorrelationMiddleware, get_correlation_context
from tests.helpers import create_test_client


def _build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(CorrelationMiddleware)

    @app.get("/echo")
    def echo_context() -> dict[str, str]:
        return get_correlation_context()

    @app.get("/boom")
    def raise_error() -> None:
        raise RuntimeError("forced")

    return app


def test_correlation_middleware_seeds_context_with_request_id() -> None:
    app = _build_app()

    with create_test_client(app) as client:
        response = client.get("/echo", headers={"X-Request-Id": "req-123"})

    payload = response.json()
    assert response.status_code == 200
    assert payload["request_id"] == "req-123"
    assert response.headers["X-Request-Id"] == "req-123"
    assert "trace_id" in payload
    assert get_correlation_context() == {}


def test_correlation_middleware_mints_request_id_when_missing() -> None:
    app = _build_app()

    with create_test_client(app) as client:
        response = client.get("/echo")

    request_id = response.json()["request_id"]
    assert len(request_id) == 32
    assert response.headers["X-Request-Id"] == request_id


def test_correlation_middleware_clears_context_even_when_handler_fails() -> None:
    app = _build_app()
    with create_test_client(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    assert get_correlation_context() == {}

from __future__ import annotations

from fastapi import FastAPI
from webhooks_api.core.error_handlers import register_error_handlers
from webhooks_api.core.errors import SignatureInvalidError, StorageUnavailableError

from tests.helpers import assert_error_payload, create_test_client


def _build_app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/app-error")
    def app_error_route() -> None:
        raise SignatureInvalidError()

    @app.get("/storage-error")
    def storage_error_route() -> None:
        raise StorageUnavailableError()

    @app.get("/unexpected-error")
    def unexpected_error_route() -> None:
        raise RuntimeError("raw stack detail")

    return app


def test_app_error_handler_returns_flat_error_body() -> None:
    app = _build_app()
    with create_test_client(app) as client:
        response = client.get("/app-error")

    assert_error_payload(response, expected_status=403, expected_category="signature_invalid")
    assert response.json()["error"] == "invalid signature"


def test_server_side_app_errors_keep_their_category() -> None:
    app = _build_app()
    with create_test_client(app) as client:
        response = client.get("/storage-error")

    assert_error_payload(response, expected_status=500, expected_category="storage_unavailable")


def test_unexpected_error_handler_masks_internal_details() -> None:
    app = _build_app()
    with create_test_client(app, raise_server_exceptions=False) as client:
        response = client.get("/unexpected-error")

    assert_error_payload(response, expected_status=500, expected_category="unexpected")
    assert response.json()["error"] == "Internal server error"

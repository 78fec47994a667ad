from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.logging import ERROR_CATEGORY, get_logger
from webhooks_api.core.errors import AppError

logger = get_logger(__name__)
_GENERIC_INTERNAL_ERROR_MESSAGE = "Internal server error"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(_: Request, exc: AppError) -> JSONResponse:
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            "application_error",
            extra={
                "extra_fields": {
                    ERROR_CATEGORY: exc.category.value,
                    "status_code": exc.http_status,
                }
            },
        )
        return JSONResponse(
            status_code=exc.http_status,
            content={"error": exc.message, "category": exc.category.value},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unexpected_error", extra={"extra_fields": {ERROR_CATEGORY: "unexpected"}}
        )
        return JSONResponse(
            status_code=500,
            content={"error": _GENERIC_INTERNAL_ERROR_MESSAGE, "category": "unexpected"},
        )

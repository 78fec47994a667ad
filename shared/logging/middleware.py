from __future__ import annotations

from collections.abc import Awaitable, Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shared.logging.fields import REQUEST_ID, TRACE_ID
from shared.logging.logger import clear_correlation_context, set_correlation_context
from shared.observability.propagation import current_trace_id

REQUEST_ID_HEADER = "X-Request-Id"


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Seeds the log context per request and echoes the request id back to the caller.

    MercadoPago sends `x-request-id` with every notification; other callers get a fresh id so
    log lines of one delivery can still be grouped.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        set_correlation_context({TRACE_ID: current_trace_id(), REQUEST_ID: request_id})
        try:
            response = await call_next(request)
        finally:
            clear_correlation_context()
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        return response

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from shared.contracts import WebhookAckResponse
from webhooks_api.api.dependencies import get_process_webhook_use_case
from webhooks_api.core.errors import PayloadTooLargeError
from webhooks_api.use_cases.process_webhook import ProcessWebhookUseCase

router = APIRouter(tags=["webhooks"])


async def read_bounded_body(request: Request, max_bytes: int) -> bytes:
    """Read the raw body, refusing it as soon as it is known to exceed `max_bytes`."""
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes:
        raise PayloadTooLargeError()
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise PayloadTooLargeError()
    return bytes(body)


@router.post(
    "/api/webhooks/mercadopago",
    response_model=WebhookAckResponse,
    response_model_exclude_none=True,
)
async def receive_mercadopago_webhook(
    request: Request,
    use_case: Annotated[ProcessWebhookUseCase, Depends(get_process_webhook_use_case)],
) -> WebhookAckResponse:
    # The signature covers the exact bytes, so the body is never parsed by FastAPI.
    raw_body = await read_bounded_body(request, use_case.max_body_bytes)
    return await use_case.execute(raw_body, request.headers)

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from shared.contracts import OrderResponse, OrderStatusUpdateRequest
from webhooks_api.api.dependencies import (
    enforce_api_auth,
    get_get_order_use_case,
    get_update_order_status_use_case,
)
from webhooks_api.use_cases.get_order import GetOrderUseCase
from webhooks_api.use_cases.update_order_status import UpdateOrderStatusUseCase

router = APIRouter(tags=["orders"], dependencies=[Depends(enforce_api_auth)])


@router.get("/orders/{order_id}")
async def get_order(
    order_id: int,
    use_case: Annotated[GetOrderUseCase, Depends(get_get_order_use_case)],
) -> OrderResponse:
    return await use_case.execute(order_id)


@router.patch("/orders/{order_id}/status")
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdateRequest,
    use_case: Annotated[UpdateOrderStatusUseCase, Depends(get_update_order_status_use_case)],
) -> OrderResponse:
    return await use_case.execute(order_id, payload.status)

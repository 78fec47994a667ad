from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shared.contracts import OrderResponse, OrderStatus, TransitionKind
from shared.logging import ORDER_ID, STATUS, get_logger, update_correlation_context
from webhooks_api.core.errors import InvalidTransitionError, OrderNotFoundError
from webhooks_api.repositories.order_repository import OrderRepository
from webhooks_api.services.order_state_machine import resolve_manual_transition
from webhooks_api.services.order_transition_service import OrderTransitionService

logger = get_logger(__name__)


class UpdateOrderStatusUseCase:
    """Merchant fulfilment moves; payment-driven moves only arrive through the webhook."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession], *, max_attempts: int = 3
    ) -> None:
        self._session_factory = session_factory
        self._max_attempts = max_attempts

    async def execute(self, order_id: int, requested: OrderStatus) -> OrderResponse:
        update_correlation_context({ORDER_ID: str(order_id)})
        async with self._session_factory() as session:
            orders = OrderRepository(session)
            order = await orders.get_by_id(order_id)
            if not order:
                raise OrderNotFoundError()

            transitions = OrderTransitionService(orders, max_attempts=self._max_attempts)
            transition = await transitions.apply(
                order_id,
                order.status,
                lambda current: resolve_manual_transition(current, requested),
            )
            if transition.kind == TransitionKind.INVALID:
                logger.warning(
                    "order_status_update_rejected",
                    extra={
                        "extra_fields": {
                            STATUS: transition.source.value,
                            "requested_status": requested.value,
                        }
                    },
                )
                raise InvalidTransitionError(transition.source, requested.value)

            await session.commit()
            snapshot = OrderResponse.model_validate(order)
            return snapshot.model_copy(update={"status": transition.target})


from __future__ import annotations

from collections.abc import Callable

from opentelemetry import trace

from shared.contracts import OrderStatus, TransitionKind
from shared.logging import ORDER_ID, PREVIOUS_STATUS, STATUS, get_logger
from shared.observability import ORDER_STATUS
from shared.observability import ORDER_ID as ORDER_ID_ATTRIBUTE
from webhooks_api.core.errors import ConcurrentUpdateError, OrderNotFoundError
from webhooks_api.core.metrics import order_transition_total
from webhooks_api.repositories.order_repository import OrderRepository
from webhooks_api.services.order_state_machine import Transition

logger = get_logger(__name__)

TransitionResolver = Callable[[OrderStatus], Transition]


class OrderTransitionService:
    """Applies a resolved transition with `UPDATE ... WHERE status = <observed>`.

    A zero-row update means another writer moved the order first; the status is re-read and
    the transition resolved again against it, up to `max_attempts` times.
    """

    def __init__(self, repository: OrderRepository, *, max_attempts: int = 3) -> None:
        self._repository = repository
        self._max_attempts = max_attempts
        self._tracer = trace.get_tracer(__name__)

    async def apply(
        self,
        order_id: int,
        current: OrderStatus,
        resolve: TransitionResolver,
        *,
        payment_id: str | None = None,
    ) -> Transition:
        with self._tracer.start_as_current_span("order_transition") as span:
            span.set_attribute(ORDER_ID_ATTRIBUTE, order_id)
            for attempt in range(1, self._max_attempts + 1):
                transition = resolve(current)
                if transition.kind != TransitionKind.APPLY:
                    return transition
                if await self._repository.update_status_if(
                    order_id, transition.source, transition.target, payment_id=payment_id
                ):
                    span.set_attribute(ORDER_STATUS, transition.target.value)
                    self._record_applied(order_id, transition)
                    return transition
                current = await self._reload_status(order_id, attempt)
            raise ConcurrentUpdateError()

    async def _reload_status(self, order_id: int, attempt: int) -> OrderStatus:
        status = await self._repository.get_status(order_id)
        if status is None:
            raise OrderNotFoundError()
        logger.info(
            "order_status_update_lost_race",
            extra={
                "extra_fields": {ORDER_ID: order_id, STATUS: status.value, "attempt": attempt}
            },
        )
        return status

    def _record_applied(self, order_id: int, transition: Transition) -> None:
        order_transition_total.add(
            1, {"from": transition.source.value, "to": transition.target.value}
        )
        logger.info(
            "order_status_changed",
            extra={
                "extra_fields": {
                    ORDER_ID: order_id,
                    PREVIOUS_STATUS: transition.source.value,
                    STATUS: transition.target.value,
                }
            },
        )

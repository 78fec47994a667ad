from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from opentelemetry import trace
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shared.constants import REQUEST_ID_HEADER, SIGNATURE_HEADER
from shared.contracts import (
    OrderORM,
    PaymentStatus,
    ProcessingOutcome,
    TransitionKind,
    WebhookAckResponse,
    WebhookEvent,
    WebhookEventType,
)
from shared.logging import (
    ERROR_CATEGORY,
    EVENT_ID,
    EVENT_TYPE,
    ORDER_ID,
    OUTCOME,
    PAYMENT_ID,
    STATUS,
    get_logger,
    redact_headers,
    update_correlation_context,
)
from shared.observability import EVENT_ID as EVENT_ID_ATTRIBUTE
from shared.observability import EVENT_TYPE as EVENT_TYPE_ATTRIBUTE
from shared.observability import OUTCOME as OUTCOME_ATTRIBUTE
from shared.observability import PAYMENT_ID as PAYMENT_ID_ATTRIBUTE
from webhooks_api.core.config import Settings
from webhooks_api.core.errors import (
    OrderNotFoundError,
    ParseError,
    PayloadTooLargeError,
    SignatureInvalidError,
    StorageUnavailableError,
    UnknownEventTypeError,
    WebhookNotConfiguredError,
)
from webhooks_api.core.metrics import (
    webhook_duplicate_total,
    webhook_invalid_transition_total,
    webhook_received_total,
    webhook_signature_rejected_total,
)
from webhooks_api.repositories.order_repository import OrderRepository
from webhooks_api.repositories.payment_repository import PaymentRepository, PaymentUpsertData
from webhooks_api.repositories.processed_event_repository import ProcessedEventRepository
from webhooks_api.services import event_parser
from webhooks_api.services.idempotency_service import IdempotencyGuard, SeenEventCache
from webhooks_api.services.order_state_machine import resolve_payment_transition
from webhooks_api.services.order_transition_service import OrderTransitionService
from webhooks_api.services.payment_resolver import PaymentDetailsResolver, ResolvedPayment
from webhooks_api.services.signature_service import SignatureVerifier

logger = get_logger(__name__)

_STATUSES_THAT_CONFIRM_PAYMENT = frozenset({PaymentStatus.APPROVED})


@dataclass(frozen=True)
class RepositoryBundle:
    orders: OrderRepository
    payments: PaymentRepository
    processed_events: ProcessedEventRepository


class ProcessWebhookUseCase:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        seen_cache: SeenEventCache,
        resolver: PaymentDetailsResolver,
        settings: Settings,
    ) -> None:
        self._session_factory = session_factory
        self._seen_cache = seen_cache
        self._resolver = resolver
        self._settings = settings
        self._tracer = trace.get_tracer(__name__)

    @property
    def max_body_bytes(self) -> int:
        return self._settings.webhook_max_body_bytes

    async def execute(self, raw_body: bytes, headers: Mapping[str, str]) -> WebhookAckResponse:
        verifier = self._build_verifier()
        self._enforce_body_size(raw_body)
        self._verify_signature(verifier, raw_body, headers)
        event = self._parse(raw_body)

        update_correlation_context({EVENT_ID: event.external_id, EVENT_TYPE: event.type.value})
        span = trace.get_current_span()
        span.set_attribute(EVENT_ID_ATTRIBUTE, event.external_id)
        span.set_attribute(EVENT_TYPE_ATTRIBUTE, event.type.value)
        webhook_received_total.add(1, {"type": event.type.value})

        if await self._seen_cache.was_processed(event.type, event.external_id):
            return self._duplicate_response(event, source="cache")
        if await self._already_recorded(event):
            return self._duplicate_response(event, source="store")

        resolved = await self._resolve_payment(event)
        outcome = await self._process_once(event, resolved)
        if outcome is None:
            return self._duplicate_response(event, source="store")

        await self._seen_cache.remember(event.type, event.external_id)
        span.set_attribute(OUTCOME_ATTRIBUTE, outcome.value)
        logger.info("webhook_processed", extra={"extra_fields": {OUTCOME: outcome.value}})
        return WebhookAckResponse()

    def _build_verifier(self) -> SignatureVerifier:
        secret = self._settings.mercadopago_webhook_secret
        if not secret:
            raise WebhookNotConfiguredError()
        return SignatureVerifier(secret, self._settings.webhook_signature_scheme)

    def _enforce_body_size(self, raw_body: bytes) -> None:
        if len(raw_body) > self._settings.webhook_max_body_bytes:
            raise PayloadTooLargeError()

    def _verify_signature(
        self, verifier: SignatureVerifier, raw_body: bytes, headers: Mapping[str, str]
    ) -> None:
        with self._tracer.start_as_current_span("verify_signature"):
            valid = verifier.is_valid(
                raw_body,
                headers.get(SIGNATURE_HEADER),
                request_id=headers.get(REQUEST_ID_HEADER),
            )
        if not valid:
            header_present = SIGNATURE_HEADER in headers
            webhook_signature_rejected_total.add(1, {"header_present": str(header_present).lower()})
            logger.warning(
                "webhook_signature_rejected",
                extra={"extra_fields": {"headers": redact_headers(headers)}},
            )
            raise SignatureInvalidError()

    def _parse(self, raw_body: bytes) -> WebhookEvent:
        with self._tracer.start_as_current_span("parse_event"):
            try:
                return event_parser.parse(raw_body)
            except UnknownEventTypeError as exc:
                logger.warning(
                    "webhook_unknown_event_type",
                    extra={
                        "extra_fields": {
                            EVENT_TYPE: exc.shell.type,
                            EVENT_ID: exc.shell.external_id,
                        }
                    },
                )
                raise
            except ParseError as exc:
                logger.warning(
                    "webhook_payload_rejected",
                    extra={"extra_fields": {ERROR_CATEGORY: exc.category.value}},
                )
                raise

    async def _already_recorded(self, event: WebhookEvent) -> bool:
        """Log lookup ahead of the provider call; the claim insert still settles races."""
        async with self._session_factory() as session:
            processed_events = self._build_repositories(session).processed_events
            try:
                return await processed_events.exists(event.external_id, event.type)
            except (SQLAlchemyError, OSError) as exc:
                raise StorageUnavailableError() from exc

    async def _resolve_payment(self, event: WebhookEvent) -> ResolvedPayment | None:
        if event.type != WebhookEventType.PAYMENT:
            return None
        with self._tracer.start_as_current_span("resolve_payment") as span:
            span.set_attribute(PAYMENT_ID_ATTRIBUTE, event.external_id)
            return await self._resolver.resolve(event)

    async def _process_once(
        self, event: WebhookEvent, resolved: ResolvedPayment | None
    ) -> ProcessingOutcome | None:
        """Claim and mutate in one transaction; `None` means another delivery owns the event."""
        async with self._session_factory() as session:
            repositories = self._build_repositories(session)
            with self._tracer.start_as_current_span("claim_event"):
                claim = await IdempotencyGuard(session, repositories.processed_events).claim(
                    event.external_id, event.type
                )
            if not claim.claimed or claim.record is None:
                return None

            try:
                outcome = await self._apply_event(repositories, event, resolved)
                claim.record.outcome = outcome
                await session.commit()
            except (SQLAlchemyError, OSError) as exc:
                raise StorageUnavailableError() from exc
            return outcome

    async def _apply_event(
        self,
        repositories: RepositoryBundle,
        event: WebhookEvent,
        resolved: ResolvedPayment | None,
    ) -> ProcessingOutcome:
        if event.type == WebhookEventType.ORDER:
            return ProcessingOutcome.ACKNOWLEDGED
        if resolved is None or resolved.order_id is None:
            return ProcessingOutcome.UNRESOLVED

        update_correlation_context(
            {ORDER_ID: str(resolved.order_id), PAYMENT_ID: resolved.payment_id}
        )
        order = await repositories.orders.get_by_id(resolved.order_id)
        if order is None:
            logger.warning(
                "webhook_order_not_found", extra={"extra_fields": {ORDER_ID: resolved.order_id}}
            )
            return ProcessingOutcome.ORDER_NOT_FOUND

        try:
            outcome = await self._transition_order(repositories.orders, order, resolved)
        except OrderNotFoundError:
            return ProcessingOutcome.ORDER_NOT_FOUND
        await repositories.payments.upsert_payment(self._payment_upsert_data(order, resolved))
        return outcome

    async def _transition_order(
        self, orders: OrderRepository, order: OrderORM, resolved: ResolvedPayment
    ) -> ProcessingOutcome:
        transitions = OrderTransitionService(
            orders, max_attempts=self._settings.order_update_max_attempts
        )
        payment_id = (
            resolved.payment_id if resolved.status in _STATUSES_THAT_CONFIRM_PAYMENT else None
        )
        transition = await transitions.apply(
            order.id,
            order.status,
            lambda current: resolve_payment_transition(current, resolved.status),
            payment_id=payment_id,
        )
        if transition.kind == TransitionKind.APPLY:
            return ProcessingOutcome.APPLIED
        if transition.kind == TransitionKind.NOOP:
            return ProcessingOutcome.NOOP

        webhook_invalid_transition_total.add(
            1, {"from": transition.source.value, "outcome": resolved.status.value}
        )
        logger.warning(
            "webhook_invalid_transition",
            extra={
                "extra_fields": {
                    ORDER_ID: order.id,
                    STATUS: transition.source.value,
                    "payment_status": resolved.status.value,
                    "provider_status": resolved.provider_status,
                }
            },
        )
        return ProcessingOutcome.INVALID_TRANSITION

    def _payment_upsert_data(self, order: OrderORM, resolved: ResolvedPayment) -> PaymentUpsertData:
        amount = resolved.amount if resolved.amount is not None else Decimal(order.total)
        return PaymentUpsertData(
            payment_id=resolved.payment_id,
            order_id=order.id,
            status=resolved.status,
            amount=amount,
            currency=resolved.currency or order.currency,
        )

    def _duplicate_response(self, event: WebhookEvent, *, source: str) -> WebhookAckResponse:
        webhook_duplicate_total.add(1, {"type": event.type.value, "source": source})
        logger.info("webhook_duplicate", extra={"extra_fields": {"source": source}})
        return WebhookAckResponse(duplicate=True)

    def _build_repositories(self, session: AsyncSession) -> RepositoryBundle:
        return RepositoryBundle(
            orders=OrderRepository(session),
            payments=PaymentRepository(session),
            processed_events=ProcessedEventRepository(session),
        )

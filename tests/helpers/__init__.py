from tests.helpers.app import build_app_with_router, create_test_client, override_dependencies
from tests.helpers.assertions import assert_error_payload
from tests.helpers.factories import (
    WEBHOOK_SECRET,
    make_order_response,
    make_payment_details,
    make_settings,
    make_webhook_body,
    make_webhook_event,
    sign,
)
from tests.helpers.fakes import (
    FakeGetOrderUseCase,
    FakeOrderRepository,
    FakePaymentLookup,
    FakeRedis,
    FakeSession,
    FakeSessionFactory,
    FakeUpdateOrderStatusUseCase,
    InMemoryStore,
    in_memory_repositories,
)

__all__ = [
    "FakeGetOrderUseCase",
    "FakeOrderRepository",
    "FakePaymentLookup",
    "FakeRedis",
    "FakeSession",
    "FakeSessionFactory",
    "FakeUpdateOrderStatusUseCase",
    "InMemoryStore",
    "WEBHOOK_SECRET",
    "assert_error_payload",
    "build_app_with_router",
    "create_test_client",
    "in_memory_repositories",
    "make_order_response",
    "make_payment_details",
    "make_settings",
    "make_webhook_body",
    "make_webhook_event",
    "override_dependencies",
    "sign",
]

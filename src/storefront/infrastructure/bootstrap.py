"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from storefront.application.initialize_payment import InitializePaymentHandler
from storefront.application.place_order import PlaceOrderHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.application.verify_payment import VerifyPaymentHandler
from storefront.domain.model.payment import ReferenceFactory
from storefront.infrastructure.gateway.paystack import PaystackGateway
from storefront.infrastructure.notifications import LoggingNotifier
from storefront.infrastructure.persistence.database import (
    init_schema,
    make_engine,
    make_session_factory,
)
from storefront.infrastructure.persistence.sql_customer_repository import (
    SqlCustomerRepository,
)
from storefront.infrastructure.persistence.sql_order_repository import (
    SqlOrderRepository,
)
from storefront.infrastructure.persistence.sql_product_repository import (
    SqlProductRepository,
)
from storefront.utils import settings


@lru_cache(maxsize=1)
def engine() -> Engine:
    eng = make_engine(settings.DATABASE_URL)
    init_schema(eng)
    return eng


@lru_cache(maxsize=1)
def session_factory() -> sessionmaker:
    return make_session_factory(engine())


@lru_cache(maxsize=1)
def reference_factory() -> ReferenceFactory:
    return ReferenceFactory()


def product_repository() -> SqlProductRepository:
    return SqlProductRepository(session_factory())


def customer_repository() -> SqlCustomerRepository:
    return SqlCustomerRepository(session_factory())


def order_repository() -> SqlOrderRepository:
    return SqlOrderRepository(session_factory())


def payment_gateway() -> PaystackGateway:
    return PaystackGateway(
        secret_key=settings.PAYSTACK_SECRET_KEY,
        base_url=settings.PAYSTACK_BASE_URL,
        timeout=settings.GATEWAY_TIMEOUT_SECONDS,
        retry_attempts=settings.GATEWAY_RETRY_ATTEMPTS,
    )


def notifier() -> LoggingNotifier:
    return LoggingNotifier()


# --- Use cases ----------------------------------------------------------------


def place_order_handler() -> PlaceOrderHandler:
    return PlaceOrderHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        customer_repo=customer_repository(),
    )


def initialize_payment_handler() -> InitializePaymentHandler:
    return InitializePaymentHandler(
        order_repo=order_repository(),
        customer_repo=customer_repository(),
        gateway=payment_gateway(),
        references=reference_factory(),
        callback_base_url=settings.PUBLIC_BASE_URL,
    )


def verify_payment_handler() -> VerifyPaymentHandler:
    return VerifyPaymentHandler(
        order_repo=order_repository(),
        customer_repo=customer_repository(),
        gateway=payment_gateway(),
        notifier=notifier(),
    )


def show_order_handler() -> ShowOrderHandler:
    return ShowOrderHandler(order_repo=order_repository())

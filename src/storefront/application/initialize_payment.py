"""Application service: Initialize Payment use case.

Opens a gateway transaction for an order that is already durably
``pending``.  If the provider cannot be reached or refuses, the order is
cancelled so it never lingers as an unpaid ``pending`` order that looks
like a fresh one.
"""

from __future__ import annotations

from storefront.application.dto import PaymentInitializationDTO
from storefront.domain.exceptions import (
    EntityNotFoundError,
    PaymentInitializationFailed,
    PersistenceError,
    ValidationError,
)
from storefront.domain.model.order import Order, OrderStatus, payment_sources
from storefront.domain.model.payment import PaymentRequest, ReferenceFactory
from storefront.domain.port.payment_gateway import GatewayError, PaymentGateway
from storefront.domain.repository.customer_repository import CustomerRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class InitializePaymentHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        customer_repo: CustomerRepository,
        gateway: PaymentGateway,
        references: ReferenceFactory,
        callback_base_url: str,
    ) -> None:
        self._order_repo = order_repo
        self._customer_repo = customer_repo
        self._gateway = gateway
        self._references = references
        self._callback_base_url = callback_base_url.rstrip("/")

    def handle(self, order_id: int) -> PaymentInitializationDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        if order.status != OrderStatus.PENDING:
            raise ValidationError(
                f"Cannot start payment for order #{order_id} in {order.status.value} "
                f"status; start a new checkout"
            )

        customer = self._customer_repo.get_by_id(order.customer_id)
        if customer is None:
            raise EntityNotFoundError(f"Customer #{order.customer_id} not found")

        request = self._build_request(order, customer.email)
        logger.info(
            f"Initializing payment {request.reference} for order {order_id} "
            f"({request.amount_minor_units} minor units)"
        )

        try:
            init = self._gateway.initialize(request)
        except GatewayError as exc:
            logger.error(f"Payment initialization for order {order_id} failed: {exc}")
            self._cancel(order_id)
            raise PaymentInitializationFailed(
                "Failed to initialize payment", order_id=order_id
            ) from exc

        return PaymentInitializationDTO(
            order_id=order_id,
            authorization_url=init.authorization_url,
            access_code=init.access_code,
            reference=init.reference,
        )

    # --- Internal helpers -----------------------------------------------------

    def _build_request(self, order: Order, email: str) -> PaymentRequest:
        return PaymentRequest(
            order_id=order.id,  # type: ignore[arg-type]
            customer_id=order.customer_id,
            email=email,
            amount_minor_units=order.amount_minor_units,
            reference=self._references.new_reference(order.id),  # type: ignore[arg-type]
            callback_url=f"{self._callback_base_url}/payment/callback?orderId={order.id}",
            line_summary=tuple(
                {
                    "id": item.product_id,
                    "quantity": item.quantity.value,
                    "minQuantity": item.min_quantity,
                    "price": str(item.price.amount),
                }
                for item in order.items
            ),
        )

    def _cancel(self, order_id: int) -> None:
        try:
            changed = self._order_repo.transition_status(
                order_id,
                OrderStatus.CANCELLED,
                from_statuses=payment_sources(OrderStatus.CANCELLED),
            )
        except PersistenceError:
            logger.exception(f"Could not cancel order {order_id} after failed initialization")
            return
        if changed:
            logger.info(f"Order {order_id} cancelled: payment could not be initialized")

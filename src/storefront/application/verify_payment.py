"""Application service: Verify Payment use case (reconciliation).

Asks the gateway for the authoritative verdict on a reference and applies
it to the order with a conditional status write:

- success  -> ``pending`` becomes ``processing``
- anything else -> ``pending`` becomes ``cancelled``

Only a ``pending`` order is ever written.  Whatever the verdict, a paid
order (processing/shipped/delivered) is never downgraded and a cancelled
order is never resurrected, so repeated or racing calls for the same
reference converge on one final status.  Side effects (the confirmation
email) run only in the call whose write actually changed the row.

If the gateway cannot be asked at all, nothing is written and the caller
may retry.
"""

from __future__ import annotations

from storefront.application.dto import VerificationResultDTO
from storefront.domain.exceptions import (
    EntityNotFoundError,
    PaymentVerificationUnavailable,
    ValidationError,
)
from storefront.domain.model.order import Order, OrderStatus, payment_sources
from storefront.domain.model.payment import (
    PaymentFailed,
    PaymentSucceeded,
    PaymentVerdict,
)
from storefront.domain.port.notifier import NotificationError, Notifier
from storefront.domain.port.payment_gateway import (
    GatewayRejectedError,
    GatewayUnavailableError,
    PaymentGateway,
)
from storefront.domain.repository.customer_repository import CustomerRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CONFIRMATION_TEMPLATE = "order_confirmation"


class VerifyPaymentHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        customer_repo: CustomerRepository,
        gateway: PaymentGateway,
        notifier: Notifier,
    ) -> None:
        self._order_repo = order_repo
        self._customer_repo = customer_repo
        self._gateway = gateway
        self._notifier = notifier

    def handle(self, reference: str) -> VerificationResultDTO:
        if not reference or not reference.strip():
            raise ValidationError("Reference is required")
        reference = reference.strip()

        try:
            verdict = self._gateway.verify(reference)
        except GatewayUnavailableError as exc:
            logger.warning(f"Verification of {reference} unavailable: {exc}")
            raise PaymentVerificationUnavailable(
                "We couldn't check your payment right now, please try again"
            ) from exc
        except GatewayRejectedError as exc:
            logger.warning(f"Gateway rejected verification of {reference}: {exc}")
            raise EntityNotFoundError(f"Payment reference '{reference}' not recognised") from exc

        order = self._order_repo.get_by_id(verdict.order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{verdict.order_id} not found")

        verdict = self._check_amount(verdict, order)

        if isinstance(verdict, PaymentSucceeded):
            return self._apply_success(verdict, order)
        return self._apply_failure(verdict)

    # --- Transitions ----------------------------------------------------------

    def _apply_success(self, verdict: PaymentSucceeded, order: Order) -> VerificationResultDTO:
        """A success for an already-cancelled order is reported, never applied: it is not reopened."""
        applied = self._order_repo.transition_status(
            order.id,  # type: ignore[arg-type]
            OrderStatus.PROCESSING,
            from_statuses=payment_sources(OrderStatus.PROCESSING),
        )
        if applied:
            logger.info(f"Order {order.id} paid via {verdict.reference}: pending -> processing")
            self._send_confirmation(order)
            return self._result(verdict.reference, order.id, OrderStatus.PROCESSING, applied=True)

        current = self._current_status(order.id)  # type: ignore[arg-type]
        if current.is_paid:
            logger.info(f"Order {order.id} already {current.value}; verify of {verdict.reference} is a no-op")
            return self._result(verdict.reference, order.id, current)

        # Cancelled before this payment was confirmed; needs a human.
        logger.error(
            f"Payment {verdict.reference} succeeded for order {order.id} "
            f"which is {current.value}; not reopening"
        )
        return VerificationResultDTO(
            success=False,
            order_id=order.id,
            message="Payment received for a cancelled order, please contact support",
            reference=verdict.reference,
            order_status=current.value,
        )

    def _apply_failure(self, verdict: PaymentVerdict) -> VerificationResultDTO:
        applied = self._order_repo.transition_status(
            verdict.order_id,
            OrderStatus.CANCELLED,
            from_statuses=payment_sources(OrderStatus.CANCELLED),
        )
        if applied:
            logger.info(
                f"Order {verdict.order_id} cancelled via {verdict.reference}: "
                f"{_describe(verdict)}"
            )
            return self._result(verdict.reference, verdict.order_id, OrderStatus.CANCELLED, applied=True)

        current = self._current_status(verdict.order_id)
        if current.is_paid:
            logger.warning(
                f"Ignoring {_describe(verdict)} for {verdict.reference}: "
                f"order {verdict.order_id} is already {current.value}"
            )
        return self._result(verdict.reference, verdict.order_id, current)

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _check_amount(verdict: PaymentVerdict, order: Order) -> PaymentVerdict:
        if isinstance(verdict, PaymentSucceeded) and verdict.amount_minor_units < order.amount_minor_units:
            logger.error(
                f"Payment {verdict.reference} covers {verdict.amount_minor_units} of "
                f"{order.amount_minor_units} minor units for order {order.id}"
            )
            return PaymentFailed(
                reference=verdict.reference,
                order_id=verdict.order_id,
                reason="amount mismatch",
                amount_minor_units=verdict.amount_minor_units,
            )
        return verdict

    def _current_status(self, order_id: int) -> OrderStatus:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order.status

    @staticmethod
    def _result(
        reference: str,
        order_id: int | None,
        status: OrderStatus,
        applied: bool = False,
    ) -> VerificationResultDTO:
        if status.is_paid:
            message = "Payment verified successfully" if applied else "Order already paid"
        else:
            message = "Payment not successful"
        return VerificationResultDTO(
            success=status.is_paid,
            order_id=order_id,
            message=message,
            reference=reference,
            order_status=status.value,
            applied=applied,
        )

    def _send_confirmation(self, order: Order) -> None:
        customer = self._customer_repo.get_by_id(order.customer_id)
        if customer is None:
            logger.warning(f"No customer #{order.customer_id} to confirm order {order.id} to")
            return
        try:
            self._notifier.send_email(
                customer.email,
                CONFIRMATION_TEMPLATE,
                {
                    "order_id": order.id,
                    "customer_name": customer.name,
                    "total": str(order.total),
                    "shipping_address": order.shipping_address,
                },
            )
        except NotificationError:
            logger.exception(f"Confirmation email for order {order.id} not sent")


def _describe(verdict: PaymentVerdict) -> str:
    if isinstance(verdict, PaymentFailed):
        return f"payment failed ({verdict.reason})"
    if isinstance(verdict, PaymentSucceeded):
        return "payment succeeded"
    return f"payment still {verdict.provider_status}"

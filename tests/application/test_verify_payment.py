"""Integration tests for the VerifyPayment use case.

Reconciliation must be idempotent: whatever order or number of times a
reference is verified, the order ends in one status and the customer
gets at most one confirmation.
"""

import threading

import pytest

from storefront.application.dto import CartItemSpec, CheckoutRequest
from storefront.application.place_order import PlaceOrderHandler
from storefront.application.verify_payment import CONFIRMATION_TEMPLATE, VerifyPaymentHandler
from storefront.domain.exceptions import (
    EntityNotFoundError,
    PaymentVerificationUnavailable,
    ValidationError,
)
from storefront.domain.model.order import OrderStatus
from storefront.domain.model.payment import PaymentFailed, PaymentPending, PaymentSucceeded
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.port.payment_gateway import (
    GatewayRejectedError,
    GatewayUnavailableError,
)
from tests.fakes import (
    FakeCustomerRepository,
    FakeGateway,
    FakeOrderRepository,
    FakeProductRepository,
    RecordingNotifier,
)

AMOUNT = 121500


def _setup(notifier: RecordingNotifier | None = None):
    order_repo = FakeOrderRepository()
    customer_repo = FakeCustomerRepository()
    product_repo = FakeProductRepository([
        Product(id="1", name="Cement", price=Money.of("100"), profit=Money.of("20"), min_quantity=10),
    ])
    gateway = FakeGateway()
    notifier = notifier or RecordingNotifier()
    handler = VerifyPaymentHandler(order_repo, customer_repo, gateway, notifier)
    placed = PlaceOrderHandler(order_repo, product_repo, customer_repo).handle(
        CheckoutRequest(
            email="ada@example.com",
            customer_name="Ada",
            shipping_address="Lagos",
            contact_number="0801",
            items=[CartItemSpec("1", 1)],
        )
    )
    reference = f"ORDER_{placed.order_id}_1700000000000"
    return handler, order_repo, gateway, notifier, placed.order_id, reference


class TestSuccessfulPayment:

    def test_pending_becomes_processing(self):
        handler, order_repo, gateway, notifier, order_id, ref = _setup()
        gateway.verdicts[ref] = PaymentSucceeded(ref, order_id, AMOUNT)

        result = handler.handle(ref)

        assert result.success
        assert result.applied
        assert result.message == "Payment verified successfully"
        assert result.order_status == "processing"
        assert order_repo.get_by_id(order_id).status == OrderStatus.PROCESSING

    def test_confirmation_email_sent(self):
        handler, _, gateway, notifier, order_id, ref = _setup()
        gateway.verdicts[ref] = PaymentSucceeded(ref, order_id, AMOUNT)
        handler.handle(ref)
        [(recipient, template, context)] = notifier.sent
        assert recipient == "ada@example.com"
        assert template == CONFIRMATION_TEMPLATE
        assert context["order_id"] == order_id

    def test_repeated_verification_is_idempotent(self):
        handler, order_repo, gateway, notifier, order_id, ref = _setup()
        gateway.verdicts[ref] = PaymentSucceeded(ref, order_id, AMOUNT)

        results = [handler.handle(ref) for _ in range(5)]

        assert all(r.success for r in results)
        assert [r.applied for r in results] == [True, False, False, False, False]
        assert results[-1].message == "Order already paid"
        assert order_repo.status_writes == 1
        assert len(notifier.sent) == 1

    def test_concurrent_verification_applies_once(self):
        handler, order_repo, gateway, notifier, order_id, ref = _setup()
        gateway.verdicts[ref] = PaymentSucceeded(ref, order_id, AMOUNT)
        barrier = threading.Barrier(8)
        results = []

        def verify():
            barrier.wait()
            results.append(handler.handle(ref))

        threads = [threading.Thread(target=verify) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 8
        assert all(r.success for r in results)
        assert sum(r.applied for r in results) == 1
        assert order_repo.status_writes == 1
        assert len(notifier.sent) == 1

    def test_shipped_order_is_left_alone(self):
        handler, order_repo, gateway, notifier, order_id, ref = _setup()
        order_repo.force_status(order_id, OrderStatus.SHIPPED)
        gateway.verdicts[ref] = PaymentSucceeded(ref, order_id, AMOUNT)

        result = handler.handle(ref)

        assert result.success
        assert result.order_status == "shipped"
        assert order_repo.get_by_id(order_id).status == OrderStatus.SHIPPED
        assert notifier.sent == []

    def test_notifier_failure_does_not_block_transition(self):
        handler, order_repo, gateway, _, order_id, ref = _setup(RecordingNotifier(fail=True))
        gateway.verdicts[ref] = PaymentSucceeded(ref, order_id, AMOUNT)
        result = handler.handle(ref)
        assert result.success
        assert order_repo.get_by_id(order_id).status == OrderStatus.PROCESSING

    def test_success_on_cancelled_order_not_reopened(self):
        handler, order_repo, gateway, notifier, order_id, ref = _setup()
        order_repo.force_status(order_id, OrderStatus.CANCELLED)
        gateway.verdicts[ref] = PaymentSucceeded(ref, order_id, AMOUNT)

        result = handler.handle(ref)

        assert not result.success
        assert "contact support" in result.message
        assert order_repo.get_by_id(order_id).status == OrderStatus.CANCELLED
        assert notifier.sent == []


class TestUnsuccessfulPayment:

    def test_failed_payment_cancels_order(self):
        handler, order_repo, gateway, notifier, order_id, ref = _setup()
        gateway.verdicts[ref] = PaymentFailed(ref, order_id, "Declined")

        result = handler.handle(ref)

        assert not result.success
        assert result.message == "Payment not successful"
        assert result.order_status == "cancelled"
        assert order_repo.get_by_id(order_id).status == OrderStatus.CANCELLED
        assert notifier.sent == []

    def test_repeated_failure_changes_nothing(self):
        handler, order_repo, gateway, _, order_id, ref = _setup()
        gateway.verdicts[ref] = PaymentFailed(ref, order_id, "Declined")
        handler.handle(ref)
        result = handler.handle(ref)
        assert not result.success
        assert not result.applied
        assert order_repo.status_writes == 1

    def test_pending_verdict_cancels_order(self):
        handler, order_repo, gateway, _, order_id, ref = _setup()
        gateway.verdicts[ref] = PaymentPending(ref, order_id, "ongoing")
        result = handler.handle(ref)
        assert not result.success
        assert order_repo.get_by_id(order_id).status == OrderStatus.CANCELLED

    def test_stale_failure_never_downgrades_paid_order(self):
        handler, order_repo, gateway, _, order_id, ref = _setup()
        gateway.verdicts[ref] = PaymentSucceeded(ref, order_id, AMOUNT)
        handler.handle(ref)

        gateway.verdicts[ref] = PaymentFailed(ref, order_id, "reversed")
        result = handler.handle(ref)

        assert result.success
        assert result.message == "Order already paid"
        assert order_repo.get_by_id(order_id).status == OrderStatus.PROCESSING

    def test_short_payment_treated_as_failure(self):
        handler, order_repo, gateway, notifier, order_id, ref = _setup()
        gateway.verdicts[ref] = PaymentSucceeded(ref, order_id, AMOUNT - 1)
        result = handler.handle(ref)
        assert not result.success
        assert order_repo.get_by_id(order_id).status == OrderStatus.CANCELLED
        assert notifier.sent == []


class TestVerificationErrors:

    def test_blank_reference(self):
        handler, _, gateway, _, _, _ = _setup()
        with pytest.raises(ValidationError):
            handler.handle("  ")
        assert gateway.verify_calls == []

    def test_gateway_unavailable_leaves_order_pending(self):
        handler, order_repo, gateway, _, order_id, ref = _setup()
        gateway.verdicts[ref] = GatewayUnavailableError("timeout")

        with pytest.raises(PaymentVerificationUnavailable):
            handler.handle(ref)

        assert order_repo.get_by_id(order_id).status == OrderStatus.PENDING
        assert order_repo.status_writes == 0

    def test_unavailable_then_retry_succeeds(self):
        handler, order_repo, gateway, _, order_id, ref = _setup()
        gateway.verdicts[ref] = GatewayUnavailableError("timeout")
        with pytest.raises(PaymentVerificationUnavailable):
            handler.handle(ref)

        gateway.verdicts[ref] = PaymentSucceeded(ref, order_id, AMOUNT)
        assert handler.handle(ref).success

    def test_unknown_reference(self):
        handler, order_repo, gateway, _, order_id, ref = _setup()
        gateway.verdicts[ref] = GatewayRejectedError("Transaction reference not found")
        with pytest.raises(EntityNotFoundError, match="not recognised"):
            handler.handle(ref)
        assert order_repo.get_by_id(order_id).status == OrderStatus.PENDING

    def test_verdict_for_missing_order(self):
        handler, _, gateway, _, _, _ = _setup()
        gateway.verdicts["ORDER_42_1"] = PaymentSucceeded("ORDER_42_1", 42, AMOUNT)
        with pytest.raises(EntityNotFoundError):
            handler.handle("ORDER_42_1")

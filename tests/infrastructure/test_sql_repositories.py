"""SQL repositories against SQLite, in memory and on disk."""

import threading
from decimal import Decimal

import pytest

from storefront.application.verify_payment import VerifyPaymentHandler
from storefront.domain.exceptions import DuplicateEmailError, PersistenceError
from storefront.domain.model.customer import UNUSABLE_CREDENTIAL_PREFIX, Customer
from storefront.domain.model.order import Order, OrderItem, OrderStatus
from storefront.domain.model.payment import PaymentSucceeded
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.service.pricing import CartLine, price_cart
from storefront.infrastructure.persistence.database import (
    init_schema,
    make_engine,
    make_session_factory,
)
from storefront.infrastructure.persistence.sql_customer_repository import SqlCustomerRepository
from storefront.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from storefront.infrastructure.persistence.sql_product_repository import SqlProductRepository
from tests.fakes import FakeGateway, RecordingNotifier


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    init_schema(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def customer_id(session_factory) -> int:
    customer = Customer.register("ada@example.com", "Ada", "0801", "Lagos")
    SqlCustomerRepository(session_factory).add(customer)
    return customer.id


def _order(customer_id: int) -> Order:
    breakdown = price_cart([
        CartLine("1", Decimal("100"), Decimal("20"), 10, 1),
        CartLine("2", Decimal("19.99"), Decimal("0.01"), 3, 2),
    ])
    return Order.place(customer_id, "12 Marina Road, Lagos", breakdown)


class TestSqlOrderRepository:

    def test_round_trip(self, session_factory, customer_id):
        repo = SqlOrderRepository(session_factory)
        order = _order(customer_id)
        repo.add(order)
        assert order.id is not None

        loaded = repo.get_by_id(order.id)
        assert loaded.status == OrderStatus.PENDING
        assert loaded.customer_id == customer_id
        assert loaded.subtotal == order.subtotal
        assert loaded.tax == order.tax
        assert loaded.total == order.total
        assert [i.product_id for i in loaded.items] == ["1", "2"]
        assert loaded.items[1].price == Money.of("20.00")
        assert loaded.items[1].total == Money.of("120.00")
        assert loaded.created_at.tzinfo is not None

    def test_missing_order(self, session_factory):
        assert SqlOrderRepository(session_factory).get_by_id(404) is None

    def test_conditional_transition_has_one_winner(self, session_factory, customer_id):
        repo = SqlOrderRepository(session_factory)
        order = _order(customer_id)
        repo.add(order)

        first = repo.transition_status(order.id, OrderStatus.PROCESSING, [OrderStatus.PENDING])
        second = repo.transition_status(order.id, OrderStatus.CANCELLED, [OrderStatus.PENDING])

        assert first is True
        assert second is False
        assert repo.get_by_id(order.id).status == OrderStatus.PROCESSING

    def test_transition_bumps_updated_at(self, session_factory, customer_id):
        repo = SqlOrderRepository(session_factory)
        order = _order(customer_id)
        repo.add(order)
        repo.transition_status(order.id, OrderStatus.CANCELLED, [OrderStatus.PENDING])
        assert repo.get_by_id(order.id).updated_at >= order.updated_at

    def test_transition_of_unknown_order(self, session_factory):
        repo = SqlOrderRepository(session_factory)
        assert repo.transition_status(99, OrderStatus.PROCESSING, [OrderStatus.PENDING]) is False

    def test_failed_item_insert_rolls_back_order(self, session_factory, customer_id):
        repo = SqlOrderRepository(session_factory)
        order = _order(customer_id)
        order.items.append(
            OrderItem(
                product_id=None,  # violates NOT NULL
                quantity=Quantity(1),
                min_quantity=1,
                price=Money.of("1"),
                total=Money.of("1"),
            )
        )
        with pytest.raises(PersistenceError):
            repo.add(order)
        assert order.id is None
        assert repo.get_by_id(1) is None


class TestSqlCustomerRepository:

    def test_add_and_lookup(self, session_factory, customer_id):
        repo = SqlCustomerRepository(session_factory)
        customer = repo.get_by_email(" ADA@example.com ")
        assert customer.id == customer_id
        assert customer.name == "Ada"
        assert customer.credential.startswith(UNUSABLE_CREDENTIAL_PREFIX)
        assert repo.get_by_id(customer_id).email == "ada@example.com"

    def test_duplicate_email(self, session_factory, customer_id):
        repo = SqlCustomerRepository(session_factory)
        duplicate = Customer.register("ada@example.com", "Other", "0", "x")
        with pytest.raises(DuplicateEmailError):
            repo.add(duplicate)
        assert duplicate.id is None

    def test_update_contact(self, session_factory, customer_id):
        repo = SqlCustomerRepository(session_factory)
        repo.update_contact(customer_id, "0909", "Abuja")
        customer = repo.get_by_id(customer_id)
        assert customer.phone == "0909"
        assert customer.address == "Abuja"


class TestSqlProductRepository:

    def test_save_and_lookup(self, session_factory):
        repo = SqlProductRepository(session_factory)
        repo.save(Product(id="1", name="Cement", price=Money.of("100"), profit=Money.of("20"), min_quantity=10))

        product = repo.get_by_id("1")
        assert product.unit_sale_price == Money.of("120")
        assert product.min_quantity == 10
        assert repo.get_by_name("cement").id == "1"
        assert repo.get_by_id("2") is None

    def test_save_updates_existing(self, session_factory):
        repo = SqlProductRepository(session_factory)
        product = Product(id="1", name="Cement", price=Money.of("100"), profit=Money.of("20"))
        repo.save(product)
        product.update_pricing(Money.of("150"))
        repo.save(product)

        assert [p.price for p in repo.list_all()] == [Money.of("150")]


class TestConcurrentVerification:
    """Racing verifications of one reference against a database file."""

    THREADS = 10

    def test_success_applied_once(self, tmp_path):
        engine = make_engine(f"sqlite:///{tmp_path / 'shop.db'}")
        init_schema(engine)
        session_factory = make_session_factory(engine)
        try:
            customer = Customer.register("ada@example.com", "Ada", "0801", "Lagos")
            customer_repo = SqlCustomerRepository(session_factory)
            customer_repo.add(customer)
            order_repo = SqlOrderRepository(session_factory)
            order = _order(customer.id)
            order_repo.add(order)

            ref = f"ORDER_{order.id}_1700000000000"
            gateway = FakeGateway()
            gateway.verdicts[ref] = PaymentSucceeded(ref, order.id, order.amount_minor_units)
            notifier = RecordingNotifier()
            handler = VerifyPaymentHandler(order_repo, customer_repo, gateway, notifier)

            barrier = threading.Barrier(self.THREADS)
            results, errors = [], []

            def verify():
                barrier.wait()
                try:
                    results.append(handler.handle(ref))
                except Exception as exc:  # surfaced by the assertion below
                    errors.append(exc)

            threads = [threading.Thread(target=verify) for _ in range(self.THREADS)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

            assert errors == []
            assert len(results) == self.THREADS
            assert all(r.success for r in results)
            assert sum(r.applied for r in results) == 1
            assert len(notifier.sent) == 1
            assert order_repo.get_by_id(order.id).status == OrderStatus.PROCESSING
        finally:
            engine.dispose()

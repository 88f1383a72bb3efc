"""SQLAlchemy-backed implementation of OrderRepository.

Status changes go through one ``UPDATE ... WHERE status IN (...)``
statement, so the database, not the application, decides which of two
racing writers wins.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import selectinload, sessionmaker

from storefront.domain.model.order import Order, OrderItem, OrderStatus
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository
from storefront.infrastructure.persistence.database import session_scope
from storefront.infrastructure.persistence.models import OrderItemModel, OrderModel


class SqlOrderRepository(OrderRepository):

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> None:
        row = self._to_row(order)
        with session_scope(self._session_factory, "Creating order") as session:
            session.add(row)
            session.flush()
            new_id = row.id
        order.id = new_id

    def get_by_id(self, order_id: int) -> Order | None:
        stmt = (
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .options(selectinload(OrderModel.items))
        )
        with session_scope(self._session_factory, f"Loading order {order_id}") as session:
            row = session.execute(stmt).scalar_one_or_none()
            return self._to_domain(row) if row is not None else None

    def transition_status(
        self,
        order_id: int,
        target: OrderStatus,
        from_statuses: Iterable[OrderStatus],
    ) -> bool:
        allowed = [status.value for status in from_statuses]
        if not allowed:
            return False
        stmt = (
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status.in_(allowed))
            .values(status=target.value, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        with session_scope(self._session_factory, f"Updating order {order_id}") as session:
            result = session.execute(stmt)
        return result.rowcount == 1

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_row(order: Order) -> OrderModel:
        return OrderModel(
            customer_id=order.customer_id,
            status=order.status.value,
            subtotal=order.subtotal.amount,
            tax=order.tax.amount,
            shipping=order.shipping.amount,
            total=order.total.amount,
            currency=order.total.currency,
            shipping_address=order.shipping_address,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                OrderItemModel(
                    product_id=item.product_id,
                    quantity=item.quantity.value,
                    min_quantity=item.min_quantity,
                    price=item.price.amount,
                    total=item.total.amount,
                )
                for item in order.items
            ],
        )

    @staticmethod
    def _to_domain(row: OrderModel) -> Order:
        currency = row.currency
        return Order(
            id=row.id,
            customer_id=row.customer_id,
            shipping_address=row.shipping_address,
            items=[
                OrderItem(
                    product_id=item.product_id,
                    quantity=Quantity(item.quantity),
                    min_quantity=item.min_quantity,
                    price=Money(item.price, currency),
                    total=Money(item.total, currency),
                )
                for item in row.items
            ],
            subtotal=Money(row.subtotal, currency),
            tax=Money(row.tax, currency),
            shipping=Money(row.shipping, currency),
            total=Money(row.total, currency),
            status=OrderStatus(row.status),
            created_at=_as_utc(row.created_at),
            updated_at=_as_utc(row.updated_at),
        )


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

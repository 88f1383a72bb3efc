"""Application service: Show Order use case (query)."""

from __future__ import annotations

from storefront.application.dto import OrderDTO, OrderItemDTO
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.order import Order
from storefront.domain.repository.order_repository import OrderRepository

_TIMESTAMP = "%Y-%m-%d %H:%M UTC"


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return self._to_dto(order)

    @staticmethod
    def _to_dto(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            customer_id=order.customer_id,
            status=order.status.value,
            shipping_address=order.shipping_address,
            items=[
                OrderItemDTO(
                    product_id=item.product_id,
                    quantity=item.quantity.value,
                    min_quantity=item.min_quantity,
                    unit_price=str(item.price),
                    line_total=str(item.total),
                )
                for item in order.items
            ],
            subtotal=str(order.subtotal),
            tax=str(order.tax),
            shipping=str(order.shipping),
            total=str(order.total),
            created_at=order.created_at.strftime(_TIMESTAMP),
            updated_at=order.updated_at.strftime(_TIMESTAMP),
        )

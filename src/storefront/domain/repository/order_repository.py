"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from storefront.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order with all its items in one transaction.

        Assigns ``order.id``.  Raises PersistenceError and writes nothing
        if any part fails.
        """

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def transition_status(
        self,
        order_id: int,
        target: OrderStatus,
        from_statuses: Iterable[OrderStatus],
    ) -> bool:
        """Atomically set ``status = target`` if the current status is one of
        ``from_statuses``.

        Must be a single conditional write, never a read followed by a
        write.  Returns True when a row changed; ``updated_at`` moves only
        then.
        """

"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items.  Monetary fields
are fixed when the order is placed; afterwards only ``status`` changes,
and only through the repository's conditional transition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.service.pricing import PriceBreakdown


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_paid(self) -> bool:
        return self in PAID_STATUSES

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self]


PAID_STATUSES = frozenset(
    {OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED}
)

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset(
        {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
    ),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def payment_sources(target: OrderStatus) -> tuple[OrderStatus, ...]:
    """Statuses a payment outcome may move to ``target``.

    Paid orders are excluded: payment reconciliation never touches an order
    once money has been recorded against it.
    """
    return tuple(
        status for status in OrderStatus
        if not status.is_paid and status.can_transition_to(target)
    )


@dataclass(frozen=True)
class OrderItem:
    """Snapshot of one cart line at order-creation time.

    ``price`` is the unit sale price (base + profit) and ``total`` the
    line total; neither is ever recomputed from the live catalog.
    """

    product_id: str
    quantity: Quantity  # cartons
    min_quantity: int  # units per carton
    price: Money
    total: Money


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MIN_CHARGE = Money(Decimal("1.00"))


def ensure_chargeable(total: Money) -> None:
    """Reject totals the payment provider would refuse to charge."""
    if total < MIN_CHARGE:
        raise ValidationError(f"Order total {total} below minimum charge {MIN_CHARGE}")


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.place()`` factory for new orders — it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    customer_id: int
    shipping_address: str
    items: list[OrderItem]
    subtotal: Money
    tax: Money
    shipping: Money
    total: Money
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def place(
        customer_id: int,
        shipping_address: str,
        breakdown: PriceBreakdown,
    ) -> Order:
        """Create a new pending order from a priced cart."""
        if not shipping_address or not shipping_address.strip():
            raise ValidationError("Shipping address is required")

        ensure_chargeable(breakdown.total)

        items = [
            OrderItem(
                product_id=line.line.product_id,
                quantity=Quantity(line.line.carton_quantity),
                min_quantity=line.line.min_quantity,
                price=line.unit_sale_price.rounded(),  # <-- price snapshot
                total=line.subtotal.rounded(),
            )
            for line in breakdown.lines
        ]

        now = datetime.now(timezone.utc)
        return Order(
            id=None,
            customer_id=customer_id,
            shipping_address=shipping_address.strip(),
            items=items,
            subtotal=breakdown.subtotal,
            tax=breakdown.tax,
            shipping=breakdown.shipping,
            total=breakdown.total,
            created_at=now,
            updated_at=now,
        )

    # --- Computed properties --------------------------------------------------

    @property
    def amount_minor_units(self) -> int:
        return self.total.to_minor_units()

"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI/HTTP and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class CartItemSpec:
    """Input: one cart entry as the client sent it.

    ``price`` is what the client displayed; it is informational only,
    the catalog price is authoritative.
    """

    product_id: str
    quantity: int
    name: str = ""
    price: Decimal | None = None
    min_quantity: int | None = None


@dataclass(frozen=True)
class CheckoutRequest:
    """Input: everything the checkout form submits."""

    email: str
    customer_name: str
    shipping_address: str
    contact_number: str
    items: list[CartItemSpec]
    amount: Decimal | None = None  # client-computed, informational only


@dataclass(frozen=True)
class PlacedOrderDTO:
    """Output: a freshly created pending order."""

    order_id: int
    customer_id: int
    email: str
    subtotal: str
    tax: str
    shipping: str
    total: str
    amount_minor_units: int


@dataclass(frozen=True)
class PaymentInitializationDTO:
    order_id: int
    authorization_url: str
    access_code: str
    reference: str


@dataclass(frozen=True)
class VerificationResultDTO:
    """Output of the verification endpoint.

    ``success`` is True only when the order is paid; clients clear their
    cart on nothing else.
    """

    success: bool
    order_id: int | None
    message: str
    reference: str
    order_status: str | None = None
    applied: bool = False


@dataclass(frozen=True)
class OrderItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: str
    quantity: int
    min_quantity: int
    unit_price: str  # formatted, e.g. "₦120.00"
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    customer_id: int
    status: str
    shipping_address: str
    items: list[OrderItemDTO] = field(default_factory=list)
    subtotal: str = ""
    tax: str = ""
    shipping: str = ""
    total: str = ""
    created_at: str = ""
    updated_at: str = ""

"""Pricing engine — pure functions that turn cart lines into order totals.

Business rules:
- a line costs ``(unit_price + unit_profit) * min_quantity * cartons``
- tax is 7.5% of the *margin* (profit), not of the gross price
- shipping is free

Every figure is summed at full Decimal precision and rounded exactly once,
so ``total == subtotal + tax + shipping`` holds to the cent.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from storefront.domain.exceptions import EmptyCartError, InvalidLineError
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import DEFAULT_CURRENCY, Money

TAX_RATE = Decimal("0.075")
SHIPPING_FEE = Decimal("0")


@dataclass(frozen=True)
class CartLine:
    """One cart entry: a product counted in cartons."""

    product_id: str
    unit_price: Decimal
    unit_profit: Decimal
    min_quantity: int
    carton_quantity: int

    @staticmethod
    def for_product(product: Product, cartons: int) -> CartLine:
        return CartLine(
            product_id=product.id,
            unit_price=product.price.amount,
            unit_profit=product.profit.amount,
            min_quantity=product.min_quantity,
            carton_quantity=cartons,
        )

    @property
    def units(self) -> int:
        return self.min_quantity * self.carton_quantity


@dataclass(frozen=True)
class LinePrice:
    line: CartLine
    unit_sale_price: Money
    subtotal: Money
    profit: Money


@dataclass(frozen=True)
class PriceBreakdown:
    lines: tuple[LinePrice, ...]
    subtotal: Money
    tax: Money
    shipping: Money
    total: Money


def price_line(line: CartLine, currency: str = DEFAULT_CURRENCY) -> LinePrice:
    """Price a single line without rounding."""
    _validate_line(line)
    unit_sale_price = Money(line.unit_price + line.unit_profit, currency)
    return LinePrice(
        line=line,
        unit_sale_price=unit_sale_price,
        subtotal=unit_sale_price * line.units,
        profit=Money(line.unit_profit, currency) * line.units,
    )


def price_cart(lines: list[CartLine], currency: str = DEFAULT_CURRENCY) -> PriceBreakdown:
    """Compute subtotal, tax, shipping and total for a whole cart."""
    if not lines:
        raise EmptyCartError("Cart is empty")

    priced = tuple(price_line(line, currency) for line in lines)

    subtotal = Money.zero(currency)
    profit = Money.zero(currency)
    for item in priced:
        subtotal = subtotal + item.subtotal
        profit = profit + item.profit

    subtotal = subtotal.rounded()
    tax = (profit * TAX_RATE).rounded()
    shipping = Money(SHIPPING_FEE, currency).rounded()

    return PriceBreakdown(
        lines=priced,
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        total=subtotal + tax + shipping,
    )


def _validate_line(line: CartLine) -> None:
    for label, qty in (("carton quantity", line.carton_quantity), ("units per carton", line.min_quantity)):
        if isinstance(qty, bool) or not isinstance(qty, int):
            raise InvalidLineError(
                f"Product '{line.product_id}': {label} must be an integer"
            )
        if qty < 1:
            raise InvalidLineError(
                f"Product '{line.product_id}': {label} must be at least 1, got {qty}"
            )
    for label, amount in (("price", line.unit_price), ("profit", line.unit_profit)):
        if not isinstance(amount, Decimal) or not amount.is_finite():
            raise InvalidLineError(f"Product '{line.product_id}': {label} must be a Decimal")
        if amount < 0:
            raise InvalidLineError(
                f"Product '{line.product_id}': {label} cannot be negative, got {amount}"
            )

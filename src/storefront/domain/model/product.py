"""Product aggregate.

Products live independently of orders. They have their own lifecycle:
prices change, products are added and removed from the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog.

    ``price`` is the base cost per unit and ``profit`` the margin added on
    top of it; customers pay both.  Products are sold in cartons of
    ``min_quantity`` units.
    """

    id: str
    name: str
    price: Money
    profit: Money
    min_quantity: int = 1

    def __post_init__(self) -> None:
        if isinstance(self.min_quantity, bool) or not isinstance(self.min_quantity, int):
            raise ValidationError("Units per carton must be an integer")
        if self.min_quantity < 1:
            raise ValidationError("Units per carton must be at least 1")

    @property
    def unit_sale_price(self) -> Money:
        return self.price + self.profit

    def update_pricing(self, price: Money, profit: Money | None = None) -> None:
        """Change the product price (and optionally its margin).

        This does NOT affect any existing orders because orders
        capture a price snapshot at creation time.
        """
        if price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = price
        if profit is not None:
            self.profit = profit

"""Application services: catalog maintenance.

Catalog prices feed every *new* checkout.  Orders already placed keep the
unit price and line totals they were created with, so nothing here
touches the order tables.
"""

from __future__ import annotations

from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, name: str, price: str, profit: str = "0", min_quantity: int = 1) -> Product:
        """Add a product sold in cartons of ``min_quantity`` units."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Product name is required")
        if self._product_repo.get_by_name(name) is not None:
            raise ValidationError(f"Product '{name}' already exists")

        base = Money.of(price)
        if base.amount <= 0:
            raise ValidationError("Product price must be greater than zero")

        product = Product(
            id=self._next_id(),
            name=name,
            price=base,
            profit=Money.of(profit),
            min_quantity=min_quantity,
        )
        self._product_repo.save(product)
        logger.info(
            f"Product {product.id} '{product.name}' added: {product.unit_sale_price} "
            f"per unit, {product.min_quantity} per carton"
        )
        return product

    def _next_id(self) -> str:
        # hand-entered ids that are not numeric are skipped
        numeric = [int(p.id) for p in self._product_repo.list_all() if p.id.isdigit()]
        return str(max(numeric) + 1) if numeric else "1"


class UpdateProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, product_id: str, new_price: str, new_profit: str | None = None) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        before = product.unit_sale_price
        profit = Money.of(new_profit) if new_profit is not None else None
        product.update_pricing(Money.of(new_price), profit)
        self._product_repo.save(product)

        logger.info(f"Product {product.id} repriced {before} -> {product.unit_sale_price}")
        return product

"""SQLAlchemy-backed implementation of ProductRepository."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository
from storefront.infrastructure.persistence.database import session_scope
from storefront.infrastructure.persistence.models import ProductModel


class SqlProductRepository(ProductRepository):

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        with session_scope(self._session_factory, "Product lookup") as session:
            row = session.get(ProductModel, product_id)
            return self._to_domain(row) if row is not None else None

    def get_by_name(self, name: str) -> Product | None:
        stmt = select(ProductModel).where(func.lower(ProductModel.name) == name.strip().lower())
        with session_scope(self._session_factory, "Product lookup") as session:
            row = session.execute(stmt).scalar_one_or_none()
            return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Product]:
        with session_scope(self._session_factory, "Product listing") as session:
            rows = session.execute(select(ProductModel).order_by(ProductModel.id)).scalars().all()
            return [self._to_domain(row) for row in rows]

    def save(self, product: Product) -> None:
        with session_scope(self._session_factory, f"Saving product '{product.id}'") as session:
            session.merge(
                ProductModel(
                    id=product.id,
                    name=product.name,
                    price=product.price.amount,
                    profit=product.profit.amount,
                    min_quantity=product.min_quantity,
                    currency=product.price.currency,
                )
            )

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_domain(row: ProductModel) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            price=Money(row.price, row.currency),
            profit=Money(row.profit, row.currency),
            min_quantity=row.min_quantity,
        )

"""Catalog lookups used when pricing a cart, plus catalog maintenance."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Current catalog entry for ``product_id``; checkout prices from this."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Case-insensitive name lookup, used to keep names unique."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        ...

    @abstractmethod
    def save(self, product: Product) -> None:
        """Insert or overwrite by id."""

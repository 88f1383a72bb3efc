"""Abstract repository for Customer records."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.customer import Customer


class CustomerRepository(ABC):

    @abstractmethod
    def get_by_email(self, email: str) -> Customer | None:
        """Return the customer with this (normalized) email, or None."""

    @abstractmethod
    def get_by_id(self, customer_id: int) -> Customer | None:
        """Return a customer by ID, or None if not found."""

    @abstractmethod
    def add(self, customer: Customer) -> None:
        """Insert a new customer and assign ``customer.id``.

        Raises DuplicateEmailError when the email is already taken; the
        unique constraint is the only arbiter of that race.
        """

    @abstractmethod
    def update_contact(self, customer_id: int, phone: str, address: str) -> None:
        """Overwrite phone and address (last write wins)."""

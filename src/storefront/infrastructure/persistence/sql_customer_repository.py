"""SQLAlchemy-backed implementation of CustomerRepository."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from storefront.domain.exceptions import DuplicateEmailError, PersistenceError
from storefront.domain.model.customer import Customer, normalize_email
from storefront.domain.repository.customer_repository import CustomerRepository
from storefront.infrastructure.persistence.database import session_scope
from storefront.infrastructure.persistence.models import CustomerModel


class SqlCustomerRepository(CustomerRepository):

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    # --- CustomerRepository interface -----------------------------------------

    def get_by_email(self, email: str) -> Customer | None:
        stmt = select(CustomerModel).where(CustomerModel.email == normalize_email(email))
        with session_scope(self._session_factory, "Customer lookup") as session:
            row = session.execute(stmt).scalar_one_or_none()
            return self._to_domain(row) if row is not None else None

    def get_by_id(self, customer_id: int) -> Customer | None:
        with session_scope(self._session_factory, "Customer lookup") as session:
            row = session.get(CustomerModel, customer_id)
            return self._to_domain(row) if row is not None else None

    def add(self, customer: Customer) -> None:
        row = CustomerModel(
            email=customer.email,
            name=customer.name,
            password=customer.credential,
            phone=customer.phone,
            address=customer.address,
        )
        try:
            with self._session_factory.begin() as session:
                session.add(row)
                session.flush()
                new_id = row.id
        except IntegrityError as exc:
            raise DuplicateEmailError(f"Customer {customer.email} already exists") from exc
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Creating customer {customer.email} failed: {exc}") from exc
        customer.id = new_id

    def update_contact(self, customer_id: int, phone: str, address: str) -> None:
        stmt = (
            update(CustomerModel)
            .where(CustomerModel.id == customer_id)
            .values(phone=phone, address=address)
        )
        with session_scope(self._session_factory, f"Updating customer {customer_id}") as session:
            session.execute(stmt)

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_domain(row: CustomerModel) -> Customer:
        return Customer(
            id=row.id,
            email=row.email,
            name=row.name,
            phone=row.phone or "",
            address=row.address or "",
            credential=row.password,
        )

"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and HTTP layers can catch them uniformly and display
user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EmptyCartError(ValidationError):
    """Checkout was attempted with no cart lines."""


class InvalidLineError(ValidationError):
    """A cart line has a non-positive quantity or a negative amount."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class PersistenceError(DomainException):
    """The backing store failed to read or write."""


class DuplicateEmailError(PersistenceError):
    """A customer with this email already exists."""


class OrderCreationFailed(DomainException):
    """The order could not be stored; nothing was written."""


class PaymentError(DomainException):
    """Base class for payment pipeline failures."""


class PaymentInitializationFailed(PaymentError):
    """The gateway refused or could not be reached; the order was cancelled."""

    def __init__(self, message: str, order_id: int | None = None) -> None:
        super().__init__(message)
        self.order_id = order_id


class PaymentVerificationUnavailable(PaymentError):
    """The gateway could not be asked; the order status was left untouched."""

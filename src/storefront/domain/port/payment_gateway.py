"""Port to the external payment provider.

The gateway only reports what the provider says; it never decides order
state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.payment import (
    PaymentInitialization,
    PaymentRequest,
    PaymentVerdict,
)


class GatewayError(Exception):
    """Base class for provider communication failures."""


class GatewayNotConfiguredError(GatewayError):
    """Credentials for the provider are missing."""


class GatewayUnavailableError(GatewayError):
    """Network failure, timeout, 5xx or an unreadable body. Retryable."""


class GatewayRejectedError(GatewayError):
    """The provider understood the request and refused it."""


class PaymentGateway(ABC):

    @abstractmethod
    def initialize(self, request: PaymentRequest) -> PaymentInitialization:
        """Open a transaction and return the customer's redirect handle."""

    @abstractmethod
    def verify(self, reference: str) -> PaymentVerdict:
        """Fetch the authoritative outcome of ``reference``.

        A pure read on the provider side; safe to call repeatedly.
        """

"""Customer entity.

Customers are resolved by email at checkout.  A first purchase creates
the record with a placeholder credential; later checkouts overwrite the
contact details with whatever the customer entered last.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass

from storefront.domain.exceptions import ValidationError

# Stored credentials starting with this marker never match any password.
UNUSABLE_CREDENTIAL_PREFIX = "!"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def unusable_credential() -> str:
    return UNUSABLE_CREDENTIAL_PREFIX + secrets.token_urlsafe(32)


@dataclass
class Customer:

    id: int | None
    email: str
    name: str
    phone: str
    address: str
    credential: str

    @staticmethod
    def register(email: str, name: str, phone: str, address: str) -> Customer:
        """Create a checkout-only customer who cannot sign in yet."""
        email = normalize_email(email)
        if not email or "@" not in email:
            raise ValidationError(f"Invalid email address: {email!r}")
        display_name = name.strip() if name and name.strip() else email.split("@")[0]
        return Customer(
            id=None,
            email=email,
            name=display_name,
            phone=phone.strip(),
            address=address.strip(),
            credential=unusable_credential(),
        )

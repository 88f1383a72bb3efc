"""Payment attempt values and the gateway's verdict on them.

A verdict is one of three tagged variants so callers branch on type
rather than on loosely-typed provider strings.
"""

from __future__ import annotations

import re
import threading
import time
from dataclasses import dataclass
from typing import Callable, Union

_REFERENCE_PATTERN = re.compile(r"^ORDER_(?P<order_id>\d+)_(?P<stamp>\d+)$")


@dataclass(frozen=True)
class PaymentRequest:
    """What the gateway needs to open a transaction."""

    order_id: int
    customer_id: int
    email: str
    amount_minor_units: int
    reference: str
    callback_url: str
    line_summary: tuple[dict, ...] = ()


@dataclass(frozen=True)
class PaymentInitialization:
    authorization_url: str
    access_code: str
    reference: str


@dataclass(frozen=True)
class PaymentSucceeded:
    reference: str
    order_id: int
    amount_minor_units: int


@dataclass(frozen=True)
class PaymentFailed:
    reference: str
    order_id: int
    reason: str
    amount_minor_units: int = 0


@dataclass(frozen=True)
class PaymentPending:
    reference: str
    order_id: int
    provider_status: str


PaymentVerdict = Union[PaymentSucceeded, PaymentFailed, PaymentPending]


def order_id_from_reference(reference: str) -> int | None:
    match = _REFERENCE_PATTERN.match(reference)
    if match is None:
        return None
    return int(match.group("order_id"))


class ReferenceFactory:
    """Issues ``ORDER_<id>_<millis>`` references.

    Stamps are strictly increasing within the process, so two attempts
    for the same order never share a reference even inside one millisecond.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def new_reference(self, order_id: int) -> str:
        with self._lock:
            stamp = max(int(self._clock() * 1000), self._last + 1)
            self._last = stamp
        return f"ORDER_{order_id}_{stamp}"

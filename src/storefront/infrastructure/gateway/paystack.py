"""Paystack adapter for the PaymentGateway port.

Talks to the transaction initialize and verify endpoints over requests.
Only verification is retried.
"""

import json
from urllib.parse import quote

import requests

from storefront.domain.model.payment import (
    PaymentFailed,
    PaymentInitialization,
    PaymentPending,
    PaymentRequest,
    PaymentSucceeded,
    PaymentVerdict,
    order_id_from_reference,
)
from storefront.domain.port.payment_gateway import (
    GatewayNotConfiguredError,
    GatewayRejectedError,
    GatewayUnavailableError,
    PaymentGateway,
)
from storefront.utils.logging import get_logger
from storefront.utils.retry import http_retry

logger = get_logger(__name__)

FAILED_STATUSES = frozenset({"failed", "abandoned", "reversed"})


class PaystackGateway(PaymentGateway):
    """Paystack transaction API client.

    ``initialize`` is attempted once: replaying it could hit a reference the
    provider already accepted.  ``verify`` is a read and is retried with
    backoff on transport errors and 5xx.
    """

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.paystack.co",
        timeout: float = 10,
        session: requests.Session | None = None,
        retry_attempts: int = 3,
        retry_min_wait: float = 0.3,
        retry_max_wait: float = 3,
    ):
        if not secret_key:
            raise GatewayNotConfiguredError("PAYSTACK_SECRET_KEY is not set")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._headers = {
            "Authorization": f"Bearer {secret_key}",
            "Content-Type": "application/json",
        }
        self._fetch_verification = http_retry(
            retry_attempts, retry_min_wait, retry_max_wait
        )(self._fetch_verification_once)

    # --- PaymentGateway -------------------------------------------------------

    def initialize(self, request: PaymentRequest) -> PaymentInitialization:
        url = f"{self.base_url}/transaction/initialize"
        payload = {
            "email": request.email,
            "amount": request.amount_minor_units,
            "reference": request.reference,
            "callback_url": request.callback_url,
            "metadata": {
                "orderId": request.order_id,
                "customerId": request.customer_id,
                "cartItems": list(request.line_summary),
            },
        }
        logger.info(f"Paystack POST {url} reference={request.reference}")

        try:
            resp = self._session.post(url, json=payload, headers=self._headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise GatewayUnavailableError(f"Paystack unreachable: {exc}") from exc

        body = self._read_body(resp)
        data = body.get("data")
        if not body.get("status") or not isinstance(data, dict):
            raise GatewayRejectedError(body.get("message") or "Payment initialization failed")

        try:
            return PaymentInitialization(
                authorization_url=data["authorization_url"],
                access_code=data["access_code"],
                reference=data.get("reference") or request.reference,
            )
        except KeyError as exc:
            raise GatewayUnavailableError(f"Paystack response missing {exc}") from exc

    def verify(self, reference: str) -> PaymentVerdict:
        try:
            resp = self._fetch_verification(reference)
        except requests.RequestException as exc:
            raise GatewayUnavailableError(f"Paystack verification unavailable: {exc}") from exc

        body = self._read_body(resp)
        data = body.get("data")
        if not body.get("status") or not isinstance(data, dict):
            raise GatewayRejectedError(body.get("message") or "Invalid payment response")

        return self._to_verdict(reference, data)

    # --- HTTP -----------------------------------------------------------------

    def _fetch_verification_once(self, reference: str) -> requests.Response:
        url = f"{self.base_url}/transaction/verify/{quote(reference, safe='')}"
        logger.info(f"Paystack GET {url}")
        resp = self._session.get(url, headers=self._headers, timeout=self.timeout)
        if resp.status_code >= 500:
            resp.raise_for_status()
        return resp

    @staticmethod
    def _read_body(resp) -> dict:
        if resp.status_code >= 500:
            raise GatewayUnavailableError(f"Paystack returned HTTP {resp.status_code}")
        try:
            body = resp.json()
        except ValueError as exc:
            raise GatewayUnavailableError(
                f"Paystack returned an unreadable body (HTTP {resp.status_code})"
            ) from exc
        if not isinstance(body, dict):
            raise GatewayUnavailableError("Paystack returned an unexpected body")
        if resp.status_code >= 400:
            raise GatewayRejectedError(body.get("message") or f"HTTP {resp.status_code}")
        return body

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_verdict(reference: str, data: dict) -> PaymentVerdict:
        reference = data.get("reference") or reference
        order_id = _order_id(data.get("metadata"), reference)
        status = str(data.get("status") or "").lower()
        try:
            amount = int(data.get("amount") or 0)
        except (TypeError, ValueError) as exc:
            raise GatewayUnavailableError(
                f"Paystack returned a non-numeric amount for {reference}: {data.get('amount')!r}"
            ) from exc

        if status == "success":
            return PaymentSucceeded(reference=reference, order_id=order_id, amount_minor_units=amount)
        if status in FAILED_STATUSES:
            reason = data.get("gateway_response") or status
            return PaymentFailed(
                reference=reference, order_id=order_id, reason=reason, amount_minor_units=amount
            )
        return PaymentPending(reference=reference, order_id=order_id, provider_status=status or "unknown")


def _order_id(metadata, reference: str) -> int:
    # metadata comes back as an object or as a JSON-encoded string
    if isinstance(metadata, str):
        try:
            metadata = json.loads(metadata)
        except ValueError:
            metadata = None
    if isinstance(metadata, dict) and metadata.get("orderId") is not None:
        try:
            return int(metadata["orderId"])
        except (TypeError, ValueError):
            pass

    order_id = order_id_from_reference(reference)
    if order_id is None:
        raise GatewayRejectedError(f"Order ID not found in payment metadata for {reference}")
    return order_id

"""Wiring of repositories, gateway and notifier into use-case handlers."""

from fastapi import HTTPException

from storefront.application.initialize_payment import InitializePaymentHandler
from storefront.application.place_order import PlaceOrderHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.application.verify_payment import VerifyPaymentHandler
from storefront.domain.port.payment_gateway import GatewayNotConfiguredError
from storefront.infrastructure import bootstrap
from storefront.utils import settings
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def get_place_order_handler() -> PlaceOrderHandler:
    return bootstrap.place_order_handler()


def get_initialize_payment_handler() -> InitializePaymentHandler:
    try:
        return bootstrap.initialize_payment_handler()
    except GatewayNotConfiguredError as exc:
        logger.error(str(exc))
        raise HTTPException(status_code=500, detail="Payment service not configured")


def get_verify_payment_handler() -> VerifyPaymentHandler:
    try:
        return bootstrap.verify_payment_handler()
    except GatewayNotConfiguredError as exc:
        logger.error(str(exc))
        raise HTTPException(status_code=500, detail="Payment service not configured")


def get_show_order_handler() -> ShowOrderHandler:
    return bootstrap.show_order_handler()


def get_public_key() -> str:
    return settings.PAYSTACK_PUBLIC_KEY

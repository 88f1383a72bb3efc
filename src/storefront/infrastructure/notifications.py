"""Notifier adapter that writes outgoing emails to the log."""

from storefront.domain.port.notifier import Notifier
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class LoggingNotifier(Notifier):
    """Records outgoing messages in the log instead of delivering them.

    Stands in for a mail provider until one is configured.
    """

    def send_email(self, recipient: str, template: str, context: dict) -> None:
        logger.info(f"[EMAIL] {template} -> {recipient}: {context}")

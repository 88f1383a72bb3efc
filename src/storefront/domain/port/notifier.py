"""Port for transactional messages to customers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class NotificationError(Exception):
    """The message could not be handed to the delivery service."""


class Notifier(ABC):

    @abstractmethod
    def send_email(self, recipient: str, template: str, context: dict) -> None:
        """Deliver ``template`` rendered with ``context`` to ``recipient``."""

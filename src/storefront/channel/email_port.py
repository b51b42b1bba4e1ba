"""Outbound email used for customer notifications."""

from abc import ABC, abstractmethod


class EmailPort(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> dict:
        """Deliver one notification email.

        Returns a dict with ``message_id`` and ``status`` ("sent" or "failed"),
        plus ``error`` on failure. Adapters may also raise on transport errors;
        the dispatcher logs either outcome and carries on.
        """
        ...

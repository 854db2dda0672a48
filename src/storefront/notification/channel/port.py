"""Notifier port: the narrow interface order workflows use to reach customers."""

from abc import ABC, abstractmethod


class Notifier(ABC):
    @abstractmethod
    def notify(self, user_id: str, event_kind: str, payload: dict) -> dict:
        """Deliver a notification.

        Returns:
            Dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...

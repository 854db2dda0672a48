"""Fake notifier: records notifications for testing."""

from uuid import uuid4

from storefront.notification.channel.port import Notifier


class FakeNotifier(Notifier):
    """Notifier that records messages in memory for test assertions."""

    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.raise_on_send = False
        self.failure_reason = "Notification delivery failed"

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Notification delivery failed",
        raise_on_send: bool = False,
    ):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.raise_on_send = raise_on_send

    def notify(self, user_id: str, event_kind: str, payload: dict) -> dict:
        if self.raise_on_send:
            raise ConnectionError(self.failure_reason)
        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"notif-{uuid4().hex[:12]}"
        self.sent.append(
            {
                "message_id": message_id,
                "user_id": user_id,
                "event_kind": event_kind,
                "payload": payload,
            }
        )
        return {"message_id": message_id, "status": "sent"}

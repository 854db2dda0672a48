"""Notifier that writes notifications to the structured log instead of delivering them."""

from uuid import uuid4

import structlog

from storefront.notification.channel.port import Notifier

logger = structlog.get_logger(__name__)


class LogNotifier(Notifier):
    def notify(self, user_id: str, event_kind: str, payload: dict) -> dict:
        message_id = f"log-{uuid4().hex[:12]}"
        logger.info("Notification", message_id=message_id, user_id=user_id, event_kind=event_kind, **payload)
        return {"message_id": message_id, "status": "sent"}

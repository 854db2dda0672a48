"""Notifier registry: pluggable customer notification channel.

Uses the fake notifier by default. Set NOTIFIER=log to write notifications
to the application log instead.
"""

import os

from storefront.notification.channel.port import Notifier

_notifier_instance: Notifier | None = None


def get_notifier() -> Notifier:
    """Return the configured notifier (singleton)."""
    global _notifier_instance
    if _notifier_instance is None:
        adapter = os.environ.get("NOTIFIER", "fake")
        if adapter == "fake":
            from storefront.notification.channel.fake_notifier import FakeNotifier

            _notifier_instance = FakeNotifier()
        elif adapter == "log":
            from storefront.notification.channel.log_notifier import LogNotifier

            _notifier_instance = LogNotifier()
        else:
            raise ValueError(f"Unknown notifier: {adapter}")
    return _notifier_instance


def set_notifier(notifier: Notifier) -> None:
    global _notifier_instance
    _notifier_instance = notifier


def reset_notifier():
    """Reset the notifier singleton (useful for testing)."""
    global _notifier_instance
    _notifier_instance = None

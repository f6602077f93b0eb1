"""Data-change broadcast for registers and checks."""

from ferrocash.notifications.notifier import ChangeNotifier
from ferrocash.notifications.sinks import NotificationSink, SubscriberHub, WebhookSink

__all__ = ["ChangeNotifier", "NotificationSink", "SubscriberHub", "WebhookSink"]

"""HitExport notifiers package."""

from hitexport.notifiers.base import BaseNotifier, LogNotifier, build_payload
from hitexport.notifiers.webhook import WebhookNotifier

__all__ = [
    "BaseNotifier",
    "LogNotifier",
    "WebhookNotifier",
    "build_payload",
]

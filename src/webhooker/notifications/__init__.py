"""Notifications — stream event decoding and webhook delivery.

Provides:
- ``NotificationEvent`` — one decoded inbound frame
- ``WebhookPayload`` — the outbound JSON body
- ``WebhookForwarder`` — posts one event to the webhook
- ``render`` — Markdown to HTML
"""

from __future__ import annotations

from webhooker.notifications.events import NotificationEvent, WebhookPayload
from webhooker.notifications.markup import render
from webhooker.notifications.webhook import WebhookForwarder

__all__ = [
    "NotificationEvent",
    "WebhookForwarder",
    "WebhookPayload",
    "render",
]

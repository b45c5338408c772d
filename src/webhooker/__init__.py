"""webhooker — relay a push-notification stream to an outbound webhook."""

from __future__ import annotations

__version__ = "1.0.0"
__title__ = "WebhookerPlugin"
__author__ = "KiMi"
__description__ = "Plugin for forwarding messages to webhook"
__license__ = "MIT"

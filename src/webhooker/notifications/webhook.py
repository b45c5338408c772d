"""Webhook delivery: one notification event becomes one JSON POST.

There is no retry, batching or queueing: a failed POST is reported to the
caller and the event is dropped.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import httpx

from webhooker.errors.relay_errors import EncodingError, NetworkError
from webhooker.notifications.events import WebhookPayload
from webhooker.notifications.markup import render

if TYPE_CHECKING:
    from collections.abc import Callable

    from webhooker.config.settings import ForwarderConfig
    from webhooker.notifications.events import NotificationEvent

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
_HEADERS = {"Content-Type": "application/json"}


class WebhookForwarder:
    """Posts notification events to a webhook URL.

    Usage::

        fwd = WebhookForwarder(config)
        await fwd.connect()
        try:
            await fwd.forward("https://example.com/hook", event)
        finally:
            await fwd.close()
    """

    def __init__(
        self,
        config: ForwarderConfig | None = None,
        *,
        renderer: Callable[[str], str] = render,
    ) -> None:
        self._timeout = config.timeout if config is not None else DEFAULT_TIMEOUT
        self._render = renderer
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:  # noqa: ASYNC910
        """Create the underlying HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    def build_payload(self, event: NotificationEvent) -> WebhookPayload:
        """Map an event to its webhook payload; ``html`` is always rendered."""
        return WebhookPayload(
            username=event.title,
            text=event.body,
            html=self._render(event.body),
        )

    async def forward(self, endpoint: str, event: NotificationEvent) -> None:
        """POST *event* to *endpoint* as JSON.

        The response status is logged but not treated as a failure.

        Raises:
            EncodingError: If the payload cannot be serialized.
            NetworkError: If the request cannot be built or the transport fails.
        """
        payload = self.build_payload(event)
        logger.info("Sending: %s", payload)

        try:
            body = json.dumps(payload.to_dict(), ensure_ascii=False, separators=(",", ":"))
            content = body.encode("utf-8")
        except (TypeError, ValueError) as exc:
            msg = f"Failed to encode webhook payload: {exc}"
            raise EncodingError(msg) from exc

        if self._client is None:
            msg = "Webhook client not connected. Call connect() first."
            raise NetworkError(msg)

        try:
            resp = await self._client.post(endpoint, content=content, headers=_HEADERS)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            msg = f"POST to {endpoint} failed: {exc}"
            raise NetworkError(msg) from exc

        if resp.status_code >= 400:
            logger.warning("Webhook %s returned %d", endpoint, resp.status_code)

"""Event types for the relay.

- ``NotificationEvent`` — one decoded inbound stream frame
- ``WebhookPayload`` — the JSON body posted to the webhook
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any

from webhooker.errors.relay_errors import DecodeError


def _text_field(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        msg = f"field {key!r} must be a string, got {type(value).__name__}"
        raise DecodeError(msg)
    return value


@dataclass(frozen=True)
class NotificationEvent:
    """A push notification received from the stream."""

    title: str = ""
    body: str = ""

    @classmethod
    def from_frame(cls, frame: str | bytes) -> NotificationEvent:
        """Decode a stream frame ``{"title": ..., "message": ...}``.

        Keys other than ``title`` and ``message`` are ignored; missing or
        null ones decode as empty strings.

        Raises:
            DecodeError: If the frame is not a JSON object with string fields.
        """
        try:
            data = json.loads(frame)
        except (ValueError, TypeError) as exc:
            msg = f"invalid JSON frame: {exc}"
            raise DecodeError(msg) from exc
        if not isinstance(data, dict):
            msg = f"frame must be a JSON object, got {type(data).__name__}"
            raise DecodeError(msg)
        return cls(title=_text_field(data, "title"), body=_text_field(data, "message"))


@dataclass(frozen=True)
class WebhookPayload:
    """Body of one outbound webhook POST."""

    username: str
    text: str
    html: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict."""
        return asdict(self)

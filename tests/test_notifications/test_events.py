"""Tests for stream frame decoding and webhook payloads."""

from __future__ import annotations

import pytest

from webhooker.errors.relay_errors import DecodeError
from webhooker.notifications.events import NotificationEvent, WebhookPayload


class TestFromFrame:
    def test_title_and_message(self) -> None:
        ev = NotificationEvent.from_frame('{"title": "T", "message": "M"}')
        assert ev == NotificationEvent(title="T", body="M")

    def test_extra_keys_ignored(self) -> None:
        frame = '{"id": 7, "appid": 2, "title": "T", "message": "M", "priority": 5, "extras": {}}'
        assert NotificationEvent.from_frame(frame) == NotificationEvent(title="T", body="M")

    def test_bytes_frame(self) -> None:
        ev = NotificationEvent.from_frame(b'{"title": "\xc3\xa9", "message": "M"}')
        assert ev.title == "é"

    def test_missing_fields_are_empty(self) -> None:
        assert NotificationEvent.from_frame("{}") == NotificationEvent(title="", body="")

    def test_null_fields_are_empty(self) -> None:
        ev = NotificationEvent.from_frame('{"title": null, "message": null}')
        assert ev == NotificationEvent()

    @pytest.mark.parametrize(
        "frame",
        [
            "{not json",
            "",
            "[1, 2]",
            '"just a string"',
            '{"title": 5, "message": "M"}',
            '{"title": "T", "message": ["M"]}',
            b"\xff\xfe",
        ],
    )
    def test_invalid_frames(self, frame: str | bytes) -> None:
        with pytest.raises(DecodeError) as exc_info:
            NotificationEvent.from_frame(frame)
        assert exc_info.value.code == "decode-error"


class TestWebhookPayload:
    def test_to_dict(self) -> None:
        payload = WebhookPayload(username="T", text="M", html="<p>M</p>")
        assert payload.to_dict() == {"username": "T", "text": "M", "html": "<p>M</p>"}

    def test_frozen(self) -> None:
        payload = WebhookPayload(username="T", text="M", html="")
        with pytest.raises(AttributeError):
            payload.text = "changed"  # type: ignore[misc]

"""Lifecycle, stream and forwarding errors."""

from __future__ import annotations

from webhooker.errors.webhooker_errors import WebhookerError

# Field name -> user-facing hint, in the order enable() checks them.
_FIELD_HINTS = {
    "host_server": "Please enter the correct web server",
    "client_token": "Please enter the client token",
    "webhook_url": "Please enter the correct webhook url",
}


class ConfigIncomplete(WebhookerError):
    """A required configuration field is empty."""

    def __init__(self, field: str) -> None:
        hint = _FIELD_HINTS.get(field, "Missing configuration value")
        super().__init__(
            f"{hint} ({field} is empty)",
            status_code=400,
            code="config-incomplete",
        )
        self.field = field


class UnreachableEndpoint(WebhookerError):
    """The pre-flight connection probe to the stream host failed."""

    def __init__(
        self,
        message: str = "Web server url or client_token is not valid",
    ) -> None:
        super().__init__(message, status_code=502, code="unreachable-endpoint")


class PersistenceError(WebhookerError):
    """The storage backend failed to load or save the armed state."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=500, code="persistence-error")


class DecodeError(WebhookerError):
    """An inbound stream frame is not a valid notification."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=422, code="decode-error")


class ForwardError(WebhookerError):
    """Posting an event to the webhook failed."""

    def __init__(self, message: str, *, code: str = "forward-error") -> None:
        super().__init__(message, status_code=502, code=code)


class EncodingError(ForwardError):
    """The webhook payload could not be serialized."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="encoding-error")


class NetworkError(ForwardError):
    """The webhook request could not be built or the transport failed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="network-error")


class StreamConnectionError(WebhookerError):
    """Opening, writing to, or reading from the stream connection failed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=502, code="stream-connection-error")

"""V1 API request/response Pydantic schemas.

Config fields accept both snake_case and the ``WebhookUrl`` /
``HostServer`` / ``ClientToken`` spelling used by plugin hosts.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from webhooker.config.settings import DEFAULT_HOST_SERVER

_REDACTED = "***"


class ErrorResponse(BaseModel):
    """Standard error body ``{"code": "...", "message": "..."}``."""

    code: str
    message: str


class RelayConfigRequest(BaseModel):
    """New relay configuration; replaces the current one wholesale."""

    model_config = ConfigDict(extra="ignore")

    webhook_url: str = Field(
        default="",
        validation_alias=AliasChoices("webhook_url", "WebhookUrl"),
    )
    host_server: str = Field(
        default=DEFAULT_HOST_SERVER,
        validation_alias=AliasChoices("host_server", "HostServer"),
    )
    client_token: str = Field(
        default="",
        validation_alias=AliasChoices("client_token", "ClientToken"),
    )


class RelayConfigResponse(BaseModel):
    """Current relay configuration with the client token masked."""

    webhook_url: str
    host_server: str
    client_token: str

    @classmethod
    def redacted(cls, webhook_url: str, host_server: str, client_token: str) -> RelayConfigResponse:
        return cls(
            webhook_url=webhook_url,
            host_server=host_server,
            client_token=_REDACTED if client_token else "",
        )


class RelayStatusResponse(BaseModel):
    """Armed flag, engine state and the last engine error."""

    enabled: bool
    engine_state: str
    config: RelayConfigResponse | None = None
    last_error: ErrorResponse | None = None


class RelayInfoResponse(BaseModel):
    """Name, version, author, description and license of the relay."""

    name: str
    version: str
    author: str
    description: str
    license: str

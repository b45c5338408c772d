"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``WEBHOOKER_``, nested via ``__``)
2. YAML config file (``config_path`` or ``WEBHOOKER_CONFIG_PATH`` env var)
3. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HOST_SERVER = "ws://localhost:8080"
STREAM_PATH = "/stream?token="

# ---------------------------------------------------------------------------
# Enums for validated choices
# ---------------------------------------------------------------------------


class StorageEngine(enum.StrEnum):
    """Supported storage backends for the armed state."""

    MEMORY = "memory"
    FILE = "file"
    REDIS = "redis"


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class RelayConfig(BaseSettings):
    """Stream source and webhook target.

    Immutable: a new instance replaces the old one on every update.
    """

    model_config = SettingsConfigDict(
        env_prefix="WEBHOOKER_RELAY__",
        case_sensitive=False,
        frozen=True,
    )

    webhook_url: str = ""
    host_server: str = DEFAULT_HOST_SERVER
    client_token: str = ""

    @property
    def stream_url(self) -> str:
        """Full websocket URL of the notification stream."""
        return self.host_server + STREAM_PATH + self.client_token

    def missing_field(self) -> str | None:
        """Return the first empty required field, or None if complete."""
        for name in ("host_server", "client_token", "webhook_url"):
            if not getattr(self, name):
                return name
        return None


class EngineConfig(BaseSettings):
    """Connection engine timings and lifecycle policy."""

    model_config = SettingsConfigDict(
        env_prefix="WEBHOOKER_ENGINE__",
        case_sensitive=False,
    )

    keepalive_interval: float = Field(default=1.0, gt=0)
    close_grace: float = Field(default=1.0, ge=0)
    open_timeout: float = Field(default=10.0, gt=0)
    stop_on_disable: bool = Field(
        default=True,
        description="Signal the running engine to shut down when the relay is disabled",
    )
    auto_resume: bool = Field(
        default=True,
        description="Re-enable on startup when the persisted state says it was enabled",
    )


class ForwarderConfig(BaseSettings):
    """Outbound webhook HTTP client settings."""

    model_config = SettingsConfigDict(
        env_prefix="WEBHOOKER_FORWARDER__",
        case_sensitive=False,
    )

    timeout: float = 10.0


class StorageConfig(BaseSettings):
    """Armed-state storage settings."""

    model_config = SettingsConfigDict(
        env_prefix="WEBHOOKER_STORAGE__",
        case_sensitive=False,
    )

    engine: StorageEngine = Field(
        default=StorageEngine.FILE,
        description="Storage backend: memory, file or redis",
    )
    path: str = "./webhooker_state.json"
    url: str = "redis://localhost:6379/0"
    key: str = "webhooker:state"


class ServerConfig(BaseSettings):
    """HTTP control server settings."""

    model_config = SettingsConfigDict(
        env_prefix="WEBHOOKER_SERVER__",
        case_sensitive=False,
    )

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8081


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Loads settings from environment variables (``WEBHOOKER_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="WEBHOOKER_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    version: str = "1.0.0"
    config_path: str = ""

    relay: RelayConfig = Field(default_factory=RelayConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    forwarder: ForwarderConfig = Field(default_factory=ForwarderConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                merged = {**val, **values[key]}
                values[key] = merged
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))

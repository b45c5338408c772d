"""Persisted armed state: the only record the relay keeps across restarts."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PersistedState(BaseModel):
    """Whether the relay was enabled when it last changed state.

    Serialized as ``{"wasEnabled": <bool>}``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    was_enabled: bool = Field(default=False, alias="wasEnabled")

    def to_bytes(self) -> bytes:
        """Serialize to the stored JSON blob."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> PersistedState:
        """Parse a stored blob; an empty blob is the first-run default.

        Raises:
            pydantic.ValidationError: If the blob is not a valid state record.
        """
        if not data.strip():
            return cls()
        return cls.model_validate_json(data)

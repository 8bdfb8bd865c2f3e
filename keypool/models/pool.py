"""
Pool state models.

``PoolState`` is the persisted aggregate; its JSON aliases match the on-disk
snapshot written by earlier releases (``keys``, ``currentIndex``, ``usage``,
``lastReset``).
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from keypool.utils.helpers import deduplicate, redact_secret


class PoolState(BaseModel):
    """
    Persisted credential pool state.

    Attributes:
        credentials: Ordered, unique credential values
        active_index: Index of the active credential
        usage: Requests per credential for the current accounting day
        last_reset: Day on which ``usage`` was last zeroed
    """

    model_config = ConfigDict(populate_by_name=True)

    credentials: list[str] = Field(default_factory=list, alias="keys")
    active_index: int = Field(default=0, alias="currentIndex")
    usage: dict[str, int] = Field(default_factory=dict)
    last_reset: date = Field(default_factory=date.today, alias="lastReset")

    @field_validator("credentials")
    @classmethod
    def drop_duplicates(cls, v: list[str]) -> list[str]:
        """Keep the first occurrence of each credential."""
        return deduplicate(v)

    @field_validator("last_reset", mode="before")
    @classmethod
    def parse_reset_day(cls, v: object) -> object:
        """Accept ISO days and JavaScript ``toDateString()`` days.

        Any other value maps to ``date.min`` so the next freshness check
        resets usage instead of discarding the whole snapshot.
        """
        if not isinstance(v, str):
            return v
        try:
            return date.fromisoformat(v)
        except ValueError:
            pass
        try:
            return datetime.strptime(v, "%a %b %d %Y").date()
        except ValueError:
            return date.min

    @field_validator("usage")
    @classmethod
    def non_negative_usage(cls, v: dict[str, int]) -> dict[str, int]:
        """Reject negative usage counters."""
        for credential, count in v.items():
            if count < 0:
                raise ValueError(f"negative usage count: {count}")
        return v

    @model_validator(mode="after")
    def clamp_active_index(self) -> "PoolState":
        """Never expose an out-of-range selection."""
        if not 0 <= self.active_index < max(len(self.credentials), 1):
            self.active_index = 0
        return self

    def to_snapshot(self) -> dict:
        """Serialize to the snapshot layout."""
        return self.model_dump(mode="json", by_alias=True)


class UsageStats(BaseModel):
    """Read-only summary of the pool for status reports."""

    keys: int = Field(..., description="Number of configured credentials")
    current_key: str | None = Field(
        default=None,
        description="Redacted active credential"
    )
    usage: dict[str, int] = Field(default_factory=dict)
    last_reset: date

    def masked_usage(self) -> dict[str, int]:
        """Usage mapping keyed by redacted credentials."""
        return {redact_secret(k): v for k, v in self.usage.items()}


class CredentialInfo(BaseModel):
    """A single row of a credential listing."""

    index: int
    masked: str
    usage: int = 0
    active: bool = False

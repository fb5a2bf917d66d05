# SPDX-License-Identifier: MIT
"""Core data models for the expiring cache."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CacheEntry(BaseModel):
    """A cached value with its optional absolute expiry."""

    model_config = ConfigDict(frozen=True)

    value: Any = Field(..., description="Cached payload")
    expires_at: float | None = Field(
        None, description="Absolute expiry as POSIX timestamp in seconds"
    )

    def is_expired(self, now: float) -> bool:
        """Check whether the entry has passed its expiry at ``now``."""
        return self.expires_at is not None and self.expires_at < now

    @property
    def expires_datetime(self) -> datetime | None:
        if self.expires_at is None:
            return None
        return datetime.fromtimestamp(self.expires_at, tz=timezone.utc)


# Full key -> entry mapping exchanged with storage drivers
Snapshot = dict[str, CacheEntry]

"""
Domain models for the TimeTagger client.

`Record` and `Setting` are immutable value objects. Any change produces a new
value through `replace`, which re-runs validation. Both know how to build
themselves from, and convert themselves to, the wire models in
`timetagger_client.domain.wire`.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, FrozenSet, Optional

from pydantic import BaseModel, Field, JsonValue, field_validator, model_validator

from timetagger_client.domain.wire import ApiRecord, ApiSetting
from timetagger_client.utils.clock import (
    EPOCH,
    MAX_INSTANT,
    from_fractional_seconds,
    from_unix_seconds,
    now_like,
    to_unix_seconds,
    utc_now,
)

# Records whose description starts with this marker are treated as deleted.
HIDDEN_MARKER = "HIDDEN"

# A record whose end is this close to its start is still running. Fragile, but
# other TimeTagger clients rely on the same convention.
RUNNING_THRESHOLD = timedelta(milliseconds=1)

_DOMAIN_CONFIG = {
    "frozen": True,
    "extra": "forbid",
}


class Record(BaseModel):
    """
    A single tracked time interval.
    """

    key: str = Field(..., min_length=1, description="Unique record identifier.")
    start: datetime = Field(..., description="When the activity began.")
    end: Optional[datetime] = Field(None, description="When the activity ended; None while open.")
    description: str = Field("", description="Free text; #words are tags.")
    modified_time: datetime = Field(default_factory=utc_now, description="Last local change.")
    server_time: datetime = Field(EPOCH, description="Server revision; epoch until synced.")

    model_config = _DOMAIN_CONFIG

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("modified_time", mode="before")
    @classmethod
    def _default_modified_time(cls, value: Any) -> Any:
        return utc_now() if value is None else value

    @field_validator("server_time", mode="before")
    @classmethod
    def _default_server_time(cls, value: Any) -> Any:
        return EPOCH if value is None else value

    @model_validator(mode="after")
    def _check_interval(self) -> "Record":
        if self.end is None:
            return self
        if (self.start.tzinfo is None) != (self.end.tzinfo is None):
            raise ValueError("start and end must both be naive or both be timezone-aware")
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) is before start ({self.start})")
        return self

    @property
    def is_running(self) -> bool:
        """True when the record has no end yet (end missing or equal to start)."""
        if self.end is None:
            return True
        return self.end - self.start < RUNNING_THRESHOLD

    @property
    def duration(self) -> timedelta:
        """Elapsed time; for running records, measured up to now."""
        if self.is_running:
            return now_like(self.start) - self.start
        return self.end - self.start

    @property
    def duration_seconds(self) -> int:
        return int(self.duration.total_seconds())

    @property
    def tags(self) -> FrozenSet[str]:
        """Space-delimited words of the description that start with '#'."""
        return frozenset(
            word for word in self.description.split(" ") if word.startswith("#") and len(word) > 1
        )

    @property
    def is_hidden(self) -> bool:
        """True when the record has been soft-deleted."""
        return self.description.startswith(HIDDEN_MARKER)

    def replace(self, **changes: Any) -> "Record":
        """Return a copy with the given fields overridden."""
        return type(self).model_validate({**self.model_dump(), **changes})

    def hidden(self) -> "Record":
        """
        Return the soft-deleted form of this record.

        Records that already carry the marker are returned unchanged.
        """
        if self.is_hidden:
            return self
        return self.replace(description=f"{HIDDEN_MARKER} {self.description}")

    @classmethod
    def from_wire(cls, record: ApiRecord) -> "Record":
        return cls(
            key=record.key,
            start=from_unix_seconds(record.t1),
            end=from_unix_seconds(record.t2),
            description=record.ds,
            modified_time=from_unix_seconds(record.mt),
            server_time=from_fractional_seconds(record.st),
        )

    def to_wire(self) -> ApiRecord:
        """
        Convert to the outbound wire shape.

        Times are truncated to whole seconds. An open record is sent with the
        far-future sentinel as its end, and the server time is always 0 since
        the server assigns it.
        """
        end = self.end if self.end is not None else MAX_INSTANT
        return ApiRecord(
            key=self.key,
            t1=to_unix_seconds(self.start),
            t2=to_unix_seconds(end),
            ds=self.description,
            mt=to_unix_seconds(self.modified_time),
            st=0,
        )


class Setting(BaseModel):
    """
    A key/value preference entry. The value's shape is defined by the server.
    """

    key: str = Field(..., min_length=1)
    value: JsonValue
    modified_time: datetime = Field(default_factory=utc_now)
    server_time: datetime = Field(EPOCH)

    model_config = _DOMAIN_CONFIG

    @field_validator("modified_time", mode="before")
    @classmethod
    def _default_modified_time(cls, value: Any) -> Any:
        return utc_now() if value is None else value

    @field_validator("server_time", mode="before")
    @classmethod
    def _default_server_time(cls, value: Any) -> Any:
        return EPOCH if value is None else value

    def replace(self, **changes: Any) -> "Setting":
        """Return a copy with the given fields overridden."""
        return type(self).model_validate({**self.model_dump(), **changes})

    @classmethod
    def from_wire(cls, setting: ApiSetting) -> "Setting":
        return cls(
            key=setting.key,
            value=setting.value,
            modified_time=from_unix_seconds(setting.mt),
            server_time=from_fractional_seconds(setting.st),
        )

    def to_wire(self) -> ApiSetting:
        return ApiSetting(
            key=self.key,
            value=self.value,
            mt=to_unix_seconds(self.modified_time),
            st=0,
        )


__all__ = ["Record", "Setting", "HIDDEN_MARKER", "RUNNING_THRESHOLD"]

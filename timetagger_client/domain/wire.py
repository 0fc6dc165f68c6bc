"""
Wire models mirroring the TimeTagger API's JSON shapes.

Field names match the service exactly. These models are internal to the client:
callers only ever see the richer domain models in `timetagger_client.domain.models`.
"""
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field, JsonValue

_WIRE_CONFIG = {
    "frozen": True,
    "extra": "ignore",
}


class ApiRecord(BaseModel):
    """A record as exchanged with the service."""

    key: str
    t1: int = Field(..., description="Start, Unix seconds.")
    t2: int = Field(..., description="End, Unix seconds.")
    ds: Optional[str] = Field(None, description="Description.")
    mt: int = Field(..., description="Modified time, Unix seconds.")
    st: float = Field(0.0, description="Server time, fractional Unix seconds.")

    model_config = _WIRE_CONFIG


class ApiSetting(BaseModel):
    """A setting as exchanged with the service."""

    key: str
    value: JsonValue = None
    mt: int
    st: float = 0.0

    model_config = _WIRE_CONFIG


class ApiFetchRecordsResponse(BaseModel):
    records: List[ApiRecord]

    model_config = _WIRE_CONFIG


class ApiFetchSettingsResponse(BaseModel):
    settings: List[ApiSetting]

    model_config = _WIRE_CONFIG


class ApiFetchUpdatesResponse(BaseModel):
    """
    Incremental update feed.

    `server_time` is in milliseconds. `reset` signals that the delta cannot be
    trusted; only the value 1 counts as set.
    """

    server_time: int
    reset: Any = 0
    records: List[ApiRecord] = Field(default_factory=list)
    settings: List[ApiSetting] = Field(default_factory=list)

    model_config = _WIRE_CONFIG

    @property
    def is_reset(self) -> bool:
        # Exactly the integer 1: JSON true and 1.0 do not count.
        return type(self.reset) is int and self.reset == 1


class ApiUpdateResponse(BaseModel):
    """Result of a batch write: accepted keys, rejected keys and error messages."""

    accepted: List[str]
    failed: List[str]
    errors: List[str]

    model_config = _WIRE_CONFIG


__all__ = [
    "ApiRecord",
    "ApiSetting",
    "ApiFetchRecordsResponse",
    "ApiFetchSettingsResponse",
    "ApiFetchUpdatesResponse",
    "ApiUpdateResponse",
]

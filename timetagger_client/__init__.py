"""
TimeTagger Client - typed Python wrapper for the TimeTagger v2 REST API.

This package provides:

- Immutable domain models for records and settings (durations, tags, soft delete)
- Mapping between those models and the service's JSON wire format
- A client for fetching, incrementally syncing and writing records and settings
- A small command-line interface built on the same client

Configuration is read from the environment or a `.env` file; see `Settings`.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from timetagger_client.client import TimeTaggerClient, Updates, WriteResult
from timetagger_client.config import Settings, get_settings
from timetagger_client.domain.models import HIDDEN_MARKER, Record, Setting
from timetagger_client.errors import DecodeError, TimeTaggerError, TransportError
from timetagger_client.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Client
    "TimeTaggerClient",
    "Updates",
    "WriteResult",
    # Domain
    "Record",
    "Setting",
    "HIDDEN_MARKER",
    # Errors
    "TimeTaggerError",
    "TransportError",
    "DecodeError",
    # Logging
    "configure_logging",
    "get_logger",
]

"""
Infrastructure package for the TimeTagger client.

Centralizes HTTP transport concerns (base URL, auth header, timeouts).
Keep this layer focused on I/O wiring, decoupled from the domain mapping and
client operations.
"""

from timetagger_client.infrastructure.http_factory import (
    AUTH_HEADER,
    build_http_client,
    normalize_base_url,
)

__all__ = [
    "AUTH_HEADER",
    "build_http_client",
    "normalize_base_url",
]

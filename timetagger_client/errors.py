"""
Exception types raised by the TimeTagger client.

Only two failure kinds reach callers: the service answered with a non-success
status (or could not be reached), or it answered with a body that does not have
the expected shape. Neither is retried internally.
"""

from __future__ import annotations

from typing import Optional


class TimeTaggerError(Exception):
    """Base class for all client errors."""


class TransportError(TimeTaggerError):
    """
    The request did not complete with a success status.

    Attributes
    ----------
    status_code : int | None
        HTTP status returned by the service, or None when no response arrived.
    body : str
        Raw response body, verbatim.
    """

    def __init__(self, status_code: Optional[int], body: str, message: Optional[str] = None) -> None:
        self.status_code = status_code
        self.body = body
        if message is None:
            message = f"Unexpected status: {status_code}\n{body}"
        super().__init__(message)


class DecodeError(TimeTaggerError):
    """The response body could not be parsed into the expected shape."""

    def __init__(self, body: str, reason: str = "") -> None:
        self.body = body
        self.reason = reason
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Failed to deserialize response{detail}\n{body}")


__all__ = ["TimeTaggerError", "TransportError", "DecodeError"]

"""
HTTP client factory for the TimeTagger client.

Builds the `httpx.Client` that carries every API call: base URL, the
`authtoken` header, timeout and TLS settings. Connection pooling and timeouts
are httpx's responsibility; this module only wires them up. Tests pass an
`httpx.MockTransport` through `transport`.
"""

from __future__ import annotations

from typing import Optional

import httpx

AUTH_HEADER = "authtoken"


def normalize_base_url(base_url: str) -> str:
    """
    Ensure the API base URL ends with '/', so relative paths resolve beneath it.

    Parameters
    ----------
    base_url : str
        Full URL of the API, e.g. ``http://localhost/timetagger/api/v2``.

    Returns
    -------
    str
        The URL with exactly one trailing slash appended when missing.
    """
    base_url = base_url.strip()
    if not base_url:
        raise ValueError("TimeTagger base URL must not be empty")
    return base_url if base_url.endswith("/") else f"{base_url}/"


def build_http_client(
    base_url: str,
    api_key: str,
    timeout: float = 30.0,
    verify: bool = True,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """
    Create an `httpx.Client` bound to the API base URL with the auth header set.

    Parameters
    ----------
    base_url : str
        API base URL; normalized to end with '/'.
    api_key : str
        Value sent in the `authtoken` header on every request.
    timeout : float
        Per-request timeout in seconds.
    verify : bool
        Whether to verify TLS certificates.
    transport : httpx.BaseTransport, optional
        Custom transport (e.g. `httpx.MockTransport` in tests).

    Returns
    -------
    httpx.Client
        A client the caller is responsible for closing.
    """
    return httpx.Client(
        base_url=normalize_base_url(base_url),
        headers={AUTH_HEADER: api_key, "Accept": "application/json"},
        timeout=timeout,
        verify=verify,
        transport=transport,
    )


__all__ = [
    "AUTH_HEADER",
    "normalize_base_url",
    "build_http_client",
]

"""
TimeTagger API client.

Each public operation issues one HTTP exchange (a reset-flagged update feed adds
two sequential follow-up reads), decodes the wire envelope and maps it onto the
domain models.

Usage:
    from timetagger_client.client import TimeTaggerClient

    with TimeTaggerClient("https://timetagger.app/api/v2/", api_key) as client:
        records = client.fetch_records()
        result = client.delete_records([r for r in records if "#old" in r.tags])
        print(result.accepted, result.rejected, result.errors)
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, List, NamedTuple, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from timetagger_client.config import Settings, get_settings
from timetagger_client.domain.models import Record, Setting
from timetagger_client.domain.wire import (
    ApiFetchRecordsResponse,
    ApiFetchSettingsResponse,
    ApiFetchUpdatesResponse,
    ApiRecord,
    ApiSetting,
    ApiUpdateResponse,
)
from timetagger_client.errors import DecodeError, TransportError
from timetagger_client.infrastructure.http_factory import build_http_client, normalize_base_url
from timetagger_client.utils.clock import EPOCH, MAX_INSTANT, from_unix_millis, to_unix_seconds
from timetagger_client.utils.logging import get_logger

log = get_logger(__name__)

_WireT = TypeVar("_WireT", bound=BaseModel)


class Updates(NamedTuple):
    """Changes since a checkpoint, plus the server time to use as the next one."""

    server_time: datetime
    records: List[Record]
    settings: List[Setting]


class WriteResult(NamedTuple):
    """
    Outcome of a batch write.

    The server may accept part of a batch. `errors` holds one entry per
    rejected key and possibly extra messages not tied to a key.
    """

    accepted: List[str]
    rejected: List[str]
    errors: List[str]

    @property
    def ok(self) -> bool:
        return not self.rejected and not self.errors


class TimeTaggerClient:
    """
    Typed wrapper around the TimeTagger v2 REST API.

    Parameters
    ----------
    base_url : str
        Full API URL, e.g. ``http://localhost/timetagger/api/v2/``. A trailing
        '/' is added when missing.
    api_key : str
        Sent as the `authtoken` header on every request.
    timeout : float
        Per-request timeout in seconds, enforced by httpx.
    verify : bool
        Whether to verify TLS certificates.
    transport : httpx.BaseTransport, optional
        Custom transport for the internally created httpx client.
    http_client : httpx.Client, optional
        Prebuilt client to use instead. It is not closed by `close()`.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        verify: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self._base_url = normalize_base_url(base_url)
        if http_client is None:
            http_client = build_http_client(
                self._base_url, api_key, timeout=timeout, verify=verify, transport=transport
            )
            self._owns_http_client = True
        else:
            self._owns_http_client = False
        self._http = http_client

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "TimeTaggerClient":
        """Build a client from configuration (environment/.env by default)."""
        settings = settings or get_settings()
        return cls(
            settings.timetagger_url,
            settings.timetagger_api_key,
            timeout=settings.timetagger_timeout,
            verify=settings.timetagger_verify_tls,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        if self._owns_http_client:
            self._http.close()

    def __enter__(self) -> "TimeTaggerClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Reads

    def fetch_records(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[Record]:
        """
        Fetch all records overlapping ``[start, end]``.

        Soft-deleted records are included; filter on `Record.is_hidden` to drop them.

        Parameters
        ----------
        start : datetime, optional
            Range start; defaults to the Unix epoch.
        end : datetime, optional
            Range end; defaults to the far-future sentinel.

        Raises
        ------
        TransportError
            If the service answers with a non-success status.
        DecodeError
            If the body is not a record list.
        """
        timerange = (
            f"{to_unix_seconds(start or EPOCH)}-{to_unix_seconds(end or MAX_INSTANT)}"
        )
        body = self._request("GET", "records", params={"timerange": timerange})
        envelope = self._decode(ApiFetchRecordsResponse, body)
        records = self._records_from_wire(envelope.records, body)
        log.debug("Fetched %d records", len(records), extra={"timerange": timerange})
        return records

    def fetch_settings(self) -> List[Setting]:
        """
        Fetch all settings.

        Raises
        ------
        TransportError
            If the service answers with a non-success status.
        DecodeError
            If the body is not a setting list.
        """
        body = self._request("GET", "settings")
        envelope = self._decode(ApiFetchSettingsResponse, body)
        settings = self._settings_from_wire(envelope.settings, body)
        log.debug("Fetched %d settings", len(settings))
        return settings

    def fetch_updates_since(self, since: datetime) -> Updates:
        """
        Fetch records and settings changed since ``since``.

        The feed is keyed on server time, so callers should keep the returned
        `Updates.server_time` (or the newest `server_time` they have seen) and
        pass it as ``since`` next time. When the server flags a reset, the delta
        is discarded and a full `fetch_records()` + `fetch_settings()` is
        returned instead.

        Raises
        ------
        TransportError
            If the service answers with a non-success status.
        DecodeError
            If the body is not an update feed.
        """
        body = self._request("GET", "updates", params={"since": to_unix_seconds(since)})
        envelope = self._decode(ApiFetchUpdatesResponse, body)
        server_time = self._convert(from_unix_millis, envelope.server_time, body)

        if envelope.is_reset:
            log.info("Server requested a reset; performing a full resync")
            records = self.fetch_records()
            settings = self.fetch_settings()
        else:
            records = self._records_from_wire(envelope.records, body)
            settings = self._settings_from_wire(envelope.settings, body)

        log.debug(
            "Fetched updates: %d records, %d settings",
            len(records),
            len(settings),
            extra={"reset": envelope.is_reset},
        )
        return Updates(server_time, records, settings)

    # Writes

    def update_records(self, records: Iterable[Record]) -> WriteResult:
        """
        Create or update records in a single batch.

        New records need a unique key; an existing key overwrites that record.
        The batch is not atomic: inspect `WriteResult.rejected` and `errors`.

        Raises
        ------
        TransportError
            If the service answers with a non-success status.
        DecodeError
            If the write result cannot be parsed.
        """
        payload = [record.to_wire().model_dump(mode="json") for record in records]
        body = self._request("PUT", "records", payload=payload)
        return self._write_result(body, "records", len(payload))

    def delete_records(self, records: Iterable[Record]) -> WriteResult:
        """
        Soft-delete records by prefixing their description with the HIDDEN marker.

        The server has no hard delete; every client treats marked records as
        removed. Records that are already marked are sent unchanged.
        """
        return self.update_records([record.hidden() for record in records])

    def update_settings(self, settings: Iterable[Setting]) -> WriteResult:
        """
        Create or update settings in a single batch. Same contract as `update_records`.
        """
        payload = [setting.to_wire().model_dump(mode="json") for setting in settings]
        body = self._request("PUT", "settings", payload=payload)
        return self._write_result(body, "settings", len(payload))

    # Internals

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        payload: Optional[list] = None,
    ) -> str:
        log.debug("%s %s", method, path, extra={"params": params})
        try:
            response = self._http.request(method, path, params=params, json=payload)
        except httpx.RequestError as exc:
            log.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(None, "", f"Request {method} {path} failed: {exc}") from exc

        body = response.text
        if not response.is_success:
            log.warning("%s %s returned unexpected status %s", method, path, response.status_code)
            raise TransportError(response.status_code, body)
        return body

    @staticmethod
    def _decode(model: Type[_WireT], body: str) -> _WireT:
        try:
            return model.model_validate_json(body)
        except ValidationError as exc:
            log.warning("Could not decode %s: %s", model.__name__, exc.errors(include_url=False))
            raise DecodeError(body, reason=f"expected {model.__name__}") from exc

    @staticmethod
    def _convert(func: Any, value: Any, body: str) -> Any:
        # Out-of-range timestamps and invalid intervals surface as decode failures.
        try:
            return func(value)
        except (ValueError, OverflowError) as exc:
            log.warning("Could not map response value: %s", exc)
            raise DecodeError(body, reason=str(exc)) from exc

    def _records_from_wire(self, records: List[ApiRecord], body: str) -> List[Record]:
        return [self._convert(Record.from_wire, record, body) for record in records]

    def _settings_from_wire(self, settings: List[ApiSetting], body: str) -> List[Setting]:
        return [self._convert(Setting.from_wire, setting, body) for setting in settings]

    def _write_result(self, body: str, kind: str, submitted: int) -> WriteResult:
        result = self._decode(ApiUpdateResponse, body)
        if result.failed:
            log.warning(
                "Server rejected %d of %d %s",
                len(result.failed),
                submitted,
                kind,
                extra={"rejected": list(result.failed), "errors": list(result.errors)},
            )
        else:
            log.debug("Server accepted %d %s", len(result.accepted), kind)
        return WriteResult(list(result.accepted), list(result.failed), list(result.errors))


__all__ = ["TimeTaggerClient", "Updates", "WriteResult"]

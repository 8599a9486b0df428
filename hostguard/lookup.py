"""Record lookups used by the reference validator.

The validator never talks to the record store directly. It is handed a
RecordLookup that answers two questions:

- find_by_backend_name: every record of a kind whose backend name matches
- get_by_record_id: the record of a kind with the given identifier, if any

InMemoryRecordLookup indexes records in-process (tests, embedded use).
HttpRecordLookup reads them from the record store API over HTTP.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from urllib.parse import quote

import httpx

from hostguard.config import settings
from hostguard.errors import LookupFailureError
from hostguard.metrics import lookup_duration
from hostguard.schemas import RecordInfo, ResourceKind

logger = logging.getLogger(__name__)

# Status codes worth retrying by the caller
TRANSIENT_HTTP_CODES = {429, 502, 503, 504}


class RecordLookup(ABC):
    """Read-only access to records in the control-plane namespace."""

    @abstractmethod
    def find_by_backend_name(self, kind: ResourceKind, name: str) -> list[RecordInfo]:
        """Return all records of `kind` whose backend name equals `name`."""
        ...

    @abstractmethod
    def get_by_record_id(self, kind: ResourceKind, record_id: str) -> RecordInfo | None:
        """Return the record of `kind` named `record_id`, or None."""
        ...


class InMemoryRecordLookup(RecordLookup):
    """Dict-backed record index."""

    def __init__(self, records: list[RecordInfo] | None = None):
        self._records: dict[tuple[ResourceKind, str], RecordInfo] = {}
        for record in records or []:
            self.add(record)

    def add(self, record: RecordInfo) -> None:
        self._records[(record.kind, record.record_id)] = record

    def remove(self, kind: ResourceKind, record_id: str) -> None:
        self._records.pop((kind, record_id), None)

    def find_by_backend_name(self, kind: ResourceKind, name: str) -> list[RecordInfo]:
        return [
            record
            for (record_kind, _), record in self._records.items()
            if record_kind == kind and record.backend_name == name
        ]

    def get_by_record_id(self, kind: ResourceKind, record_id: str) -> RecordInfo | None:
        return self._records.get((kind, record_id))


class HttpRecordLookup(RecordLookup):
    """Record lookups against the record store HTTP API.

    Endpoints:
        GET {base_url}/records/{kind}?backend_name={name} -> list of records
        GET {base_url}/records/{kind}/{record_id}          -> record or 404

    Failures are raised as LookupFailureError; retry policy belongs to the
    caller.
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _get(self, operation: str, path: str, params: dict | None = None) -> httpx.Response:
        start = time.monotonic()
        status = "error"
        try:
            response = self._client.get(path, params=params)
            status = str(response.status_code)
            return response
        except httpx.TimeoutException as e:
            raise LookupFailureError(f"Record store timed out on {path}: {e}", retriable=True) from e
        except httpx.HTTPError as e:
            raise LookupFailureError(f"Cannot reach record store for {path}: {e}", retriable=True) from e
        finally:
            lookup_duration.labels(operation=operation, status=status).observe(
                time.monotonic() - start
            )

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        raise LookupFailureError(
            f"Record store returned HTTP {response.status_code} for {response.request.url.path}",
            retriable=response.status_code in TRANSIENT_HTTP_CODES,
        )

    def find_by_backend_name(self, kind: ResourceKind, name: str) -> list[RecordInfo]:
        response = self._get(
            "find_by_backend_name",
            f"/records/{kind.value}",
            params={"backend_name": name},
        )
        self._raise_for_status(response)
        try:
            return [RecordInfo(**item) for item in response.json()]
        except (ValueError, TypeError) as e:
            raise LookupFailureError(f"Malformed record list for {kind.value}: {e}") from e

    def get_by_record_id(self, kind: ResourceKind, record_id: str) -> RecordInfo | None:
        encoded_id = quote(record_id, safe="")
        response = self._get("get_by_record_id", f"/records/{kind.value}/{encoded_id}")
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        try:
            return RecordInfo(**response.json())
        except (ValueError, TypeError) as e:
            raise LookupFailureError(f"Malformed {kind.value} record {record_id}: {e}") from e


# Module-level singleton
_record_lookup: RecordLookup | None = None


def get_record_lookup() -> RecordLookup:
    """Get the process-wide RecordLookup, built from settings on first use."""
    global _record_lookup
    if _record_lookup is None:
        _record_lookup = HttpRecordLookup(
            settings.record_store_url,
            token=settings.record_store_token,
            timeout=settings.lookup_timeout,
        )
        logger.info(f"Record lookups go to {settings.record_store_url}")
    return _record_lookup


def set_record_lookup(lookup: RecordLookup | None) -> None:
    """Replace the process-wide RecordLookup (None resets to settings)."""
    global _record_lookup
    _record_lookup = lookup

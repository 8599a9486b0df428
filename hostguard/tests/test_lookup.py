"""Tests for record lookups (hostguard/lookup.py)."""
from __future__ import annotations

import httpx
import pytest

from hostguard import lookup as lookup_module
from hostguard.config import settings
from hostguard.errors import LookupFailureError
from hostguard.lookup import (
    HttpRecordLookup,
    InMemoryRecordLookup,
    get_record_lookup,
    set_record_lookup,
)
from hostguard.schemas import DomainResource, RecordInfo, ResourceKind
from hostguard.validation import validate


def _lookup(handler) -> HttpRecordLookup:
    return HttpRecordLookup("http://store.test/", token="secret", transport=httpx.MockTransport(handler))


class TestInMemoryRecordLookup:
    def test_find_by_backend_name_returns_all_matches(self, records):
        found = records.find_by_backend_name(ResourceKind.BOOT_DISK, "seed")
        assert sorted(r.record_id for r in found) == ["seed-a", "seed-b"]

    def test_find_filters_by_kind(self, records):
        assert records.find_by_backend_name(ResourceKind.POOL, "seed") == []

    def test_get_by_record_id(self, records):
        assert records.get_by_record_id(ResourceKind.POOL, "default-a").owner == "libvirt-a"
        assert records.get_by_record_id(ResourceKind.VOLUME, "default-a") is None

    def test_remove(self, records):
        records.remove(ResourceKind.POOL, "default-a")
        assert records.get_by_record_id(ResourceKind.POOL, "default-a") is None
        records.remove(ResourceKind.POOL, "never-existed")


class TestHttpRecordLookup:
    def test_find_by_backend_name(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(
                200,
                json=[{"record_id": "default-a", "kind": "pool", "owner": "libvirt-a", "backend_name": "default"}],
            )

        found = _lookup(handler).find_by_backend_name(ResourceKind.POOL, "default")

        assert found == [
            RecordInfo(record_id="default-a", kind=ResourceKind.POOL, owner="libvirt-a", backend_name="default")
        ]
        assert seen["path"] == "/records/pool"
        assert seen["params"] == {"backend_name": "default"}
        assert seen["auth"] == "Bearer secret"

    def test_get_by_record_id(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/records/boot_disk/seed-a"
            return httpx.Response(
                200, json={"record_id": "seed-a", "kind": "boot_disk", "owner": "libvirt-a"}
            )

        record = _lookup(handler).get_by_record_id(ResourceKind.BOOT_DISK, "seed-a")
        assert record.owner == "libvirt-a"

    def test_record_id_is_escaped(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["raw_path"] = request.url.raw_path
            return httpx.Response(404)

        assert _lookup(handler).get_by_record_id(ResourceKind.BOOT_DISK, "seed-b#x") is None
        assert seen["raw_path"] == b"/records/boot_disk/seed-b%23x"

    @pytest.mark.parametrize("ref", ["seed-b?x=1", "nope/../seed-b", "seed-b#x"])
    def test_unknown_reference_not_resolved_to_other_record(self, ref):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.raw_path == b"/records/boot_disk/seed-b":
                return httpx.Response(
                    200, json={"record_id": "seed-b", "kind": "boot_disk", "owner": "libvirt-b"}
                )
            return httpx.Response(404)

        domain = DomainResource(name="web", owner="libvirt-a", boot_disk_ref=ref)
        assert validate(domain, _lookup(handler)) == []

    def test_get_not_found(self):
        lookup = _lookup(lambda request: httpx.Response(404, json={"detail": "not found"}))
        assert lookup.get_by_record_id(ResourceKind.BOOT_DISK, "missing") is None

    @pytest.mark.parametrize("status,retriable", [(503, True), (429, True), (500, False), (403, False)])
    def test_http_errors(self, status, retriable):
        lookup = _lookup(lambda request: httpx.Response(status))
        with pytest.raises(LookupFailureError) as exc_info:
            lookup.find_by_backend_name(ResourceKind.POOL, "default")
        assert exc_info.value.retriable is retriable
        assert str(status) in exc_info.value.message

    def test_list_404_is_a_failure(self):
        lookup = _lookup(lambda request: httpx.Response(404))
        with pytest.raises(LookupFailureError):
            lookup.find_by_backend_name(ResourceKind.POOL, "default")

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(LookupFailureError) as exc_info:
            _lookup(handler).get_by_record_id(ResourceKind.BOOT_DISK, "seed-a")
        assert exc_info.value.retriable is True

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(LookupFailureError, match="timed out"):
            _lookup(handler).find_by_backend_name(ResourceKind.POOL, "default")

    def test_malformed_payload(self):
        lookup = _lookup(lambda request: httpx.Response(200, json=[{"unexpected": True}]))
        with pytest.raises(LookupFailureError, match="Malformed"):
            lookup.find_by_backend_name(ResourceKind.POOL, "default")


class TestLookupSingleton:
    def test_built_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "record_store_url", "http://records.internal:9000")
        lookup = get_record_lookup()
        assert isinstance(lookup, HttpRecordLookup)
        assert get_record_lookup() is lookup

    def test_override(self):
        fake = InMemoryRecordLookup()
        set_record_lookup(fake)
        assert get_record_lookup() is fake
        assert lookup_module._record_lookup is fake

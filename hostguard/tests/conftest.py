from __future__ import annotations

import pytest

from hostguard import lookup as lookup_module
from hostguard.lookup import InMemoryRecordLookup
from hostguard.schemas import RecordInfo, ResourceKind


@pytest.fixture(autouse=True)
def _reset_record_lookup():
    """Keep the process-wide lookup singleton from leaking between tests."""
    lookup_module.set_record_lookup(None)
    yield
    lookup_module.set_record_lookup(None)


@pytest.fixture
def records() -> InMemoryRecordLookup:
    """Record graph spanning two libvirt instances."""
    return InMemoryRecordLookup(
        [
            RecordInfo(record_id="seed-a", kind=ResourceKind.BOOT_DISK, owner="libvirt-a", backend_name="seed"),
            RecordInfo(record_id="seed-b", kind=ResourceKind.BOOT_DISK, owner="libvirt-b", backend_name="seed"),
            RecordInfo(record_id="default-a", kind=ResourceKind.POOL, owner="libvirt-a", backend_name="default"),
            RecordInfo(record_id="images-b", kind=ResourceKind.POOL, owner="libvirt-b", backend_name="images"),
        ]
    )

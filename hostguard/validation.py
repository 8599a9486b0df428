"""Cross-host reference validation.

A resource may only reference records owned by the same libvirt instance
(provider config). References are:

- dangling-tolerant: a referenced name with no record is accepted, since it
  may exist only on the libvirt host
- mismatch-fatal: a referenced record owned by another instance is rejected

Raw paths and libvirt keys (disk volume_id, base_volume_id) are opaque to
the control plane and only produce advisory warnings. Network names are not
checked.

Key operations:
- validate: dispatch on resource kind, raise ValidationFailure on rejection
- validate_domain: boot disk must share the domain's owner
- validate_volume: pool (by backend name) must share the volume's owner
"""
from __future__ import annotations

import logging
from typing import Callable

from hostguard.errors import (
    CrossHostReferenceError,
    EmptyReferenceNameError,
    LookupFailureError,
    MissingOwnerError,
)
from hostguard.lookup import RecordLookup
from hostguard.schemas import DomainResource, RecordInfo, ResourceKind, VolumeResource

logger = logging.getLogger(__name__)


def _require_owner(kind: ResourceKind, name: str, owner: str | None) -> str:
    if not owner:
        raise MissingOwnerError(kind.value, name)
    return owner


def _find(lookup: RecordLookup, kind: ResourceKind, name: str) -> list[RecordInfo]:
    try:
        return lookup.find_by_backend_name(kind, name)
    except LookupFailureError:
        raise
    except Exception as e:
        raise LookupFailureError(f"Failed to list {kind.value} records named {name}: {e}") from e


def _get(lookup: RecordLookup, kind: ResourceKind, record_id: str) -> RecordInfo | None:
    try:
        return lookup.get_by_record_id(kind, record_id)
    except LookupFailureError:
        raise
    except Exception as e:
        raise LookupFailureError(f"Failed to get {kind.value} {record_id}: {e}") from e


def validate_domain(domain: DomainResource, lookup: RecordLookup) -> list[str]:
    """Validate a domain's references.

    Args:
        domain: Domain being admitted
        lookup: Record lookups

    Returns:
        Advisory warnings (never affect the verdict)

    Raises:
        MissingOwnerError: domain has no providerConfigRef
        EmptyReferenceNameError: boot_disk_ref is set to ""
        CrossHostReferenceError: boot disk record has a different owner
    """
    owner = _require_owner(ResourceKind.DOMAIN, domain.name, domain.owner)
    warnings: list[str] = []

    if domain.boot_disk_ref is not None:
        if domain.boot_disk_ref == "":
            raise EmptyReferenceNameError("boot disk", domain.name)

        boot_disk = _get(lookup, ResourceKind.BOOT_DISK, domain.boot_disk_ref)
        if boot_disk is None:
            logger.debug(
                f"Boot disk {domain.boot_disk_ref} for domain {domain.name} has no record, "
                "assuming it exists on the libvirt host"
            )
        elif (boot_disk.owner or "") != owner:
            raise CrossHostReferenceError(
                ResourceKind.DOMAIN.value,
                domain.name,
                ResourceKind.BOOT_DISK.value,
                domain.boot_disk_ref,
                owner,
                boot_disk.owner or "",
            )

    # Disk volume IDs are host paths/keys, not record references
    for i, disk in enumerate(domain.disks):
        if disk.volume_id:
            warnings.append(f"disk[{i}] references volume path {disk.volume_id} (not validated)")

    return warnings


def validate_volume(volume: VolumeResource, lookup: RecordLookup) -> list[str]:
    """Validate a volume's pool reference.

    Every pool record whose backend name matches is checked; any one with a
    different owner rejects the volume.

    Raises:
        MissingOwnerError: volume has no providerConfigRef
        EmptyReferenceNameError: pool is set to ""
        CrossHostReferenceError: a matching pool record has a different owner
    """
    owner = _require_owner(ResourceKind.VOLUME, volume.name, volume.owner)
    warnings: list[str] = []

    if volume.pool is not None:
        if volume.pool == "":
            raise EmptyReferenceNameError("pool", volume.name)

        candidates = _find(lookup, ResourceKind.POOL, volume.pool)
        for pool in candidates:
            if pool.backend_name != volume.pool:
                continue
            if (pool.owner or "") != owner:
                raise CrossHostReferenceError(
                    ResourceKind.VOLUME.value,
                    volume.name,
                    ResourceKind.POOL.value,
                    volume.pool,
                    owner,
                    pool.owner or "",
                )
        if not candidates:
            logger.debug(
                f"Pool {volume.pool} for volume {volume.name} has no record, "
                "assuming it exists on the libvirt host"
            )

    if volume.base_volume_id:
        warnings.append(f"base volume {volume.base_volume_id} is not validated")

    return warnings


_VALIDATORS: dict[ResourceKind, Callable[..., list[str]]] = {
    ResourceKind.DOMAIN: validate_domain,
    ResourceKind.VOLUME: validate_volume,
}

# To add a resource kind:
# - Add a <Kind>Resource schema with a Literal kind and include it in Resource.
# - Implement validate_<kind>(resource, lookup) -> list[str].
# - Register it in _VALIDATORS.


def validate(resource: DomainResource | VolumeResource, lookup: RecordLookup) -> list[str]:
    """Validate all cross-resource references carried by `resource`.

    Returns advisory warnings when accepted; raises a ValidationFailure when
    rejected. LookupFailureError propagates when the record store fails.
    """
    validator = _VALIDATORS.get(ResourceKind(resource.kind))
    if validator is None:
        raise ValueError(f"No reference validator for kind {resource.kind}")
    return validator(resource, lookup)

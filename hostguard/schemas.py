"""Resource and API schemas.

These Pydantic models describe the resources submitted for admission, the
records returned by the record store, and the payloads exchanged over HTTP.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from hostguard.naming import Strategy


class ResourceKind(str, Enum):
    """Record kinds in the shared control-plane namespace."""
    DOMAIN = "domain"
    VOLUME = "volume"
    POOL = "pool"
    BOOT_DISK = "boot_disk"  # cloud-init / boot configuration disk


class Operation(str, Enum):
    """Admission operation being reviewed."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


# --- Resources ---

class DiskDevice(BaseModel):
    """Disk attached to a domain.

    volume_id is a raw path or libvirt volume key on the target host. It is
    opaque to the control plane and never resolved against records.
    """
    volume_id: str | None = None
    device: str | None = None  # e.g. "disk", "cdrom"


class DomainResource(BaseModel):
    """Virtual machine domain."""
    kind: Literal["domain"] = "domain"
    name: str  # record identifier
    owner: str | None = None  # providerConfigRef name
    backend_name: str | None = None  # libvirt domain name
    boot_disk_ref: str | None = None  # record name of a boot disk
    disks: list[DiskDevice] = Field(default_factory=list)
    networks: list[str] = Field(default_factory=list)  # opaque network names


class VolumeResource(BaseModel):
    """Storage volume."""
    kind: Literal["volume"] = "volume"
    name: str
    owner: str | None = None
    backend_name: str | None = None
    pool: str | None = None  # backend name of the pool
    base_volume_id: str | None = None  # opaque path or key of a backing volume


Resource = Annotated[Union[DomainResource, VolumeResource], Field(discriminator="kind")]


class RecordInfo(BaseModel):
    """One record returned by the record store."""
    record_id: str
    kind: ResourceKind
    owner: str | None = None
    backend_name: str | None = None


# --- Admission ---

class AdmissionRequest(BaseModel):
    """Caller -> hostguard: review a resource change."""
    operation: Operation
    resource: Resource
    old_resource: Resource | None = None  # previous version on UPDATE


class AdmissionResponse(BaseModel):
    """hostguard -> caller: admission verdict."""
    allowed: bool
    code: str | None = None
    message: str = ""
    warnings: list[str] = Field(default_factory=list)


# --- Naming ---

class GenerateNameRequest(BaseModel):
    """Derive a record identifier for a backend resource."""
    backend_name: str
    owner: str = ""
    strategy: str | None = None  # defaults to the configured strategy


class GenerateNameResponse(BaseModel):
    record_id: str
    strategy: Strategy
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)

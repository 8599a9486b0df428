"""Admission hooks for resource create/update/delete.

Create and update check the resource name against the record identifier
grammar and run reference validation before a resource enters the
reconciliation pipeline. Delete never validates: removing a resource cannot
introduce a cross-host inconsistency.
"""
from __future__ import annotations

import logging

from hostguard.errors import InvalidRecordIdError, LookupFailureError, ValidationFailure
from hostguard.lookup import RecordLookup
from hostguard.metrics import admission_reviews
from hostguard.naming import is_valid_record_id
from hostguard.schemas import (
    AdmissionRequest,
    AdmissionResponse,
    DomainResource,
    Operation,
    VolumeResource,
)
from hostguard.validation import validate

logger = logging.getLogger(__name__)

AnyResource = DomainResource | VolumeResource


def _check_record_id(resource: AnyResource) -> None:
    if not is_valid_record_id(resource.name):
        raise InvalidRecordIdError(resource.name)


def validate_create(resource: AnyResource, lookup: RecordLookup) -> list[str]:
    """Validate a resource on creation."""
    _check_record_id(resource)
    return validate(resource, lookup)


def validate_update(old: AnyResource | None, new: AnyResource, lookup: RecordLookup) -> list[str]:
    """Validate a resource on update. Only the new version is checked."""
    _check_record_id(new)
    return validate(new, lookup)


def validate_delete(resource: AnyResource) -> list[str]:
    """No validation needed on delete."""
    return []


def review(request: AdmissionRequest, lookup: RecordLookup) -> AdmissionResponse:
    """Review an admission request and return the verdict.

    ValidationFailure becomes a denied response. LookupFailureError is
    re-raised so the caller can decide whether to retry.
    """
    resource = request.resource
    kind = resource.kind
    operation = request.operation.value

    try:
        if request.operation == Operation.CREATE:
            warnings = validate_create(resource, lookup)
        elif request.operation == Operation.UPDATE:
            warnings = validate_update(request.old_resource, resource, lookup)
        else:
            warnings = validate_delete(resource)
    except ValidationFailure as e:
        admission_reviews.labels(kind=kind, operation=operation, result="denied").inc()
        logger.warning(
            f"Denied {operation} of {kind} {resource.name}: {e.message}",
            extra={"code": e.code, "resource_kind": kind, "resource_name": resource.name},
        )
        return AdmissionResponse(allowed=False, code=e.code, message=e.message)
    except LookupFailureError:
        admission_reviews.labels(kind=kind, operation=operation, result="error").inc()
        raise

    admission_reviews.labels(kind=kind, operation=operation, result="allowed").inc()
    logger.debug(f"Allowed {operation} of {kind} {resource.name}")
    return AdmissionResponse(allowed=True, warnings=warnings)

"""Errors raised while admitting resources.

ValidationFailure subclasses are verdicts about one resource: the resource
is rejected and must be corrected and re-submitted. LookupFailureError is
not a verdict; it means the record store could not be read and the caller
decides whether to retry.
"""

from __future__ import annotations


class ValidationFailure(Exception):
    """Base exception for rejected resources."""
    code = "VALIDATION_FAILED"

    def __init__(self, message: str, resource_name: str | None = None):
        super().__init__(message)
        self.message = message
        self.resource_name = resource_name


class MissingOwnerError(ValidationFailure):
    """Resource does not name the provider config that owns it."""
    code = "MISSING_OWNER"

    def __init__(self, kind: str, resource_name: str | None = None):
        super().__init__(f"{kind} must have a providerConfigRef", resource_name)
        self.kind = kind


class InvalidRecordIdError(ValidationFailure):
    """Resource name is not a valid record identifier."""
    code = "INVALID_RECORD_ID"

    def __init__(self, resource_name: str):
        super().__init__(
            f"{resource_name!r} is not a valid record identifier "
            "(lowercase [a-z0-9-], no leading, trailing or doubled '-', at most 63 characters)",
            resource_name,
        )


class EmptyReferenceNameError(ValidationFailure):
    """A reference field is present but names nothing."""
    code = "EMPTY_REFERENCE_NAME"

    def __init__(self, field: str, resource_name: str | None = None):
        super().__init__(f"{field} reference name cannot be empty", resource_name)
        self.field = field


class CrossHostReferenceError(ValidationFailure):
    """A resource references a record owned by a different libvirt instance."""
    code = "CROSS_HOST_REFERENCE"

    def __init__(
        self,
        referrer_kind: str,
        referrer_name: str,
        referent_kind: str,
        referent_name: str,
        owner: str,
        referent_owner: str,
    ):
        super().__init__(
            f"{referent_kind} {referent_name} uses providerConfig {referent_owner or '<none>'}, "
            f"but {referrer_kind} {referrer_name} uses providerConfig {owner}. "
            "Resources must use the same libvirt instance",
            referrer_name,
        )
        self.referrer_kind = referrer_kind
        self.referrer_name = referrer_name
        self.referent_kind = referent_kind
        self.referent_name = referent_name
        self.owner = owner
        self.referent_owner = referent_owner


class LookupFailureError(Exception):
    """The record store could not answer a lookup."""
    def __init__(self, message: str, retriable: bool = False):
        super().__init__(message)
        self.message = message
        self.retriable = retriable

"""Centralized naming conventions for control-plane records.

The same libvirt resource name (e.g. "webserver") can exist on several
independent libvirt hosts. All components that turn a backend resource name
into a record identifier MUST go through generate_name() (or a NameGenerator
holding the deployment strategy) so identifiers are derived the same way
everywhere and can be re-derived later from the same inputs.

Record identifiers follow the DNS-label grammar: lowercase [a-z0-9-],
no leading/trailing or doubled '-', at most 63 characters.
"""

from __future__ import annotations

import hashlib
import re
from enum import Enum

# Label identifying which libvirt instance (provider config) owns a record
LABEL_INSTANCE = "libvirt.nourspeed.io/instance"

# Alternative label carrying the human-readable libvirt host
LABEL_HOST = "libvirt.nourspeed.io/host"

# Annotation storing the original libvirt resource name
ANNOTATION_ORIGINAL_NAME = "libvirt.nourspeed.io/original-name"

MAX_NAME_LENGTH = 63

# "-" plus a 3-digit tag appended when a name is truncated
TRUNCATE_TAG_LENGTH = 4

SHORT_HASH_LENGTH = 6

# Wrapper tokens stripped by extract_hostname(), first match wins
_HOST_PREFIXES = ("libvirt-", "provider-", "config-")
_HOST_SUFFIXES = ("-libvirt", "-provider", "-config")

_INVALID_CHARS = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUNS = re.compile(r"-+")
RECORD_ID_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")

_INT64_MASK = (1 << 64) - 1
_INT64_SIGN = 1 << 63


class Strategy(str, Enum):
    """How record identifiers incorporate the owning libvirt instance."""
    NONE = "none"  # backend name only, collisions across hosts possible
    PREFIX_PROVIDER = "prefix-provider"  # {provider-config}-{name}
    PREFIX_HOST = "prefix-host"  # {host}-{name}
    HASH = "hash"  # {name}-{hash(provider-config)}


def parse_strategy(value: str | None) -> Strategy:
    """Parse a strategy token leniently.

    Case-insensitive. None, empty and unrecognized values resolve to
    Strategy.NONE instead of failing.
    """
    if not value:
        return Strategy.NONE
    try:
        return Strategy(value.strip().lower())
    except ValueError:
        return Strategy.NONE


def sanitize_name(name: str | None) -> str:
    """Make a string safe for use as (part of) a record identifier.

    Lowercases, replaces every character outside [a-z0-9-] with '-',
    collapses runs of '-' and strips leading/trailing '-'. Idempotent.
    """
    if not name:
        return ""
    safe = _INVALID_CHARS.sub("-", name.lower())
    safe = _HYPHEN_RUNS.sub("-", safe)
    return safe.strip("-")


def extract_hostname(owner: str | None) -> str:
    """Best-effort host portion of a provider config name.

    libvirt-host1 -> host1, provider-prod-01 -> prod-01, host1-libvirt -> host1.
    At most one prefix and one suffix are removed. Names without a known
    wrapper token come back sanitized but otherwise unchanged.
    """
    lower = (owner or "").lower()

    for prefix in _HOST_PREFIXES:
        if lower.startswith(prefix):
            lower = lower[len(prefix):]
            break

    for suffix in _HOST_SUFFIXES:
        if lower.endswith(suffix):
            lower = lower[:-len(suffix)]
            break

    return sanitize_name(lower)


def short_hash(value: str | None) -> str:
    """Six hex characters identifying a provider config name."""
    digest = hashlib.sha256((value or "").encode("utf-8")).hexdigest()
    return digest[:SHORT_HASH_LENGTH]


def _truncate_tag(name: str) -> str:
    # Rolling hash over the full name with int64 wraparound
    acc = 0
    for i, ch in enumerate(name):
        acc = (acc * 31 + ord(ch) + i) & _INT64_MASK
        if acc & _INT64_SIGN:
            acc -= 1 << 64
    return f"{abs(acc) % 1000:03d}"


def truncate_name(name: str, max_len: int = MAX_NAME_LENGTH) -> str:
    """Bound a name to max_len characters.

    Names that fit are returned unchanged. Longer names keep their first
    max_len - 4 characters followed by "-NNN", where NNN is derived from the
    whole untruncated name so names sharing a long prefix still differ.
    A '-' at the cut point is skipped and the next character pulled in, so
    the result never carries "--".
    Budgets too small to hold the tag fall back to a plain cut.
    """
    if len(name) <= max_len:
        return name

    truncate_at = max_len - TRUNCATE_TAG_LENGTH
    if truncate_at < 1:
        return name[:max(max_len, 0)].rstrip("-")

    head = name[:truncate_at]
    if head.endswith("-"):
        head = head[:-1] + name[truncate_at]
    head = head.rstrip("-")
    return f"{head}-{_truncate_tag(name)}"


def _join(*parts: str) -> str:
    return truncate_name("-".join(part for part in parts if part))


def generate_name(strategy: Strategy, backend_name: str, owner: str) -> str:
    """Generate the record identifier for a backend resource.

    Formats:
        none:            {name}
        prefix-provider: {provider-config}-{name}
        prefix-host:     {host}-{name}
        hash:            {name}-{hash6(provider-config)}

    Never fails; the result is empty only when there is nothing to name.
    """
    name = sanitize_name(backend_name)

    if strategy == Strategy.PREFIX_PROVIDER:
        return _join(sanitize_name(owner), name)
    if strategy == Strategy.PREFIX_HOST:
        return _join(extract_hostname(owner), name)
    if strategy == Strategy.HASH:
        return _join(name, short_hash(owner))
    return _join(name)


def is_valid_record_id(value: str) -> bool:
    """Check an already-generated identifier against the record grammar."""
    return bool(RECORD_ID_PATTERN.match(value)) and "--" not in value


def record_metadata(backend_name: str, owner: str) -> tuple[dict[str, str], dict[str, str]]:
    """Labels and annotations that accompany a record for operators.

    Returns (labels, annotations). Label values are bounded the same way
    identifiers are; the original backend name is kept verbatim in the
    annotation.
    """
    labels = {LABEL_INSTANCE: truncate_name(sanitize_name(owner))}
    host = truncate_name(extract_hostname(owner))
    if host:
        labels[LABEL_HOST] = host
    annotations = {ANNOTATION_ORIGINAL_NAME: backend_name}
    return labels, annotations


class NameGenerator:
    """Record-name generator bound to the deployment's naming strategy."""

    def __init__(self, strategy: Strategy):
        self._strategy = strategy

    @property
    def strategy(self) -> Strategy:
        return self._strategy

    def generate(self, backend_name: str, owner: str) -> str:
        return generate_name(self._strategy, backend_name, owner)

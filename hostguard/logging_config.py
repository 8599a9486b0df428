"""Structured logging setup for hostguard.

JSON output is the default so admission decisions can be shipped to a log
pipeline; text output is meant for local runs.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from hostguard.config import settings

SERVICE_NAME = "hostguard"

# Attributes present on every LogRecord; anything else came in via extra=
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class HostguardJSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def __init__(self, instance_id: str = ""):
        super().__init__()
        self.instance_id = instance_id

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": SERVICE_NAME,
            "instance_id": self.instance_id,
        }
        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class HostguardTextFormatter(logging.Formatter):
    """Human-readable formatter with a short instance prefix."""

    def __init__(self, instance_id: str = ""):
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s [%(instance)s] %(name)s: %(message)s",
        )
        self.instance_id = instance_id

    def format(self, record: logging.LogRecord) -> str:
        record.instance = (self.instance_id or SERVICE_NAME)[:8]
        return super().format(record)


def setup_logging(instance_id: str = "") -> None:
    """Configure the root logger from settings.log_level / settings.log_format."""
    if settings.log_format.lower() == "text":
        formatter: logging.Formatter = HostguardTextFormatter(instance_id=instance_id)
    else:
        formatter = HostguardJSONFormatter(instance_id=instance_id)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    # Quiet per-request client logs
    logging.getLogger("httpx").setLevel(logging.WARNING)

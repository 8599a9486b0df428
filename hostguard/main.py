"""Hostguard - record naming and cross-host admission service.

This service runs next to the control plane and handles:
- Deriving record identifiers from libvirt resource names
- Rejecting resources that reference records of another libvirt instance
- Health and Prometheus metrics endpoints
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, HTTPException, Response

from hostguard.admission import review
from hostguard.config import settings
from hostguard.errors import LookupFailureError
from hostguard.logging_config import setup_logging
from hostguard.lookup import RecordLookup, get_record_lookup
from hostguard.metrics import get_metrics
from hostguard.naming import NameGenerator, parse_strategy, record_metadata
from hostguard.schemas import (
    AdmissionRequest,
    AdmissionResponse,
    GenerateNameRequest,
    GenerateNameResponse,
)
from hostguard.version import __version__, get_commit

INSTANCE_ID = settings.instance_id or str(uuid.uuid4())[:8]

setup_logging(INSTANCE_ID)

logger = logging.getLogger(__name__)

# Naming strategy is fixed for the lifetime of the process
name_generator = NameGenerator(parse_strategy(settings.naming_strategy))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"Hostguard {INSTANCE_ID} starting (version {__version__}, "
        f"naming strategy {name_generator.strategy.value})"
    )
    yield
    logger.info(f"Hostguard {INSTANCE_ID} shutting down")


app = FastAPI(
    title="Hostguard",
    version=__version__,
    lifespan=lifespan,
)


# --- Health Endpoints ---

@app.get("/health")
def health():
    """Basic health check."""
    return {
        "status": "ok",
        "instance_id": INSTANCE_ID,
        "commit": get_commit(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/info")
def info():
    """Return version and naming configuration."""
    return {
        "instance_id": INSTANCE_ID,
        "version": __version__,
        "commit": get_commit(),
        "naming_strategy": name_generator.strategy.value,
    }


@app.get("/metrics")
def metrics():
    """Prometheus metrics."""
    body, content_type = get_metrics()
    return Response(content=body, media_type=content_type)


# --- Admission ---

@app.post("/admission/review", response_model=AdmissionResponse)
def admission_review(
    request: AdmissionRequest,
    lookup: RecordLookup = Depends(get_record_lookup),
) -> AdmissionResponse:
    """Review a resource create/update/delete.

    Returns 200 with allowed=false for rejected resources, and 503 when the
    record store could not be read.
    """
    try:
        return review(request, lookup)
    except LookupFailureError as e:
        logger.error(f"Record lookup failed during admission: {e.message}")
        raise HTTPException(status_code=503, detail=e.message)


# --- Naming ---

@app.post("/naming/generate", response_model=GenerateNameResponse)
def generate_name(request: GenerateNameRequest) -> GenerateNameResponse:
    """Derive the record identifier for a libvirt resource."""
    generator = name_generator
    if request.strategy is not None:
        generator = NameGenerator(parse_strategy(request.strategy))

    labels, annotations = record_metadata(request.backend_name, request.owner)
    return GenerateNameResponse(
        record_id=generator.generate(request.backend_name, request.owner),
        strategy=generator.strategy,
        labels=labels,
        annotations=annotations,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.service_host, port=settings.service_port)

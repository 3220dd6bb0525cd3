"""FastAPI routes for animal record CRUD, search and health check."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request
from fastapi.responses import PlainTextResponse

from shelter.data.schemas import (
    RECORD_ID_PATTERN,
    AnimalCreate,
    AnimalRecord,
    AnimalUpdate,
    HealthResponse,
    MutationResponse,
)
from shelter.records.service import RecordService

logger = logging.getLogger(__name__)

router = APIRouter()

RecordId = Annotated[
    str, Path(pattern=RECORD_ID_PATTERN, description="Animal record identifier")
]


def get_service(request: Request) -> RecordService:
    """Record service constructed at startup."""
    return request.app.state.service


Service = Annotated[RecordService, Depends(get_service)]


def _query_params(request: Request) -> dict[str, str | list[str]]:
    """Collapse query parameters, keeping repeated ones as lists."""
    params: dict[str, str | list[str]] = {}
    for key in request.query_params.keys():
        values = request.query_params.getlist(key)
        params[key] = values[0] if len(values) == 1 else values
    return params


@router.get("/", response_class=PlainTextResponse)
async def home() -> str:
    """Liveness text for the root path."""
    return "Animal records service is functional"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint for monitoring.

    Returns:
        HealthResponse with Elasticsearch connectivity.
    """
    es = request.app.state.es_client
    es_healthy = await es.ping()
    return HealthResponse(
        status="healthy" if es_healthy else "degraded",
        elasticsearch="connected" if es_healthy else "disconnected",
    )


@router.post("/animals", response_model=MutationResponse, status_code=201)
async def create_animal(payload: AnimalCreate, service: Service) -> MutationResponse:
    """Add a new animal, reusing the caretaker identity for known emails."""
    record = await service.create(payload)
    return MutationResponse(message="New animal added", id=record.id)


@router.get("/animals", response_model=list[AnimalRecord])
async def search_animals(request: Request, service: Service) -> list[AnimalRecord]:
    """Search animals.

    Recognized query parameters: ``searchterm``, ``gender``,
    ``species_name``, ``status_tags`` (comma-separated),
    ``adopt_foster`` (comma-separated) and ``email``. Without parameters
    every record is returned.
    """
    return await service.search(_query_params(request))


@router.get("/animals/{record_id}", response_model=AnimalRecord | None)
async def get_animal(record_id: RecordId, service: Service) -> AnimalRecord | None:
    """Fetch one animal by identifier; ``null`` when it does not exist."""
    return await service.fetch_one(record_id)


@router.put("/animals/{record_id}", response_model=MutationResponse)
async def update_animal(
    record_id: RecordId, payload: AnimalUpdate, service: Service
) -> MutationResponse:
    """Replace an animal's mutable fields."""
    await service.update(record_id, payload)
    return MutationResponse(message=f"Animal record (ID: {record_id}) updated", id=record_id)


@router.delete("/animals/{record_id}", response_model=MutationResponse)
async def delete_animal(record_id: RecordId, service: Service) -> MutationResponse:
    """Delete an animal by identifier."""
    await service.delete(record_id)
    return MutationResponse(message=f"Animal record (ID: {record_id}) deleted", id=record_id)

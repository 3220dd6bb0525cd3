"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from elasticsearch import AsyncElasticsearch
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shelter.config import Config, get_config
from shelter.records.caretakers import CaretakerResolver
from shelter.records.errors import RecordNotFoundError, StoreError
from shelter.records.service import RecordService
from shelter.store.adapter import AnimalStore
from shelter.store.es_client import create_es_client
from shelter.store.mappings import ensure_indices

logger = logging.getLogger(__name__)

INTERNAL_ERROR_DETAIL = "Internal server error. Please contact administrator."


def build_service(es_client: AsyncElasticsearch, config: Config) -> RecordService:
    """Wire the record service around one shared Elasticsearch client."""
    store = AnimalStore(
        es_client,
        index_name=config.index_name,
        caretaker_index=config.caretaker_index,
        refresh=config.refresh,
        max_results=config.max_results,
    )
    return RecordService(store, CaretakerResolver(store))


def _make_lifespan(config: Config, reset_indices: bool):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the shared Elasticsearch client on startup, close it on shutdown.

        A failed connection aborts startup.
        """
        es_client = await create_es_client(config)
        try:
            await ensure_indices(
                es_client,
                animal_index=config.index_name,
                caretaker_index=config.caretaker_index,
                reset=reset_indices,
            )
            app.state.config = config
            app.state.es_client = es_client
            app.state.service = build_service(es_client, config)
            yield
        finally:
            await es_client.close()

    return lifespan


async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.exception(
        "Store failure on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_DETAIL})


async def _not_found_handler(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    """Map service failures to HTTP responses."""
    app.add_exception_handler(StoreError, _store_error_handler)
    app.add_exception_handler(RecordNotFoundError, _not_found_handler)


def create_app(config: Config | None = None, reset_indices: bool = False) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Configuration to use; read from the environment if omitted.
        reset_indices: Drop and recreate the indices on startup.

    Returns:
        Configured FastAPI application instance.
    """
    config = config or get_config()

    app = FastAPI(
        title="Adoptable Animal Records",
        description="Record management for adoptable animals backed by Elasticsearch",
        version="0.1.0",
        lifespan=_make_lifespan(config, reset_indices),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    from shelter.api.routes import router

    app.include_router(router)

    return app

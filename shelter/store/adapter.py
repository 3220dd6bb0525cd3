"""Document store adapter over an Elasticsearch cluster.

All client failures are wrapped in ``StoreError``. Missing documents are
reported through return values, never exceptions: ``find_one`` returns
``None`` and ``update_one``/``delete_one`` return whether a document
matched.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from elasticsearch import (
    ApiError,
    AsyncElasticsearch,
    ConflictError,
    NotFoundError,
    TransportError,
)

from shelter.records.criteria import SearchCriteria
from shelter.records.errors import StoreError
from shelter.store.mappings import ANIMAL_INDEX_NAME, CARETAKER_INDEX_NAME
from shelter.store.query import to_es_query

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _store_errors(action: str) -> AsyncIterator[None]:
    """Convert client exceptions raised inside the block into StoreError."""
    try:
        yield
    except (ApiError, TransportError) as exc:
        raise StoreError(f"Elasticsearch {action} failed") from exc


class AnimalStore:
    """Find/insert/update/delete primitives for animal documents.

    Also owns the caretaker registry, whose document ids are normalized
    emails, giving one atomic find-or-create per caretaker.

    Args:
        es_client: Shared AsyncElasticsearch client.
        index_name: Index holding animal records.
        caretaker_index: Index holding the caretaker registry.
        refresh: Refresh policy applied to writes.
        max_results: Upper bound on documents returned by ``find``.
    """

    def __init__(
        self,
        es_client: AsyncElasticsearch,
        index_name: str = ANIMAL_INDEX_NAME,
        caretaker_index: str = CARETAKER_INDEX_NAME,
        refresh: str = "wait_for",
        max_results: int = 10000,
    ) -> None:
        self.es = es_client
        self.index_name = index_name
        self.caretaker_index = caretaker_index
        self.refresh = refresh
        self.max_results = max_results

    async def find(
        self, criteria: SearchCriteria, limit: int | None = None
    ) -> list[tuple[str, dict]]:
        """Return ``(id, document)`` pairs matching the criteria.

        At most ``limit`` documents are returned, or ``max_results`` when
        no limit is given.
        """
        query = to_es_query(criteria)
        logger.debug("Searching '%s' with %s", self.index_name, query)
        async with _store_errors("search"):
            resp = await self.es.search(
                index=self.index_name, query=query, size=limit or self.max_results
            )
        return [(hit["_id"], hit["_source"]) for hit in resp["hits"]["hits"]]

    async def find_one(self, record_id: str) -> dict | None:
        """Point lookup by id; ``None`` when absent."""
        async with _store_errors("get"):
            try:
                resp = await self.es.get(index=self.index_name, id=record_id)
            except NotFoundError:
                return None
        return resp["_source"]

    async def insert_one(self, document: dict) -> str:
        """Insert a document and return its store-assigned id."""
        async with _store_errors("index"):
            resp = await self.es.index(
                index=self.index_name, document=document, refresh=self.refresh
            )
        return resp["_id"]

    async def update_one(self, record_id: str, fields: dict) -> bool:
        """Overwrite ``fields`` on one document; False when no document matched."""
        async with _store_errors("update"):
            try:
                await self.es.update(
                    index=self.index_name,
                    id=record_id,
                    doc=fields,
                    refresh=self.refresh,
                )
            except NotFoundError:
                return False
        return True

    async def delete_one(self, record_id: str) -> bool:
        """Remove one document; False when no document matched."""
        async with _store_errors("delete"):
            try:
                await self.es.delete(
                    index=self.index_name, id=record_id, refresh=self.refresh
                )
            except NotFoundError:
                return False
        return True

    async def find_or_create_caretaker(
        self, email_key: str, candidate: dict
    ) -> tuple[dict, bool]:
        """Atomically register ``candidate`` under ``email_key`` unless taken.

        Args:
            email_key: Normalized email used as the registry document id.
            candidate: Registry document to store if the key is new.

        Returns:
            Tuple of (registry document now stored, whether it was created).
        """
        async with _store_errors("caretaker create"):
            try:
                await self.es.create(
                    index=self.caretaker_index,
                    id=email_key,
                    document=candidate,
                    refresh=self.refresh,
                )
            except ConflictError:
                resp = await self.es.get(index=self.caretaker_index, id=email_key)
                return resp["_source"], False
        return candidate, True

    async def rename_caretaker(
        self, email_key: str, caretaker_id: str, caretaker_name: str
    ) -> int:
        """Set a new display name in the registry and on every animal record.

        Returns:
            Number of animal records updated.
        """
        async with _store_errors("caretaker rename"):
            await self.es.update(
                index=self.caretaker_index,
                id=email_key,
                doc={"caretaker_name": caretaker_name},
                refresh=self.refresh,
            )
            resp = await self.es.update_by_query(
                index=self.index_name,
                query={"term": {"current_caretaker.id": caretaker_id}},
                script={
                    "source": "ctx._source.current_caretaker.caretaker_name = params.name",
                    "params": {"name": caretaker_name},
                },
                conflicts="proceed",
                # update_by_query takes a boolean refresh; wait_for counts as true
                refresh=self.refresh not in ("false", False),
            )
        return resp["updated"]

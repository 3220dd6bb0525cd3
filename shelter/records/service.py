"""Record service orchestrating the five animal record operations."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from shelter.data.schemas import AnimalCreate, AnimalRecord, AnimalUpdate
from shelter.records.caretakers import CaretakerResolver
from shelter.records.criteria import ParamValue, build_criteria
from shelter.records.errors import RecordNotFoundError
from shelter.store.adapter import AnimalStore

logger = logging.getLogger(__name__)


class RecordService:
    """Create, search, fetch, update and delete adoptable animal records.

    Every operation is a single document operation against the store;
    ``StoreError`` from the adapter propagates to the caller unchanged.

    Args:
        store: Store adapter bound to the shared client.
        resolver: Caretaker resolver used on creation.
    """

    def __init__(self, store: AnimalStore, resolver: CaretakerResolver) -> None:
        self.store = store
        self.resolver = resolver

    async def create(self, payload: AnimalCreate) -> AnimalRecord:
        """Resolve the caretaker identity and insert a new record.

        Args:
            payload: Validated creation request.

        Returns:
            The stored record, including its assigned identifier.
        """
        resolution = await self.resolver.resolve(
            payload.current_caretaker.email,
            payload.current_caretaker.caretaker_name,
        )
        document = payload.model_dump(mode="json", exclude={"current_caretaker"})
        document["current_caretaker"] = resolution.caretaker.model_dump(mode="json")

        record_id = await self.store.insert_one(document)
        logger.info("Created animal record %s", record_id)

        # Renaming waits for a successful insert so a failed create leaves no trace
        await self.resolver.apply_rename(resolution)
        return AnimalRecord.from_document(record_id, document)

    async def search(self, params: Mapping[str, ParamValue]) -> list[AnimalRecord]:
        """Return all records matching the given query parameters."""
        criteria = build_criteria(params)
        hits = await self.store.find(criteria)
        return [AnimalRecord.from_document(record_id, doc) for record_id, doc in hits]

    async def fetch_one(self, record_id: str) -> AnimalRecord | None:
        """Return one record, or None if no record has this identifier."""
        document = await self.store.find_one(record_id)
        if document is None:
            return None
        return AnimalRecord.from_document(record_id, document)

    async def update(self, record_id: str, payload: AnimalUpdate) -> None:
        """Replace the full mutable field set of a record.

        Raises:
            RecordNotFoundError: If no record has this identifier.
        """
        fields = payload.model_dump(mode="json")
        if not await self.store.update_one(record_id, fields):
            logger.warning("Update matched no animal record %s", record_id)
            raise RecordNotFoundError(record_id)
        logger.info("Updated animal record %s", record_id)

    async def delete(self, record_id: str) -> None:
        """Remove a record.

        Raises:
            RecordNotFoundError: If no record has this identifier.
        """
        if not await self.store.delete_one(record_id):
            logger.warning("Delete matched no animal record %s", record_id)
            raise RecordNotFoundError(record_id)
        logger.info("Deleted animal record %s", record_id)

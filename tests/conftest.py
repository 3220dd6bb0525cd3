"""Shared test fixtures for the animal records test suite."""

from __future__ import annotations

import copy
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from shelter.data.schemas import AnimalCreate, AnimalUpdate
from shelter.records.caretakers import CaretakerResolver
from shelter.records.criteria import AnyOf, Clause, Either, SearchCriteria, TextMatch
from shelter.records.errors import StoreError
from shelter.records.service import RecordService


def _field_values(document: dict, dotted: str) -> list[str]:
    value: object = document
    for part in dotted.split("."):
        if not isinstance(value, dict) or part not in value:
            return []
        value = value[part]
    if isinstance(value, list):
        return [str(v) for v in value]
    return [str(value)]


def _clause_matches(clause: Clause, document: dict) -> bool:
    if isinstance(clause, TextMatch):
        needle = clause.value.lower()
        values = [v.lower() for v in _field_values(document, clause.field)]
        if clause.exact:
            return needle in values
        return any(needle in v for v in values)
    if isinstance(clause, AnyOf):
        return any(v in clause.values for v in _field_values(document, clause.field))
    if isinstance(clause, Either):
        return any(_clause_matches(sub, document) for sub in clause.clauses)
    raise TypeError(clause)


class InMemoryStore:
    """Store adapter double that evaluates criteria trees in Python."""

    def __init__(self) -> None:
        self.documents: dict[str, dict] = {}
        self.caretakers: dict[str, dict] = {}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise StoreError("store unavailable")

    async def find(
        self, criteria: SearchCriteria, limit: int | None = None
    ) -> list[tuple[str, dict]]:
        self._check()
        hits = [
            (record_id, copy.deepcopy(doc))
            for record_id, doc in self.documents.items()
            if all(_clause_matches(c, doc) for c in criteria.clauses)
        ]
        return hits[:limit] if limit else hits

    async def find_one(self, record_id: str) -> dict | None:
        self._check()
        doc = self.documents.get(record_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def insert_one(self, document: dict) -> str:
        self._check()
        record_id = uuid.uuid4().hex[:20]
        self.documents[record_id] = copy.deepcopy(document)
        return record_id

    async def update_one(self, record_id: str, fields: dict) -> bool:
        self._check()
        if record_id not in self.documents:
            return False
        self.documents[record_id].update(copy.deepcopy(fields))
        return True

    async def delete_one(self, record_id: str) -> bool:
        self._check()
        return self.documents.pop(record_id, None) is not None

    async def find_or_create_caretaker(
        self, email_key: str, candidate: dict
    ) -> tuple[dict, bool]:
        self._check()
        if email_key in self.caretakers:
            return dict(self.caretakers[email_key]), False
        self.caretakers[email_key] = dict(candidate)
        return dict(candidate), True

    async def rename_caretaker(
        self, email_key: str, caretaker_id: str, caretaker_name: str
    ) -> int:
        self._check()
        self.caretakers[email_key]["caretaker_name"] = caretaker_name
        updated = 0
        for doc in self.documents.values():
            if doc["current_caretaker"]["id"] == caretaker_id:
                doc["current_caretaker"]["caretaker_name"] = caretaker_name
                updated += 1
        return updated


@pytest.fixture
def memory_store() -> InMemoryStore:
    """Create an empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def record_service(memory_store: InMemoryStore) -> RecordService:
    """Create a RecordService over the in-memory store."""
    return RecordService(memory_store, CaretakerResolver(memory_store))


@pytest.fixture
def create_body() -> dict:
    """Raw JSON body of a valid create request."""
    return {
        "name": "Buddy",
        "img_url": "https://example.org/buddy.jpg",
        "gender": "Male",
        "date_of_birth": "2021-04-12",
        "species": {"species_name": "Dog", "breed": "Labrador Retriever"},
        "status_tags": ["VACCINATED", "NEUTERED"],
        "description": "A friendly, playful companion.",
        "adopt_foster": "Adopt",
        "current_caretaker": {"caretaker_name": "Alice Tan", "email": "alice@example.org"},
    }


@pytest.fixture
def sample_create(create_body: dict) -> AnimalCreate:
    """Create a validated AnimalCreate."""
    return AnimalCreate(**create_body)


@pytest.fixture
def make_create(create_body: dict):
    """Factory for AnimalCreate with top-level fields replaced."""

    def _make(**overrides: object) -> AnimalCreate:
        body = copy.deepcopy(create_body)
        body.update(overrides)
        return AnimalCreate(**body)

    return _make


@pytest.fixture
def update_body(create_body: dict) -> dict:
    """Raw JSON body of a valid update request."""
    body = copy.deepcopy(create_body)
    body["name"] = "Buddy Jr."
    body["adopt_foster"] = "Foster"
    body["current_caretaker"] = {
        "_id": "c0ffee",
        "caretaker_name": "Bob Lim",
        "email": "bob@example.org",
    }
    return body


@pytest.fixture
def sample_update(update_body: dict) -> AnimalUpdate:
    """Create a validated AnimalUpdate."""
    return AnimalUpdate(**update_body)


@pytest.fixture
def mock_es_client() -> MagicMock:
    """Create a mock AsyncElasticsearch client."""
    mock = MagicMock()
    mock.ping = AsyncMock(return_value=True)
    mock.close = AsyncMock()
    mock.search = AsyncMock(return_value={"hits": {"hits": []}})
    mock.get = AsyncMock()
    mock.index = AsyncMock(return_value={"_id": "generated-id", "result": "created"})
    mock.update = AsyncMock(return_value={"result": "updated"})
    mock.delete = AsyncMock(return_value={"result": "deleted"})
    mock.create = AsyncMock(return_value={"result": "created"})
    mock.update_by_query = AsyncMock(return_value={"updated": 0})
    mock.indices.exists = AsyncMock(return_value=False)
    mock.indices.create = AsyncMock(return_value={"acknowledged": True})
    mock.indices.delete = AsyncMock(return_value={"acknowledged": True})
    return mock

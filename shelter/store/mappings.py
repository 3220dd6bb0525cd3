"""Index definitions for animal records and the caretaker registry."""

from __future__ import annotations

import logging

from elasticsearch import AsyncElasticsearch

logger = logging.getLogger(__name__)

ANIMAL_INDEX_NAME = "animals"
CARETAKER_INDEX_NAME = "caretakers"

_SETTINGS = {
    "number_of_shards": 1,
    "number_of_replicas": 0,
}

# Free-text fields use the wildcard type so unanchored substring queries
# run against the whole value rather than analyzed tokens.
ANIMAL_INDEX_MAPPING = {
    "settings": _SETTINGS,
    "mappings": {
        "dynamic": "strict",
        "properties": {
            "name": {"type": "wildcard"},
            "img_url": {"type": "keyword", "index": False},
            "gender": {"type": "keyword"},
            "date_of_birth": {"type": "date", "format": "strict_date"},
            "species": {
                "properties": {
                    "species_name": {"type": "keyword"},
                    "breed": {"type": "wildcard"},
                }
            },
            "status_tags": {"type": "keyword"},
            "description": {"type": "wildcard"},
            "adopt_foster": {"type": "keyword"},
            "current_caretaker": {
                "properties": {
                    "id": {"type": "keyword"},
                    "caretaker_name": {"type": "keyword"},
                    "email": {"type": "keyword"},
                }
            },
        },
    },
}

# Document id is the normalized email, which makes it the unique key
CARETAKER_INDEX_MAPPING = {
    "settings": _SETTINGS,
    "mappings": {
        "dynamic": "strict",
        "properties": {
            "caretaker_id": {"type": "keyword"},
            "caretaker_name": {"type": "keyword"},
            "email": {"type": "keyword"},
        },
    },
}


async def create_index(
    es: AsyncElasticsearch,
    index_name: str,
    body: dict,
    reset: bool = False,
) -> bool:
    """Create an index unless it already exists.

    Args:
        es: Elasticsearch client.
        index_name: Name of the index to create.
        body: Settings and mappings for the index.
        reset: Delete and recreate the index if it exists.

    Returns:
        True if the index was created by this call.
    """
    if await es.indices.exists(index=index_name):
        if not reset:
            return False
        logger.info("Deleting existing index '%s'", index_name)
        await es.indices.delete(index=index_name)

    await es.indices.create(
        index=index_name, settings=body["settings"], mappings=body["mappings"]
    )
    logger.info("Created index '%s'", index_name)
    return True


async def ensure_indices(
    es: AsyncElasticsearch,
    animal_index: str = ANIMAL_INDEX_NAME,
    caretaker_index: str = CARETAKER_INDEX_NAME,
    reset: bool = False,
) -> None:
    """Make sure both indices exist with the expected mappings."""
    await create_index(es, animal_index, ANIMAL_INDEX_MAPPING, reset=reset)
    await create_index(es, caretaker_index, CARETAKER_INDEX_MAPPING, reset=reset)

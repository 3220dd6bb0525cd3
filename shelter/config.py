"""Central application configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _split_origins(raw: str) -> tuple[str, ...]:
    """Parse a comma-separated origin list, dropping blanks."""
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Config:
    """Central application configuration.

    Reads from environment variables with sensible defaults.
    """

    # Elasticsearch
    elasticsearch_url: str = field(
        default_factory=lambda: os.getenv("ELASTICSEARCH_URL", "http://localhost:9200")
    )
    es_cloud_id: str | None = field(default_factory=lambda: os.getenv("ELASTIC_CLOUD_ID"))
    es_api_key: str | None = field(default_factory=lambda: os.getenv("ELASTIC_API_KEY"))
    request_timeout: float = field(
        default_factory=lambda: float(os.getenv("ES_REQUEST_TIMEOUT", "10"))
    )

    # Indices
    index_name: str = field(default_factory=lambda: os.getenv("ANIMALS_INDEX", "animals"))
    caretaker_index: str = field(
        default_factory=lambda: os.getenv("CARETAKERS_INDEX", "caretakers")
    )

    # Writes wait for the next refresh so searches observe them
    refresh: str = field(default_factory=lambda: os.getenv("ES_REFRESH", "wait_for"))

    # Search
    max_results: int = 10000

    # Server
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: _split_origins(os.getenv("CORS_ORIGINS", "*"))
    )
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8888")))


def get_config() -> Config:
    """Get application configuration.

    Returns:
        Config instance with values from environment or defaults.
    """
    return Config()

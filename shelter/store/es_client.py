"""Elasticsearch client construction with health checks."""

from __future__ import annotations

import logging
import time

from elasticsearch import AsyncElasticsearch, Elasticsearch

from shelter.config import Config

logger = logging.getLogger(__name__)


def _client_kwargs(
    url: str,
    cloud_id: str | None,
    api_key: str | None,
    request_timeout: float | None,
) -> dict:
    """Connection arguments for local or Elastic Cloud deployments."""
    kwargs: dict = {}
    if cloud_id:
        kwargs["cloud_id"] = cloud_id
        kwargs["api_key"] = api_key
    else:
        kwargs["hosts"] = url
    if request_timeout is not None:
        kwargs["request_timeout"] = request_timeout
    return kwargs


async def create_es_client(config: Config) -> AsyncElasticsearch:
    """Create and verify the process-wide Elasticsearch client.

    Args:
        config: Application configuration.

    Returns:
        Connected AsyncElasticsearch client.

    Raises:
        ConnectionError: If unable to connect to Elasticsearch.
    """
    es = AsyncElasticsearch(
        **_client_kwargs(
            config.elasticsearch_url,
            config.es_cloud_id,
            config.es_api_key,
            config.request_timeout,
        )
    )
    target = config.es_cloud_id or config.elasticsearch_url
    if not await es.ping():
        await es.close()
        raise ConnectionError(f"Cannot connect to Elasticsearch at {target}")
    logger.info("Connected to Elasticsearch at %s", target)
    return es


def wait_for_elasticsearch(
    url: str,
    timeout: int = 120,
    cloud_id: str | None = None,
    api_key: str | None = None,
) -> bool:
    """Wait for Elasticsearch to become healthy.

    Retries connection every 5 seconds until timeout.

    Args:
        url: Elasticsearch URL (ignored when cloud_id is set).
        timeout: Maximum seconds to wait.
        cloud_id: Elastic Cloud deployment ID.
        api_key: Elastic Cloud API key.

    Returns:
        True if ES is healthy, False if timeout reached.
    """
    es = Elasticsearch(**_client_kwargs(url, cloud_id, api_key, None))
    target = cloud_id or url
    start = time.monotonic()

    try:
        while time.monotonic() - start < timeout:
            try:
                if es.ping():
                    logger.info("Elasticsearch is ready at %s", target)
                    return True
            except Exception as exc:
                logger.debug("Ping to %s failed: %s", target, exc)
            logger.info("Waiting for Elasticsearch...")
            time.sleep(5)
    finally:
        es.close()

    logger.error("Elasticsearch not available at %s after %ds", target, timeout)
    return False

#!/usr/bin/env python3
"""Adoptable animal records service: single entry point.

Waits for Elasticsearch, then launches the FastAPI service. The indices
are created on startup when missing.

Usage:
    python main.py
    python main.py --port 8000
    python main.py --es-url http://es:9200 --wait 60
    python main.py --reset-index        # drop and recreate both indices
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger("shelter")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Adoptable animal records service")
    parser.add_argument("--port", type=int, default=None, help="Server port")
    parser.add_argument("--host", type=str, default=None, help="Server host")
    parser.add_argument(
        "--es-url", type=str, default=None, help="Elasticsearch URL"
    )
    parser.add_argument(
        "--wait",
        type=int,
        default=120,
        help="Seconds to wait for Elasticsearch before giving up",
    )
    parser.add_argument(
        "--reset-index",
        action="store_true",
        help="Delete and recreate the animal and caretaker indices on startup",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Wait for the store, then serve the API."""
    args = _parse_args(argv)

    from shelter.config import get_config

    config = get_config()
    overrides = {
        key: value
        for key, value in (
            ("elasticsearch_url", args.es_url),
            ("host", args.host),
            ("port", args.port),
        )
        if value is not None
    }
    config = replace(config, **overrides)

    from shelter.store.es_client import wait_for_elasticsearch

    target = config.es_cloud_id or config.elasticsearch_url
    logger.info("Ensuring Elasticsearch is available at %s", target)
    if not wait_for_elasticsearch(
        config.elasticsearch_url,
        timeout=args.wait,
        cloud_id=config.es_cloud_id,
        api_key=config.es_api_key,
    ):
        logger.error("Elasticsearch not available after waiting. Exiting.")
        sys.exit(1)

    import uvicorn

    from shelter.api.app import create_app

    app = create_app(config, reset_indices=args.reset_index)

    logger.info("Server listening on %s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()

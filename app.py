#!/usr/bin/env python3
"""
Main entry point for the LinkVault service.

Concurrency: one process, one event loop. The link store lives in memory and
is the only writer of the links file, so run a single uvicorn worker.

Usage:
    python app.py

Environment variables:
    LINKS_FILE - JSON file holding every link
    BASE_URL - Base URL for short links
    PORT - Port to listen on
    FLUSH_DELAY_MS - Debounce delay before the links file is rewritten
    RATE_LIMIT / RATE_LIMIT_WINDOW_SECONDS - Create/verify budget per client
    TRUST_FORWARDED_FOR - Rate limit by X-Forwarded-For (behind a proxy)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager
from datetime import timedelta

import uvicorn
from fastapi import FastAPI

from config import load_config
from linkvault.rate_limit import RateLimiter
from linkvault.shortcode import ShortCodeGenerator
from linkvault.store import LinkStore
from linkvault.storage.json_file import JSONFileBackend
from linkvault.common.logging_config import setup_logging
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting LinkVault...")

    backend = JSONFileBackend(config.links_file)
    store = LinkStore.with_backend(
        backend,
        flush_delay_seconds=config.flush_delay_seconds,
        short_code_generator=ShortCodeGenerator(default_length=config.short_code_length),
        link_ttl=timedelta(days=config.link_ttl_days),
    )
    await store.load()

    app.state.store = store
    app.state.rate_limiter = RateLimiter(
        limit=config.rate_limit,
        window_seconds=config.rate_limit_window_seconds,
        sweep_seconds=config.rate_limit_sweep_seconds,
    )

    logger.info(f"Links persisted to {config.links_file}")

    yield

    logger.info("Shutting down LinkVault...")

    # Write anything still inside the debounce window
    await store.writer.close()

    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("LinkVault API")
    logger.info(f"Configuration: {config.model_dump()}")

    app = create_app(
        store_instance=None,  # Will be set in lifespan
        rate_limiter_instance=None,
        config=config,
    )

    app.state.logger = logger
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=1,
        log_level=config.log_level.lower(),
        access_log=False,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

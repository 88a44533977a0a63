"""Entry point for the Horizon fee tracker.

Wires all components together and runs the fee poller next to the FastAPI
query API. Both share a single asyncio event loop via uvicorn's
programmatic API; the poller is started and signalled from FastAPI's
lifespan context manager.

The two activities shut down independently. uvicorn closes the listener and
drains open connections before it runs the lifespan shutdown, so the HTTP
side never waits on an in-flight poll. The lifespan shutdown then requests
poller shutdown and waits for the current cycle, if any, to finish before
closing the Horizon client. The poller is never cancelled.

Component wiring order (in build_components):
1. AppSettings (configuration, CLI overrides applied)
2. Logging setup
3. HorizonClient (fee data provider)
4. FeeHistoryStore (bounded snapshot history)
5. FeeInsightsEngine (derived analytics)
6. FeePoller (timer-driven ingestion)
"""

import asyncio
import json
import signal
import sys
from collections.abc import Sequence
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from feetracker.api.app import create_app
from feetracker.api.routes.fees import snapshot_to_dict
from feetracker.api.routes.insights import status_to_dict
from feetracker.cli import load_settings, parse_args
from feetracker.config import AppSettings
from feetracker.insights.engine import FeeInsightsEngine
from feetracker.logging import get_logger, setup_logging
from feetracker.provider.horizon import HorizonClient
from feetracker.scheduler.poller import FeePoller
from feetracker.store.history import FeeHistoryStore


def build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all tracker components from settings.

    Note: Does NOT call provider.connect() -- that happens in the lifespan
    (API mode) or run() (headless and --once modes).

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    provider = HorizonClient(settings.horizon)
    store = FeeHistoryStore(settings.store.capacity)
    engine = FeeInsightsEngine(settings.insights.to_config())
    poller = FeePoller(
        provider=provider,
        store=store,
        engine=engine,
        interval=settings.poll.interval_seconds,
    )
    return {
        "provider": provider,
        "store": store,
        "engine": engine,
        "poller": poller,
    }


def _setup_signal_handlers(poller: FeePoller) -> None:
    """Register SIGINT/SIGTERM to request poller shutdown (headless mode only).

    Must be called after the asyncio event loop is running. In API mode
    uvicorn owns the signals and the lifespan forwards shutdown instead.
    """
    logger = get_logger("feetracker.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        poller.request_shutdown()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage provider and poller lifecycle within the FastAPI application.

    On startup: connects the provider and starts the poller as a background task.

    On shutdown (after uvicorn has stopped serving): requests poller shutdown,
    waits for an in-flight cycle to complete, and closes the provider.
    """
    logger = get_logger("feetracker.main")
    components = app.state.components

    await components["provider"].connect()
    await components["poller"].start()
    logger.info("lifespan_started")

    yield

    await components["poller"].stop()
    await components["provider"].close()
    logger.info("fee_tracker_stopped")


async def _run_once(components: dict[str, Any]) -> None:
    """Poll a single time and print the result as JSON."""
    provider = components["provider"]
    await provider.connect()
    try:
        ingested = await components["poller"].poll_once()
    finally:
        await provider.close()

    latest = await components["store"].latest()
    status = await components["engine"].current()
    print(json.dumps({
        "ingested": ingested,
        "snapshot": snapshot_to_dict(latest) if latest else None,
        "insights": status_to_dict(status),
    }, indent=2))
    if not ingested:
        sys.exit(1)


async def run(argv: Sequence[str] | None = None) -> None:
    """Run the fee tracker.

    When the API is enabled (API_ENABLED=true, the default):
    - Creates the FastAPI app with lifespan
    - Runs the server and the poller in a single asyncio event loop via uvicorn
    - Lifespan manages provider and poller startup/shutdown

    When the API is disabled (API_ENABLED=false):
    - Runs the poller directly with its own signal handlers
    """
    args = parse_args(argv)

    # 1. Load settings
    try:
        settings = load_settings(args)
    except ValidationError as e:
        setup_logging()
        get_logger("feetracker.main").error("invalid_configuration", error=str(e))
        sys.exit(1)

    # 2. Setup logging
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("feetracker.main")
    logger.info(
        "configuration_loaded",
        horizon_url=settings.horizon.url,
        poll_interval=settings.poll.interval_seconds,
        store_capacity=settings.store.capacity,
        window_size=settings.insights.window_size,
    )

    # 3-6. Build all components
    components = build_components(settings)
    provider = components["provider"]
    poller = components["poller"]

    if args.once:
        await _run_once(components)
        return

    if settings.api.enabled:
        app = create_app(lifespan=lifespan, allowed_origins=settings.api.origins)
        app.state.components = components
        app.state.store = components["store"]
        app.state.engine = components["engine"]
        app.state.poller = poller

        logger.info(
            "starting_with_api",
            host=settings.api.host,
            port=settings.api.port,
        )

        config = uvicorn.Config(
            app,
            host=settings.api.host,
            port=settings.api.port,
            log_level="warning",  # Suppress uvicorn access logs
        )
        server = uvicorn.Server(config)
        await server.serve()
    else:
        _setup_signal_handlers(poller)
        logger.info("starting_without_api", interval=settings.poll.interval_seconds)

        try:
            await provider.connect()
            await poller.run()
        finally:
            await provider.close()
            logger.info("fee_tracker_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()

"""Application lifespan management."""

import asyncio
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from backend.web.core.config import HTTP_CLIENT_MAX_CONNECTIONS, SHUTDOWN_DRAIN_TIMEOUT_SEC
from backend.web.services.keeper_service import KeeperService
from config import KeeperSettings, load_settings
from core.callback import CallbackChannel, CallbackService, RequestsController
from storage.container import StorageContainer

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup and shutdown."""
    # Tests may pre-seed settings on app.state
    settings: KeeperSettings = getattr(app.state, "settings", None) or load_settings()
    configure_logging(settings.log_level)

    storage = StorageContainer(settings.db_path)
    channel = CallbackChannel(capacity=settings.callback.channel_capacity)
    http_client = getattr(app.state, "http_client", None) or httpx.AsyncClient(
        limits=httpx.Limits(max_connections=HTTP_CLIENT_MAX_CONNECTIONS),
    )
    callback_service = CallbackService(
        channel,
        storage.file_repo(),
        storage.file_content_repo(),
        storage.listener_repo(),
        RequestsController(http_client, settings.callback),
        max_concurrency=settings.callback.max_concurrency,
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.http_client = http_client
    app.state.callback_channel = channel
    app.state.callback_service = callback_service
    app.state.keeper = KeeperService(storage, channel)
    app.state.callback_stop = asyncio.Event()
    app.state.callback_task = None

    try:
        # Start the callback dispatch loop
        app.state.callback_task = asyncio.create_task(callback_service.run(app.state.callback_stop))
        logger.info(
            "Config Keeper started (db=%s, callback channel capacity=%d)", settings.db_path, channel.capacity
        )
        yield
    finally:
        # Cleanup: let pending edits reach the channel, stop the dispatch loop,
        # then drain in-flight deliveries
        try:
            await asyncio.wait_for(app.state.keeper.flush_notifications(), SHUTDOWN_DRAIN_TIMEOUT_SEC)
        except TimeoutError:
            logger.warning("Change notifications still waiting for the channel after %ss", SHUTDOWN_DRAIN_TIMEOUT_SEC)
        app.state.callback_stop.set()
        task = app.state.callback_task
        if task:
            await task
        try:
            await asyncio.wait_for(callback_service.join(), SHUTDOWN_DRAIN_TIMEOUT_SEC)
        except TimeoutError:
            logger.warning("Callback deliveries still running after %ss, abandoning", SHUTDOWN_DRAIN_TIMEOUT_SEC)

        await http_client.aclose()
        app.state.keeper = None
        logger.info("Config Keeper stopped")

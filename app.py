from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import asyncio

from constants import (
    ALLOWED_ORIGINS,
    LOG_FILE,
    LOG_LEVEL,
    ROOM_IDLE_TIMEOUT_SECONDS,
    ROOM_SWEEP_INTERVAL_SECONDS,
    STATIC_DIR,
    WS_PATH,
)
from connections import ConnectionManager
from logging_config import get_logger, setup_logging
from registry import RoomRegistry
from routers.assets import create_assets_router
from routers.rooms import rooms_router
from session import SessionRouter

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


async def sweep_idle_rooms(app: FastAPI, idle_timeout: int, interval: int):
    """Background task evicting rooms that never got a second player."""
    logger.info(f"Starting idle room sweeper: timeout={idle_timeout}s, interval={interval}s")
    try:
        while True:
            await asyncio.sleep(interval)
            deliveries = app.state.registry.evict_idle(idle_timeout)
            if deliveries:
                await app.state.session_router.deliver(deliveries)
    except asyncio.CancelledError:
        logger.info("Idle room sweeper stopped")
        raise


def create_app(
    registry: Optional[RoomRegistry] = None,
    static_dir: str = STATIC_DIR,
    room_idle_timeout: int = ROOM_IDLE_TIMEOUT_SECONDS,
    sweep_interval: int = ROOM_SWEEP_INTERVAL_SECONDS,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = None
        if room_idle_timeout > 0:
            sweeper = asyncio.create_task(sweep_idle_rooms(app, room_idle_timeout, sweep_interval))
        try:
            yield
        finally:
            if sweeper:
                sweeper.cancel()
                try:
                    await sweeper
                except asyncio.CancelledError:
                    pass

    app = FastAPI(lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Each app owns its registry so tests can run independent servers side by side
    app.state.registry = registry if registry is not None else RoomRegistry()
    app.state.connections = ConnectionManager()
    app.state.session_router = SessionRouter(app.state.registry, app.state.connections)

    @app.websocket(WS_PATH)
    async def websocket_endpoint(websocket: WebSocket):
        """Game channel: one JSON message per frame, see schemas.messages."""
        await websocket.accept()
        connections = app.state.connections
        session_router = app.state.session_router
        connection = connections.register(websocket)
        logger.info(f"New player connected: {connection.connection_id}")

        try:
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    logger.info(f"WebSocket disconnected for connection {connection.connection_id} (code {frame.get('code')})")
                    break
                raw = frame.get("text")
                if raw is None:
                    raw = frame.get("bytes") or b""
                await session_router.handle_message(connection, raw)
        except Exception as e:
            logger.error(f"WebSocket error for connection {connection.connection_id}: {e}", exc_info=True)
        finally:
            await session_router.handle_disconnect(connection)
            connections.unregister(connection.connection_id)
            logger.info(f"Player {connection.connection_id} connection closed")

    app.include_router(rooms_router)
    # Catch-all GET, so it has to come last
    app.include_router(create_assets_router(static_dir))

    logger.info("FastAPI application initialized")
    return app


app = create_app()

"""
FastAPI WebSocket server for the Sequence game.
"""

import asyncio
import logging
import os
import uuid
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..constants import ABANDONED_SESSION_TTL
from ..errors import INTERNAL_ERROR
from ..rules import RuleConfig
from ..serialization import loads
from ..session import SessionManager, SessionRegistry
from .events import (
    CreateGameEvent, JoinGameEvent, MakeMoveEvent, ReconnectEvent, ServerEvent,
    create_error_event, encode_event, parse_inbound_event,
)

# Configure logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


class ClientConnection:
    """
    One client socket with its own outbound queue.

    Sessions hand events to ``send_nowait``; a writer task drains the queue so
    a slow client never holds up a session.
    """

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.id = str(uuid.uuid4())[:8]
        self.closed = False
        self._queue: asyncio.Queue = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = None

    def start(self):
        self._writer = asyncio.create_task(self._write_loop())

    def send_nowait(self, event: ServerEvent) -> None:
        if self.closed:
            logger.debug(f"Dropping {event.type.value} for closed connection {self.id}")
            return
        self._queue.put_nowait(event)

    async def _write_loop(self):
        while True:
            event = await self._queue.get()
            try:
                await self.websocket.send_text(encode_event(event))
            except Exception as e:
                logger.error(f"Error sending {event.type.value} to connection {self.id}: {e}")
                self.closed = True
                return

    async def close(self):
        self.closed = True
        if self._writer is not None:
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass


async def handle_event(manager: SessionManager, connection: ClientConnection, event) -> None:
    """Route an inbound event to the session manager."""

    if isinstance(event, CreateGameEvent):
        await manager.create_game(connection, event.payload.player_name)
    elif isinstance(event, JoinGameEvent):
        await manager.join_game(connection, event.payload.game_id, event.payload.player_name)
    elif isinstance(event, MakeMoveEvent):
        payload = event.payload
        await manager.make_move(
            connection,
            payload.game_id,
            payload.card_index,
            payload.position.row,
            payload.position.col,
            payload.player_id,
        )
    elif isinstance(event, ReconnectEvent):
        await manager.reconnect(connection, event.payload.game_id, event.payload.player_id)
    else:
        raise ValueError(f"Unhandled event type: {type(event)}")


async def serve_connection(manager: SessionManager, websocket: WebSocket) -> None:
    """Read loop for one client."""
    await websocket.accept()
    connection = ClientConnection(websocket)
    connection.start()
    logger.info(f"Connection {connection.id} accepted")

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            # Text and binary frames both carry JSON
            raw_data = message.get("text") or message.get("bytes")

            try:
                if not raw_data:
                    raise ValueError("Empty frame")
                event = parse_inbound_event(loads(raw_data))
            except ValueError as e:
                # Transport noise, not a game error
                logger.warning(f"Dropping malformed message on {connection.id}: {e}")
                continue

            try:
                await handle_event(manager, connection, event)
            except Exception as e:
                logger.error(f"Error handling {event.type.value} on {connection.id}: {e}")
                connection.send_nowait(create_error_event(INTERNAL_ERROR, "Internal server error"))

    except WebSocketDisconnect:
        logger.info(f"Connection {connection.id} disconnected")
    except Exception as e:
        logger.error(f"WebSocket error on {connection.id}: {e}")
    finally:
        await manager.disconnect(connection)
        await connection.close()


def create_app(
    manager: Optional[SessionManager] = None,
    rules: Optional[RuleConfig] = None
) -> FastAPI:
    """Build the ASGI application around a session manager."""
    app = FastAPI(title="Sequence Game Engine", version=__version__)

    origins = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if manager is None:
        manager = SessionManager(
            SessionRegistry(),
            rules,
            abandoned_ttl=float(os.getenv("SESSION_TTL", ABANDONED_SESSION_TTL)),
        )
    app.state.manager = manager

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        session_manager: SessionManager = app.state.manager
        return {
            "status": "healthy",
            "games": len(session_manager.registry),
            "connections": session_manager.connection_count(),
        }

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Main WebSocket endpoint."""
        await serve_connection(app.state.manager, websocket)

    return app

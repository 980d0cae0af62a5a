"""
WebSocket client for the Sequence game.

The client keeps a ``ClientCache`` of the last known game so a fresh process
can reconnect to a match. The cache is only a replica: any state pushed by the
server replaces it.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import orjson
import websockets

logger = logging.getLogger(__name__)

MAX_RECONNECT_ATTEMPTS = 3
BASE_BACKOFF_SECONDS = 1.0

# Events whose payload carries an authoritative game state
STATE_EVENTS = ("GAME_STARTED", "GAME_STATE_UPDATED", "RECONNECT_SUCCESS", "GAME_OVER")


def backoff_delay(attempt: int, base: float = BASE_BACKOFF_SECONDS) -> float:
    """Delay before retry number ``attempt`` (0-based), doubling each time."""
    return base * (2 ** attempt)


@dataclass
class ClientCache:
    game_id: Optional[str] = None
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    game_state: Optional[Dict[str, Any]] = None
    is_game_started: bool = False
    players: List[Dict[str, Any]] = field(default_factory=list)
    last_error: Optional[str] = None

    def apply_event(self, event: Dict[str, Any]) -> None:
        """Update the cache from a server event."""
        event_type = event.get("type")
        payload = event.get("payload") or {}

        if event_type == "ERROR":
            self.last_error = payload.get("message")
            return

        game_id = payload.get("gameId")
        if event_type in ("GAME_CREATED", "GAME_JOINED") or (game_id and game_id != self.game_id):
            # A different match: nothing cached for the previous one applies
            self.game_state = None
            self.is_game_started = False
            self.players = []

        if game_id:
            self.game_id = game_id
        if event_type in ("GAME_CREATED", "GAME_JOINED", "RECONNECT_SUCCESS") and payload.get("playerId"):
            self.player_id = payload["playerId"]
        if "players" in payload:
            self.players = list(payload["players"])

        if event_type in STATE_EVENTS and "gameState" in payload:
            self.game_state = payload["gameState"]
            self.is_game_started = self.game_state is not None

    def can_reconnect(self) -> bool:
        return bool(self.game_id and self.player_id and self.is_game_started)

    def reconnect_message(self) -> Optional[Dict[str, Any]]:
        if not self.can_reconnect():
            return None
        return {"type": "RECONNECT", "payload": {"gameId": self.game_id, "playerId": self.player_id}}

    def clear(self) -> None:
        self.game_id = None
        self.player_id = None
        self.game_state = None
        self.is_game_started = False
        self.players = []
        self.last_error = None

    def save(self, path: Union[str, Path]) -> None:
        Path(path).write_bytes(orjson.dumps(asdict(self)))

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ClientCache':
        """Load a saved cache; a missing or unreadable file gives an empty one."""
        try:
            data = orjson.loads(Path(path).read_bytes())
        except FileNotFoundError:
            return cls()
        except orjson.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable client cache {path}: {e}")
            return cls()
        known = {key: value for key, value in data.items() if key in cls.__dataclass_fields__}
        return cls(**known)


class SequenceClient:
    """Async client that talks the game protocol and follows server pushes."""

    def __init__(
        self,
        url: str,
        cache: Optional[ClientCache] = None,
        max_attempts: int = MAX_RECONNECT_ATTEMPTS,
        base_delay: float = BASE_BACKOFF_SECONDS
    ):
        self.url = url
        self.cache = cache or ClientCache()
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.websocket = None

    async def connect(self):
        """
        Open the socket, retrying with exponential backoff.

        Once connected, a RECONNECT is sent if the cache holds a started game.

        Raises:
            ConnectionError: If every attempt fails
        """
        last_error: Optional[Exception] = None
        for attempt in range(self.max_attempts):
            try:
                self.websocket = await websockets.connect(self.url)
                break
            except (OSError, websockets.exceptions.WebSocketException) as e:
                last_error = e
                delay = backoff_delay(attempt, self.base_delay)
                logger.warning(f"Connect attempt {attempt + 1}/{self.max_attempts} to {self.url} failed: {e}")
                if attempt + 1 < self.max_attempts:
                    await asyncio.sleep(delay)
        else:
            raise ConnectionError(f"Could not connect to {self.url}: {last_error}")

        message = self.cache.reconnect_message()
        if message is not None:
            logger.info(f"Reconnecting to game {self.cache.game_id} as {self.cache.player_id}")
            await self._send(message)
        return self.websocket

    async def _send(self, message: Dict[str, Any]) -> None:
        await self.websocket.send(orjson.dumps(message).decode())

    async def send(self, event_type: str, payload: Dict[str, Any]) -> None:
        await self._send({"type": event_type, "payload": payload})

    async def create_game(self, player_name: str) -> None:
        self.cache.player_name = player_name
        await self.send("CREATE_GAME", {"playerName": player_name})

    async def join_game(self, game_id: str, player_name: str) -> None:
        self.cache.player_name = player_name
        await self.send("JOIN_GAME", {"gameId": game_id, "playerName": player_name})

    async def make_move(self, card_index: int, row: int, col: int) -> None:
        await self.send("MAKE_MOVE", {
            "gameId": self.cache.game_id,
            "cardIndex": card_index,
            "position": {"row": row, "col": col},
            "playerId": self.cache.player_id,
        })

    async def receive(self) -> Dict[str, Any]:
        """Wait for the next server event and fold it into the cache."""
        event = orjson.loads(await self.websocket.recv())
        self.cache.apply_event(event)
        return event

    async def close(self) -> None:
        if self.websocket is not None:
            await self.websocket.close()
            self.websocket = None

"""
WebSocket event models and validation.

Every message is an envelope ``{"type": ..., "payload": {...}}``.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field

from ..constants import DEFAULT_CREATOR_NAME, DEFAULT_JOINER_NAME


class EventType(str, Enum):
    """Inbound event types."""
    CREATE_GAME = "CREATE_GAME"
    JOIN_GAME = "JOIN_GAME"
    MAKE_MOVE = "MAKE_MOVE"
    RECONNECT = "RECONNECT"


class OutboundEventType(str, Enum):
    """Outbound event types."""
    GAME_CREATED = "GAME_CREATED"
    GAME_JOINED = "GAME_JOINED"
    PLAYER_JOINED = "PLAYER_JOINED"
    GAME_STARTED = "GAME_STARTED"
    GAME_STATE_UPDATED = "GAME_STATE_UPDATED"
    RECONNECT_SUCCESS = "RECONNECT_SUCCESS"
    GAME_OVER = "GAME_OVER"
    ERROR = "ERROR"


class Payload(BaseModel):
    """Payloads accept the camelCase wire names."""
    model_config = ConfigDict(populate_by_name=True)


class CreateGamePayload(Payload):
    player_name: str = Field(default=DEFAULT_CREATOR_NAME, alias="playerName", min_length=1, max_length=30)


class JoinGamePayload(Payload):
    game_id: str = Field(..., alias="gameId", min_length=1)
    player_name: str = Field(default=DEFAULT_JOINER_NAME, alias="playerName", min_length=1, max_length=30)


class PositionPayload(Payload):
    row: int
    col: int


class MakeMovePayload(Payload):
    game_id: str = Field(..., alias="gameId", min_length=1)
    card_index: int = Field(..., alias="cardIndex")
    position: PositionPayload
    player_id: Optional[str] = Field(default=None, alias="playerId")


class ReconnectPayload(Payload):
    game_id: str = Field(..., alias="gameId", min_length=1)
    player_id: str = Field(..., alias="playerId", min_length=1)


# Inbound event models
class BaseEvent(BaseModel):
    """Base event model."""
    type: EventType


class CreateGameEvent(BaseEvent):
    """Create a new match."""
    type: EventType = EventType.CREATE_GAME
    payload: CreateGamePayload = Field(default_factory=CreateGamePayload)


class JoinGameEvent(BaseEvent):
    """Join an existing match."""
    type: EventType = EventType.JOIN_GAME
    payload: JoinGamePayload


class MakeMoveEvent(BaseEvent):
    """Play a card from hand onto the board."""
    type: EventType = EventType.MAKE_MOVE
    payload: MakeMovePayload


class ReconnectEvent(BaseEvent):
    """Rebind a known player to a new connection."""
    type: EventType = EventType.RECONNECT
    payload: ReconnectPayload


# Union type for all inbound events
InboundEvent = Union[
    CreateGameEvent,
    JoinGameEvent,
    MakeMoveEvent,
    ReconnectEvent,
]


class ServerEvent(BaseModel):
    """Outbound event envelope."""
    type: OutboundEventType
    payload: Dict[str, Any]


def parse_inbound_event(data: Dict[str, Any]) -> InboundEvent:
    """
    Parse raw event data into appropriate event model.

    Args:
        data: Raw event data from WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be an object")

    event_type = data.get("type")

    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    event_map = {
        EventType.CREATE_GAME: CreateGameEvent,
        EventType.JOIN_GAME: JoinGameEvent,
        EventType.MAKE_MOVE: MakeMoveEvent,
        EventType.RECONNECT: ReconnectEvent,
    }

    event_class = event_map[event_type]
    payload = data.get("payload")
    fields = {"type": event_type}
    if payload is not None:
        fields["payload"] = payload

    try:
        return event_class(**fields)
    except Exception as e:
        raise ValueError(f"Invalid event data: {str(e)}")


def encode_event(event: ServerEvent) -> str:
    """Encode an outbound event as JSON text."""
    return orjson.dumps(event.model_dump(mode="json")).decode()


def create_error_event(code: str, message: str) -> ServerEvent:
    """Create an error event."""
    return ServerEvent(
        type=OutboundEventType.ERROR,
        payload={"message": message, "code": code}
    )


def create_game_created_event(game_id: str, player_id: str, players: List[Dict[str, Any]]) -> ServerEvent:
    return ServerEvent(
        type=OutboundEventType.GAME_CREATED,
        payload={"gameId": game_id, "playerId": player_id, "players": players}
    )


def create_game_joined_event(game_id: str, player_id: str, players: List[Dict[str, Any]]) -> ServerEvent:
    return ServerEvent(
        type=OutboundEventType.GAME_JOINED,
        payload={"gameId": game_id, "playerId": player_id, "players": players}
    )


def create_player_joined_event(game_id: str, players: List[Dict[str, Any]]) -> ServerEvent:
    return ServerEvent(
        type=OutboundEventType.PLAYER_JOINED,
        payload={"gameId": game_id, "playerCount": len(players), "players": players}
    )


def create_game_started_event(
    game_id: str,
    game_state: Dict[str, Any],
    players: List[Dict[str, Any]],
    player_id: str
) -> ServerEvent:
    """Create a game started event, personalised with the receiver's id."""
    return ServerEvent(
        type=OutboundEventType.GAME_STARTED,
        payload={"gameId": game_id, "gameState": game_state, "players": players, "playerId": player_id}
    )


def create_state_updated_event(
    game_id: str,
    game_state: Dict[str, Any],
    changes: Optional[List[Dict[str, Any]]] = None
) -> ServerEvent:
    return ServerEvent(
        type=OutboundEventType.GAME_STATE_UPDATED,
        payload={"gameId": game_id, "gameState": game_state, "changes": changes or []}
    )


def create_reconnect_success_event(
    game_id: str,
    player_id: str,
    players: List[Dict[str, Any]],
    game_state: Optional[Dict[str, Any]]
) -> ServerEvent:
    return ServerEvent(
        type=OutboundEventType.RECONNECT_SUCCESS,
        payload={"gameId": game_id, "playerId": player_id, "players": players, "gameState": game_state}
    )


def create_game_over_event(game_id: str, winner_id: str, game_state: Dict[str, Any]) -> ServerEvent:
    return ServerEvent(
        type=OutboundEventType.GAME_OVER,
        payload={"gameId": game_id, "winnerId": winner_id, "gameState": game_state}
    )

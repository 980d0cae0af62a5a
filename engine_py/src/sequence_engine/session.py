"""
Match sessions: registry, connection routing and the serialized per-match
operations that drive the engine.
"""

import asyncio
import logging
import random
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Protocol, Union

from .constants import (
    ABANDONED_SESSION_TTL, DEFAULT_CREATOR_NAME, DEFAULT_JOINER_NAME, STATUS_WAITING,
)
from .diff import compute_diff, get_changed_fields
from .engine import apply_move, create_player, initialize_game
from .errors import (
    GameError, GAME_FULL, GAME_NOT_FOUND, GAME_NOT_STARTED, GAME_OVER,
    NOT_YOUR_TURN, PLAYER_NOT_FOUND,
)
from .models import GameState, PLAYER_TOKENS
from .rules import RuleConfig, default_rules
from .serialization import game_state_to_dict, serialize_player_for_list
from .validate import is_player_turn
from .ws.events import (
    ServerEvent, create_error_event, create_game_created_event,
    create_game_joined_event, create_game_over_event, create_game_started_event,
    create_player_joined_event, create_reconnect_success_event,
    create_state_updated_event,
)

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Transport handle a session routes events to."""

    def send_nowait(self, event: ServerEvent) -> None:
        """Queue an event for delivery without waiting on it."""


@dataclass
class SessionPlayer:
    id: str
    name: str
    connection: Optional[Connection] = None


@dataclass
class Session:
    id: str
    players: List[SessionPlayer] = field(default_factory=list)
    game_state: Optional[GameState] = None
    abandoned_at: Optional[float] = None  # monotonic time the last player left
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def status(self) -> str:
        if self.game_state is None:
            return STATUS_WAITING
        return self.game_state.status

    def find_player(self, player_id: Optional[str]) -> Optional[SessionPlayer]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def find_player_by_connection(self, connection: Connection) -> Optional[SessionPlayer]:
        for player in self.players:
            if player.connection is connection:
                return player
        return None

    def resolve_player(self, connection: Connection, player_id: Optional[str]) -> SessionPlayer:
        """
        Find the acting player.

        The connection handle is tried first. Failing that, a known player id
        is accepted and its handle is rebound to ``connection``.
        """
        player = self.find_player_by_connection(connection)
        if player is not None:
            return player

        player = self.find_player(player_id)
        if player is None:
            raise GameError(PLAYER_NOT_FOUND, "Player not found in game")

        logger.info(f"Rebinding player {player.id} in game {self.id} to a new connection")
        self.bind(player, connection)
        return player

    def bind(self, player: SessionPlayer, connection: Connection) -> None:
        """Route ``player`` to ``connection``; a handle speaks for one seat only."""
        for other in self.players:
            if other is not player and other.connection is connection:
                logger.info(f"Unbinding player {other.id} in game {self.id} from a reused connection")
                other.connection = None
        player.connection = connection
        self.abandoned_at = None

    def public_players(self) -> List[Dict[str, Any]]:
        return [serialize_player_for_list(player) for player in self.players]

    def is_connected(self) -> bool:
        return any(player.connection is not None for player in self.players)


class SessionRegistry:
    """In-memory store of live sessions."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def create(self, session_id: Optional[str] = None) -> Session:
        session_id = session_id or str(uuid.uuid4())
        if session_id in self._sessions:
            raise ValueError(f"Session {session_id} already exists")
        session = Session(id=session_id)
        self._sessions[session_id] = session
        return session

    def get(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise GameError(GAME_NOT_FOUND, "Game not found")
        return session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def sessions_for(self, connection: Connection) -> List[Session]:
        return [
            session for session in self._sessions.values()
            if session.find_player_by_connection(connection) is not None
        ]

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))


class SessionManager:
    """
    Entry point for every client intent.

    Each operation on a session runs under that session's lock. Broadcasts are
    only queued on the connection handles, never awaited, so the critical
    section stays free of network waits.
    """

    def __init__(
        self,
        registry: Optional[SessionRegistry] = None,
        rules: Optional[RuleConfig] = None,
        seed: Optional[Union[int, random.Random]] = None,
        abandoned_ttl: float = ABANDONED_SESSION_TTL
    ):
        self.registry = registry if registry is not None else SessionRegistry()
        self.rules = rules or default_rules
        self.abandoned_ttl = abandoned_ttl
        if isinstance(seed, random.Random):
            self.rng = seed
        else:
            self.rng = random.Random(seed)

    async def create_game(self, connection: Connection, player_name: Optional[str] = None) -> Session:
        await self.prune_abandoned()
        session = self.registry.create()
        async with session.lock:
            player = SessionPlayer(id=str(uuid.uuid4()), name=player_name or DEFAULT_CREATOR_NAME, connection=connection)
            session.players.append(player)
            logger.info(f"Game {session.id} created by {player.name} ({player.id})")
            connection.send_nowait(create_game_created_event(session.id, player.id, session.public_players()))
        return session

    async def join_game(
        self,
        connection: Connection,
        game_id: str,
        player_name: Optional[str] = None
    ) -> Optional[Session]:
        try:
            session = self.registry.get(game_id)
            async with session.lock:
                if len(session.players) >= self.rules.players_per_match:
                    raise GameError(GAME_FULL, "Game is full")

                player = SessionPlayer(id=str(uuid.uuid4()), name=player_name or DEFAULT_JOINER_NAME, connection=connection)
                session.players.append(player)
                logger.info(f"{player.name} ({player.id}) joined game {session.id}")

                players = session.public_players()
                connection.send_nowait(create_game_joined_event(session.id, player.id, players))
                self._broadcast(session, create_player_joined_event(session.id, players))

                if len(session.players) == self.rules.players_per_match:
                    self._start_game(session)
            return session
        except GameError as e:
            self._send_error(connection, e)
            return None

    async def make_move(
        self,
        connection: Connection,
        game_id: str,
        card_index: int,
        row: int,
        col: int,
        player_id: Optional[str] = None
    ) -> bool:
        try:
            session = self.registry.get(game_id)
            async with session.lock:
                state = session.game_state
                if state is None:
                    raise GameError(GAME_NOT_STARTED, "Game not found or not started")
                if state.is_finished:
                    raise GameError(GAME_OVER, "Game is already over")

                player = session.resolve_player(connection, player_id)
                if not is_player_turn(state, player.id):
                    raise GameError(NOT_YOUR_TURN, "Not your turn")

                result = apply_move(state, card_index, row, col, self.rules)
                if not result.success:
                    raise GameError(result.error_code, result.message)

                session.game_state = result.state
                changes = compute_diff(state, result.state)
                logger.info(
                    f"{player.name} played at ({row}, {col}) in game {session.id}; "
                    f"changed {get_changed_fields(changes)}"
                )

                snapshot = game_state_to_dict(result.state)
                self._broadcast(session, create_state_updated_event(session.id, snapshot, changes))
                if result.state.winner is not None:
                    self._broadcast(session, create_game_over_event(session.id, result.state.winner, snapshot))
            return True
        except GameError as e:
            self._send_error(connection, e)
            return False

    async def reconnect(self, connection: Connection, game_id: str, player_id: str) -> bool:
        try:
            session = self.registry.get(game_id)
            async with session.lock:
                player = session.find_player(player_id)
                if player is None:
                    raise GameError(PLAYER_NOT_FOUND, "Player not found in this game")

                session.bind(player, connection)
                logger.info(f"Player {player_id} reconnected to game {game_id}")

                snapshot = game_state_to_dict(session.game_state) if session.game_state else None
                connection.send_nowait(
                    create_reconnect_success_event(session.id, player.id, session.public_players(), snapshot)
                )
            return True
        except GameError as e:
            self._send_error(connection, e)
            return False

    async def disconnect(self, connection: Connection) -> None:
        """Drop a connection handle; player entries are kept for reconnection."""
        for session in self.registry.sessions_for(connection):
            async with session.lock:
                player = session.find_player_by_connection(connection)
                if player is None:
                    continue
                player.connection = None
                logger.info(f"Player {player.id} disconnected from game {session.id}")

                if session.is_connected():
                    continue
                if session.game_state is not None and session.game_state.is_finished:
                    self.registry.delete(session.id)
                    logger.info(f"Finished game {session.id} removed")
                else:
                    session.abandoned_at = time.monotonic()

        await self.prune_abandoned()

    async def prune_abandoned(self, now: Optional[float] = None) -> int:
        """Remove matches nobody has been connected to for ``abandoned_ttl`` seconds."""
        now = time.monotonic() if now is None else now
        removed = 0
        for session in self.registry:
            if session.abandoned_at is None:
                continue
            async with session.lock:
                if session.abandoned_at is None or session.is_connected():
                    continue
                if now - session.abandoned_at >= self.abandoned_ttl:
                    self.registry.delete(session.id)
                    removed += 1
                    logger.info(f"Abandoned game {session.id} removed")
        return removed

    def connection_count(self) -> int:
        return sum(
            1 for session in self.registry for player in session.players
            if player.connection is not None
        )

    def _start_game(self, session: Session) -> None:
        players = [
            create_player(player.id, player.name, token_type)
            for player, token_type in zip(session.players, PLAYER_TOKENS)
        ]
        session.game_state = initialize_game(players, self.rules, self.rng)
        logger.info(f"Game {session.id} started with {[p.name for p in players]}")

        snapshot = game_state_to_dict(session.game_state)
        public_players = session.public_players()
        for player in session.players:
            if player.connection is not None:
                player.connection.send_nowait(
                    create_game_started_event(session.id, snapshot, public_players, player.id)
                )

    def _broadcast(self, session: Session, event: ServerEvent) -> None:
        for player in session.players:
            if player.connection is not None:
                player.connection.send_nowait(event)

    def _send_error(self, connection: Connection, error: GameError) -> None:
        logger.warning(f"Request rejected ({error.category}): {error}")
        connection.send_nowait(create_error_event(error.code, error.message))

"""
Shared fixtures for the Sequence engine tests.
"""

import pytest

from sequence_engine.board import get_card_positions, get_valid_token_placements, initialize_board, place_token
from sequence_engine.models import Card, GameState, Player, TokenType
from sequence_engine.session import SessionManager, SessionRegistry


class RecordingConnection:
    """Connection handle that keeps every event it is sent."""

    def __init__(self, name: str = "conn"):
        self.name = name
        self.events = []

    def send_nowait(self, event):
        self.events.append(event)

    def of_type(self, event_type: str):
        return [event for event in self.events if event.type == event_type]

    def last(self, event_type: str = None):
        events = self.of_type(event_type) if event_type else self.events
        return events[-1] if events else None

    def types(self):
        return [event.type.value for event in self.events]

    def __repr__(self):
        return f"RecordingConnection({self.name})"


@pytest.fixture
def connection_factory():
    def make(name: str = "conn"):
        return RecordingConnection(name)
    return make


@pytest.fixture
def manager():
    """Session manager with a deterministic shuffle."""
    return SessionManager(SessionRegistry(), seed=1234)


@pytest.fixture
def make_state():
    """
    Build a two-player state on the standard board.

    ``tokens`` maps (row, col) to the token placed there before play starts.
    """
    def make(hand1=(), hand2=(), deck=(), tokens=None, current_turn=0):
        board = initialize_board()
        for (row, col), token in (tokens or {}).items():
            board = place_token(board, row, col, token)
        players = (
            Player(id="p1", name="Alice", token_type=TokenType.PLAYER1, hand=tuple(Card.from_code(c) for c in hand1)),
            Player(id="p2", name="Bob", token_type=TokenType.PLAYER2, hand=tuple(Card.from_code(c) for c in hand2)),
        )
        return GameState(
            board=board,
            current_turn=current_turn,
            players=players,
            deck=tuple(Card.from_code(c) for c in deck),
        )
    return make


def find_legal_move(state):
    """First playable (card_index, row, col) for the player to move."""
    player = state.current_player
    for index, card in enumerate(player.hand):
        if card.is_one_eyed_jack:
            continue
        if card.is_two_eyed_jack:
            target = get_valid_token_placements(state.board)[0]
            return index, target.row, target.col
        for pos in get_card_positions(state.board, card):
            if state.board[pos.row][pos.col].is_empty:
                return index, pos.row, pos.col
    raise AssertionError("No legal move in hand")


@pytest.fixture
def legal_move():
    return find_legal_move

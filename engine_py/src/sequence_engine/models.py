"""Game models and data structures"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from .constants import (
    ONE_EYED_JACK_SUITS, RANKS, STATUS_FINISHED, STATUS_IN_PROGRESS,
    SUIT_CODES, SUIT_LETTERS, SUITS, TWO_EYED_JACK_SUITS,
)


class TokenType(str, Enum):
    NONE = 'none'
    PLAYER1 = 'player1'
    PLAYER2 = 'player2'


# Token types handed out in seat order
PLAYER_TOKENS = (TokenType.PLAYER1, TokenType.PLAYER2)


@dataclass(frozen=True)
class Card:
    suit: str
    rank: str

    def __post_init__(self):
        if self.suit not in SUITS:
            raise ValueError(f"Unknown suit: {self.suit}")
        if self.rank not in RANKS:
            raise ValueError(f"Unknown rank: {self.rank}")

    @property
    def is_jack(self) -> bool:
        return self.rank == 'J'

    @property
    def is_one_eyed_jack(self) -> bool:
        """One-eyed jacks (spades, hearts) remove an opponent's token."""
        return self.is_jack and self.suit in ONE_EYED_JACK_SUITS

    @property
    def is_two_eyed_jack(self) -> bool:
        """Two-eyed jacks (diamonds, clubs) are wild."""
        return self.is_jack and self.suit in TWO_EYED_JACK_SUITS

    @property
    def code(self) -> str:
        return f"{self.rank}{SUIT_LETTERS[self.suit]}"

    @classmethod
    def from_code(cls, code: str) -> 'Card':
        """Parse a short card code such as '10H' or 'JS'."""
        if len(code) < 2 or code[-1] not in SUIT_CODES:
            raise ValueError(f"Invalid card code: {code!r}")
        return cls(suit=SUIT_CODES[code[-1]], rank=code[:-1])

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True)
class Position:
    row: int
    col: int


@dataclass(frozen=True)
class BoardSpace:
    card: Optional[Card] = None  # None for corner spaces
    token: TokenType = TokenType.NONE
    is_corner: bool = False

    @property
    def is_empty(self) -> bool:
        return self.token == TokenType.NONE


Board = Tuple[Tuple[BoardSpace, ...], ...]


@dataclass(frozen=True)
class ScoredSequence:
    """A completed line, kept once scored so its spaces stay locked."""
    token_type: TokenType
    positions: Tuple[Position, ...]


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    token_type: TokenType
    hand: Tuple[Card, ...] = ()


@dataclass(frozen=True)
class GameState:
    board: Board
    current_turn: int
    players: Tuple[Player, ...]
    deck: Tuple[Card, ...] = field(default_factory=tuple)
    sequences: Tuple[ScoredSequence, ...] = field(default_factory=tuple)
    winner: Optional[str] = None  # player id once a match is decided

    @property
    def current_player(self) -> Player:
        return self.players[self.current_turn]

    @property
    def locked_positions(self) -> FrozenSet[Position]:
        return frozenset(pos for sequence in self.sequences for pos in sequence.positions)

    def sequence_count(self, token_type: TokenType) -> int:
        return sum(1 for sequence in self.sequences if sequence.token_type == token_type)

    @property
    def is_finished(self) -> bool:
        return self.winner is not None

    @property
    def status(self) -> str:
        return STATUS_FINISHED if self.is_finished else STATUS_IN_PROGRESS

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

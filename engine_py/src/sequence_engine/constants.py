"""Game constants and card helpers"""

from typing import Dict, List, Tuple

SUITS = ('spades', 'hearts', 'diamonds', 'clubs')
RANKS = ('2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K', 'A')

SUIT_CODES: Dict[str, str] = {
    'S': 'spades',
    'H': 'hearts',
    'D': 'diamonds',
    'C': 'clubs',
}
SUIT_LETTERS: Dict[str, str] = {suit: code for code, suit in SUIT_CODES.items()}

ONE_EYED_JACK_SUITS = ('spades', 'hearts')
TWO_EYED_JACK_SUITS = ('diamonds', 'clubs')

# Board geometry
BOARD_SIZE = 10
CORNER_POSITIONS: Tuple[Tuple[int, int], ...] = ((0, 0), (0, 9), (9, 0), (9, 9))
SEQUENCE_LENGTH = 5

# Line directions scanned for sequences: horizontal, vertical, both diagonals
LINE_DIRECTIONS: Tuple[Tuple[int, int], ...] = ((0, 1), (1, 0), (1, 1), (1, -1))

# Hand sizes by player count
CARDS_PER_PLAYER_2_PLAYERS = 7
CARDS_PER_PLAYER_3_PLAYERS = 6
CARDS_PER_PLAYER_DEFAULT = 5

# Match status values
STATUS_WAITING = 'waiting_for_players'
STATUS_IN_PROGRESS = 'in_progress'
STATUS_FINISHED = 'finished'

DEFAULT_CREATOR_NAME = 'Player 1'
DEFAULT_JOINER_NAME = 'Player 2'

# Seconds a match may sit with nobody connected before it is discarded
ABANDONED_SESSION_TTL = 600.0

# Physical board layout. Corner entries are printed on the table but never
# assigned to a space.
BOARD_LAYOUT: List[List[str]] = [
    ['JS', '6D', '7D', '8D', '9D', '10D', 'QD', 'KD', 'AD', '2S'],
    ['5D', '3H', '2H', '2S', '3S', '4S', '5S', '6S', '7S', 'AC'],
    ['4D', '4H', 'KD', 'AD', 'AC', 'KC', 'QC', '10C', '8S', 'KC'],
    ['3D', '5H', 'QD', 'QH', '10H', '9H', '8H', '9C', '9S', 'QC'],
    ['2D', '6H', '10D', 'KH', '3H', '2H', '7H', '8C', '10H', '10C'],
    ['AS', '7H', '9D', 'AH', '4H', '5H', '6H', '7C', 'QC', '9C'],
    ['KS', '8H', '8D', '2C', '3C', '4C', '5C', '6C', 'KS', '8C'],
    ['QS', '9H', '7D', '6D', '5D', '4D', '3D', '2D', 'AS', '7C'],
    ['10S', '10H', 'QH', 'KH', 'AH', '2C', '3C', '4C', '5C', '6C'],
    ['3C', '9S', '8S', '7S', '6S', '5S', '4S', '3S', '2S', '5S'],
]


def is_corner(row: int, col: int) -> bool:
    return (row, col) in CORNER_POSITIONS

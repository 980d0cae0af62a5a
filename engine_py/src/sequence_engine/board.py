"""
Board construction, token placement and line scanning.

Boards are immutable: every mutator returns a new board and leaves the one it
was given untouched, so snapshots can be shared between clients safely.
"""

from typing import Iterator, List, Tuple

from .constants import (
    BOARD_LAYOUT, BOARD_SIZE, CORNER_POSITIONS, LINE_DIRECTIONS,
    SEQUENCE_LENGTH, is_corner,
)
from .models import Board, BoardSpace, Card, Position, TokenType

Line = Tuple[Position, ...]


def _freeze(grid: List[List[BoardSpace]]) -> Board:
    return tuple(tuple(row) for row in grid)


def empty_board() -> Board:
    """Create a blank 10x10 board with the four corners marked free."""
    grid = [[BoardSpace() for _ in range(BOARD_SIZE)] for _ in range(BOARD_SIZE)]
    for row, col in CORNER_POSITIONS:
        grid[row][col] = BoardSpace(card=None, is_corner=True)
    return _freeze(grid)


def initialize_board() -> Board:
    """Create the playing board from the static card layout."""
    grid = []
    for row, layout_row in enumerate(BOARD_LAYOUT):
        spaces = []
        for col, code in enumerate(layout_row):
            if is_corner(row, col):
                spaces.append(BoardSpace(card=None, is_corner=True))
            else:
                spaces.append(BoardSpace(card=Card.from_code(code)))
        grid.append(spaces)
    return _freeze(grid)


def _replace_space(board: Board, row: int, col: int, space: BoardSpace) -> Board:
    new_row = board[row][:col] + (space,) + board[row][col + 1:]
    return board[:row] + (new_row,) + board[row + 1:]


def place_token(board: Board, row: int, col: int, token_type: TokenType) -> Board:
    """Return a new board with ``token_type`` on the given space."""
    space = board[row][col]
    return _replace_space(board, row, col, BoardSpace(card=space.card, token=token_type, is_corner=space.is_corner))


def remove_token(board: Board, row: int, col: int) -> Board:
    """Return a new board with the given space cleared."""
    return place_token(board, row, col, TokenType.NONE)


def is_valid_position(board: Board, row: int, col: int) -> bool:
    return 0 <= row < len(board) and 0 <= col < len(board[0])


def get_card_positions(board: Board, card: Card) -> List[Position]:
    """Every space printed with a card of the same suit and rank."""
    positions = []
    for row_index, row in enumerate(board):
        for col_index, space in enumerate(row):
            if space.card is not None and space.card.suit == card.suit and space.card.rank == card.rank:
                positions.append(Position(row_index, col_index))
    return positions


def get_valid_token_placements(board: Board) -> List[Position]:
    """Empty, non-corner spaces (two-eyed jack targets)."""
    return [
        Position(row_index, col_index)
        for row_index, row in enumerate(board)
        for col_index, space in enumerate(row)
        if space.is_empty and not space.is_corner
    ]


def get_valid_token_removals(board: Board, player_token: TokenType) -> List[Position]:
    """Spaces holding an opponent's token (one-eyed jack targets)."""
    return [
        Position(row_index, col_index)
        for row_index, row in enumerate(board)
        for col_index, space in enumerate(row)
        if space.token != TokenType.NONE and space.token != player_token
    ]


def get_adjacent_positions(board: Board, row: int, col: int) -> List[Position]:
    offsets = [
        (-1, -1), (-1, 0), (-1, 1),
        (0, -1),           (0, 1),
        (1, -1),  (1, 0),  (1, 1),
    ]
    return [
        Position(row + d_row, col + d_col)
        for d_row, d_col in offsets
        if is_valid_position(board, row + d_row, col + d_col)
    ]


def get_line_positions(
    board: Board,
    start_row: int,
    start_col: int,
    d_row: int,
    d_col: int,
    length: int
) -> List[Position]:
    """Up to ``length`` positions from a start point, stopping at the board edge."""
    positions = []
    for i in range(length):
        row = start_row + i * d_row
        col = start_col + i * d_col
        if not is_valid_position(board, row, col):
            break
        positions.append(Position(row, col))
    return positions


def _line_matches(board: Board, line: List[Position], token_type: TokenType) -> bool:
    return all(board[pos.row][pos.col].token == token_type for pos in line)


def can_form_sequence(
    board: Board,
    row: int,
    col: int,
    token_type: TokenType,
    length: int
) -> bool:
    """Check whether a full run of ``length`` tokens starts at the given point."""
    if token_type == TokenType.NONE:
        return False
    for d_row, d_col in LINE_DIRECTIONS:
        for sign in (1, -1):
            line = get_line_positions(board, row, col, sign * d_row, sign * d_col, length)
            if len(line) == length and _line_matches(board, line, token_type):
                return True
    return False


def check_for_sequence(board: Board, token_type: TokenType) -> bool:
    """Check whether any five same-token spaces are in a straight line."""
    if token_type == TokenType.NONE:
        return False

    # Horizontal
    for i in range(BOARD_SIZE):
        for j in range(BOARD_SIZE - 4):
            if all(board[i][j + k].token == token_type for k in range(5)):
                return True

    # Vertical
    for i in range(BOARD_SIZE - 4):
        for j in range(BOARD_SIZE):
            if all(board[i + k][j].token == token_type for k in range(5)):
                return True

    # Diagonal, top-left to bottom-right
    for i in range(BOARD_SIZE - 4):
        for j in range(BOARD_SIZE - 4):
            if all(board[i + k][j + k].token == token_type for k in range(5)):
                return True

    # Diagonal, top-right to bottom-left
    for i in range(BOARD_SIZE - 4):
        for j in range(4, BOARD_SIZE):
            if all(board[i + k][j - k].token == token_type for k in range(5)):
                return True

    return False


def iter_lines(board: Board, length: int = SEQUENCE_LENGTH) -> Iterator[Line]:
    """Every in-bounds straight line of ``length`` spaces, direction by direction."""
    for d_row, d_col in LINE_DIRECTIONS:
        for row in range(len(board)):
            for col in range(len(board[0])):
                line = get_line_positions(board, row, col, d_row, d_col, length)
                if len(line) == length:
                    yield tuple(line)


def find_sequences(board: Board, token_type: TokenType, length: int = SEQUENCE_LENGTH) -> List[Line]:
    """All lines of ``length`` spaces fully held by ``token_type``."""
    if token_type == TokenType.NONE:
        return []
    return [line for line in iter_lines(board, length) if _line_matches(board, list(line), token_type)]


def render_board(board: Board) -> str:
    """Plain-text board dump for logs."""
    symbols = {TokenType.NONE: '.', TokenType.PLAYER1: '1', TokenType.PLAYER2: '2'}
    rows = []
    for row in board:
        rows.append(' '.join('*' if space.is_corner else symbols[space.token] for space in row))
    return '\n'.join(rows)

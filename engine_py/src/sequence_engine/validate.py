"""
Move and setup validation.
"""

from typing import Optional, Sequence

from .board import get_card_positions, is_valid_position
from .errors import (
    CANNOT_REMOVE_OWN_TOKEN, CARD_POSITION_MISMATCH, DUPLICATE_TOKEN_TYPE,
    INVALID_PLAYER_COUNT, INVALID_POSITION, NO_TOKEN_TO_REMOVE,
    SEQUENCE_LOCKED, SPACE_OCCUPIED, SPACE_UNAVAILABLE,
)
from .models import Card, GameState, Player, Position, TokenType
from .rules import RuleConfig, default_rules


class ValidationResult:
    """Result of move or setup validation."""

    def __init__(
        self,
        valid: bool,
        message: str,
        error_code: Optional[str] = None
    ):
        self.valid = valid
        self.message = message
        self.error_code = error_code

    @classmethod
    def success(cls, message: str) -> 'ValidationResult':
        """Create a successful validation result."""
        return cls(valid=True, message=message)

    @classmethod
    def error(cls, error_code: str, message: str) -> 'ValidationResult':
        """Create an error validation result."""
        return cls(valid=False, message=message, error_code=error_code)

    def __bool__(self) -> bool:
        return self.valid

    def __repr__(self) -> str:
        return f"ValidationResult(valid={self.valid}, error_code={self.error_code!r}, message={self.message!r})"


def is_player_turn(state: GameState, player_id: str) -> bool:
    """Check whether ``player_id`` is the player to move."""
    return state.current_player.id == player_id


def validate_move(state: GameState, card: Card, row: int, col: int) -> ValidationResult:
    """
    Validate playing ``card`` on the space at (row, col) for the current player.

    Args:
        state: Current game state
        card: Card being played
        row: Target row
        col: Target column

    Returns:
        ValidationResult with validation outcome
    """
    if not is_valid_position(state.board, row, col):
        return ValidationResult.error(INVALID_POSITION, f"Position ({row}, {col}) is off the board")

    space = state.board[row][col]
    current_player = state.current_player

    # One-eyed jack removes an opponent's token
    if card.is_one_eyed_jack:
        if space.token == TokenType.NONE:
            return ValidationResult.error(NO_TOKEN_TO_REMOVE, "No token to remove")
        if space.token == current_player.token_type:
            return ValidationResult.error(CANNOT_REMOVE_OWN_TOKEN, "Cannot remove your own token")
        if Position(row, col) in state.locked_positions:
            return ValidationResult.error(SEQUENCE_LOCKED, "Token is part of a completed sequence")
        return ValidationResult.success("Valid move: Remove opponent token")

    # Two-eyed jack is wild
    if card.is_two_eyed_jack:
        if space.token != TokenType.NONE or space.is_corner:
            return ValidationResult.error(SPACE_UNAVAILABLE, "Space is not available")
        return ValidationResult.success("Valid move: Wild card placement")

    card_positions = get_card_positions(state.board, card)
    if not card_positions:
        return ValidationResult.error(CARD_POSITION_MISMATCH, "Card does not match any board position")
    if not any(pos.row == row and pos.col == col for pos in card_positions):
        return ValidationResult.error(CARD_POSITION_MISMATCH, "Selected position does not match card")

    if space.token != TokenType.NONE:
        return ValidationResult.error(SPACE_OCCUPIED, "Space is already occupied")

    return ValidationResult.success("Valid move")


def validate_game_setup(players: Sequence[Player], rules: RuleConfig = default_rules) -> ValidationResult:
    """Check player count limits and that every player has a distinct token."""
    if len(players) < rules.min_players:
        return ValidationResult.error(INVALID_PLAYER_COUNT, f"Need at least {rules.min_players} players")

    if len(players) > rules.max_players:
        return ValidationResult.error(INVALID_PLAYER_COUNT, f"Maximum {rules.max_players} players allowed")

    token_types = {player.token_type for player in players}
    if len(token_types) != len(players):
        return ValidationResult.error(DUPLICATE_TOKEN_TYPE, "Each player must have a unique token color")

    return ValidationResult.success("Valid game setup")

"""Game engine: match setup, move application and win detection"""

import logging
import random
from dataclasses import replace
from typing import Optional, Sequence, Tuple, Union

from .board import find_sequences, initialize_board, place_token, remove_token, render_board
from .constants import SEQUENCE_LENGTH
from .errors import EmptyDeckError, GameError, GAME_OVER, INVALID_CARD_INDEX
from .models import Board, GameState, Player, ScoredSequence, TokenType
from .rules import RuleConfig, default_rules
from .shuffle import build_deck, deal_cards, draw_card, format_hand, get_cards_per_player, shuffle_deck
from .validate import validate_game_setup, validate_move

logger = logging.getLogger(__name__)


class EngineResult:
    """Outcome of an engine operation."""

    def __init__(
        self,
        success: bool,
        state: Optional[GameState],
        message: str = "",
        error_code: Optional[str] = None
    ):
        self.success = success
        self.state = state
        self.message = message
        self.error_code = error_code

    @property
    def error_message(self) -> Optional[str]:
        return None if self.success else self.message

    @classmethod
    def ok(cls, state: GameState, message: str) -> 'EngineResult':
        return cls(success=True, state=state, message=message)

    @classmethod
    def failure(cls, state: Optional[GameState], error_code: str, message: str) -> 'EngineResult':
        return cls(success=False, state=state, message=message, error_code=error_code)


def create_player(player_id: str, name: str, token_type: TokenType) -> Player:
    return Player(id=player_id, name=name, token_type=token_type, hand=())


def initialize_game(
    players: Sequence[Player],
    rules: RuleConfig = default_rules,
    seed: Optional[Union[int, random.Random]] = None
) -> GameState:
    """
    Deal a fresh match for ``players``.

    Raises:
        GameError: If the player setup is invalid
    """
    setup = validate_game_setup(players, rules)
    if not setup.valid:
        raise GameError(setup.error_code, setup.message)

    deck = shuffle_deck(build_deck(), seed)
    hands, remaining_deck = deal_cards(deck, len(players), get_cards_per_player(len(players)))

    dealt_players = tuple(replace(player, hand=hand) for player, hand in zip(players, hands))
    for player in dealt_players:
        logger.debug(f"Dealt {player.name}: {format_hand(player.hand)}")

    return GameState(
        board=initialize_board(),
        current_turn=0,
        players=dealt_players,
        deck=remaining_deck,
    )


def apply_move(
    state: GameState,
    card_index: int,
    row: int,
    col: int,
    rules: RuleConfig = default_rules
) -> EngineResult:
    """
    Play the current player's card at ``card_index`` on (row, col).

    On failure the original state is returned untouched.
    """
    if state.is_finished:
        return EngineResult.failure(state, GAME_OVER, "Game is already over")

    player_index = state.current_turn
    player = state.players[player_index]

    if not 0 <= card_index < len(player.hand):
        return EngineResult.failure(state, INVALID_CARD_INDEX, f"No card at index {card_index}")

    card = player.hand[card_index]
    validation = validate_move(state, card, row, col)
    if not validation.valid:
        logger.debug(f"Rejected {card} at ({row}, {col}) for {player.name}: {validation.message}")
        return EngineResult.failure(state, validation.error_code, validation.message)

    sequences = state.sequences
    if card.is_one_eyed_jack:
        board = remove_token(state.board, row, col)
    else:
        board = place_token(state.board, row, col, player.token_type)
        sequences = record_sequences(sequences, board, player.token_type, rules.sequence_length)
        if len(sequences) > len(state.sequences):
            held = sum(1 for s in sequences if s.token_type == player.token_type)
            logger.info(f"{player.name} completed a sequence ({held} held)")

    hand = player.hand[:card_index] + player.hand[card_index + 1:]
    deck = state.deck
    try:
        drawn, deck = draw_card(deck)
        hand = hand + (drawn,)
    except EmptyDeckError:
        logger.debug(f"Deck empty, {player.name} plays on with {len(hand)} cards")

    players = list(state.players)
    players[player_index] = replace(player, hand=hand)

    new_state = GameState(
        board=board,
        current_turn=(player_index + 1) % len(players),
        players=tuple(players),
        deck=deck,
        sequences=sequences,
    )

    winner = check_for_win(new_state, rules)
    if winner is not None:
        new_state = replace(new_state, winner=winner.id)
        logger.info(f"{winner.name} completed {rules.sequences_to_win} sequences\n{render_board(board)}")

    return EngineResult.ok(new_state, validation.message)


def record_sequences(
    sequences: Sequence[ScoredSequence],
    board: Board,
    token_type: TokenType,
    length: int = SEQUENCE_LENGTH
) -> Tuple[ScoredSequence, ...]:
    """
    Add the newly completed lines for a token to the scored sequences.

    A line is scored when it shares at most one space with each sequence the
    token already holds, so a straight run of nine tokens scores twice while a
    run of six scores once. Scored sequences are never dropped.
    """
    scored = list(sequences)
    for line in find_sequences(board, token_type, length):
        cells = frozenset(line)
        held = [frozenset(s.positions) for s in scored if s.token_type == token_type]
        if all(len(cells & other) <= 1 for other in held):
            scored.append(ScoredSequence(token_type=token_type, positions=line))
    return tuple(scored)


def count_sequences(board: Board, token_type: TokenType, length: int = SEQUENCE_LENGTH) -> int:
    """Count the sequences a token would score on a board with nothing scored yet."""
    return len(record_sequences((), board, token_type, length))


def check_for_win(state: GameState, rules: RuleConfig = default_rules) -> Optional[Player]:
    """Return the first player whose scored sequences reach the target."""
    for player in state.players:
        if state.sequence_count(player.token_type) >= rules.sequences_to_win:
            return player
    return None

"""
Tests for move validation, move application and win detection.
"""

from dataclasses import replace

import pytest

from sequence_engine.board import empty_board, place_token
from sequence_engine.engine import (
    apply_move, check_for_win, count_sequences, create_player, initialize_game,
    record_sequences,
)
from sequence_engine.errors import (
    CANNOT_REMOVE_OWN_TOKEN, CARD_POSITION_MISMATCH, DUPLICATE_TOKEN_TYPE,
    GameError, GAME_OVER, INVALID_CARD_INDEX, INVALID_PLAYER_COUNT,
    INVALID_POSITION, NO_TOKEN_TO_REMOVE, SEQUENCE_LOCKED, SPACE_OCCUPIED,
    SPACE_UNAVAILABLE,
)
from sequence_engine.models import Card, GameState, Player, Position, TokenType
from sequence_engine.rules import create_rules
from sequence_engine.validate import is_player_turn, validate_game_setup, validate_move

P1 = TokenType.PLAYER1
P2 = TokenType.PLAYER2


def row_tokens(row, cols, token=P1):
    return {(row, col): token for col in cols}


def with_scored(state, token=P1):
    return replace(state, sequences=record_sequences(state.sequences, state.board, token))


# Validation

def test_regular_card_on_matching_space(make_state):
    state = make_state(hand1=["3H"])
    result = validate_move(state, Card.from_code("3H"), 1, 1)
    assert result.valid
    assert result


def test_regular_card_on_wrong_space(make_state):
    state = make_state(hand1=["3H"])
    result = validate_move(state, Card.from_code("3H"), 0, 1)
    assert not result.valid
    assert result.error_code == CARD_POSITION_MISMATCH
    assert result.message == "Selected position does not match card"


def test_regular_card_missing_from_board():
    board = empty_board()
    players = (Player("p1", "Alice", P1, (Card.from_code("3H"),)), Player("p2", "Bob", P2))
    state = GameState(board=board, current_turn=0, players=players)

    result = validate_move(state, Card.from_code("3H"), 1, 1)
    assert result.error_code == CARD_POSITION_MISMATCH
    assert result.message == "Card does not match any board position"


def test_regular_card_on_occupied_space(make_state):
    state = make_state(hand1=["3H"], tokens={(1, 1): P2})
    result = validate_move(state, Card.from_code("3H"), 1, 1)
    assert result.error_code == SPACE_OCCUPIED


def test_position_off_board(make_state):
    state = make_state(hand1=["3H"])
    for row, col in [(10, 0), (0, 10), (-1, 3)]:
        assert validate_move(state, Card.from_code("3H"), row, col).error_code == INVALID_POSITION


def test_one_eyed_jack_needs_a_token(make_state):
    state = make_state(hand1=["JS"])
    result = validate_move(state, Card.from_code("JS"), 4, 4)
    assert result.error_code == NO_TOKEN_TO_REMOVE


def test_one_eyed_jack_cannot_remove_own_token(make_state):
    state = make_state(hand1=["JH"], tokens={(4, 4): P1})
    result = validate_move(state, Card.from_code("JH"), 4, 4)
    assert result.error_code == CANNOT_REMOVE_OWN_TOKEN


def test_one_eyed_jack_removes_opponent_token(make_state):
    state = make_state(hand1=["JH"], tokens={(4, 4): P2})
    assert validate_move(state, Card.from_code("JH"), 4, 4).valid

    result = apply_move(state, 0, 4, 4)
    assert result.success
    assert result.state.board[4][4].token == TokenType.NONE


def test_two_eyed_jack_on_empty_space(make_state):
    state = make_state(hand1=["JD"])
    assert validate_move(state, Card.from_code("JD"), 5, 5).valid

    result = apply_move(state, 0, 5, 5)
    assert result.success
    assert result.state.board[5][5].token == P1


@pytest.mark.parametrize("row,col", [(0, 0), (9, 9)])
def test_two_eyed_jack_not_on_corner(make_state, row, col):
    state = make_state(hand1=["JC"])
    assert validate_move(state, Card.from_code("JC"), row, col).error_code == SPACE_UNAVAILABLE


def test_two_eyed_jack_not_on_occupied_space(make_state):
    state = make_state(hand1=["JC"], tokens={(5, 5): P2})
    assert validate_move(state, Card.from_code("JC"), 5, 5).error_code == SPACE_UNAVAILABLE


def test_is_player_turn(make_state):
    state = make_state()
    assert is_player_turn(state, "p1")
    assert not is_player_turn(state, "p2")
    assert is_player_turn(make_state(current_turn=1), "p2")


# Move application

def test_apply_move_places_token_and_draws(make_state):
    hand = ["3H", "2H", "6D", "7D", "KC", "KS", "AS"]
    state = make_state(hand1=hand, hand2=hand, deck=["5D", "QS"])

    result = apply_move(state, 0, 4, 4)
    assert result.success

    new_state = result.state
    assert new_state.board[4][4].token == P1
    assert new_state.current_turn == 1
    assert len(new_state.deck) == 1
    assert len(new_state.players[0].hand) == 7
    assert new_state.players[0].hand[-1] == Card.from_code("QS")
    assert Card.from_code("3H") not in new_state.players[0].hand
    assert new_state.players[1] == state.players[1]

    # Original state is untouched
    assert state.board[4][4].token == TokenType.NONE
    assert len(state.deck) == 2


def test_turn_wraps_around(make_state):
    state = make_state(hand2=["2H"], current_turn=1)
    result = apply_move(state, 0, 1, 2)
    assert result.success
    assert result.state.current_turn == 0
    assert result.state.board[1][2].token == P2


def test_hand_shrinks_when_deck_is_empty(make_state):
    state = make_state(hand1=["3H", "2H"])
    result = apply_move(state, 1, 1, 2)
    assert result.success
    assert result.state.players[0].hand == (Card.from_code("3H"),)
    assert result.state.deck == ()


@pytest.mark.parametrize("card_index", [-1, 1, 7])
def test_invalid_card_index(make_state, card_index):
    state = make_state(hand1=["3H"])
    result = apply_move(state, card_index, 1, 1)
    assert not result.success
    assert result.error_code == INVALID_CARD_INDEX
    assert result.state is state


def test_failed_move_returns_original_state(make_state):
    state = make_state(hand1=["3H"], deck=["2S"])
    result = apply_move(state, 0, 0, 1)
    assert not result.success
    assert result.error_code == CARD_POSITION_MISMATCH
    assert result.error_message == "Selected position does not match card"
    assert result.state is state


# Sequences and winning

def test_count_sequences_single_run(make_state):
    state = make_state(tokens=row_tokens(2, range(0, 5)))
    assert count_sequences(state.board, P1) == 1
    assert count_sequences(state.board, P2) == 0


def test_run_of_six_counts_once(make_state):
    state = make_state(tokens=row_tokens(2, range(0, 6)))
    assert count_sequences(state.board, P1) == 1


def test_run_of_nine_counts_twice(make_state):
    state = make_state(tokens=row_tokens(2, range(0, 9)))
    assert count_sequences(state.board, P1) == 2


def test_crossing_sequences_count_twice(make_state):
    tokens = row_tokens(4, range(2, 7))
    tokens.update({(row, 4): P1 for row in range(2, 7)})
    state = make_state(tokens=tokens)
    assert count_sequences(state.board, P1) == 2


def test_two_separate_sequences_win(make_state):
    tokens = row_tokens(2, range(0, 5))
    tokens.update(row_tokens(6, range(3, 8)))
    state = with_scored(make_state(tokens=tokens))

    winner = check_for_win(state)
    assert winner is not None
    assert winner.id == "p1"


def test_one_sequence_is_not_a_win_by_default(make_state):
    state = with_scored(make_state(tokens=row_tokens(2, range(0, 5))))
    assert check_for_win(state) is None
    assert check_for_win(state, create_rules(sequences_to_win=1)).id == "p1"


def test_winning_move_finishes_game(make_state):
    state = make_state(hand1=["JD", "3H"], tokens=row_tokens(2, range(0, 8)))
    assert not state.is_finished

    result = apply_move(state, 0, 2, 8)
    assert result.success
    assert result.state.winner == "p1"
    assert result.state.is_finished
    assert result.state.status == "finished"


def test_no_moves_after_game_over(make_state):
    state = make_state(hand1=["3H"], hand2=["2H"], current_turn=1)
    finished = GameState(
        board=state.board,
        current_turn=state.current_turn,
        players=state.players,
        deck=state.deck,
        winner="p1",
    )
    result = apply_move(finished, 0, 1, 2)
    assert not result.success
    assert result.error_code == GAME_OVER


def test_completed_sequence_is_locked(make_state):
    """Test a scored sequence cannot be broken by a one-eyed jack."""
    tokens = row_tokens(2, range(0, 4))
    tokens[(5, 5)] = P1
    state = make_state(hand1=["JD"], hand2=["JS", "JH"], tokens=tokens)

    scored = apply_move(state, 0, 2, 4).state
    assert scored.sequence_count(P1) == 1
    assert scored.locked_positions == {Position(2, col) for col in range(0, 5)}

    result = apply_move(scored, 0, 2, 2)
    assert not result.success
    assert result.error_code == SEQUENCE_LOCKED
    assert result.state is scored

    # Tokens outside a sequence can still be removed
    result = apply_move(scored, 1, 5, 5)
    assert result.success
    assert result.state.board[5][5].token == TokenType.NONE
    assert result.state.sequence_count(P1) == 1


def test_win_counts_scored_sequences_only(make_state):
    tokens = row_tokens(2, range(0, 5))
    tokens.update(row_tokens(6, range(3, 8)))
    state = make_state(tokens=tokens)

    assert count_sequences(state.board, P1) == 2
    assert check_for_win(state) is None
    assert check_for_win(with_scored(state)).id == "p1"


def test_extending_a_scored_run_scores_again(make_state):
    state = with_scored(make_state(hand1=["JD"], tokens=row_tokens(2, range(0, 8))))
    assert state.sequence_count(P1) == 1

    result = apply_move(state, 0, 2, 8)
    assert result.state.sequence_count(P1) == 2
    assert result.state.winner == "p1"


# Setup

def test_initialize_game_deals_hands():
    players = [create_player("p1", "Alice", P1), create_player("p2", "Bob", P2)]
    state = initialize_game(players, seed=99)

    assert state.current_turn == 0
    assert state.winner is None
    assert [len(player.hand) for player in state.players] == [7, 7]
    assert len(state.deck) == 104 - 14
    assert all(space.token == TokenType.NONE for row in state.board for space in row)


def test_initialize_game_is_deterministic_with_seed():
    players = [create_player("p1", "Alice", P1), create_player("p2", "Bob", P2)]
    assert initialize_game(players, seed=3) == initialize_game(players, seed=3)


def test_initialize_game_rejects_bad_setup():
    with pytest.raises(GameError) as exc_info:
        initialize_game([create_player("p1", "Alice", P1)])
    assert exc_info.value.code == INVALID_PLAYER_COUNT


def test_validate_game_setup():
    alice = create_player("p1", "Alice", P1)
    bob = create_player("p2", "Bob", P2)
    twin = create_player("p3", "Carol", P1)

    assert validate_game_setup([alice, bob]).valid
    assert validate_game_setup([alice]).error_code == INVALID_PLAYER_COUNT
    assert validate_game_setup([alice, twin]).error_code == DUPLICATE_TOKEN_TYPE

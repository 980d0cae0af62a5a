"""
Tests for state serialization and diffs.
"""

import pytest

from sequence_engine.diff import apply_diff, compute_diff, get_changed_fields
from sequence_engine.engine import apply_move
from sequence_engine.models import Card, TokenType
from sequence_engine.serialization import (
    card_from_dict, card_to_dict, decode_game_state, encode_game_state,
    game_state_from_dict, game_state_to_dict,
)


def test_card_wire_format():
    assert card_to_dict(Card.from_code("JS")) == {
        "suit": "spades",
        "rank": "J",
        "isOneEyedJack": True,
        "isTwoEyedJack": False,
    }
    assert card_to_dict(None) is None


def test_card_flags_are_derived_on_read():
    card = card_from_dict({"suit": "clubs", "rank": "J", "isOneEyedJack": True, "isTwoEyedJack": False})
    assert card.is_two_eyed_jack
    assert not card.is_one_eyed_jack


def test_game_state_to_dict(make_state):
    state = make_state(hand1=["3H"], hand2=["2H"], deck=["QS"], tokens={(1, 1): TokenType.PLAYER2})
    data = game_state_to_dict(state)

    assert data["currentTurn"] == 0
    assert data["winner"] is None
    assert len(data["board"]) == 10
    assert data["board"][0][0] == {"card": None, "token": "none", "isCorner": True}
    assert data["board"][1][1]["token"] == "player2"
    assert data["players"][0]["tokenType"] == "player1"
    assert data["players"][1]["hand"][0]["rank"] == "2"
    assert data["deck"][0]["suit"] == "spades"


def test_game_state_round_trip(make_state):
    state = make_state(hand1=["3H", "JD"], hand2=["2H"], deck=["QS", "5D"], tokens={(4, 4): TokenType.PLAYER1})
    assert game_state_from_dict(game_state_to_dict(state)) == state
    assert decode_game_state(encode_game_state(state)) == state


def test_scored_sequences_round_trip(make_state):
    tokens = {(2, col): TokenType.PLAYER1 for col in range(0, 4)}
    state = apply_move(make_state(hand1=["JD"], tokens=tokens), 0, 2, 4).state

    data = game_state_to_dict(state)
    assert data["sequences"] == [{
        "tokenType": "player1",
        "positions": [{"row": 2, "col": col} for col in range(0, 5)],
    }]
    assert game_state_from_dict(data) == state


def test_diff_of_regular_move(make_state):
    state = make_state(hand1=["3H"], deck=["5D", "QS"])
    new_state = apply_move(state, 0, 4, 4).state
    ops = compute_diff(state, new_state)

    assert {"op": "replace", "path": "/board/4/4/token", "value": "player1"} in ops
    assert {"op": "replace", "path": "/currentTurn", "value": 1} in ops
    assert {"op": "remove", "path": "/deck/1"} in ops
    assert get_changed_fields(ops) == ["board", "currentTurn", "players", "deck"]


def test_apply_diff_reproduces_new_state(make_state):
    tokens = {(2, col): TokenType.PLAYER1 for col in range(0, 8)}
    state = make_state(hand1=["JD", "3H"], hand2=["2H"], deck=["5D", "QS"], tokens=tokens)
    new_state = apply_move(state, 0, 2, 8).state
    assert new_state.winner == "p1"

    old_data = game_state_to_dict(state)
    patched = apply_diff(old_data, compute_diff(state, new_state))

    assert patched == game_state_to_dict(new_state)
    # Input is left untouched
    assert old_data == game_state_to_dict(state)


def test_diff_without_previous_state(make_state):
    assert compute_diff(None, make_state()) == []


def test_apply_diff_rejects_unknown_op(make_state):
    with pytest.raises(ValueError):
        apply_diff(game_state_to_dict(make_state()), [{"op": "move", "path": "/deck"}])

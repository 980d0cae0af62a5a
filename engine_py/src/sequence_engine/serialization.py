"""
State serialization utilities.

Game states travel to clients as plain dictionaries using the wire field
names (``currentTurn``, ``tokenType``, ``isCorner`` ...) and are encoded with
orjson.
"""

from typing import Any, Dict, List, Optional

import orjson

from .models import Board, BoardSpace, Card, GameState, Player, Position, ScoredSequence, TokenType


def card_to_dict(card: Optional[Card]) -> Optional[Dict[str, Any]]:
    if card is None:
        return None
    return {
        "suit": card.suit,
        "rank": card.rank,
        "isOneEyedJack": card.is_one_eyed_jack,
        "isTwoEyedJack": card.is_two_eyed_jack,
    }


def card_from_dict(data: Optional[Dict[str, Any]]) -> Optional[Card]:
    # Jack flags are derived from suit and rank, so incoming flags are ignored
    if data is None:
        return None
    return Card(suit=data["suit"], rank=data["rank"])


def board_to_list(board: Board) -> List[List[Dict[str, Any]]]:
    return [
        [
            {
                "card": card_to_dict(space.card),
                "token": space.token.value,
                "isCorner": space.is_corner,
            }
            for space in row
        ]
        for row in board
    ]


def board_from_list(rows: List[List[Dict[str, Any]]]) -> Board:
    return tuple(
        tuple(
            BoardSpace(
                card=card_from_dict(space.get("card")),
                token=TokenType(space.get("token", TokenType.NONE.value)),
                is_corner=bool(space.get("isCorner", False)),
            )
            for space in row
        )
        for row in rows
    )


def player_to_dict(player: Player) -> Dict[str, Any]:
    return {
        "id": player.id,
        "name": player.name,
        "tokenType": player.token_type.value,
        "hand": [card_to_dict(card) for card in player.hand],
    }


def player_from_dict(data: Dict[str, Any]) -> Player:
    return Player(
        id=data["id"],
        name=data["name"],
        token_type=TokenType(data["tokenType"]),
        hand=tuple(card_from_dict(card) for card in data.get("hand", [])),
    )


def sequence_to_dict(sequence: ScoredSequence) -> Dict[str, Any]:
    return {
        "tokenType": sequence.token_type.value,
        "positions": [{"row": pos.row, "col": pos.col} for pos in sequence.positions],
    }


def sequence_from_dict(data: Dict[str, Any]) -> ScoredSequence:
    return ScoredSequence(
        token_type=TokenType(data["tokenType"]),
        positions=tuple(Position(pos["row"], pos["col"]) for pos in data["positions"]),
    )


def game_state_to_dict(state: GameState) -> Dict[str, Any]:
    """Serialize a game state for transmission to clients."""
    return {
        "board": board_to_list(state.board),
        "currentTurn": state.current_turn,
        "players": [player_to_dict(player) for player in state.players],
        "deck": [card_to_dict(card) for card in state.deck],
        "sequences": [sequence_to_dict(sequence) for sequence in state.sequences],
        "winner": state.winner,
    }


def game_state_from_dict(data: Dict[str, Any]) -> GameState:
    """Rebuild a game state from its serialized form."""
    return GameState(
        board=board_from_list(data["board"]),
        current_turn=int(data["currentTurn"]),
        players=tuple(player_from_dict(player) for player in data["players"]),
        deck=tuple(card_from_dict(card) for card in data.get("deck", [])),
        sequences=tuple(sequence_from_dict(sequence) for sequence in data.get("sequences", [])),
        winner=data.get("winner"),
    )


def serialize_player_for_list(player) -> Dict[str, Any]:
    """Serialize a seated player for lobby player lists."""
    return {
        "id": player.id,
        "name": player.name,
    }


def dumps(data: Any) -> str:
    return orjson.dumps(data).decode()


def loads(raw) -> Any:
    return orjson.loads(raw)


def encode_game_state(state: GameState) -> str:
    return dumps(game_state_to_dict(state))


def decode_game_state(raw) -> GameState:
    return game_state_from_dict(loads(raw))

"""
State diff computation for client-side patching.
"""

import copy
from typing import Any, Dict, List, Optional

from .models import GameState
from .serialization import card_to_dict, player_to_dict, sequence_to_dict


def compute_diff(
    old_state: Optional[GameState],
    new_state: GameState
) -> List[Dict[str, Any]]:
    """
    Compute a JSON Patch-style diff between two game states.

    Paths refer to the serialized form produced by ``game_state_to_dict``.

    Args:
        old_state: Previous game state
        new_state: New game state

    Returns:
        List of patch operations
    """
    if old_state is None:
        # First state, no diff needed
        return []

    ops = []

    for row_index, (old_row, new_row) in enumerate(zip(old_state.board, new_state.board)):
        if old_row is new_row:
            continue
        for col_index, (old_space, new_space) in enumerate(zip(old_row, new_row)):
            if old_space.token != new_space.token:
                ops.append({
                    "op": "replace",
                    "path": f"/board/{row_index}/{col_index}/token",
                    "value": new_space.token.value
                })

    if old_state.current_turn != new_state.current_turn:
        ops.append({"op": "replace", "path": "/currentTurn", "value": new_state.current_turn})

    for index, (old_player, new_player) in enumerate(zip(old_state.players, new_state.players)):
        if old_player != new_player:
            ops.append({
                "op": "replace",
                "path": f"/players/{index}",
                "value": player_to_dict(new_player)
            })

    old_deck, new_deck = old_state.deck, new_state.deck
    if old_deck[:len(new_deck)] == new_deck:
        # Cards were drawn from the end
        for index in range(len(old_deck) - 1, len(new_deck) - 1, -1):
            ops.append({"op": "remove", "path": f"/deck/{index}"})
    else:
        ops.append({
            "op": "replace",
            "path": "/deck",
            "value": [card_to_dict(card) for card in new_deck]
        })

    if old_state.sequences != new_state.sequences:
        ops.append({
            "op": "replace",
            "path": "/sequences",
            "value": [sequence_to_dict(sequence) for sequence in new_state.sequences]
        })

    if old_state.winner != new_state.winner:
        ops.append({"op": "replace", "path": "/winner", "value": new_state.winner})

    return ops


def apply_diff(state: Dict[str, Any], ops: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Apply patch operations to a serialized state.

    Args:
        state: Serialized state to patch
        ops: Operations from ``compute_diff``

    Returns:
        Patched copy of the state
    """
    result = copy.deepcopy(state)

    for op in ops:
        path = [_path_key(part) for part in op["path"].strip("/").split("/")]

        if op["op"] == "replace":
            _set_nested_value(result, path, copy.deepcopy(op["value"]))
        elif op["op"] == "remove":
            _remove_nested_value(result, path)
        else:
            raise ValueError(f"Unsupported patch operation: {op['op']}")

    return result


def _path_key(part: str):
    return int(part) if part.isdigit() else part


def _set_nested_value(obj, path: List, value: Any):
    """Set a nested value using a path."""
    current = obj
    for key in path[:-1]:
        current = current[key]
    current[path[-1]] = value


def _remove_nested_value(obj, path: List):
    """Remove a nested value using a path."""
    current = obj
    for key in path[:-1]:
        current = current[key]
    del current[path[-1]]


def get_changed_fields(ops: List[Dict[str, Any]]) -> List[str]:
    """Top-level fields touched by a set of operations."""
    fields = []
    for op in ops:
        field = op["path"].strip("/").split("/")[0]
        if field not in fields:
            fields.append(field)
    return fields

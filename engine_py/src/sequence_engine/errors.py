# engine_py/src/sequence_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

    @property
    def category(self) -> str:
        return error_category(self.code)


class EmptyDeckError(GameError):
    """Raised when drawing from a deck with no cards left."""
    def __init__(self, message: str = "Deck is empty"):
        super().__init__(EMPTY_DECK, message)


# Setup errors
INVALID_PLAYER_COUNT = "INVALID_PLAYER_COUNT"
DUPLICATE_TOKEN_TYPE = "DUPLICATE_TOKEN_TYPE"

# Session errors
GAME_NOT_FOUND = "GAME_NOT_FOUND"
GAME_FULL = "GAME_FULL"
PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
GAME_NOT_STARTED = "GAME_NOT_STARTED"
GAME_OVER = "GAME_OVER"

# Turn errors
NOT_YOUR_TURN = "NOT_YOUR_TURN"

# Move validation errors
NO_TOKEN_TO_REMOVE = "NO_TOKEN_TO_REMOVE"
CANNOT_REMOVE_OWN_TOKEN = "CANNOT_REMOVE_OWN_TOKEN"
SEQUENCE_LOCKED = "SEQUENCE_LOCKED"
SPACE_UNAVAILABLE = "SPACE_UNAVAILABLE"
CARD_POSITION_MISMATCH = "CARD_POSITION_MISMATCH"
SPACE_OCCUPIED = "SPACE_OCCUPIED"
INVALID_CARD_INDEX = "INVALID_CARD_INDEX"
INVALID_POSITION = "INVALID_POSITION"

# Resource errors
EMPTY_DECK = "EMPTY_DECK"

# Transport errors
INTERNAL_ERROR = "INTERNAL_ERROR"

ERROR_CATEGORIES = {
    INVALID_PLAYER_COUNT: "setup",
    DUPLICATE_TOKEN_TYPE: "setup",
    GAME_NOT_FOUND: "session",
    GAME_FULL: "session",
    PLAYER_NOT_FOUND: "session",
    GAME_NOT_STARTED: "session",
    GAME_OVER: "session",
    NOT_YOUR_TURN: "turn",
    NO_TOKEN_TO_REMOVE: "move",
    CANNOT_REMOVE_OWN_TOKEN: "move",
    SEQUENCE_LOCKED: "move",
    SPACE_UNAVAILABLE: "move",
    CARD_POSITION_MISMATCH: "move",
    SPACE_OCCUPIED: "move",
    INVALID_CARD_INDEX: "move",
    INVALID_POSITION: "move",
    EMPTY_DECK: "resource",
    INTERNAL_ERROR: "internal",
}


def error_category(code: str) -> str:
    return ERROR_CATEGORIES.get(code, "internal")

"""
Type definitions used across layers
"""

from enum import StrEnum


class Color(StrEnum):
    BLACK = "black"
    WHITE = "white"


class Winner(StrEnum):
    BLACK = "black"
    WHITE = "white"
    DRAW = "draw"


class Action(StrEnum):
    """The `action` tag of a game reply. Anything else in the log is spectator traffic."""

    JOIN = "join"
    MOVE = "move"
    TIMEOUT_CLAIM = "timeout_claim"


def opponent(color: Color) -> Color:
    return Color.WHITE if color == Color.BLACK else Color.BLACK

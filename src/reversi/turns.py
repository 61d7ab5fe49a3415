"""Who actually moves next, once automatic passes are taken into account."""

from typing import Optional

from src.core.shared_types import Color, opponent
from src.reversi.board import Board, has_any_legal_move


def resolve_turn(board: Board, nominal: Color) -> Optional[Color]:
    """
    The nominal mover keeps the turn if they have a legal move.
    Otherwise the turn passes automatically to the opponent, if the opponent can move.
    None means neither side can move: the game is over.
    """
    if has_any_legal_move(board, nominal):
        return nominal
    if has_any_legal_move(board, opponent(nominal)):
        return opponent(nominal)
    return None

"""Unit tests for src/reversi/turns.py"""

from typing import Callable

from src.core.shared_types import Color
from src.reversi.board import Board
from src.reversi.turns import resolve_turn

BoardFactory = Callable[[dict[int, Color]], Board]


def test_mover_with_a_legal_move_keeps_the_turn() -> None:
    assert resolve_turn(Board.starting_position(), Color.BLACK) == Color.BLACK
    assert resolve_turn(Board.starting_position(), Color.WHITE) == Color.WHITE


def test_automatic_pass(board_with: BoardFactory) -> None:
    """Black is stuck (white disc in the corner) but White can capture at index 2."""
    board = board_with({0: Color.WHITE, 1: Color.BLACK})
    assert resolve_turn(board, Color.BLACK) == Color.WHITE
    assert resolve_turn(board, Color.WHITE) == Color.WHITE


def test_no_one_can_move(board_with: BoardFactory) -> None:
    board = board_with({27: Color.BLACK, 28: Color.BLACK, 35: Color.BLACK})
    assert resolve_turn(board, Color.BLACK) is None
    assert resolve_turn(board, Color.WHITE) is None


def test_full_board_ends_the_game() -> None:
    board = Board([Color.BLACK] * 32 + [Color.WHITE] * 32)
    assert resolve_turn(board, Color.BLACK) is None

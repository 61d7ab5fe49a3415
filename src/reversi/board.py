"""
The board and the pure Reversi rules that act on it (legal moves, flipping, counting discs).

Cells are indexed 0..63, row by row: row = index // 8, column = index % 8.
"""

from dataclasses import dataclass
from typing import Self

from src.core.models import Cell
from src.core.shared_types import Color, opponent

BOARD_SIZE = 8
NUM_CELLS = BOARD_SIZE * BOARD_SIZE

# (row delta, column delta). Walking in (row, col) space keeps every ray on the board:
# an index + delta walk would wrap from the end of one row into the next.
Vector = tuple[int, int]
DIRECTIONS: list[Vector] = [
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
]

STARTING_DISCS: dict[int, Color] = {
    27: Color.WHITE,
    28: Color.BLACK,
    35: Color.BLACK,
    36: Color.WHITE,
}

CHAR_TO_CELL: dict[str, Cell] = {".": None, "B": Color.BLACK, "W": Color.WHITE}
CELL_TO_CHAR: dict[Cell, str] = {value: key for key, value in CHAR_TO_CELL.items()}
CELL_TO_SYMBOL: dict[Cell, str] = {Color.BLACK: "⚫", Color.WHITE: "⚪", None: "·"}


def index_to_coord(index: int) -> str:
    """0 -> 'A1', 7 -> 'H1', 63 -> 'H8'. Columns are letters, rows are numbered from the top."""
    return f"{chr(ord('A') + index % BOARD_SIZE)}{index // BOARD_SIZE + 1}"


def _on_board(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


@dataclass
class Board:
    cells: list[Cell]

    @classmethod
    def empty(cls) -> Self:
        return cls([None] * NUM_CELLS)

    @classmethod
    def starting_position(cls) -> Self:
        board = cls.empty()
        for index, color in STARTING_DISCS.items():
            board.cells[index] = color
        return board

    @classmethod
    def from_string(cls, text: str) -> Self:
        """Construct a board from 8 rows of '.', 'B', 'W', separated by slashes.

        ex. the starting position:
        ......../......../......../...WB.../...BW.../......../......../........
        """
        rows = text.split("/")
        if len(rows) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in rows):
            raise ValueError(f"Board string must have {BOARD_SIZE} rows of {BOARD_SIZE} cells: {text!r}")
        return cls([CHAR_TO_CELL[character] for row in rows for character in row])

    def to_string(self) -> str:
        characters = "".join(CELL_TO_CHAR[cell] for cell in self.cells)
        return "/".join(
            characters[row * BOARD_SIZE : (row + 1) * BOARD_SIZE]
            for row in range(BOARD_SIZE)
        )

    def to_markdown(self) -> str:
        """Table used as the body of a move post."""
        header = "| " + " | ".join(chr(ord("A") + col) for col in range(BOARD_SIZE)) + " |"
        separator = "|" + "---|" * BOARD_SIZE
        rows = [
            "| "
            + " | ".join(
                CELL_TO_SYMBOL[self.cells[row * BOARD_SIZE + col]]
                for col in range(BOARD_SIZE)
            )
            + " |"
            for row in range(BOARD_SIZE)
        ]
        return "\n".join(["### Current Board", "", header, separator, *rows]) + "\n"

    def cell(self, index: int) -> Cell:
        return self.cells[index]

    def copy(self) -> Self:
        return type(self)(list(self.cells))

    def place(self, index: int, color: Color, flips: set[int]) -> None:
        """Put a disc down and turn over the captured discs. Legality is the caller's business."""
        self.cells[index] = color
        for flipped in flips:
            self.cells[flipped] = color


# --- RULES ---
def _flips_in_direction(board: Board, index: int, direction: Vector, color: Color) -> list[int]:
    """Walk outward while the cells belong to the opponent. Only a ray closed off by our own disc captures."""
    other = opponent(color)
    dr, dc = direction
    row, col = divmod(index, BOARD_SIZE)
    row, col = row + dr, col + dc

    captured: list[int] = []
    while _on_board(row, col) and board.cell(row * BOARD_SIZE + col) == other:
        captured.append(row * BOARD_SIZE + col)
        row, col = row + dr, col + dc

    if _on_board(row, col) and board.cell(row * BOARD_SIZE + col) == color:
        return captured
    return []


def legal_move_flips(board: Board, index: int, color: Color) -> set[int]:
    """Discs that placing `color` on `index` would turn over. Empty set means the move is illegal."""
    if board.cell(index) is not None:
        return set()
    flips: set[int] = set()
    for direction in DIRECTIONS:
        flips.update(_flips_in_direction(board, index, direction, color))
    return flips


def legal_moves(board: Board, color: Color) -> list[int]:
    return [index for index in range(NUM_CELLS) if legal_move_flips(board, index, color)]


def has_any_legal_move(board: Board, color: Color) -> bool:
    return any(legal_move_flips(board, index, color) for index in range(NUM_CELLS))


def count_discs(board: Board) -> tuple[int, int]:
    """(black, white)"""
    black = sum(1 for cell in board.cells if cell == Color.BLACK)
    white = sum(1 for cell in board.cells if cell == Color.WHITE)
    return black, white

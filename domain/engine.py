from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .models import Result


BOARD_SIZE = 3

Position = Tuple[int, int]

# Every line that wins the game: rows, columns, then the two diagonals.
WINNING_LINES: Tuple[Tuple[Position, Position, Position], ...] = (
    ((0, 0), (0, 1), (0, 2)),
    ((1, 0), (1, 1), (1, 2)),
    ((2, 0), (2, 1), (2, 2)),
    ((0, 0), (1, 0), (2, 0)),
    ((0, 1), (1, 1), (2, 1)),
    ((0, 2), (1, 2), (2, 2)),
    ((0, 0), (1, 1), (2, 2)),
    ((0, 2), (1, 1), (2, 0)),
)


class Cell(Enum):
    EMPTY = " "
    PLAYER_X = "X"
    PLAYER_O = "O"


BoardSnapshot = Tuple[Tuple[Cell, ...], ...]


class Turn(Enum):
    FIRST = "first"
    SECOND = "second"

    def opposite(self) -> "Turn":
        return Turn.SECOND if self is Turn.FIRST else Turn.FIRST

    @property
    def mark(self) -> Cell:
        """The first player always plays X."""
        return Cell.PLAYER_X if self is Turn.FIRST else Cell.PLAYER_O


class GameStatus(Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    DRAW = "draw"

    @property
    def is_terminal(self) -> bool:
        return self is not GameStatus.IN_PROGRESS


def _in_bounds(value: int) -> bool:
    return 0 <= value < BOARD_SIZE


@dataclass
class Cursor:
    """Selected cell. Moves that would leave the board are ignored."""

    row: int = 0
    col: int = 0

    @property
    def position(self) -> Position:
        return self.row, self.col

    def move_to(self, row: int, col: int) -> bool:
        if not (_in_bounds(row) and _in_bounds(col)):
            return False
        self.row, self.col = row, col
        return True

    def shift(self, d_row: int, d_col: int) -> bool:
        # Each axis is clamped on its own, as a keyboard cursor would be.
        moved = False
        if d_row and _in_bounds(self.row + d_row):
            self.row += d_row
            moved = True
        if d_col and _in_bounds(self.col + d_col):
            self.col += d_col
            moved = True
        return moved


def find_winning_line(board: BoardSnapshot) -> Optional[Tuple[Cell, Tuple[Position, ...]]]:
    """Return the owning mark and the line if any line is uniformly filled."""

    for line in WINNING_LINES:
        marks = {board[row][col] for row, col in line}
        if len(marks) == 1:
            mark = marks.pop()
            if mark is not Cell.EMPTY:
                return mark, line
    return None


def is_full(board: BoardSnapshot) -> bool:
    return all(cell is not Cell.EMPTY for row in board for cell in row)


class TicTacToeEngine:
    """
    3x3 tic-tac-toe state machine.

    The engine starts in progress with the first player (X) to move.
    `evaluate()` must run after every move; once it reports a win or a
    draw the engine is terminal and further moves have no effect.
    """

    def __init__(self) -> None:
        self._board: List[List[Cell]] = [
            [Cell.EMPTY for _ in range(BOARD_SIZE)] for _ in range(BOARD_SIZE)
        ]
        self.turn = Turn.FIRST
        self.status = GameStatus.IN_PROGRESS
        self.winner: Optional[Cell] = None
        self.winning_line: Optional[Tuple[Position, ...]] = None
        self.cursor = Cursor()

    @classmethod
    def from_board(cls, board: BoardSnapshot) -> "TicTacToeEngine":
        """Build an engine from an existing position; X always moves first."""

        engine = cls()
        engine._board = [list(row) for row in board]
        x_count = sum(row.count(Cell.PLAYER_X) for row in board)
        o_count = sum(row.count(Cell.PLAYER_O) for row in board)
        engine.turn = Turn.SECOND if x_count > o_count else Turn.FIRST
        return engine

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def won(self) -> bool:
        return self.status is GameStatus.WON

    @property
    def draw(self) -> bool:
        return self.status is GameStatus.DRAW

    def cell(self, row: int, col: int) -> Cell:
        return self._board[row][col]

    def snapshot(self) -> BoardSnapshot:
        return tuple(tuple(row) for row in self._board)

    def attempt_move(self, row: int, col: int) -> bool:
        """
        Place the active player's mark at (row, col) and pass the turn.

        Returns False, leaving the board and turn untouched, if the position
        is off the board, the cell is taken, or the game is already over.
        """

        if self.is_terminal:
            return False
        if not (_in_bounds(row) and _in_bounds(col)):
            return False
        if self._board[row][col] is not Cell.EMPTY:
            return False

        self._board[row][col] = self.turn.mark
        self.turn = self.turn.opposite()
        return True

    def evaluate(self) -> GameStatus:
        if self.is_terminal:
            return self.status

        found = find_winning_line(self.snapshot())
        if found is not None:
            self.winner, self.winning_line = found
            self.status = GameStatus.WON
        elif is_full(self.snapshot()):
            self.status = GameStatus.DRAW
        return self.status

    def outcome(self) -> Result:
        """Result from the first player's point of view."""

        if self.status is GameStatus.DRAW:
            return Result.DRAW
        if self.status is GameStatus.WON:
            return Result.WIN if self.winner is Cell.PLAYER_X else Result.LOSE
        return Result.UNDETERMINED

    def move_cursor(self, d_row: int, d_col: int) -> bool:
        if self.is_terminal:
            return False
        return self.cursor.shift(d_row, d_col)

    def place_at_cursor(self) -> bool:
        return self.attempt_move(self.cursor.row, self.cursor.col)

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

from application.ledger import RatingLedger, SettlementResult
from domain.engine import BoardSnapshot, GameStatus, Position, TicTacToeEngine, Turn
from domain.models import Match


logger = logging.getLogger(__name__)


class InputEvent(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    CONFIRM = "confirm"


# (row, col) offset for each cursor event.
CURSOR_MOVES = {
    InputEvent.UP: (-1, 0),
    InputEvent.DOWN: (1, 0),
    InputEvent.LEFT: (0, -1),
    InputEvent.RIGHT: (0, 1),
}


@dataclass(frozen=True)
class BoardView:
    """Everything a renderer needs to draw one frame."""

    board: BoardSnapshot
    cursor: Optional[Position]
    status: GameStatus
    status_text: str


class Renderer(Protocol):
    def render(self, view: BoardView) -> None:
        ...


class InputSource(Protocol):
    def read_event(self) -> Optional[InputEvent]:
        """Block until the next event; None means input is exhausted."""

        ...


def status_text(engine: TicTacToeEngine, match: Match) -> str:
    if engine.draw:
        return "It's a draw!"
    if engine.won:
        # The turn has already passed to the loser.
        winner = match.second_player if engine.turn is Turn.FIRST else match.first_player
        return f"{winner} won!"
    active = match.first_player if engine.turn is Turn.FIRST else match.second_player
    return f"It's {active}'s turn now."


class SessionController:
    """
    Plays one match to completion.

    Each iteration evaluates the board, renders it, and either settles the
    finished match or waits for one input event and applies it. There is no
    way out of a match other than reaching a win or a draw.
    """

    def __init__(
        self,
        ledger: RatingLedger,
        renderer: Renderer,
        input_source: InputSource,
        engine_factory: Callable[[], TicTacToeEngine] = TicTacToeEngine,
    ) -> None:
        self._ledger = ledger
        self._renderer = renderer
        self._input = input_source
        self._engine_factory = engine_factory
        self.last_settlement: Optional[SettlementResult] = None

    def run(self, match: Match) -> Match:
        engine = self._engine_factory()
        logger.info(
            "Starting game %s: %s vs %s, wager %s",
            match.index,
            match.first_player,
            match.second_player,
            match.wager,
        )

        while True:
            status = engine.evaluate()
            self._renderer.render(self._view(engine, match))

            if status.is_terminal:
                finished = match.finished(engine.outcome())
                self.last_settlement = self._ledger.settle(finished)
                return finished

            event = self._input.read_event()
            if event is None:
                raise EOFError(f"Input ended before game {match.index} was finished.")
            self._apply(engine, event)

    @staticmethod
    def _apply(engine: TicTacToeEngine, event: InputEvent) -> None:
        if event is InputEvent.CONFIRM:
            engine.place_at_cursor()
            return
        offset = CURSOR_MOVES.get(event)
        if offset is not None:
            engine.move_cursor(*offset)

    @staticmethod
    def _view(engine: TicTacToeEngine, match: Match) -> BoardView:
        return BoardView(
            board=engine.snapshot(),
            cursor=None if engine.is_terminal else engine.cursor.position,
            status=engine.status,
            status_text=status_text(engine, match),
        )

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

from application.services import AccountStats
from application.session import BoardView
from domain.engine import Cell
from domain.models import Account, Match, Result


CELL_TEXT = {
    Cell.PLAYER_X: "[X]",
    Cell.PLAYER_O: "[O]",
    Cell.EMPTY: "[ ]",
}
SELECTED = "[/]"

CLEAR = "\033[2J\033[H"

HISTORY_HEADERS = ("Index", "Game Name", "First Player", "Second Player", "Result", "Wager")


def render_board(view: BoardView) -> str:
    lines = []
    for row_index, row in enumerate(view.board):
        cells = []
        for col_index, cell in enumerate(row):
            if view.cursor == (row_index, col_index) and cell is Cell.EMPTY:
                cells.append(SELECTED)
            elif view.cursor == (row_index, col_index):
                # Occupied cells keep their mark but show the selection.
                cells.append(CELL_TEXT[cell].replace("[", "/").replace("]", "/"))
            else:
                cells.append(CELL_TEXT[cell])
        lines.append("\t".join(cells))
        lines.append("")
    lines.append(view.status_text)
    return "\n".join(lines)


def format_table(headers: Sequence[str], rows: List[Tuple[str, ...]]) -> str:
    widths = [len(h) for h in headers]
    for row in rows:
        for i, value in enumerate(row):
            widths[i] = max(widths[i], len(value))

    def line(values: Sequence[str]) -> str:
        return " | ".join(v.ljust(widths[i]) for i, v in enumerate(values)).rstrip()

    out = [line(headers), "-+-".join("-" * w for w in widths)]
    out.extend(line(row) for row in rows)
    return "\n".join(out)


def history_table(
    matches: Sequence[Match],
    results: Optional[Sequence[Result]] = None,
) -> str:
    """
    Table of games. `results` overrides each game's stored result, used to
    show outcomes relative to one player.
    """

    rows = []
    for i, match in enumerate(matches):
        result = results[i] if results is not None else match.result
        rows.append(
            (
                str(match.index),
                match.game_name,
                match.first_player,
                match.second_player,
                result.value,
                str(match.wager),
            )
        )
    return format_table(HISTORY_HEADERS, rows)


def ratings_table(accounts: Sequence[Account]) -> str:
    if not accounts:
        return ""
    width = max(len(a.username) for a in accounts)
    return "\n".join(f"{a.username.ljust(width)}'s rating: {a.rating}" for a in accounts)


def stats_text(stats: AccountStats) -> str:
    account = stats.account
    parts = []
    if stats.entries:
        parts.append(
            history_table(
                [e.match for e in stats.entries],
                [e.result for e in stats.entries],
            )
        )
        parts.append("")
    parts.append(
        f"{account.username}'s rating: {account.rating} "
        f"({account.tier.value}, {account.games_count} games)"
    )
    return "\n".join(parts)


class ConsoleRenderer:
    """
    Draws each frame of a match to the terminal.

    `footer` is printed under the board while the game is in progress, so
    help text survives the screen being cleared between frames.
    """

    def __init__(
        self,
        write: Callable[[str], None] = print,
        clear_screen: bool = True,
        footer: str = "",
    ) -> None:
        self._write = write
        self._clear_screen = clear_screen
        self._footer = footer

    def render(self, view: BoardView) -> None:
        frame = render_board(view)
        if self._footer and not view.status.is_terminal:
            frame = f"{frame}\n{self._footer}"
        if self._clear_screen:
            frame = CLEAR + frame
        self._write(frame)

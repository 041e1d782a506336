from __future__ import annotations

import sqlite3
from typing import List

from domain.errors import StorageError
from domain.models import Match, Result
from domain.repositories import MatchRepository


class SqliteMatchRepository(MatchRepository):
    """
    SQLite-backed implementation of `MatchRepository`.

    This repository owns the `games` table, one row per match keyed by the
    match index. It is self-initialising: the table is created if needed.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_table()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS games (
                    game_index INTEGER PRIMARY KEY,
                    game_name TEXT NOT NULL,
                    first_player TEXT NOT NULL,
                    second_player TEXT NOT NULL,
                    wager INTEGER NOT NULL,
                    result TEXT NOT NULL
                )
                """
            )
            conn.commit()

    def _to_domain(self, row: tuple) -> Match:
        try:
            result = Result[row[5]]
        except KeyError as exc:
            raise StorageError(self._db_path, f"unknown result {row[5]!r} for game {row[0]}") from exc
        return Match(
            index=int(row[0]),
            game_name=row[1],
            first_player=row[2],
            second_player=row[3],
            wager=int(row[4]),
            result=result,
        )

    def load_history(self) -> List[Match]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT game_index, game_name, first_player, second_player, wager, result
                FROM games
                ORDER BY game_index
                """
            )
            rows = cur.fetchall()
            return [self._to_domain(row) for row in rows]

    def save_history(self, matches: List[Match]) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM games")
            cur.executemany(
                """
                INSERT INTO games (game_index, game_name, first_player, second_player, wager, result)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (m.index, m.game_name, m.first_player, m.second_player, m.wager, m.result.name)
                    for m in matches
                ],
            )
            conn.commit()

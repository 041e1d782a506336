from __future__ import annotations

import sqlite3
from typing import Dict, List

from domain.errors import StorageError
from domain.models import Account, Tier
from domain.repositories import AccountRepository


class SqliteAccountRepository(AccountRepository):
    """
    SQLite-backed implementation of `AccountRepository`.

    Manages the `accounts` table and the `account_games` table, which keeps
    each account's ordered list of match indices. Tables are created if
    needed; saving replaces both tables' contents in one transaction.
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
                CREATE TABLE IF NOT EXISTS accounts (
                    username TEXT PRIMARY KEY,
                    rating INTEGER NOT NULL,
                    games_count INTEGER NOT NULL DEFAULT 0,
                    tier TEXT NOT NULL DEFAULT 'BASIC'
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS account_games (
                    username TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    match_index INTEGER NOT NULL,
                    PRIMARY KEY (username, position)
                )
                """
            )
            conn.commit()

    def _to_domain(self, row: tuple, history: List[int]) -> Account:
        try:
            tier = Tier[row[3]]
        except KeyError as exc:
            raise StorageError(self._db_path, f"unknown tier {row[3]!r} for {row[0]!r}") from exc
        return Account(
            username=row[0],
            rating=int(row[1]),
            history=history,
            games_count=int(row[2]),
            tier=tier,
        )

    def load_accounts(self) -> List[Account]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT username, match_index
                FROM account_games
                ORDER BY username, position
                """
            )
            histories: Dict[str, List[int]] = {}
            for username, match_index in cur.fetchall():
                histories.setdefault(username, []).append(int(match_index))

            cur.execute("SELECT username, rating, games_count, tier FROM accounts ORDER BY rowid")
            rows = cur.fetchall()
            return [self._to_domain(row, histories.get(row[0], [])) for row in rows]

    def save_accounts(self, accounts: List[Account]) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM account_games")
            cur.execute("DELETE FROM accounts")
            cur.executemany(
                """
                INSERT INTO accounts (username, rating, games_count, tier)
                VALUES (?, ?, ?, ?)
                """,
                [(a.username, a.rating, a.games_count, a.tier.name) for a in accounts],
            )
            cur.executemany(
                """
                INSERT INTO account_games (username, position, match_index)
                VALUES (?, ?, ?)
                """,
                [
                    (a.username, position, match_index)
                    for a in accounts
                    for position, match_index in enumerate(a.history)
                ],
            )
            conn.commit()

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

from domain.errors import StorageError
from domain.models import TIC_TAC_TOE, Account, Match, Result, Tier
from domain.repositories import AccountRepository, MatchRepository


logger = logging.getLogger(__name__)


def _read_list(path: Path) -> List[Dict[str, Any]]:
    if not path.exists():
        logger.info("%s does not exist yet, starting empty", path)
        return []

    try:
        data = json.loads(path.read_text(encoding="utf-8") or "[]")
    except json.JSONDecodeError as exc:
        raise StorageError(str(path), f"invalid JSON ({exc})") from exc

    if not isinstance(data, list):
        raise StorageError(str(path), "expected a JSON array")
    return data


def _write_list(path: Path, items: List[Dict[str, Any]]) -> None:
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(items, indent=2), encoding="utf-8")
    os.replace(tmp, path)


class JsonAccountRepository(AccountRepository):
    """
    Stores all accounts as one JSON array in a single file.

    A missing file reads as no accounts. Saving rewrites the whole file.
    """

    def __init__(self, path: str) -> None:
        self._path = Path(path)

    @staticmethod
    def _to_record(account: Account) -> Dict[str, Any]:
        return {
            "username": account.username,
            "rating": account.rating,
            "history": list(account.history),
            "games_count": account.games_count,
            "tier": account.tier.name,
        }

    def _to_domain(self, record: Dict[str, Any]) -> Account:
        try:
            return Account(
                username=str(record["username"]),
                rating=int(record["rating"]),
                history=[int(i) for i in record.get("history", [])],
                games_count=int(record.get("games_count", 0)),
                tier=Tier[record.get("tier", Tier.BASIC.name)],
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(str(self._path), f"bad account record {record!r}") from exc

    def load_accounts(self) -> List[Account]:
        return [self._to_domain(r) for r in _read_list(self._path)]

    def save_accounts(self, accounts: List[Account]) -> None:
        _write_list(self._path, [self._to_record(a) for a in accounts])


class JsonMatchRepository(MatchRepository):
    """JSON-file implementation of `MatchRepository`."""

    def __init__(self, path: str) -> None:
        self._path = Path(path)

    @staticmethod
    def _to_record(match: Match) -> Dict[str, Any]:
        return {
            "index": match.index,
            "game_name": match.game_name,
            "first_player": match.first_player,
            "second_player": match.second_player,
            "wager": match.wager,
            "result": match.result.name,
        }

    def _to_domain(self, record: Dict[str, Any]) -> Match:
        try:
            return Match(
                index=int(record["index"]),
                first_player=str(record["first_player"]),
                second_player=str(record["second_player"]),
                wager=int(record["wager"]),
                game_name=str(record.get("game_name", TIC_TAC_TOE)),
                result=Result[record["result"]],
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(str(self._path), f"bad game record {record!r}") from exc

    def load_history(self) -> List[Match]:
        return [self._to_domain(r) for r in _read_list(self._path)]

    def save_history(self, matches: List[Match]) -> None:
        _write_list(self._path, [self._to_record(m) for m in matches])

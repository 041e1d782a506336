from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, List


DEFAULT_RATING = 5
TIC_TAC_TOE = "Tic Tac Toe"


class Result(Enum):
    """Outcome of a match, always relative to the first player."""

    WIN = "Win"
    LOSE = "Lose"
    DRAW = "Draw"
    UNDETERMINED = "Undetermined"

    def mirrored(self) -> "Result":
        """The same outcome seen from the second player's side."""
        if self is Result.WIN:
            return Result.LOSE
        if self is Result.LOSE:
            return Result.WIN
        return self


class Tier(Enum):
    """Account tier, selects the rating adjustment policy."""

    BASIC = "Basic"
    PREMIUM = "Premium"
    PREMIUM_PLUS = "PremiumPlus"


@dataclass
class Account:
    """
    A player's rating account.

    The username is the identity. `history` holds indices into the shared
    match history rather than copies of the matches themselves, so a match
    played between two accounts exists exactly once.
    """

    username: str
    rating: int = DEFAULT_RATING
    history: List[int] = field(default_factory=list)
    games_count: int = 0
    tier: Tier = Tier.BASIC

    def has_played(self, match_index: int) -> bool:
        return match_index in self.history


@dataclass(frozen=True)
class Match:
    """
    Record of a single game between two accounts.

    Participants are referenced by username. The record is immutable:
    finishing a match yields a new record carrying the result.
    """

    index: int
    first_player: str
    second_player: str
    wager: int
    game_name: str = TIC_TAC_TOE
    result: Result = Result.UNDETERMINED

    @property
    def is_finished(self) -> bool:
        return self.result is not Result.UNDETERMINED

    def finished(self, result: Result) -> "Match":
        return replace(self, result=result)

    def involves(self, username: str) -> bool:
        return username in (self.first_player, self.second_player)

    def result_for(self, username: str) -> Result:
        """Result as seen by `username` (Win/Lose swapped for the second player)."""
        if username == self.first_player:
            return self.result
        if username == self.second_player:
            return self.result.mirrored()
        raise ValueError(f"{username!r} did not play game {self.index}")


class MatchCounter:
    """
    Hands out match indices.

    Owned by whoever bootstraps a session; it continues numbering from the
    persisted history so indices stay unique across runs.
    """

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("Match counter cannot start below zero.")
        self._next = start

    @classmethod
    def continuing(
        cls,
        matches: Iterable[Match],
        accounts: Iterable[Account] = (),
    ) -> "MatchCounter":
        """
        Start after every index already in use.

        Account histories are consulted too: accounts and history are stored
        separately and may disagree, and an index an account already holds
        would be refused by the ledger.
        """

        matches = list(matches)
        highest = max((m.index for m in matches), default=-1)
        referenced = max((i for a in accounts for i in a.history), default=-1)
        return cls(max(len(matches), highest + 1, referenced + 1))

    @property
    def peek(self) -> int:
        return self._next

    def next_index(self) -> int:
        index = self._next
        self._next += 1
        return index

    def reset(self) -> None:
        self._next = 0

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional

from domain.errors import ParticipantError
from domain.history import MatchHistory
from domain.models import Account, Match, Result, Tier
from domain.rating import TierPolicy, apply_delta, build_rules


logger = logging.getLogger(__name__)


class SettlementGuard(Enum):
    """
    How a repeated settlement of the same match is detected.

    STRICT skips the whole settlement if either participant already has the
    match recorded. PER_ACCOUNT lets each side check only its own history.
    """

    STRICT = "strict"
    PER_ACCOUNT = "per_account"


@dataclass
class SettlementResult:
    """Outcome of settling one match onto both participants."""

    applied: bool
    match_index: int
    first_rating: int
    second_rating: int
    first_delta: int = 0
    second_delta: int = 0


def raw_deltas(match: Match) -> tuple[int, int]:
    """Unscaled rating change for (first, second) player."""

    if match.result is Result.WIN:
        return match.wager, -match.wager
    if match.result is Result.LOSE:
        return -match.wager, match.wager
    return 0, 0


class RatingLedger:
    """
    Applies finished matches to account ratings.

    The ledger owns the username -> account lookup table and the shared
    match history. Settling a match updates both participants or neither,
    and a match index is applied at most once per account.
    """

    def __init__(
        self,
        accounts: Dict[str, Account],
        history: MatchHistory,
        rules: Optional[Mapping[Tier, TierPolicy]] = None,
        guard: SettlementGuard = SettlementGuard.STRICT,
    ) -> None:
        self._accounts = accounts
        self._history = history
        self._rules = dict(rules) if rules is not None else build_rules()
        self._guard = guard

    @property
    def guard(self) -> SettlementGuard:
        return self._guard

    def policy_for(self, account: Account) -> TierPolicy:
        return self._rules.get(account.tier) or TierPolicy(tier=account.tier)

    def _participant(self, username: str, match: Match) -> Account:
        account = self._accounts.get(username)
        if account is None:
            raise ParticipantError(username, match.index)
        return account

    def settle(self, match: Match, on_behalf_of: Optional[str] = None) -> SettlementResult:
        """
        Record `match` for both participants and move the wager between them.

        `on_behalf_of` names the account completing the game (the first
        player by default); completing a game you did not play in raises
        `ParticipantError`.
        """

        if not match.is_finished:
            raise ValueError(f"Game {match.index} has no result yet and cannot be settled.")

        requester = match.first_player if on_behalf_of is None else on_behalf_of
        if not match.involves(requester):
            raise ParticipantError(requester, match.index)

        first = self._participant(match.first_player, match)
        second = self._participant(match.second_player, match)

        first_seen = first.has_played(match.index)
        second_seen = second.has_played(match.index)

        if self._guard is SettlementGuard.STRICT and (first_seen or second_seen):
            logger.warning(
                "Game %s already settled for %s/%s, skipping",
                match.index,
                first.username,
                second.username,
            )
            return SettlementResult(
                applied=False,
                match_index=match.index,
                first_rating=first.rating,
                second_rating=second.rating,
            )

        first_raw, second_raw = raw_deltas(match)
        first_delta = 0 if first_seen else self._record(first, match, first_raw)
        second_delta = 0 if second_seen else self._record(second, match, second_raw)
        self._history.add(match)

        applied = not (first_seen and second_seen)
        if applied:
            logger.info(
                "Settled game %s (%s): %s %+d -> %d, %s %+d -> %d",
                match.index,
                match.result.value,
                first.username,
                first_delta,
                first.rating,
                second.username,
                second_delta,
                second.rating,
            )
        else:
            logger.warning("Game %s already settled for both players, skipping", match.index)

        return SettlementResult(
            applied=applied,
            match_index=match.index,
            first_rating=first.rating,
            second_rating=second.rating,
            first_delta=first_delta,
            second_delta=second_delta,
        )

    def _record(self, account: Account, match: Match, delta: int) -> int:
        before = account.rating
        account.rating = apply_delta(self.policy_for(account), before, delta)
        account.history.append(match.index)
        account.games_count += 1
        return account.rating - before

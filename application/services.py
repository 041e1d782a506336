from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from application.ledger import RatingLedger
from application.session import SessionController
from domain.history import MatchHistory
from domain.models import DEFAULT_RATING, TIC_TAC_TOE, Account, Match, MatchCounter, Result, Tier
from domain.repositories import AccountRepository, MatchRepository


logger = logging.getLogger(__name__)


@dataclass
class Lobby:
    """
    In-memory state for one run of the program.

    Loaded once at startup and written back wholesale after each finished
    match. `accounts` doubles as the ledger's lookup table.
    """

    accounts: Dict[str, Account] = field(default_factory=dict)
    history: MatchHistory = field(default_factory=MatchHistory)
    counter: MatchCounter = field(default_factory=MatchCounter)


@dataclass
class OperationResult:
    """Generic result type for simple operations."""

    success: bool
    error_message: Optional[str] = None


@dataclass
class PlayResult:
    """Result of playing a match through to settlement."""

    match: Match
    first: Account
    second: Account
    applied: bool


@dataclass
class HistoryEntry:
    """One row of a player's history, with the result seen from their side."""

    match: Match
    result: Result


@dataclass
class AccountStats:
    account: Account
    entries: List[HistoryEntry] = field(default_factory=list)


def load_lobby(account_repo: AccountRepository, match_repo: MatchRepository) -> Lobby:
    """
    Read accounts and history and continue match numbering after them.
    """

    accounts = account_repo.load_accounts()
    matches = match_repo.load_history()
    lobby = Lobby(
        accounts={a.username: a for a in accounts},
        history=MatchHistory(matches),
        counter=MatchCounter.continuing(matches, accounts),
    )
    logger.info(
        "Loaded %d accounts and %d games, next game index %d",
        len(lobby.accounts),
        len(lobby.history),
        lobby.counter.peek,
    )
    return lobby


def save_lobby(
    lobby: Lobby,
    account_repo: AccountRepository,
    match_repo: MatchRepository,
) -> None:
    match_repo.save_history(lobby.history.all())
    account_repo.save_accounts(list(lobby.accounts.values()))
    logger.info("Saved %d accounts and %d games", len(lobby.accounts), len(lobby.history))


def get_or_create_account(
    lobby: Lobby,
    username: str,
    tier: Tier = Tier.BASIC,
    default_rating: int = DEFAULT_RATING,
) -> Account:
    """
    Return the account for `username`, creating it on first use.

    `tier` only applies to newly created accounts.
    """

    existing = lobby.accounts.get(username)
    if existing is not None:
        return existing

    account = Account(username=username, rating=default_rating, tier=tier)
    lobby.accounts[username] = account
    logger.info("Created %s account %r with rating %d", tier.value, username, default_rating)
    return account


def validate_player_name(name: str, taken: Optional[str] = None) -> Optional[str]:
    if not name.strip():
        return "Player name cannot be empty."
    if taken is not None and name == taken:
        return "Second player must differ from the first player."
    return None


def validate_wager(wager: int, first: Account, second: Account) -> Optional[str]:
    if wager < 0:
        return "Wager cannot be negative."
    limit = min(first.rating, second.rating)
    if wager > limit:
        return f"Wager cannot exceed either player's rating (max {limit})."
    return None


def parse_wager(text: str, first: Account, second: Account) -> tuple[Optional[int], Optional[str]]:
    """Parse user input into a wager, or return the reason it was rejected."""

    try:
        wager = int(text.strip())
    except ValueError:
        return None, "Wager must be a whole number."

    error = validate_wager(wager, first, second)
    if error:
        return None, error
    return wager, None


def new_match(
    lobby: Lobby,
    first: Account,
    second: Account,
    wager: int,
    game_name: str = TIC_TAC_TOE,
) -> Match:
    """
    Create an undetermined match between two accounts.

    The index comes from the lobby's counter, so it is only consumed once
    the wager has been validated.
    """

    if first.username == second.username:
        raise ValueError("A player cannot play against themselves.")
    error = validate_wager(wager, first, second)
    if error:
        raise ValueError(error)

    return Match(
        index=lobby.counter.next_index(),
        first_player=first.username,
        second_player=second.username,
        wager=wager,
        game_name=game_name,
    )


def play_match(
    lobby: Lobby,
    controller: SessionController,
    match: Match,
    account_repo: AccountRepository,
    match_repo: MatchRepository,
) -> PlayResult:
    """
    Run `match` to completion, settle it and persist the lobby.
    """

    finished = controller.run(match)
    save_lobby(lobby, account_repo, match_repo)

    settlement = controller.last_settlement
    return PlayResult(
        match=finished,
        first=lobby.accounts[finished.first_player],
        second=lobby.accounts[finished.second_player],
        applied=settlement.applied if settlement is not None else False,
    )


def build_ledger(lobby: Lobby, **kwargs) -> RatingLedger:
    return RatingLedger(lobby.accounts, lobby.history, **kwargs)


def ratings_report(lobby: Lobby) -> List[Account]:
    """Accounts ordered from the highest rating down."""

    return sorted(lobby.accounts.values(), key=lambda a: a.rating, reverse=True)


def account_stats(lobby: Lobby, username: str) -> Optional[AccountStats]:
    account = lobby.accounts.get(username)
    if account is None:
        return None

    entries = [
        HistoryEntry(match=m, result=m.result_for(username))
        for m in lobby.history.for_indices(account.history)
    ]
    return AccountStats(account=account, entries=entries)


def clear_data(
    lobby: Lobby,
    account_repo: AccountRepository,
    match_repo: MatchRepository,
) -> OperationResult:
    """
    Wipe every account and game, in memory and in storage.
    """

    removed_accounts = len(lobby.accounts)
    removed_games = len(lobby.history)

    lobby.accounts.clear()
    lobby.history.clear()
    lobby.counter.reset()
    save_lobby(lobby, account_repo, match_repo)

    logger.warning("Cleared %d accounts and %d games", removed_accounts, removed_games)
    return OperationResult(success=True)

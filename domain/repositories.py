from __future__ import annotations

from typing import List, Protocol

from .models import Account, Match


class AccountRepository(Protocol):
    """
    Abstraction over account persistence.

    Implementations are responsible for:
    - Mapping between stored records and the `Account` domain model.
    - Treating missing storage (first run) as an empty collection.
    - Replacing the whole collection on save; there are no partial writes.
    """

    def load_accounts(self) -> List[Account]:
        """Return every stored account."""

        ...

    def save_accounts(self, accounts: List[Account]) -> None:
        """Replace the stored accounts with `accounts`."""

        ...


class MatchRepository(Protocol):
    """
    Persistence abstraction for the match history.

    Matches are stored once each, in index order. Accounts only hold the
    indices of the matches they took part in.
    """

    def load_history(self) -> List[Match]:
        ...

    def save_history(self, matches: List[Match]) -> None:
        ...

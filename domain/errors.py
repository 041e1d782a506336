from __future__ import annotations


class LedgerError(Exception):
    """Base class for rating ledger failures."""


class ParticipantError(LedgerError):
    """
    Raised when a match is settled for an account that did not play in it,
    or when a participant is missing from the account lookup table.

    This is a data-integrity fault, not a user error: callers are expected
    to report it and stop.
    """

    def __init__(self, username: str, match_index: int) -> None:
        super().__init__(
            f"Players cannot complete a game they did not participate in "
            f"(player={username!r}, game={match_index})"
        )
        self.username = username
        self.match_index = match_index


class StorageError(Exception):
    """Persisted data could not be read back into domain objects."""

    def __init__(self, location: str, reason: str) -> None:
        super().__init__(f"{location}: {reason}")
        self.location = location
        self.reason = reason

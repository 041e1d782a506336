from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Optional

from application.ledger import RatingLedger
from application.services import (
    Lobby,
    account_stats,
    build_ledger,
    clear_data,
    get_or_create_account,
    new_match,
    parse_wager,
    play_match,
    ratings_report,
    validate_player_name,
)
from application.session import InputEvent, SessionController
from domain.models import Account, Tier
from domain.rating import build_rules
from domain.repositories import AccountRepository, MatchRepository
from infrastructure.config import Config
from interfaces.console.keymap import parse_line
from interfaces.console.render import (
    CLEAR,
    ConsoleRenderer,
    history_table,
    ratings_table,
    stats_text,
)


logger = logging.getLogger(__name__)

MENU = (
    "Menu Options:\n"
    "1. Play Tic Tac Toe\n"
    "2. View Game History\n"
    "3. View Player's ratings\n"
    "4. View Player's stats\n"
    "5. Clear data\n"
    "6. Quit"
)

CONTROLS = "Move with w/a/s/d (or up/down/left/right), place with e, space or Enter."

SKIPPED_NOTICE = (
    "Game {index} was already recorded for one of the players, ratings were not changed."
)

TIER_CHOICES = {
    "": Tier.BASIC,
    "1": Tier.BASIC,
    "basic": Tier.BASIC,
    "2": Tier.PREMIUM,
    "premium": Tier.PREMIUM,
    "3": Tier.PREMIUM_PLUS,
    "premium_plus": Tier.PREMIUM_PLUS,
    "premiumplus": Tier.PREMIUM_PLUS,
}


class ConsoleInput:
    """
    Reads lines from the console and hands them out one event at a time.
    """

    def __init__(self, read_line: Callable[[str], str] = input, prompt: str = "> ") -> None:
        self._read_line = read_line
        self._prompt = prompt
        self._pending: Deque[InputEvent] = deque()

    def read_event(self) -> Optional[InputEvent]:
        while not self._pending:
            try:
                line = self._read_line(self._prompt)
            except EOFError:
                return None
            self._pending.extend(parse_line(line))
        return self._pending.popleft()


class ConsoleApp:
    """
    Text menu wired to the application layer.

    This class contains only console concerns: prompting, re-prompting on
    invalid input and printing. Game rules and persistence live behind the
    application services.
    """

    def __init__(
        self,
        lobby: Lobby,
        config: Config,
        account_repo: AccountRepository,
        match_repo: MatchRepository,
        read_line: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ) -> None:
        self.lobby = lobby
        self.config = config
        self._account_repo = account_repo
        self._match_repo = match_repo
        self._read_line = read_line
        self._write = write
        self.ledger: RatingLedger = build_ledger(
            lobby,
            rules=build_rules(config.premium_multiplier, config.rating_floor),
            guard=config.settlement_guard,
        )

    def _clear(self) -> None:
        if self.config.clear_screen:
            self._write(CLEAR)

    def _pause(self) -> None:
        self._read_line("Press Enter to continue...")

    def _notify(self, message: str) -> None:
        # The next menu frame clears the screen, so wait for the user first.
        self._write(message)
        self._pause()

    def run(self) -> None:
        handlers = {
            "1": self.handle_play,
            "2": self.handle_history,
            "3": self.handle_ratings,
            "4": self.handle_stats,
            "5": self.handle_clear,
        }

        while True:
            self._clear()
            self._write(MENU)
            try:
                choice = self._read_line("Enter an option: ").strip()
            except EOFError:
                return

            if choice == "6":
                return

            handler = handlers.get(choice)
            try:
                if handler is None:
                    self._notify("Invalid input. Please try again.")
                else:
                    handler()
            except EOFError:
                return

    def _ask_name(self, prompt: str, taken: Optional[str] = None) -> str:
        while True:
            name = self._read_line(prompt).strip()
            error = validate_player_name(name, taken)
            if error is None:
                return name
            self._write(error)

    def _ask_tier(self, username: str) -> Tier:
        while True:
            answer = self._read_line(
                f"New player {username}. Account type [1] Basic, [2] Premium, [3] PremiumPlus: "
            )
            tier = TIER_CHOICES.get(answer.strip().lower())
            if tier is not None:
                return tier
            self._write("Please choose 1, 2 or 3.")

    def _ask_account(self, prompt: str, taken: Optional[str] = None) -> Account:
        name = self._ask_name(prompt, taken)
        if name in self.lobby.accounts:
            return self.lobby.accounts[name]
        tier = self._ask_tier(name)
        return get_or_create_account(self.lobby, name, tier, self.config.default_rating)

    def _ask_wager(self, first: Account, second: Account) -> int:
        limit = min(first.rating, second.rating)
        while True:
            text = self._read_line(f"Enter rating wager (0-{limit}): ")
            wager, error = parse_wager(text, first, second)
            if wager is not None:
                return wager
            self._write(error or "Invalid wager.")

    def handle_play(self) -> None:
        self._clear()
        first = self._ask_account("First player: ")
        second = self._ask_account("Second player: ", taken=first.username)
        wager = self._ask_wager(first, second)

        match = new_match(self.lobby, first, second, wager)
        controller = SessionController(
            self.ledger,
            ConsoleRenderer(self._write, self.config.clear_screen, footer=CONTROLS),
            ConsoleInput(self._read_line),
        )
        result = play_match(self.lobby, controller, match, self._account_repo, self._match_repo)

        self._write("")
        self._write(f"{result.first.username}'s rating: {result.first.rating}")
        self._write(f"{result.second.username}'s rating: {result.second.rating}")
        if not result.applied:
            self._write(SKIPPED_NOTICE.format(index=result.match.index))
        self._pause()

    def handle_history(self) -> None:
        if len(self.lobby.history) == 0:
            self._notify("No games have been played yet.")
            return
        self._clear()
        self._write(history_table(self.lobby.history.all()))
        self._pause()

    def handle_ratings(self) -> None:
        accounts = ratings_report(self.lobby)
        if not accounts:
            self._notify("No players yet.")
            return
        self._clear()
        self._write(ratings_table(accounts))
        self._pause()

    def handle_stats(self) -> None:
        name = self._read_line("Player name: ").strip()
        stats = account_stats(self.lobby, name)
        if stats is None:
            self._notify(f"No player named {name!r}.")
            return
        self._clear()
        self._write(stats_text(stats))
        self._pause()

    def handle_clear(self) -> None:
        answer = self._read_line("Delete all players and games? [y/N]: ").strip().lower()
        if answer not in ("y", "yes"):
            self._notify("Nothing was deleted.")
            return
        clear_data(self.lobby, self._account_repo, self._match_repo)
        self._notify("All data cleared.")


def create_console_app(
    lobby: Lobby,
    config: Config,
    account_repo: AccountRepository,
    match_repo: MatchRepository,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> ConsoleApp:
    """
    Configure and return a console app wired to the application layer.
    """

    logger.debug("Creating console app with %s storage", config.storage_backend)
    return ConsoleApp(lobby, config, account_repo, match_repo, read_line, write)

import unittest

from application.services import (
    Lobby,
    account_stats,
    build_ledger,
    clear_data,
    get_or_create_account,
    load_lobby,
    new_match,
    parse_wager,
    play_match,
    ratings_report,
    save_lobby,
    validate_player_name,
    validate_wager,
)
from application.session import InputEvent, SessionController
from domain.models import Account, Match, Result, Tier
from domain.repositories import AccountRepository, MatchRepository


def _copy(account):
    return Account(
        username=account.username,
        rating=account.rating,
        history=list(account.history),
        games_count=account.games_count,
        tier=account.tier,
    )


class InMemoryAccountRepository(AccountRepository):
    def __init__(self, accounts=None):
        self.accounts = [_copy(a) for a in accounts or []]

    def load_accounts(self):
        return [_copy(a) for a in self.accounts]

    def save_accounts(self, accounts):
        self.accounts = [_copy(a) for a in accounts]


class InMemoryMatchRepository(MatchRepository):
    def __init__(self, matches=None):
        self.matches = list(matches or [])

    def load_history(self):
        return list(self.matches)

    def save_history(self, matches):
        self.matches = list(matches)


class ScriptedInput:
    def __init__(self, events):
        self._events = list(events)

    def read_event(self):
        return self._events.pop(0) if self._events else None


class NullRenderer:
    def render(self, view):
        pass


class ApplicationServicesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.account_repo = InMemoryAccountRepository()
        self.match_repo = InMemoryMatchRepository()
        self.lobby = load_lobby(self.account_repo, self.match_repo)

    def test_get_or_create_account_creates_once(self):
        created = get_or_create_account(self.lobby, "alice", Tier.PREMIUM, default_rating=5)
        again = get_or_create_account(self.lobby, "alice", Tier.BASIC, default_rating=99)

        self.assertIs(created, again)
        self.assertEqual(again.rating, 5)
        self.assertIs(again.tier, Tier.PREMIUM)
        self.assertEqual(list(self.lobby.accounts), ["alice"])

    def test_player_name_validation(self):
        self.assertIsNotNone(validate_player_name(""))
        self.assertIsNotNone(validate_player_name("   "))
        self.assertIsNotNone(validate_player_name("alice", taken="alice"))
        self.assertIsNone(validate_player_name("bob", taken="alice"))

    def test_wager_must_fit_both_ratings(self):
        first = Account(username="alice", rating=8)
        second = Account(username="bob", rating=3)

        self.assertIsNone(validate_wager(0, first, second))
        self.assertIsNone(validate_wager(3, first, second))
        self.assertIsNotNone(validate_wager(4, first, second))
        self.assertIsNotNone(validate_wager(-1, first, second))

        self.assertEqual(parse_wager(" 2 ", first, second), (2, None))
        wager, error = parse_wager("two", first, second)
        self.assertIsNone(wager)
        self.assertIsNotNone(error)

    def test_new_match_uses_lobby_counter(self):
        alice = get_or_create_account(self.lobby, "alice")
        bob = get_or_create_account(self.lobby, "bob")

        first = new_match(self.lobby, alice, bob, 1)
        second = new_match(self.lobby, bob, alice, 2)

        self.assertEqual((first.index, second.index), (0, 1))
        self.assertIs(first.result, Result.UNDETERMINED)
        self.assertEqual(second.first_player, "bob")

    def test_new_match_rejects_bad_setups(self):
        alice = get_or_create_account(self.lobby, "alice")
        bob = get_or_create_account(self.lobby, "bob")

        with self.assertRaises(ValueError):
            new_match(self.lobby, alice, alice, 1)
        with self.assertRaises(ValueError):
            new_match(self.lobby, alice, bob, 100)
        # Rejected setups do not consume an index.
        self.assertEqual(self.lobby.counter.peek, 0)

    def test_load_lobby_continues_numbering(self):
        matches = [
            Match(index=0, first_player="a", second_player="b", wager=1, result=Result.WIN),
            Match(index=1, first_player="b", second_player="a", wager=1, result=Result.DRAW),
        ]
        lobby = load_lobby(InMemoryAccountRepository(), InMemoryMatchRepository(matches))

        self.assertEqual(lobby.counter.peek, 2)
        self.assertEqual(len(lobby.history), 2)

    def test_load_lobby_skips_indices_already_held_by_accounts(self):
        # Accounts file remembers game 0, history file was lost.
        accounts = [
            Account(username="alice", rating=10, history=[0], games_count=1),
            Account(username="bob", rating=10),
        ]
        lobby = load_lobby(InMemoryAccountRepository(accounts), InMemoryMatchRepository())

        match = new_match(lobby, lobby.accounts["alice"], lobby.accounts["bob"], 2)
        settlement = build_ledger(lobby).settle(match.finished(Result.WIN))

        self.assertEqual(match.index, 1)
        self.assertTrue(settlement.applied)
        self.assertEqual(lobby.accounts["alice"].rating, 12)
        self.assertEqual(lobby.accounts["bob"].rating, 8)
        self.assertIn(1, lobby.history)

    def test_play_match_settles_and_persists(self):
        alice = get_or_create_account(self.lobby, "alice")
        bob = get_or_create_account(self.lobby, "bob")
        match = new_match(self.lobby, alice, bob, 2)

        ok, down, right, left = (
            InputEvent.CONFIRM,
            InputEvent.DOWN,
            InputEvent.RIGHT,
            InputEvent.LEFT,
        )
        # X takes the left column while O plays the middle column.
        events = [ok, right, ok, down, left, ok, right, ok, down, left, ok]
        controller = SessionController(build_ledger(self.lobby), NullRenderer(), ScriptedInput(events))

        result = play_match(self.lobby, controller, match, self.account_repo, self.match_repo)

        self.assertEqual(result.match.result, Result.WIN)
        self.assertTrue(result.applied)
        self.assertEqual(result.first.rating, 7)
        self.assertEqual(result.second.rating, 3)
        self.assertEqual(self.match_repo.matches, [result.match])
        stored = {a.username: a for a in self.account_repo.accounts}
        self.assertEqual(stored["alice"].rating, 7)
        self.assertEqual(stored["bob"].history, [0])

    def test_ratings_report_orders_by_rating(self):
        self.lobby.accounts["low"] = Account(username="low", rating=1)
        self.lobby.accounts["high"] = Account(username="high", rating=9)
        self.lobby.accounts["mid"] = Account(username="mid", rating=5)

        names = [a.username for a in ratings_report(self.lobby)]
        self.assertEqual(names, ["high", "mid", "low"])

    def test_account_stats_shows_results_from_players_side(self):
        ledger = build_ledger(self.lobby)
        get_or_create_account(self.lobby, "alice", default_rating=10)
        get_or_create_account(self.lobby, "bob", default_rating=10)
        ledger.settle(Match(index=0, first_player="alice", second_player="bob", wager=2, result=Result.WIN))
        ledger.settle(Match(index=1, first_player="bob", second_player="alice", wager=1, result=Result.DRAW))

        stats = account_stats(self.lobby, "bob")

        self.assertEqual([e.result for e in stats.entries], [Result.LOSE, Result.DRAW])
        self.assertEqual(stats.account.rating, 8)
        self.assertIsNone(account_stats(self.lobby, "nobody"))

    def test_save_and_reload_round_trip_through_repositories(self):
        ledger = build_ledger(self.lobby)
        get_or_create_account(self.lobby, "alice")
        get_or_create_account(self.lobby, "bob")
        ledger.settle(Match(index=0, first_player="alice", second_player="bob", wager=1, result=Result.LOSE))
        save_lobby(self.lobby, self.account_repo, self.match_repo)

        reloaded = load_lobby(self.account_repo, self.match_repo)

        self.assertEqual(reloaded.accounts["bob"].rating, 6)
        self.assertEqual(reloaded.counter.peek, 1)
        self.assertEqual(reloaded.history.get(0).result, Result.LOSE)

    def test_clear_data_wipes_everything(self):
        ledger = build_ledger(self.lobby)
        get_or_create_account(self.lobby, "alice")
        get_or_create_account(self.lobby, "bob")
        ledger.settle(Match(index=0, first_player="alice", second_player="bob", wager=1, result=Result.WIN))
        self.lobby.counter.next_index()

        result = clear_data(self.lobby, self.account_repo, self.match_repo)

        self.assertTrue(result.success)
        self.assertEqual(self.lobby.accounts, {})
        self.assertEqual(len(self.lobby.history), 0)
        self.assertEqual(self.lobby.counter.peek, 0)
        self.assertEqual(self.account_repo.accounts, [])
        self.assertEqual(self.match_repo.matches, [])

    def test_empty_lobby_defaults(self):
        lobby = Lobby()
        self.assertEqual(lobby.accounts, {})
        self.assertEqual(lobby.counter.peek, 0)


if __name__ == "__main__":
    unittest.main()

import unittest

from application.ledger import RatingLedger
from application.session import InputEvent, SessionController
from domain.engine import Cell, GameStatus
from domain.history import MatchHistory
from domain.models import Account, Match, Result


U, D, L, R, OK = (
    InputEvent.UP,
    InputEvent.DOWN,
    InputEvent.LEFT,
    InputEvent.RIGHT,
    InputEvent.CONFIRM,
)


class ScriptedInput:
    def __init__(self, events):
        self._events = list(events)

    def read_event(self):
        if not self._events:
            return None
        return self._events.pop(0)


class RecordingRenderer:
    def __init__(self):
        self.views = []

    def render(self, view):
        self.views.append(view)


class SessionControllerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.alice = Account(username="alice", rating=10)
        self.bob = Account(username="bob", rating=10)
        self.history = MatchHistory()
        self.ledger = RatingLedger({"alice": self.alice, "bob": self.bob}, self.history)
        self.renderer = RecordingRenderer()
        self.match = Match(index=7, first_player="alice", second_player="bob", wager=3)

    def _run(self, events):
        controller = SessionController(self.ledger, self.renderer, ScriptedInput(events))
        return controller.run(self.match), controller

    def test_first_player_wins_top_row_and_is_settled(self):
        # X (0,0), O (1,1), X (0,1), O (1,0), X (0,2)
        events = [OK, D, R, OK, U, OK, D, L, OK, U, R, R, OK]
        finished, controller = self._run(events)

        self.assertEqual(finished.result, Result.WIN)
        self.assertEqual(finished.index, 7)
        self.assertEqual(self.alice.rating, 13)
        self.assertEqual(self.bob.rating, 7)
        self.assertIn(7, self.history)
        self.assertTrue(controller.last_settlement.applied)

        last = self.renderer.views[-1]
        self.assertEqual(last.status, GameStatus.WON)
        self.assertEqual(last.status_text, "alice won!")
        self.assertIsNone(last.cursor)
        self.assertEqual(last.board[0], (Cell.PLAYER_X,) * 3)

    def test_draw_leaves_ratings_unchanged(self):
        # X O X / X O O / O X X
        events = [
            OK, R, OK, R, OK,          # row 0: X O X
            D, L, OK, L, OK, R, R, OK,  # (1,1) O, (1,0) X, (1,2) O
            D, L, OK, L, OK, R, R, OK,  # (2,1) X, (2,0) O, (2,2) X
        ]
        finished, _ = self._run(events)

        self.assertEqual(finished.result, Result.DRAW)
        self.assertEqual(self.renderer.views[-1].status_text, "It's a draw!")
        self.assertEqual(self.alice.rating, 10)
        self.assertEqual(self.bob.rating, 10)
        self.assertEqual(self.alice.games_count, 1)

    def test_second_player_win_is_settled_as_loss(self):
        # X (0,0), O (1,1), X (0,1), O (0,2), X (2,2), O (2,0)
        events = [OK, D, R, OK, U, OK, R, OK, D, D, OK, L, L, OK]
        finished, _ = self._run(events)

        self.assertEqual(finished.result, Result.LOSE)
        self.assertEqual(self.renderer.views[-1].status_text, "bob won!")
        self.assertEqual(self.alice.rating, 7)
        self.assertEqual(self.bob.rating, 13)

    def test_status_text_announces_turns(self):
        controller = SessionController(self.ledger, self.renderer, ScriptedInput([OK]))
        with self.assertRaises(EOFError):
            controller.run(self.match)

        self.assertEqual(self.renderer.views[0].status_text, "It's alice's turn now.")
        self.assertEqual(self.renderer.views[0].cursor, (0, 0))
        self.assertEqual(self.renderer.views[1].status_text, "It's bob's turn now.")

    def test_confirm_on_occupied_cell_keeps_turn(self):
        controller = SessionController(self.ledger, self.renderer, ScriptedInput([OK, OK]))
        with self.assertRaises(EOFError):
            controller.run(self.match)

        self.assertEqual(self.renderer.views[-1].status_text, "It's bob's turn now.")
        self.assertEqual(self.renderer.views[-1].board[0][0], Cell.PLAYER_X)

    def test_cursor_cannot_leave_the_board(self):
        controller = SessionController(self.ledger, self.renderer, ScriptedInput([U, L]))
        with self.assertRaises(EOFError):
            controller.run(self.match)

        self.assertTrue(all(v.cursor == (0, 0) for v in self.renderer.views))

    def test_unfinished_match_is_not_settled(self):
        controller = SessionController(self.ledger, self.renderer, ScriptedInput([OK, R, OK]))
        with self.assertRaises(EOFError):
            controller.run(self.match)

        self.assertEqual(self.alice.history, [])
        self.assertEqual(len(self.history), 0)
        self.assertIsNone(controller.last_settlement)


if __name__ == "__main__":
    unittest.main()

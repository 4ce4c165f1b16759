import unittest

from reddit_vote.errors import CandidateNotFound, InvalidArgument
from reddit_vote.models import DesiredAction, ExternalVoteState, OutcomeStatus
from reddit_vote.pipeline import VoteSettings, confirm_state, run_vote, run_with_rescans

from fakes import FakeBoard, post


class _VanishingBoard(FakeBoard):
    """The first `vanish` inspections report the post as gone."""

    def __init__(self, *args, vanish=1, **kwargs):
        super().__init__(*args, **kwargs)
        self.vanish = vanish

    def inspect(self, stable_id):
        if self.vanish > 0:
            self.vanish -= 1
            return super().inspect("t3_nowhere")
        return super().inspect(stable_id)


class RunVoteTests(unittest.TestCase):
    def setUp(self) -> None:
        self.items = [
            post("Welcome to r/gaming", "t3_pin", pinned=True),
            post("Nintendo Direct announced", "t3_a"),
            post("Patch notes", "t3_b", permalink="/r/gaming/comments/b/patch_notes/"),
        ]

    def test_second_real_post_gets_downvoted(self) -> None:
        board = FakeBoard(self.items, votes={"t3_a": None, "t3_b": None})
        run = run_vote(board, VoteSettings(target_index=2))
        self.assertEqual(run.candidate.title, "Patch notes")
        self.assertIs(run.decision, DesiredAction.ASSERT_NEGATIVE)
        self.assertIs(run.outcome.status, OutcomeStatus.CLICKED)
        self.assertEqual(board.activations, [("t3_b", DesiredAction.ASSERT_NEGATIVE)])

    def test_keyword_post_gets_upvoted(self) -> None:
        board = FakeBoard([post("New Nintendo Switch bundle", "t3_n")], votes={"t3_n": None})
        run = run_vote(board, VoteSettings(target_index=1))
        self.assertIs(run.decision, DesiredAction.ASSERT_POSITIVE)
        self.assertEqual(board.activations, [("t3_n", DesiredAction.ASSERT_POSITIVE)])

    def test_rerun_issues_no_second_click(self) -> None:
        board = FakeBoard(self.items, votes={"t3_a": None, "t3_b": None})
        settings = VoteSettings(target_index=2)
        run_vote(board, settings)
        again = run_vote(board, settings)
        self.assertIs(again.outcome.status, OutcomeStatus.ALREADY_SELECTED)
        self.assertEqual(len(board.activations), 1)

    def test_dry_run_never_touches_arrows(self) -> None:
        board = FakeBoard(self.items, votes={"t3_a": None, "t3_b": None})
        run = run_vote(board, VoteSettings(target_index=1), dry_run=True)
        self.assertIsNone(run.outcome)
        self.assertIs(run.decision, DesiredAction.ASSERT_POSITIVE)
        self.assertEqual(board.activations, [])

    def test_too_few_posts_raises(self) -> None:
        board = FakeBoard(self.items)
        with self.assertRaises(CandidateNotFound):
            run_vote(board, VoteSettings(target_index=3))
        self.assertEqual(board.activations, [])

    def test_bad_settings_raise(self) -> None:
        board = FakeBoard(self.items)
        with self.assertRaises(InvalidArgument):
            run_vote(board, VoteSettings(target_index=0))
        with self.assertRaises(InvalidArgument):
            run_vote(board, VoteSettings(keywords=()))

    def test_settings_from_config(self) -> None:
        settings = VoteSettings.from_config({"target_index": 4, "keywords": ["zelda"]})
        self.assertEqual(settings, VoteSettings(target_index=4, keywords=("zelda",)))
        self.assertEqual(VoteSettings.from_config({}), VoteSettings())


class RescanTests(unittest.TestCase):
    def test_rescans_after_post_vanishes(self) -> None:
        board = _VanishingBoard([post("Patch notes", "t3_b")], votes={"t3_b": None}, vanish=1)
        run = run_with_rescans(board, VoteSettings(target_index=1), max_rescans=1)
        self.assertIs(run.outcome.status, OutcomeStatus.CLICKED)
        self.assertEqual(board.snapshots, 2)
        self.assertEqual(len(board.activations), 1)

    def test_gives_up_after_max_rescans(self) -> None:
        board = _VanishingBoard([post("Patch notes", "t3_b")], votes={"t3_b": None}, vanish=5)
        run = run_with_rescans(board, VoteSettings(target_index=1), max_rescans=2)
        self.assertIs(run.outcome.status, OutcomeStatus.NOT_FOUND)
        self.assertEqual(board.snapshots, 3)
        self.assertEqual(board.activations, [])

    def test_missing_arrows_are_not_rescanned(self) -> None:
        board = FakeBoard([post("Patch notes", "t3_b")], votes={"t3_b": None},
                          broken={"t3_b": {"up"}})
        run = run_with_rescans(board, VoteSettings(target_index=1), max_rescans=3)
        self.assertIs(run.outcome.status, OutcomeStatus.CONTROL_NOT_FOUND)
        self.assertEqual(board.snapshots, 1)


class ConfirmStateTests(unittest.TestCase):
    def test_reads_fresh_state(self) -> None:
        board = FakeBoard(votes={"t3_a": "down"})
        self.assertIs(confirm_state(board, "t3_a"), ExternalVoteState.NEGATIVE)
        self.assertIsNone(confirm_state(board, "t3_gone"))
        with self.assertRaises(InvalidArgument):
            confirm_state(board, None)


if __name__ == "__main__":
    unittest.main()

"""
Tests for best-of-three result evaluation.
"""

import pytest

from ttleague.models.match import PHASE_LEAGUE, Match
from ttleague.services.match_results import (
    MatchResultError,
    apply_outcome,
    evaluate_result,
    format_set_scores,
)


def _match() -> Match:
    return Match(id=1, player1_id=10, player2_id=20, phase=PHASE_LEAGUE)


class TestEvaluateResult:
    def test_straight_sets(self):
        outcome = evaluate_result([(11, 5), (11, 3), (None, None)])
        assert outcome.player1_won
        assert (outcome.player1_sets_won, outcome.player2_sets_won) == (2, 0)
        assert outcome.sets == [(11, 5), (11, 3)]

    def test_two_sets_only(self):
        outcome = evaluate_result([(5, 11), (3, 11)])
        assert not outcome.player1_won
        assert outcome.player2_sets_won == 2

    def test_decided_in_third_set(self):
        outcome = evaluate_result([(11, 9), (7, 11), (8, 11)])
        assert not outcome.player1_won
        assert (outcome.player1_sets_won, outcome.player2_sets_won) == (1, 2)

    def test_split_sets_without_decider_rejected(self):
        with pytest.raises(MatchResultError, match="Match must have a winner"):
            evaluate_result([(11, 9), (7, 11), (None, None)])

    def test_level_sets_do_not_count(self):
        with pytest.raises(MatchResultError):
            evaluate_result([(11, 11), (11, 5)])

    def test_half_filled_third_set_rejected(self):
        with pytest.raises(MatchResultError, match="Set 3"):
            evaluate_result([(11, 9), (7, 11), (11, None)])

    def test_missing_second_set_rejected(self):
        with pytest.raises(MatchResultError, match="Set 2"):
            evaluate_result([(11, 9), (None, None)])

    def test_negative_score_rejected(self):
        with pytest.raises(MatchResultError, match="non-negative"):
            evaluate_result([(11, -1), (11, 5)])

    def test_wrong_number_of_sets(self):
        with pytest.raises(MatchResultError):
            evaluate_result([(11, 5)])
        with pytest.raises(MatchResultError):
            evaluate_result([(11, 5)] * 4)


class TestApplyOutcome:
    def test_player1_winner_and_empty_third_set(self):
        match = _match()
        apply_outcome(match, evaluate_result([(11, 5), (11, 3)]))
        assert match.winner_id == 10
        assert (match.set1_p1, match.set1_p2, match.set2_p1, match.set2_p2) == (11, 5, 11, 3)
        assert match.set3_p1 is None and match.set3_p2 is None

    def test_correction_overwrites_previous_result(self):
        match = _match()
        apply_outcome(match, evaluate_result([(11, 5), (5, 11), (11, 2)]))
        apply_outcome(match, evaluate_result([(5, 11), (3, 11)]))
        assert match.winner_id == 20
        assert match.set3_p1 is None


class TestFormatSetScores:
    def test_two_sets(self):
        match = _match()
        apply_outcome(match, evaluate_result([(11, 5), (11, 3)]))
        assert format_set_scores(match) == "11-5, 11-3"

    def test_unplayed(self):
        assert format_set_scores(_match()) == ""

"""Tests for videopoker/analysis/session_stats.py — decision accuracy tracking."""

from __future__ import annotations

import pytest

from videopoker.analysis.session_stats import SessionStats


class TestSessionStats:
    def test_starts_empty(self):
        s = SessionStats()
        assert s.total_hands == 0
        assert s.accuracy == 0.0

    def test_record_decisions(self):
        s = SessionStats()
        for correct in (True, False, True):
            s.record_decision(correct)
        assert s.total_hands == 3
        assert s.correct_decisions == 2
        assert s.accuracy == 66.7

    def test_accuracy_one_decimal(self):
        assert SessionStats(total_hands=8, correct_decisions=1).accuracy == 12.5
        assert SessionStats(total_hands=7, correct_decisions=7).accuracy == 100.0

    def test_reset(self):
        s = SessionStats(total_hands=4, correct_decisions=3)
        s.reset()
        assert s == SessionStats()

    def test_dict_roundtrip(self):
        s = SessionStats(total_hands=12, correct_decisions=9)
        assert s.to_dict() == {"total_hands": 12, "correct_decisions": 9}
        assert SessionStats.from_dict(s.to_dict()) == s

    def test_from_partial_dict(self):
        assert SessionStats.from_dict({}) == SessionStats()

    @pytest.mark.parametrize("total, correct", [(-1, 0), (2, 3), (0, -1)])
    def test_invalid_counters(self, total, correct):
        with pytest.raises(ValueError):
            SessionStats(total_hands=total, correct_decisions=correct)

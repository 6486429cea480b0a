"""Tests for videopoker/trainer.py — the facade used by the front-end."""

from __future__ import annotations

import threading

import pytest

from tests.conftest import hand
from videopoker.analysis.session_stats import SessionStats
from videopoker.engine.game_state import Phase
from videopoker.engine.hand_evaluator import HandType
from videopoker.solvers import background as background_module
from videopoker.solvers import ev_calculator
from videopoker.trainer import Trainer


@pytest.fixture(params=[True, False], ids=["background", "inline"])
def trainer(request):
    with Trainer(credits=50, bet=2, seed=9, background=request.param, sample_size=100) as t:
        yield t


class TestRoundFlow:
    def test_deal_debits_bet(self, trainer):
        state = trainer.deal_round()
        assert state.phase == Phase.DEALT
        assert state.credits == 48
        assert trainer.state is state

    def test_draw_scores_player_hold(self, trainer):
        trainer.deal_round()
        trainer.toggle_hold(0)
        trainer.toggle_hold(1)
        dealt_holds = trainer.state.holds
        result = trainer.draw(timeout=60)

        assert trainer.state.phase == Phase.DRAWN
        assert trainer.last_draw is result
        analysis = trainer.last_analysis
        assert analysis.player_choice.holds == dealt_holds
        assert analysis.round_id == trainer.state.round_id
        assert len(analysis.combinations) == 32
        assert trainer.stats.total_hands == 1

    def test_credits_follow_payout(self, trainer):
        trainer.deal_round()
        result = trainer.draw(timeout=60)
        assert trainer.state.credits == 48 + result.payout

    def test_consecutive_rounds(self, trainer):
        for _ in range(3):
            trainer.deal_round()
            trainer.set_holds(trainer.advise().holds)
            trainer.draw(timeout=60)
        assert trainer.state.round_id == 3
        assert trainer.stats.total_hands == 3
        assert trainer.last_analysis.round_id == 3

    def test_deal_clears_previous_analysis(self, trainer):
        trainer.deal_round()
        trainer.draw(timeout=60)
        trainer.deal_round()
        assert trainer.last_analysis is None
        assert trainer.last_draw is None

    def test_rejected_action_keeps_state(self, trainer):
        trainer.deal_round()
        before = trainer.state
        with pytest.raises(ValueError):
            trainer.set_bet(5)
        assert trainer.state is before

    def test_insufficient_credits(self):
        with Trainer(credits=0, bet=1, seed=0, background=False) as t:
            with pytest.raises(ValueError, match="Insufficient credits"):
                t.deal_round()
            assert t.state.phase == Phase.INITIAL


class TestFacade:
    def test_advise_requires_hand(self):
        with Trainer(background=False) as t:
            with pytest.raises(ValueError):
                t.advise()

    def test_classify_and_payout(self):
        with Trainer(background=False) as t:
            result = t.classify(hand("AH", "2D", "3C", "4S", "5H"))
            assert result.hand_type == HandType.STRAIGHT
            assert t.payout(HandType.ROYAL_FLUSH, 5) == 4000

    def test_analyze_hand(self):
        with Trainer(background=False, sample_size=100) as t:
            analysis = t.analyze_hand(hand("10H", "JH", "QH", "KH", "3C"), 1, round_id=4)
            assert analysis.optimal_choice.holds == (True, True, True, True, False)
            assert analysis.round_id == 4
            assert not analysis.is_complete

    def test_continues_existing_stats(self):
        stats = SessionStats(total_hands=10, correct_decisions=7)
        with Trainer(seed=1, background=False, sample_size=100, stats=stats) as t:
            t.deal_round()
            t.draw()
            assert stats.total_hands == 11


class TestBackgroundTimeout:
    def test_draw_falls_back_to_inline_analysis(self, monkeypatch):
        release = threading.Event()

        def blocked_analyze(*args, **kwargs):
            release.wait(30)
            return ev_calculator.analyze(*args, **kwargs)

        monkeypatch.setattr(background_module, "analyze", blocked_analyze)
        t = Trainer(seed=3, sample_size=100)
        try:
            t.deal_round()
            result = t.draw(timeout=1e-4)
            assert t.state.phase == Phase.DRAWN
            assert t.last_draw is result
            assert t.last_analysis is not None
            assert t.last_analysis.round_id == t.state.round_id
            assert t.stats.total_hands == 1
        finally:
            release.set()
            t.close()

    def test_draw_outside_dealt_phase_changes_nothing(self):
        with Trainer(seed=3, background=False) as t:
            before = t.state
            with pytest.raises(ValueError):
                t.draw()
            assert t.state is before
            assert t.stats.total_hands == 0
            assert t.last_draw is None


class TestLifecycle:
    def test_close_waits_for_running_analysis(self):
        with Trainer(seed=2, sample_size=100) as t:
            t.deal_round()
            future = t._analyzer._future
        assert future.done()

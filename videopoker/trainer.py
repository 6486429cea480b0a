"""
Trainer facade for a presentation layer.

Owns the current RoundState, a BackgroundAnalyzer and the session's decision
statistics, and exposes the operations a front-end needs:

    deal_round()                 — debit the bet, deal, start EV analysis
    toggle_hold(position)        — flip a hold while the hand is dealt
    draw()                       — replace discards, pay, score the decision
    analyze_hand(hand, bet, ...) — synchronous EV analysis of any hand
    classify(hand), payout(hand_type, bet)

Analysis of a dealt hand starts on a worker thread at deal time and is scored
against the player's holds after the draw. The background job is keyed by
round_id, so a slow analysis can never be reported against a later hand.
"""

from __future__ import annotations

import logging
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Sequence

import numpy as np

from videopoker.analysis.session_stats import SessionStats
from videopoker.engine import game_state
from videopoker.engine.game_state import DEFAULT_CREDITS, DrawResult, RoundState
from videopoker.engine.hand_evaluator import HandResult, HandType, classify
from videopoker.engine.pay_table import JACKS_OR_BETTER_9_6, MIN_BET, PayTable, payout
from videopoker.solvers.background import BackgroundAnalyzer
from videopoker.solvers.ev_calculator import (
    EVAnalysis,
    analyze,
    is_optimal_choice,
    with_player_choice,
)
from videopoker.solvers.strategy import StrategyAdvice, advise

logger = logging.getLogger(__name__)


class Trainer:
    """One player's training session.

    Args:
        credits:     Starting credit balance.
        bet:         Starting bet, 1..5.
        seed:        Seed for the shuffle generator; None for fresh entropy.
        table:       Pay table used for payouts and analysis.
        background:  Run deal-time analysis on a worker thread.
        sample_size: Forwarded to analyze(); None keeps analysis exact.
        stats:       Existing SessionStats to continue, e.g. restored from a
                     store via SessionStats.from_dict().
    """

    def __init__(
        self,
        credits: int = DEFAULT_CREDITS,
        bet: int = MIN_BET,
        *,
        seed: int | None = None,
        table: PayTable = JACKS_OR_BETTER_9_6,
        background: bool = True,
        sample_size: int | None = None,
        stats: SessionStats | None = None,
    ) -> None:
        self.state: RoundState = game_state.new_game(credits, bet)
        self.stats = stats if stats is not None else SessionStats()
        self.table = table
        self.sample_size = sample_size
        self.last_analysis: EVAnalysis | None = None
        self.last_draw: DrawResult | None = None
        self._rng = np.random.default_rng(seed)
        self._analyzer = (
            BackgroundAnalyzer(sample_size=sample_size, table=table) if background else None
        )

    # ─── Round flow ──────────────────────────────────────────────────────────

    def deal_round(self) -> RoundState:
        self.state = game_state.deal_round(self.state, self._rng)
        self.last_analysis = None
        self.last_draw = None
        if self._analyzer is not None:
            self._analyzer.submit_round(self.state)
        return self.state

    def toggle_hold(self, position: int) -> RoundState:
        self.state = game_state.toggle_hold(self.state, position)
        return self.state

    def set_holds(self, holds: Sequence[bool]) -> RoundState:
        self.state = game_state.set_holds(self.state, tuple(holds))
        return self.state

    def set_bet(self, bet: int) -> RoundState:
        self.state = game_state.set_bet(self.state, bet)
        return self.state

    def draw(self, timeout: float | None = None) -> DrawResult:
        """Draw, then score the player's holds against the round's analysis.

        The round is only committed once the analysis is in hand. If the
        background job misses ``timeout``, the hand is analysed inline.
        """
        dealt = self.state
        drawn, result = game_state.draw(dealt, self.table)

        analysis = None
        if self._analyzer is not None:
            try:
                analysis = self._analyzer.result(dealt.round_id, timeout=timeout)
            except FutureTimeoutError:
                logger.debug("Round %d: background analysis timed out, analysing inline", dealt.round_id)
        if analysis is None:
            analysis = self.analyze_hand(dealt.hand, dealt.bet, round_id=dealt.round_id)
        scored = with_player_choice(analysis, dealt.holds)

        self.state = drawn
        self.last_draw = result
        self.last_analysis = scored
        self.stats.record_decision(is_optimal_choice(scored))
        logger.debug(
            "Round %d: player rank %s, accuracy %.1f%%",
            dealt.round_id, scored.player_rank, self.stats.accuracy,
        )
        return result

    def advise(self) -> StrategyAdvice:
        if not self.state.hand:
            raise ValueError("No hand has been dealt.")
        return advise(self.state.hand)

    # ─── Stateless operations ────────────────────────────────────────────────

    def analyze_hand(
        self,
        hand: Sequence[int],
        bet: int,
        player_choice: Sequence[bool] | None = None,
        round_id: int | None = None,
    ) -> EVAnalysis:
        return analyze(
            hand, bet, player_choice,
            sample_size=self.sample_size, table=self.table, round_id=round_id,
        )

    @staticmethod
    def classify(hand: Sequence[int]) -> HandResult:
        return classify(hand)

    def payout(self, hand_type: HandType, bet: int) -> int:
        return payout(hand_type, bet, self.table)

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    def close(self) -> None:
        if self._analyzer is not None:
            self._analyzer.shutdown(wait=True)

    def __enter__(self) -> Trainer:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

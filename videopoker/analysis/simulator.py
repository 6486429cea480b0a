"""
Monte Carlo simulator for video poker hold strategies.

Plays complete rounds (shuffle, deal five, choose holds, draw, pay) with a
hold strategy and accumulates per-round payouts into return statistics with a
confidence interval.

Primary use: sanity-check strategies against the published return of the
9/6 pay table. Perfect max-coin play returns 99.54%; the heuristic advisor
should land a little below that, and discarding everything far below it.

Returns are reported per credit wagered so results at different bets are
comparable (royal flush at five credits is worth 800 per credit, 250 below).
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable

import numpy as np

from videopoker.engine.cards import HAND_SIZE
from videopoker.engine.deck import create_deck, deal, replace_discards, shuffle_deck
from videopoker.engine.hand_evaluator import HandType, classify
from videopoker.engine.pay_table import JACKS_OR_BETTER_9_6, MAX_BET, PayTable, payout
from videopoker.solvers.ev_calculator import DEFAULT_SAMPLE_SIZE, analyze
from videopoker.solvers.strategy import advise

logger = logging.getLogger(__name__)

# strategy(hand, bet) -> hold flag per position
HoldStrategy = Callable[[tuple[int, ...], int], tuple[bool, ...]]


# ─── Result type ──────────────────────────────────────────────────────────────


@dataclass
class SimulationResult:
    """Aggregate statistics from a Monte Carlo simulation run.

    Attributes:
        n_hands:          Number of rounds simulated.
        bet:              Credits wagered per round.
        mean_return:      Mean credits returned per credit wagered.
        std_return:       Sample standard deviation of the per-credit return.
        ci_95_low:        Lower bound of the 95% confidence interval.
        ci_95_high:       Upper bound of the 95% confidence interval.
        return_pct:       mean_return * 100 (return to player, %).
        n_wins:           Rounds returning more than the bet.
        n_pushes:         Rounds returning exactly the bet.
        n_losses:         Rounds returning less than the bet.
        hand_counts:      Final hand category -> rounds.
        payouts:          Raw per-round payouts in credits (float64), or None
                          unless return_payouts=True.
    """

    n_hands: int
    bet: int
    mean_return: float
    std_return: float
    ci_95_low: float
    ci_95_high: float
    return_pct: float
    n_wins: int
    n_pushes: int
    n_losses: int
    hand_counts: dict[HandType, int] = field(default_factory=dict)
    payouts: np.ndarray | None = None

    def __str__(self) -> str:
        return (
            f"Hands: {self.n_hands:,} | Bet: {self.bet} | "
            f"Return: {self.return_pct:.2f}% | "
            f"95% CI: [{self.ci_95_low * 100:.2f}%, {self.ci_95_high * 100:.2f}%] | "
            f"W/P/L: {self.n_wins}/{self.n_pushes}/{self.n_losses}"
        )


# ─── Strategies ───────────────────────────────────────────────────────────────


def advisor_strategy(hand: tuple[int, ...], bet: int) -> tuple[bool, ...]:
    """Hold what the heuristic advisor recommends."""
    return advise(hand).holds


def make_optimal_strategy(sample_size: int | None = DEFAULT_SAMPLE_SIZE) -> HoldStrategy:
    """Return a strategy that holds the EV engine's best pattern.

    With the default sampling of four- and five-card draws each decision takes
    a few tens of milliseconds; pass ``sample_size=None`` for exact play at
    roughly half a second per hand.
    """

    def _strategy(hand: tuple[int, ...], bet: int) -> tuple[bool, ...]:
        return analyze(hand, bet, sample_size=sample_size, rng=0).optimal_choice.holds

    return _strategy


def hold_nothing_strategy(hand: tuple[int, ...], bet: int) -> tuple[bool, ...]:
    """Discard all five cards every round."""
    return (False,) * HAND_SIZE


def hold_everything_strategy(hand: tuple[int, ...], bet: int) -> tuple[bool, ...]:
    """Stand pat on every dealt hand."""
    return (True,) * HAND_SIZE


# ─── Core simulation loop ─────────────────────────────────────────────────────


def play_round(
    rng: np.random.Generator,
    strategy: HoldStrategy,
    bet: int,
    table: PayTable = JACKS_OR_BETTER_9_6,
) -> tuple[int, HandType]:
    """Play one round from a fresh shuffled deck.

    Returns:
        (payout in credits, final hand category)
    """
    hand, rest = deal(shuffle_deck(create_deck(), rng))
    holds = strategy(hand, bet)
    final_hand, _ = replace_discards(hand, holds, rest)
    hand_type = classify(final_hand).hand_type
    return payout(hand_type, bet, table), hand_type


def simulate_hands(
    strategy: HoldStrategy,
    n_hands: int = 10_000,
    bet: int = MAX_BET,
    seed: int | None = 42,
    return_payouts: bool = False,
    table: PayTable = JACKS_OR_BETTER_9_6,
) -> SimulationResult:
    """Simulate n_hands rounds with ``strategy`` and return aggregate statistics.

    Args:
        strategy:       Callable(hand, bet) -> holds.
        n_hands:        Number of rounds to play.
        bet:            Credits wagered per round.
        seed:           Seed for the numpy Generator. None for a
                        non-deterministic run.
        return_payouts: If True, attach the per-round payout array.
        table:          Pay table.

    Returns:
        SimulationResult with per-credit return statistics.
    """
    if n_hands < 2:
        raise ValueError(f"n_hands must be at least 2, got {n_hands}.")

    rng = np.random.default_rng(seed)
    payouts = np.empty(n_hands, dtype=np.float64)
    counts: Counter[HandType] = Counter()

    for i in range(n_hands):
        paid, hand_type = play_round(rng, strategy, bet, table)
        payouts[i] = paid
        counts[hand_type] += 1

    per_credit = payouts / bet
    mean = float(np.mean(per_credit))
    std = float(np.std(per_credit, ddof=1))
    ci_margin = 1.96 * std / math.sqrt(n_hands)

    result = SimulationResult(
        n_hands=n_hands,
        bet=bet,
        mean_return=mean,
        std_return=std,
        ci_95_low=mean - ci_margin,
        ci_95_high=mean + ci_margin,
        return_pct=mean * 100.0,
        n_wins=int(np.sum(payouts > bet)),
        n_pushes=int(np.sum(payouts == bet)),
        n_losses=int(np.sum(payouts < bet)),
        hand_counts=dict(counts),
        payouts=payouts if return_payouts else None,
    )
    logger.info("Simulated %s", result)
    return result


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    n = int(sys.argv[1]) if len(sys.argv) > 1 else 20_000
    print(f"Video poker Monte Carlo — {n:,} hands per strategy, max bet\n")
    for label, strat in [
        ("advisor", advisor_strategy),
        ("hold nothing", hold_nothing_strategy),
        ("hold everything", hold_everything_strategy),
    ]:
        print(f"{label:<16} {simulate_hands(strat, n_hands=n)}")

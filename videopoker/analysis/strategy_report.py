"""Strategy report: where the heuristic advisor and the EV engine disagree.

The advisor picks the first matching pattern from a fixed priority list; the
EV engine ranks all 32 holds exactly. The two are deliberately independent,
so disagreements are expected and are the point of this report: each one is
a hand where following the advisor gives up some expected value.

    compare_hand(hand)               — advisor vs optimal for one hand
    find_disagreements(n_hands)      — random deals, disagreements only
    summarize_disagreements(items)   — EV given up per advisor pattern
    print_disagreement_report(items) — formatted table
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from videopoker.engine.cards import hand_to_str
from videopoker.engine.deck import create_deck, deal, shuffle_deck
from videopoker.solvers.ev_calculator import analyze
from videopoker.solvers.strategy import advise

logger = logging.getLogger(__name__)


# ─── Result types ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Comparison:
    """Advisor and EV-engine choices for one hand, at one bet.

    Attributes:
        hand:            The dealt hand.
        bet:             Bet used for the EV analysis.
        advisor_pattern: Name of the advisor pattern that matched.
        advisor_holds:   Hold flags recommended by the advisor.
        advisor_ev:      Exact EV of the advisor's hold.
        optimal_holds:   Hold flags of the top-ranked pattern.
        optimal_ev:      Exact EV of the best hold.
        optimal_description: e.g. 'Keep pair of Ks'.
        advisor_rank:    1 + number of holds with strictly greater EV.
    """

    hand: tuple[int, ...]
    bet: int
    advisor_pattern: str
    advisor_holds: tuple[bool, ...]
    advisor_ev: float
    optimal_holds: tuple[bool, ...]
    optimal_ev: float
    optimal_description: str
    advisor_rank: int

    @property
    def ev_loss(self) -> float:
        """Credits of EV given up by following the advisor (>= 0)."""
        return self.optimal_ev - self.advisor_ev

    @property
    def agrees(self) -> bool:
        return self.advisor_rank == 1


@dataclass(frozen=True)
class PatternSummary:
    """Disagreements attributed to one advisor pattern."""

    pattern: str
    count: int
    total_ev_loss: float
    max_ev_loss: float
    worst_hand: tuple[int, ...]

    @property
    def mean_ev_loss(self) -> float:
        return self.total_ev_loss / self.count


# ─── Public functions ─────────────────────────────────────────────────────────


def compare_hand(
    hand: Sequence[int],
    bet: int = 1,
    sample_size: int | None = None,
    rng: np.random.Generator | int | None = 0,
) -> Comparison:
    """Run both the advisor and the EV engine on ``hand``."""
    advice = advise(hand)
    analysis = analyze(hand, bet, advice.holds, sample_size=sample_size, rng=rng)
    return Comparison(
        hand=analysis.hand,
        bet=bet,
        advisor_pattern=advice.pattern,
        advisor_holds=advice.holds,
        advisor_ev=analysis.player_choice.expected_value,
        optimal_holds=analysis.optimal_choice.holds,
        optimal_ev=analysis.optimal_choice.expected_value,
        optimal_description=analysis.optimal_choice.description,
        advisor_rank=analysis.player_tie_rank,
    )


def find_disagreements(
    n_hands: int = 200,
    seed: int | None = 7,
    bet: int = 1,
    sample_size: int | None = None,
) -> list[Comparison]:
    """Deal ``n_hands`` random hands and keep those where the advisor is not optimal.

    Exact analysis is the default; pass ``sample_size`` to trade accuracy for
    speed on large runs.
    """
    rng = np.random.default_rng(seed)
    found = []
    for _ in range(n_hands):
        hand, _rest = deal(shuffle_deck(create_deck(), rng))
        comparison = compare_hand(hand, bet, sample_size, rng)
        if not comparison.agrees:
            found.append(comparison)
    logger.info("Advisor disagreed with the EV engine on %d of %d hands", len(found), n_hands)
    return found


def summarize_disagreements(comparisons: Sequence[Comparison]) -> list[PatternSummary]:
    """Group disagreements by advisor pattern, largest total EV loss first."""
    grouped: dict[str, list[Comparison]] = defaultdict(list)
    for c in comparisons:
        if not c.agrees:
            grouped[c.advisor_pattern].append(c)

    summaries = []
    for pattern, items in grouped.items():
        worst = max(items, key=lambda c: c.ev_loss)
        summaries.append(
            PatternSummary(
                pattern=pattern,
                count=len(items),
                total_ev_loss=sum(c.ev_loss for c in items),
                max_ev_loss=worst.ev_loss,
                worst_hand=worst.hand,
            )
        )
    summaries.sort(key=lambda s: s.total_ev_loss, reverse=True)
    return summaries


def print_disagreement_report(comparisons: Sequence[Comparison], n_hands: int | None = None) -> str:
    """Print per-pattern totals followed by the individual hands.

    Returns:
        The formatted report string (also printed to stdout).
    """
    lines = ["=" * 72, "Advisor vs EV engine", "=" * 72]
    if n_hands:
        lines.append(f"  Disagreements: {len(comparisons)} / {n_hands} hands")
    lines += [
        "",
        f"  {'Pattern':<26} {'Count':>5} {'Total loss':>11} {'Max loss':>9}  Worst hand",
        f"  {'-' * 26} {'-' * 5} {'-' * 11} {'-' * 9}  {'-' * 14}",
    ]
    for s in summarize_disagreements(comparisons):
        lines.append(
            f"  {s.pattern:<26} {s.count:>5} {s.total_ev_loss:>11.4f} "
            f"{s.max_ev_loss:>9.4f}  {hand_to_str(s.worst_hand)}"
        )
    lines += ["", "  Hands:"]
    for c in sorted(comparisons, key=lambda c: c.ev_loss, reverse=True):
        lines.append(
            f"    {hand_to_str(c.hand):<16} advisor={c.advisor_pattern:<24} "
            f"best='{c.optimal_description}' loss={c.ev_loss:.4f}"
        )
    lines.append("")
    report = "\n".join(lines)
    print(report)
    return report


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    n = int(sys.argv[1]) if len(sys.argv) > 1 else 200
    print_disagreement_report(find_disagreements(n), n_hands=n)

"""Variance and bankroll analysis for video poker sessions.

Works on the per-round net result (payout minus bet, in credits) produced by
the simulator. Video poker is a high-variance game with a slightly negative
edge even under perfect 9/6 play, so the interesting questions are about
sessions rather than the long run:

- Distribution statistics (mean, std, skewness, kurtosis, percentiles)
- Risk of ruin (gambler's ruin approximation, certain for a non-positive edge)
- Horizon projections via CLT (expected net + confidence intervals)
- Session bankroll: bootstrap the deepest loss from the starting balance over
  a session and report what it takes to last the session at a confidence
  level

Usage (standalone report):
    python -m videopoker.analysis.bankroll 20000
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from scipy import stats

logger = logging.getLogger(__name__)

_PERCENTILES: tuple[int, ...] = (1, 5, 25, 50, 75, 95, 99)

# ─── Dataclasses ──────────────────────────────────────────────────────────────


@dataclass
class VarianceStats:
    """Descriptive statistics for per-round net results.

    Attributes:
        mean:        Mean net credits per round.
        std:         Sample standard deviation.
        variance:    std ** 2.
        skewness:    Fisher skewness. Strongly positive: rare big hands.
        kurtosis:    Excess kurtosis (normal = 0).
        percentiles: 'p1', 'p5', ... 'p99' -> value.
        n_hands:     Rounds in the sample.
    """

    mean: float
    std: float
    variance: float
    skewness: float
    kurtosis: float
    percentiles: dict[str, float]
    n_hands: int


@dataclass
class HorizonProjection:
    """Expected net result and uncertainty after n_hands rounds.

    Attributes:
        n_hands:       Rounds in this horizon.
        expected_net:  n_hands * mean.
        ci_low:        Lower bound of the confidence interval.
        ci_high:       Upper bound of the confidence interval.
        prob_ahead:    Probability the cumulative net is positive (CLT).
    """

    n_hands: int
    expected_net: float
    ci_low: float
    ci_high: float
    prob_ahead: float


@dataclass
class SessionBankroll:
    """Bankroll needed to play a whole session without running dry.

    Attributes:
        session_hands:     Rounds per session.
        survival_prob:     Target probability of finishing the session.
        required_credits:  Starting credits that survive at survival_prob.
        mean_worst_loss:   Mean of the deepest loss below the starting
                           balance across bootstrap sessions.
        p_bust_1000:       Fraction of sessions whose deepest loss reached
                           1000 credits (the default starting balance).
        n_sessions:        Bootstrap sessions used.
    """

    session_hands: int
    survival_prob: float
    required_credits: float
    mean_worst_loss: float
    p_bust_1000: float
    n_sessions: int


# ─── Computation functions ────────────────────────────────────────────────────


def net_results(payouts: np.ndarray, bet: int) -> np.ndarray:
    """Convert per-round payouts into net credits (payout - bet)."""
    return np.asarray(payouts, dtype=np.float64) - bet


def compute_variance_stats(net: np.ndarray) -> VarianceStats:
    """Descriptive statistics for a 1-D array of per-round net results."""
    if len(net) < 2:
        raise ValueError("At least two rounds are needed for variance statistics.")
    std = float(np.std(net, ddof=1))
    pct_values = np.percentile(net, _PERCENTILES)
    return VarianceStats(
        mean=float(np.mean(net)),
        std=std,
        variance=std ** 2,
        skewness=float(stats.skew(net)),
        kurtosis=float(stats.kurtosis(net)),
        percentiles={f"p{p}": float(v) for p, v in zip(_PERCENTILES, pct_values)},
        n_hands=len(net),
    )


def risk_of_ruin(bankroll: float, edge: float, std: float) -> float:
    """Probability of eventually losing ``bankroll`` credits.

    Gambler's ruin approximation for a drifting random walk:
        RoR = exp(-2 * edge * bankroll / variance)

    A non-positive edge means ruin is certain in the long run, so 1.0 is
    returned; use session_bankroll() for finite sessions.
    """
    if bankroll <= 0:
        raise ValueError(f"bankroll must be positive, got {bankroll}.")
    if edge <= 0:
        return 1.0
    return float(math.exp(-2.0 * edge * bankroll / std ** 2))


def compute_horizon_projections(
    mean: float,
    std: float,
    horizons: list[int] | None = None,
    confidence: float = 0.95,
) -> list[HorizonProjection]:
    """CLT projections of the cumulative net result at several horizons.

    After N rounds the net is approximately N(N * mean, N * std**2). With a
    royal flush in the tail this is optimistic for short horizons.
    """
    if horizons is None:
        horizons = [100, 1_000, 10_000, 100_000]

    z = stats.norm.ppf((1.0 + confidence) / 2.0)
    projections = []
    for n in horizons:
        expected = n * mean
        margin = z * std * math.sqrt(n)
        if std > 0:
            prob_ahead = float(stats.norm.cdf(math.sqrt(n) * mean / std))
        else:
            prob_ahead = 1.0 if mean > 0 else 0.0
        projections.append(
            HorizonProjection(
                n_hands=n,
                expected_net=expected,
                ci_low=expected - margin,
                ci_high=expected + margin,
                prob_ahead=prob_ahead,
            )
        )
    return projections


def worst_losses(
    net: np.ndarray,
    session_hands: int = 1_000,
    n_sessions: int = 1_000,
    seed: int = 0,
) -> np.ndarray:
    """Bootstrap sessions and return each one's deepest loss below the start.

    The loss is measured from the starting balance, not from a running peak:
    it is the credit balance a player needs to avoid going broke mid-session.
    """
    rng = np.random.default_rng(seed)
    samples = rng.choice(np.asarray(net, dtype=np.float64), size=(n_sessions, session_hands))
    balance = np.cumsum(samples, axis=1)
    return np.maximum(0.0, -balance.min(axis=1))


def session_bankroll(
    net: np.ndarray,
    session_hands: int = 1_000,
    survival_prob: float = 0.95,
    n_sessions: int = 1_000,
    seed: int = 0,
) -> SessionBankroll:
    """Credits needed to finish a session of ``session_hands`` rounds.

    Args:
        net:           Observed per-round net results.
        session_hands: Rounds per session.
        survival_prob: Target probability in (0, 1).
        n_sessions:    Bootstrap sessions.
        seed:          Seed for reproducibility.
    """
    if not 0.0 < survival_prob < 1.0:
        raise ValueError(f"survival_prob must be in (0, 1), got {survival_prob}.")
    losses = worst_losses(net, session_hands, n_sessions, seed)
    result = SessionBankroll(
        session_hands=session_hands,
        survival_prob=survival_prob,
        required_credits=float(np.percentile(losses, survival_prob * 100)),
        mean_worst_loss=float(np.mean(losses)),
        p_bust_1000=float(np.mean(losses >= 1000)),
        n_sessions=n_sessions,
    )
    logger.debug("Session bankroll: %s", result)
    return result


# ─── Report ───────────────────────────────────────────────────────────────────


def print_variance_report(
    variance: VarianceStats,
    projections: list[HorizonProjection],
    sessions: list[SessionBankroll],
    *,
    label: str = "",
) -> str:
    """Format and print a variance and bankroll report.

    Returns:
        The formatted report string (also printed to stdout).
    """
    header = f"Variance & Bankroll Report{' (' + label + ')' if label else ''}"
    pct = variance.percentiles
    lines = [
        "=" * 70,
        header,
        "=" * 70,
        "",
        "── Per-round net result (credits) ──────────────────────────────────",
        f"  Rounds          : {variance.n_hands:>10,}",
        f"  Mean            : {variance.mean:>+10.4f}",
        f"  Std deviation   : {variance.std:>10.4f}",
        f"  Skewness        : {variance.skewness:>10.4f}",
        f"  Excess kurtosis : {variance.kurtosis:>10.4f}",
        "  Percentiles     : " + "  ".join(f"{k}={v:+.0f}" for k, v in pct.items()),
        "",
        "── Horizon projections (CLT) ───────────────────────────────────────",
        f"  {'Rounds':>8}  {'E[net]':>10}  {'CI low':>10}  {'CI high':>10}  {'P(ahead)':>8}",
    ]
    for p in projections:
        lines.append(
            f"  {p.n_hands:>8,}  {p.expected_net:>+10.1f}  "
            f"{p.ci_low:>+10.1f}  {p.ci_high:>+10.1f}  {p.prob_ahead:>8.1%}"
        )
    lines += [
        "",
        "── Session bankroll (bootstrap) ─────────────────────────────────────",
    ]
    for s in sessions:
        lines.append(
            f"  {s.session_hands:>7,} rounds @ {s.survival_prob:.0%}: "
            f"{s.required_credits:>8.0f} credits  "
            f"(mean worst loss {s.mean_worst_loss:.0f}, "
            f"P(lose 1000) {s.p_bust_1000:.1%})"
        )
    lines.append("")
    report = "\n".join(lines)
    print(report)
    return report


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from videopoker.analysis.simulator import advisor_strategy, simulate_hands

    n = int(sys.argv[1]) if len(sys.argv) > 1 else 20_000
    sim = simulate_hands(advisor_strategy, n_hands=n, return_payouts=True)
    net = net_results(sim.payouts, sim.bet)
    v = compute_variance_stats(net)
    print_variance_report(
        v,
        compute_horizon_projections(v.mean, v.std),
        [session_bankroll(net, hands) for hands in (500, 1_000, 5_000)],
        label=f"advisor, bet {sim.bet}",
    )

"""
Heuristic hold advisor for 9/6 Jacks-or-Better.

A fixed, ordered list of named hand patterns. The first pattern that matches
the dealt hand decides the hold; nothing is computed combinatorially, so the
advice is instant. The expected value reported with the advice is a static
per-credit lookup, not a calculation.

Pattern order (first match wins):
     1. paying_hand               straight or better — hold all five
     2. four_to_royal
     3. three_of_a_kind
     4. four_to_straight_flush
     5. two_pair
     6. three_to_royal
     7. high_pair                 J, Q, K or A
     8. four_to_flush
     9. low_pair
    10. three_to_straight_flush
    11. four_to_outside_straight
    12. two_suited_high
    13. two_unsuited_high         A-K preferred
    14. suited_ten_high           10 with a suited J, Q or K
    15. one_high_card             A > K > Q > J
    16. discard_all

Reordering this list changes recommended play. The advisor is independent of
the EV engine and can disagree with it (three_to_royal above high_pair is the
best-known case); see analysis.strategy_report for measuring that.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from videopoker.engine.cards import (
    HAND_SIZE,
    HIGH_RANKS,
    RANK_ACE,
    RANK_JACK,
    RANK_KING,
    RANK_NAMES,
    RANK_QUEEN,
    RANK_TEN,
    ROYAL_RANKS,
    card_rank,
    card_suit,
    rank_value,
)
from videopoker.engine.deck import validate_hand
from videopoker.engine.hand_evaluator import HandResult, HandType, classify

HoldPattern = tuple[bool, ...]

# Approximate long-run value of each pattern, in credits per credit bet.
PATTERN_EXPECTED_VALUES: dict[str, float] = {
    "paying_hand": 5.0,
    "four_to_royal": 19.15,
    "three_of_a_kind": 3.0,
    "four_to_straight_flush": 8.5,
    "two_pair": 2.0,
    "three_to_royal": 1.11,
    "high_pair": 1.0,
    "four_to_flush": 1.06,
    "low_pair": 0.82,
    "three_to_straight_flush": 0.55,
    "four_to_outside_straight": 0.85,
    "two_suited_high": 0.59,
    "two_unsuited_high": 0.45,
    "suited_ten_high": 0.43,
    "one_high_card": 0.32,
    "discard_all": 0.21,
}

_MADE_HANDS: frozenset[HandType] = frozenset({
    HandType.STRAIGHT,
    HandType.FLUSH,
    HandType.FULL_HOUSE,
    HandType.FOUR_OF_A_KIND,
    HandType.STRAIGHT_FLUSH,
    HandType.ROYAL_FLUSH,
})


@dataclass(frozen=True)
class StrategyPattern:
    """A matched pattern: its name, the hold it implies, and why."""
    name: str
    holds: HoldPattern
    explanation: str


@dataclass(frozen=True)
class StrategyAdvice:
    """Advisor output for one hand.

    Attributes:
        holds:          Recommended hold flag per position.
        expected_value: Static per-credit EV of the matched pattern.
        hand_type:      Category of the dealt hand.
        explanation:    Short reason naming the pattern.
        pattern:        Name of the matched pattern.
    """
    holds: HoldPattern
    expected_value: float
    hand_type: HandType
    explanation: str
    pattern: str


# ─── Grouping helpers ─────────────────────────────────────────────────────────


def _positions_by_rank(hand: Sequence[int]) -> dict[int, list[int]]:
    """rank -> positions, in order of first appearance in the hand."""
    groups: dict[int, list[int]] = {}
    for i, c in enumerate(hand):
        groups.setdefault(card_rank(c), []).append(i)
    return groups


def _positions_by_suit(hand: Sequence[int]) -> dict[int, list[int]]:
    """suit -> positions, in order of first appearance in the hand."""
    groups: dict[int, list[int]] = {}
    for i, c in enumerate(hand):
        groups.setdefault(card_suit(c), []).append(i)
    return groups


def _hold(positions: Sequence[int]) -> HoldPattern:
    chosen = set(positions)
    return tuple(i in chosen for i in range(HAND_SIZE))


def _highest(hand: Sequence[int], positions: Sequence[int], n: int) -> list[int]:
    """The n positions holding the highest ranks."""
    return sorted(positions, key=lambda i: rank_value(hand[i]), reverse=True)[:n]


def _consecutive_run(hand: Sequence[int], positions: Sequence[int], length: int) -> list[int] | None:
    """Positions of the first run of ``length`` consecutive rank values, if any."""
    ordered = sorted(positions, key=lambda i: rank_value(hand[i]))
    for start in range(len(ordered) - length + 1):
        window = ordered[start:start + length]
        values = [rank_value(hand[i]) for i in window]
        if all(b == a + 1 for a, b in zip(values, values[1:])):
            return window
    return None


# ─── Pattern checks ───────────────────────────────────────────────────────────


def _paying_hand(hand, result: HandResult) -> StrategyPattern | None:
    if result.hand_type in _MADE_HANDS:
        return StrategyPattern(
            "paying_hand", (True,) * HAND_SIZE, f"Keep the entire {result.description}"
        )
    return None


def _four_to_royal(hand, result) -> StrategyPattern | None:
    for positions in _positions_by_suit(hand).values():
        if len(positions) == 4 and all(card_rank(hand[i]) in ROYAL_RANKS for i in positions):
            return StrategyPattern(
                "four_to_royal", _hold(positions), "Keep four cards to a royal flush"
            )
    return None


def _three_of_a_kind(hand, result) -> StrategyPattern | None:
    for rank, positions in _positions_by_rank(hand).items():
        if len(positions) == 3:
            return StrategyPattern(
                "three_of_a_kind", _hold(positions), f"Keep three {RANK_NAMES[rank]}s"
            )
    return None


def _four_to_straight_flush(hand, result) -> StrategyPattern | None:
    for positions in _positions_by_suit(hand).values():
        if len(positions) >= 4:
            run = _consecutive_run(hand, positions, 4)
            if run is not None:
                return StrategyPattern(
                    "four_to_straight_flush", _hold(run), "Keep four cards to a straight flush"
                )
    return None


def _two_pair(hand, result: HandResult) -> StrategyPattern | None:
    if result.hand_type != HandType.TWO_PAIR:
        return None
    pairs = [p for p in _positions_by_rank(hand).values() if len(p) == 2]
    return StrategyPattern(
        "two_pair", _hold([i for p in pairs for i in p]), "Keep both pairs"
    )


def _three_to_royal(hand, result) -> StrategyPattern | None:
    for positions in _positions_by_suit(hand).values():
        royals = [i for i in positions if card_rank(hand[i]) in ROYAL_RANKS]
        if len(royals) >= 3:
            return StrategyPattern(
                "three_to_royal", _hold(_highest(hand, royals, 3)),
                "Keep three cards to a royal flush",
            )
    return None


def _high_pair(hand, result) -> StrategyPattern | None:
    for rank, positions in _positions_by_rank(hand).items():
        if len(positions) == 2 and rank in HIGH_RANKS:
            return StrategyPattern(
                "high_pair", _hold(positions), f"Keep pair of {RANK_NAMES[rank]}s"
            )
    return None


def _four_to_flush(hand, result) -> StrategyPattern | None:
    for positions in _positions_by_suit(hand).values():
        if len(positions) == 4:
            return StrategyPattern(
                "four_to_flush", _hold(positions), "Keep four cards to a flush"
            )
    return None


def _low_pair(hand, result) -> StrategyPattern | None:
    for rank, positions in _positions_by_rank(hand).items():
        if len(positions) == 2 and rank not in HIGH_RANKS:
            return StrategyPattern(
                "low_pair", _hold(positions), f"Keep pair of {RANK_NAMES[rank]}s"
            )
    return None


def _three_to_straight_flush(hand, result) -> StrategyPattern | None:
    for positions in _positions_by_suit(hand).values():
        if len(positions) >= 3:
            run = _consecutive_run(hand, positions, 3)
            if run is not None:
                return StrategyPattern(
                    "three_to_straight_flush", _hold(run),
                    "Keep three cards to a straight flush",
                )
    return None


def _four_to_outside_straight(hand, result) -> StrategyPattern | None:
    # One card per rank; pairs were handled by earlier patterns.
    firsts = [p[0] for p in _positions_by_rank(hand).values()]
    if len(firsts) < 4:
        return None
    run = _consecutive_run(hand, firsts, 4)
    if run is None:
        return None
    # A low ace completes 2-3-4-5 from below; J-Q-K-A can only be filled by a 10.
    if rank_value(hand[run[-1]]) <= 13:
        return StrategyPattern(
            "four_to_outside_straight", _hold(run), "Keep four cards to an outside straight"
        )
    return None


def _two_suited_high(hand, result) -> StrategyPattern | None:
    for positions in _positions_by_suit(hand).values():
        highs = [i for i in positions if card_rank(hand[i]) in HIGH_RANKS]
        if len(highs) >= 2:
            return StrategyPattern(
                "two_suited_high", _hold(_highest(hand, highs, 2)), "Keep two suited high cards"
            )
    return None


def _two_unsuited_high(hand, result) -> StrategyPattern | None:
    highs = [i for i, c in enumerate(hand) if card_rank(c) in HIGH_RANKS]
    if len(highs) < 2:
        return None
    ace_king = [i for i in highs if card_rank(hand[i]) in (RANK_ACE, RANK_KING)]
    if len(ace_king) == 2:
        return StrategyPattern("two_unsuited_high", _hold(ace_king), "Keep Ace and King")
    return StrategyPattern(
        "two_unsuited_high", _hold(_highest(hand, highs, 2)), "Keep two high cards"
    )


def _suited_ten_high(hand, result) -> StrategyPattern | None:
    for positions in _positions_by_suit(hand).values():
        tens = [i for i in positions if card_rank(hand[i]) == RANK_TEN]
        faces = [i for i in positions if card_rank(hand[i]) in (RANK_JACK, RANK_QUEEN, RANK_KING)]
        if len(tens) == 1 and faces:
            face = faces[0]
            return StrategyPattern(
                "suited_ten_high", _hold([tens[0], face]),
                f"Keep suited 10 and {RANK_NAMES[card_rank(hand[face])]}",
            )
    return None


def _one_high_card(hand, result) -> StrategyPattern | None:
    for rank in (RANK_ACE, RANK_KING, RANK_QUEEN, RANK_JACK):
        for i, c in enumerate(hand):
            if card_rank(c) == rank:
                return StrategyPattern("one_high_card", _hold([i]), f"Keep {RANK_NAMES[rank]}")
    return None


def _discard_all(hand, result) -> StrategyPattern:
    return StrategyPattern("discard_all", (False,) * HAND_SIZE, "Discard all cards")


PatternCheck = Callable[[Sequence[int], HandResult], Optional[StrategyPattern]]

PATTERN_CHECKS: tuple[PatternCheck, ...] = (
    _paying_hand,
    _four_to_royal,
    _three_of_a_kind,
    _four_to_straight_flush,
    _two_pair,
    _three_to_royal,
    _high_pair,
    _four_to_flush,
    _low_pair,
    _three_to_straight_flush,
    _four_to_outside_straight,
    _two_suited_high,
    _two_unsuited_high,
    _suited_ten_high,
    _one_high_card,
    _discard_all,
)

PATTERN_ORDER: tuple[str, ...] = tuple(check.__name__.lstrip("_") for check in PATTERN_CHECKS)


# ─── Public API ───────────────────────────────────────────────────────────────


def match_patterns(hand: Sequence[int]) -> list[StrategyPattern]:
    """Return every pattern the hand matches, in priority order."""
    hand = validate_hand(hand)
    result = classify(hand)
    matches = []
    for check in PATTERN_CHECKS:
        pattern = check(hand, result)
        if pattern is not None:
            matches.append(pattern)
    return matches


def advise(hand: Sequence[int]) -> StrategyAdvice:
    """Recommend a hold for a dealt hand using the first matching pattern.

    Raises:
        ValueError: If the hand is not five distinct cards.

    Examples:
        >>> advise((34, 38, 42, 46, 5)).pattern   # 10H JH QH KH 3D
        'four_to_royal'
    """
    hand = validate_hand(hand)
    result = classify(hand)
    for check in PATTERN_CHECKS:
        pattern = check(hand, result)
        if pattern is not None:
            return StrategyAdvice(
                holds=pattern.holds,
                expected_value=PATTERN_EXPECTED_VALUES[pattern.name],
                hand_type=result.hand_type,
                explanation=pattern.explanation,
                pattern=pattern.name,
            )
    raise AssertionError("discard_all always matches")  # pragma: no cover

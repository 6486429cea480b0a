"""
Five-card hand classification for Jacks-or-Better.

Category hierarchy (strongest first):
    royal_flush      — 10-J-Q-K-A suited
    straight_flush   — five consecutive ranks suited (wheel A-2-3-4-5 included)
    four_of_a_kind
    full_house       — three of one rank plus a pair of another
    flush            — five suited, not consecutive
    straight         — five consecutive ranks, not suited (wheel included)
    three_of_a_kind
    two_pair
    jacks_or_better  — one pair of J, Q, K or A (pays)
    pair             — one pair of 2 through 10 (pays nothing)
    high_card

Straight and flush are tested before rank multiplicities; a classifier that
counts pairs first will call a wheel or a flush 'high card'.

Two entry points share the same rules:
    classify(cards)        — one hand, returns a HandResult with a description.
    classify_many(hands)   — an (n, 5) card array, returns an int8 array of
                             HandType codes. Used by the EV engine, which
                             evaluates up to 1.5M hands per hold pattern.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence

import numpy as np

from .cards import (
    HAND_SIZE,
    HIGH_RANKS,
    RANK_ACE,
    RANK_FIVE,
    RANK_NAMES,
    RANK_TEN,
)


class HandType(IntEnum):
    """Hand categories. The value is the strength rank used for ordering."""

    HIGH_CARD = 0
    PAIR = 1
    JACKS_OR_BETTER = 2
    TWO_PAIR = 3
    THREE_OF_A_KIND = 4
    STRAIGHT = 5
    FLUSH = 6
    FULL_HOUSE = 7
    FOUR_OF_A_KIND = 8
    STRAIGHT_FLUSH = 9
    ROYAL_FLUSH = 10

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS: dict[HandType, str] = {
    HandType.HIGH_CARD: "High Card",
    HandType.PAIR: "Pair",
    HandType.JACKS_OR_BETTER: "Jacks or Better",
    HandType.TWO_PAIR: "Two Pair",
    HandType.THREE_OF_A_KIND: "Three of a Kind",
    HandType.STRAIGHT: "Straight",
    HandType.FLUSH: "Flush",
    HandType.FULL_HOUSE: "Full House",
    HandType.FOUR_OF_A_KIND: "Four of a Kind",
    HandType.STRAIGHT_FLUSH: "Straight Flush",
    HandType.ROYAL_FLUSH: "Royal Flush",
}


@dataclass(frozen=True)
class HandResult:
    """Classification of a five-card hand.

    Attributes:
        hand_type:   The category.
        cards:       The hand's cards sorted by ascending rank.
        rank:        Numeric strength (equal to ``int(hand_type)``).
        description: Human-readable label, e.g. 'Pair of Js', 'Flush'.
    """
    hand_type: HandType
    cards: tuple[int, ...]
    rank: int
    description: str

    def __str__(self) -> str:
        return self.description


# ─── Scalar classifier ────────────────────────────────────────────────────────


def _is_flush(suits: Sequence[int]) -> bool:
    return len(set(suits)) == 1


def _is_straight(ranks: Sequence[int]) -> bool:
    """ranks must be sorted ascending."""
    if len(set(ranks)) != 5:
        return False
    if ranks[4] - ranks[0] == 4:
        return True
    # Wheel: A-2-3-4-5 with the ace playing low.
    return ranks[3] == RANK_FIVE and ranks[4] == RANK_ACE


def classify(cards: Sequence[int]) -> HandResult:
    """Classify exactly five cards into one of the eleven hand categories.

    The result does not depend on the order the cards are given in.

    Raises:
        ValueError: If the hand does not contain exactly 5 cards.

    Examples:
        >>> classify((34, 38, 42, 46, 50)).description   # 10H JH QH KH AH
        'Royal Flush'
        >>> classify((48, 1, 6, 11, 14)).hand_type.name  # AC 2D 3H 4S 5H
        'STRAIGHT'
    """
    if len(cards) != HAND_SIZE:
        raise ValueError(f"Hand must contain exactly {HAND_SIZE} cards, got {len(cards)}.")

    ordered = tuple(sorted((int(c) for c in cards), key=lambda c: (c // 4, c % 4)))
    ranks = [c // 4 for c in ordered]
    suits = [c % 4 for c in ordered]

    flush = _is_flush(suits)
    straight = _is_straight(ranks)

    if flush and straight:
        if ranks[0] == RANK_TEN:
            return _result(HandType.ROYAL_FLUSH, ordered)
        return _result(HandType.STRAIGHT_FLUSH, ordered)

    counts = Counter(ranks)
    shape = sorted(counts.values(), reverse=True)

    if shape[0] == 4:
        return _result(HandType.FOUR_OF_A_KIND, ordered)
    if shape[0] == 3 and shape[1] == 2:
        return _result(HandType.FULL_HOUSE, ordered)
    if flush:
        return _result(HandType.FLUSH, ordered)
    if straight:
        return _result(HandType.STRAIGHT, ordered)
    if shape[0] == 3:
        return _result(HandType.THREE_OF_A_KIND, ordered)
    if shape[0] == 2 and shape[1] == 2:
        return _result(HandType.TWO_PAIR, ordered)
    if shape[0] == 2:
        pair_rank = next(r for r, n in counts.items() if n == 2)
        description = f"Pair of {RANK_NAMES[pair_rank]}s"
        if pair_rank in HIGH_RANKS:
            return _result(HandType.JACKS_OR_BETTER, ordered, description)
        return _result(HandType.PAIR, ordered, description)
    return _result(HandType.HIGH_CARD, ordered)


def _result(hand_type: HandType, ordered: tuple[int, ...], description: str | None = None) -> HandResult:
    return HandResult(
        hand_type=hand_type,
        cards=ordered,
        rank=int(hand_type),
        description=description or hand_type.label,
    )


# ─── Vectorised classifier ────────────────────────────────────────────────────


def classify_many(hands: np.ndarray) -> np.ndarray:
    """Classify many five-card hands at once.

    Applies exactly the same rules as classify(), expressed as numpy array
    operations over the sorted ranks of every row.

    Args:
        hands: Integer array of shape (n, 5); each row is one hand.

    Returns:
        np.ndarray: int8 array of shape (n,) holding HandType values.

    Examples:
        >>> classify_many(np.array([[34, 38, 42, 46, 50], [0, 1, 6, 11, 19]]))
        array([10,  1], dtype=int8)
    """
    hands = np.asarray(hands)
    if hands.ndim != 2 or hands.shape[1] != HAND_SIZE:
        raise ValueError(f"Expected an (n, {HAND_SIZE}) array of hands, got shape {hands.shape}.")

    ranks = np.sort(hands // 4, axis=1)
    suits = hands % 4

    flush = (suits == suits[:, :1]).all(axis=1)

    # Adjacent equalities in the sorted ranks describe the multiplicity shape:
    #   0 -> all distinct, 1 -> one pair, 2 -> two pair or trips,
    #   3 -> full house or quads.
    eq = ranks[:, 1:] == ranks[:, :-1]
    n_equal = eq.sum(axis=1)
    run3 = eq[:, 1:] & eq[:, :-1]          # three equal ranks in a row
    run4 = run3[:, 1:] & run3[:, :-1]      # four equal ranks in a row
    trips = run3.any(axis=1)
    quads = run4.any(axis=1)

    distinct = n_equal == 0
    wheel = distinct & (ranks[:, 3] == RANK_FIVE) & (ranks[:, 4] == RANK_ACE)
    straight = distinct & ((ranks[:, 4] - ranks[:, 0] == 4) | wheel)

    one_pair = n_equal == 1
    pair_rank = np.take_along_axis(ranks, eq.argmax(axis=1)[:, None], axis=1)[:, 0]
    high_pair = one_pair & np.isin(pair_rank, list(HIGH_RANKS))

    out = np.full(len(hands), HandType.HIGH_CARD, dtype=np.int8)
    out[one_pair] = HandType.PAIR
    out[high_pair] = HandType.JACKS_OR_BETTER
    out[(n_equal == 2) & ~trips] = HandType.TWO_PAIR
    out[(n_equal == 2) & trips] = HandType.THREE_OF_A_KIND
    out[straight] = HandType.STRAIGHT
    out[flush] = HandType.FLUSH
    out[(n_equal == 3) & ~quads] = HandType.FULL_HOUSE
    out[quads] = HandType.FOUR_OF_A_KIND
    out[flush & straight] = HandType.STRAIGHT_FLUSH
    out[flush & straight & (ranks[:, 0] == RANK_TEN)] = HandType.ROYAL_FLUSH
    return out


# ─── Winning-card positions ───────────────────────────────────────────────────


def winning_positions(cards: Sequence[int]) -> tuple[int, ...]:
    """Return the hand positions of the cards that make the paying combination.

    Straights, flushes, full houses and better use all five cards. Quads,
    trips, two pair and a paying pair use only the matched cards. High card
    and a non-paying low pair return no positions.

    Examples:
        >>> winning_positions((36, 37, 12, 24, 30))   # JC JD 5C 8C 9H
        (0, 1)
    """
    result = classify(cards)
    hand_type = result.hand_type
    if hand_type in (HandType.HIGH_CARD, HandType.PAIR):
        return ()
    if hand_type in (
        HandType.STRAIGHT,
        HandType.FLUSH,
        HandType.FULL_HOUSE,
        HandType.STRAIGHT_FLUSH,
        HandType.ROYAL_FLUSH,
    ):
        return tuple(range(len(cards)))
    counts = Counter(c // 4 for c in cards)
    return tuple(i for i, c in enumerate(cards) if counts[c // 4] >= 2)

"""
Pay table lookup for 9/6 Jacks-or-Better.

Payout convention:
    Each category maps to five payouts, one per bet size 1..5 credits. The
    payout is the total returned to the player (the bet is already debited at
    deal time), so a losing hand returns 0.

The royal flush at five credits pays 4000, not 5 × 250. That jackpot bonus is
stored literally and must never be derived by multiplication.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

import numpy as np

from .hand_evaluator import HandType

MIN_BET: int = 1
MAX_BET: int = 5

PayTable = Mapping[HandType, tuple[int, ...]]

JACKS_OR_BETTER_9_6: PayTable = MappingProxyType({
    HandType.ROYAL_FLUSH: (250, 500, 750, 1000, 4000),
    HandType.STRAIGHT_FLUSH: (50, 100, 150, 200, 250),
    HandType.FOUR_OF_A_KIND: (25, 50, 75, 100, 125),
    HandType.FULL_HOUSE: (9, 18, 27, 36, 45),
    HandType.FLUSH: (6, 12, 18, 24, 30),
    HandType.STRAIGHT: (4, 8, 12, 16, 20),
    HandType.THREE_OF_A_KIND: (3, 6, 9, 12, 15),
    HandType.TWO_PAIR: (2, 4, 6, 8, 10),
    HandType.JACKS_OR_BETTER: (1, 2, 3, 4, 5),
})

# Long-run return (%) of 9/6 Jacks-or-Better with perfect max-coin play.
RETURN_TO_PLAYER_9_6: float = 99.54


def payout(hand_type: HandType, bet: int, table: PayTable = JACKS_OR_BETTER_9_6) -> int:
    """Look up the credits paid for a hand category at a given bet.

    Bets above MAX_BET are treated as MAX_BET. Bets below MIN_BET, and
    categories absent from the table (high card, low pair), pay 0.

    Examples:
        >>> payout(HandType.ROYAL_FLUSH, 5)
        4000
        >>> payout(HandType.ROYAL_FLUSH, 4)
        1000
        >>> payout(HandType.PAIR, 5)
        0
        >>> payout(HandType.JACKS_OR_BETTER, 0)
        0
    """
    if bet < MIN_BET:
        return 0
    row = table.get(HandType(hand_type))
    if row is None:
        return 0
    return int(row[min(bet, MAX_BET) - 1])


def payout_vector(bet: int, table: PayTable = JACKS_OR_BETTER_9_6) -> np.ndarray:
    """Return payouts for every category as an array indexed by HandType value.

    Lets the EV engine turn a whole array of classified hands into payouts
    with one fancy-indexing step: ``payout_vector(bet)[codes]``.

    Examples:
        >>> payout_vector(1)[HandType.FULL_HOUSE]
        9.0
    """
    return np.array([payout(t, bet, table) for t in HandType], dtype=np.float64)


def validate_pay_table(table: PayTable) -> None:
    """Check the structural invariants of a pay table.

    Every row must hold exactly five non-negative payouts, non-decreasing in
    bet size.

    Raises:
        ValueError: Describing the first violated invariant.
    """
    for hand_type, row in table.items():
        if len(row) != MAX_BET:
            raise ValueError(
                f"{HandType(hand_type).name}: expected {MAX_BET} payouts, got {len(row)}."
            )
        if any(p < 0 for p in row):
            raise ValueError(f"{HandType(hand_type).name}: negative payout in {row}.")
        if any(b < a for a, b in zip(row, row[1:])):
            raise ValueError(
                f"{HandType(hand_type).name}: payouts must be non-decreasing in bet, got {row}."
            )

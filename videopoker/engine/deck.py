"""
Deck creation, shuffling, dealing and discard replacement.

The deck is a numpy int8 array of card integers in deal order: index 0 is the
next card off the top. Functions never mutate their inputs; every operation
returns new arrays/tuples so a rejected action leaves the caller's deck intact.

Integer encoding: card // 4 = rank index, card % 4 = suit index.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .cards import DECK_SIZE, HAND_SIZE, hand_to_str, str_to_card


def create_deck() -> np.ndarray:
    """Create a fresh, ordered 52-card deck.

    Returns:
        np.ndarray: int8 array of shape (52,) holding cards 0..51 in order.

    Examples:
        >>> deck = create_deck()
        >>> len(deck)
        52
        >>> deck.dtype
        dtype('int8')
    """
    return np.arange(DECK_SIZE, dtype=np.int8)


def _as_generator(rng: np.random.Generator | int | None) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def shuffle_deck(
    deck: np.ndarray,
    rng: np.random.Generator | int | None = None,
) -> np.ndarray:
    """Return a uniformly random permutation of ``deck``.

    The input is not modified. numpy's permutation is an unbiased
    Fisher–Yates shuffle; randomness is statistical, not cryptographic.

    Args:
        deck: Deck array (any length — a post-deal remainder is fine).
        rng:  A numpy Generator, an integer seed, or None for fresh entropy.

    Examples:
        >>> shuffled = shuffle_deck(create_deck(), rng=7)
        >>> sorted(shuffled.tolist()) == list(range(52))
        True
    """
    return _as_generator(rng).permutation(np.asarray(deck, dtype=np.int8))


def cards_remaining(deck: np.ndarray) -> int:
    """Return the number of cards left in the deck."""
    return int(len(deck))


def deal(deck: np.ndarray, n: int = HAND_SIZE) -> tuple[tuple[int, ...], np.ndarray]:
    """Deal ``n`` cards from the front of the deck.

    Returns:
        (hand, remainder) — the dealt cards as a tuple of ints, and a new
        array with the rest of the deck.

    Raises:
        ValueError: If n is negative or larger than the deck.

    Examples:
        >>> hand, rest = deal(create_deck(), 5)
        >>> hand
        (0, 1, 2, 3, 4)
        >>> len(rest)
        47
    """
    if n < 0:
        raise ValueError(f"Cannot deal a negative number of cards: {n}")
    if n > len(deck):
        raise ValueError(
            f"Cannot deal {n} cards from a deck of {len(deck)}."
        )
    hand = tuple(int(c) for c in deck[:n])
    return hand, np.array(deck[n:], dtype=np.int8)


def replace_discards(
    hand: Sequence[int],
    holds: Sequence[bool],
    deck: np.ndarray,
) -> tuple[tuple[int, ...], np.ndarray]:
    """Replace every non-held position with the next card off the deck.

    Positions are filled left to right in deck order; held positions keep
    their card. Holding everything consumes nothing.

    Raises:
        ValueError: If holds is not one flag per card, or the deck holds
                    fewer cards than the number of discards.

    Examples:
        >>> deck = create_deck()
        >>> hand, rest = deal(deck)
        >>> new_hand, rest2 = replace_discards(hand, [True, False, True, True, False], rest)
        >>> new_hand
        (0, 5, 2, 3, 6)
        >>> len(rest2)
        45
    """
    if len(holds) != len(hand):
        raise ValueError(
            f"Hold pattern has {len(holds)} entries for a {len(hand)}-card hand."
        )
    n_discards = sum(1 for h in holds if not h)
    if n_discards > len(deck):
        raise ValueError(
            f"Deck has {len(deck)} cards but {n_discards} discards were requested."
        )

    new_hand = list(hand)
    next_index = 0
    for i, held in enumerate(holds):
        if not held:
            new_hand[i] = int(deck[next_index])
            next_index += 1
    return tuple(new_hand), np.array(deck[next_index:], dtype=np.int8)


def validate_hand(hand: Sequence[int], size: int = HAND_SIZE) -> tuple[int, ...]:
    """Check that a hand has ``size`` distinct valid cards and return it as a tuple.

    Raises:
        ValueError: On the wrong card count, out-of-range cards or duplicates.
    """
    cards = tuple(int(c) for c in hand)
    if len(cards) != size:
        raise ValueError(f"Hand must contain exactly {size} cards, got {len(cards)}.")
    for c in cards:
        if not 0 <= c < DECK_SIZE:
            raise ValueError(f"Card {c} is out of range 0–51.")
    if len(set(cards)) != len(cards):
        raise ValueError(f"Hand contains duplicate cards: {hand_to_str(cards)}")
    return cards


def remaining_cards(*hands: Sequence[int]) -> np.ndarray:
    """Return every card not present in the given hands, in ascending order.

    For a single 5-card hand this is the 47-card universe that discards are
    drawn from.

    Examples:
        >>> len(remaining_cards((0, 1, 2, 3, 4)))
        47
    """
    used = {int(c) for h in hands for c in h}
    return np.array([c for c in range(DECK_SIZE) if c not in used], dtype=np.int8)


def build_deck_from_strs(*card_strs: str) -> np.ndarray:
    """Build a stacked deck in the given order (deterministic test setups).

    Examples:
        >>> build_deck_from_strs('AS', 'KS').tolist()
        [51, 47]
    """
    return np.array([str_to_card(s) for s in card_strs], dtype=np.int8)

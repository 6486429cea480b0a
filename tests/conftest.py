"""
Shared pytest fixtures for video poker trainer tests.

Provides convenience wrappers around str_to_card for building known hands.
"""

from __future__ import annotations

import numpy as np
import pytest

from videopoker.engine.cards import str_to_card
from videopoker.engine.deck import create_deck


def hand(*card_strs: str) -> tuple[int, ...]:
    """Build a hand tuple from human-readable card strings.

    Examples:
        >>> hand('AS', 'AC')   # Ace of Spades, Ace of Clubs
        (51, 48)
        >>> hand('10H', 'JH', 'QH', 'KH', '3C')
        (34, 38, 42, 46, 4)
    """
    return tuple(str_to_card(s) for s in card_strs)


@pytest.fixture
def fresh_deck() -> np.ndarray:
    """Return a full, ordered 52-card deck."""
    return create_deck()


@pytest.fixture
def h():
    """Expose the hand() helper as a fixture for convenience."""
    return hand

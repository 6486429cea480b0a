"""
Card encoding, rank groups used by video poker, and string I/O helpers.

Card encoding (integer 0–51):
    rank_index = card // 4  ->  0=2, 1=3, ..., 8=10, 9=J, 10=Q, 11=K, 12=A
    suit_index = card % 4   ->  0=C, 1=D, 2=H, 3=S

Two cards are the same card exactly when their integers are equal, so the
integer doubles as the card's identity. The string form ('10H', 'AS') is the
card's human-readable id and is used only at I/O boundaries.
"""

from __future__ import annotations

RANK_NAMES: list[str] = ['2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K', 'A']
SUIT_NAMES: list[str] = ['C', 'D', 'H', 'S']
SUIT_SYMBOLS: list[str] = ['♣', '♦', '♥', '♠']

NUM_RANKS: int = 13
NUM_SUITS: int = 4
DECK_SIZE: int = 52
HAND_SIZE: int = 5

# Rank indices the evaluator and advisor refer to by name
RANK_FIVE: int = 3
RANK_TEN: int = 8
RANK_JACK: int = 9
RANK_QUEEN: int = 10
RANK_KING: int = 11
RANK_ACE: int = 12

# Jacks or better: the ranks whose pair pays.
HIGH_RANKS: frozenset[int] = frozenset({RANK_JACK, RANK_QUEEN, RANK_KING, RANK_ACE})

# Broadway ranks (10 through Ace), the only ranks that can make a royal flush.
ROYAL_RANKS: frozenset[int] = frozenset({RANK_TEN, RANK_JACK, RANK_QUEEN, RANK_KING, RANK_ACE})


def card_rank(card: int) -> int:
    """Return the rank index (0–12) of a card.

    Examples:
        >>> card_rank(0)   # 2 of Clubs
        0
        >>> card_rank(51)  # Ace of Spades
        12
    """
    return card // 4


def card_suit(card: int) -> int:
    """Return the suit index (0–3) of a card.

    Examples:
        >>> card_suit(0)   # 2 of Clubs
        0
        >>> card_suit(51)  # Ace of Spades
        3
    """
    return card % 4


def rank_value(card: int) -> int:
    """Return the face value used for ordering: 2..10, J=11, Q=12, K=13, A=14.

    Examples:
        >>> rank_value(0)    # 2C
        2
        >>> rank_value(36)   # JC
        11
        >>> rank_value(51)   # AS
        14
    """
    return card // 4 + 2


def make_card(rank: int, suit: int) -> int:
    """Build a card integer from a rank index and a suit index."""
    if not 0 <= rank < NUM_RANKS or not 0 <= suit < NUM_SUITS:
        raise ValueError(f"Invalid rank/suit index: rank={rank}, suit={suit}")
    return rank * 4 + suit


def card_to_str(card: int) -> str:
    """Convert a card integer to its human-readable string representation.

    Examples:
        >>> card_to_str(0)   # 2 of Clubs
        '2C'
        >>> card_to_str(51)  # Ace of Spades
        'AS'
        >>> card_to_str(34)  # 10 of Hearts
        '10H'
    """
    return RANK_NAMES[card // 4] + SUIT_NAMES[card % 4]


def card_to_pretty(card: int) -> str:
    """Render a card with its suit symbol, e.g. '10♥'."""
    return RANK_NAMES[card // 4] + SUIT_SYMBOLS[card % 4]


def str_to_card(s: str) -> int:
    """Parse a human-readable card string to its integer encoding.

    The format is <rank><suit> where suit is the last character.
    Rank can be '2'-'9', '10' (or 'T'), 'J', 'Q', 'K', or 'A'.
    Suit can be 'C', 'D', 'H', or 'S' (case-insensitive).

    Raises:
        ValueError: If the string is not a valid card.

    Examples:
        >>> str_to_card('2C')
        0
        >>> str_to_card('AS')
        51
        >>> str_to_card('10H')
        34
        >>> str_to_card('th')
        34
    """
    s = s.strip().upper()
    if len(s) < 2:
        raise ValueError(f"Invalid card string: {s!r}")
    rank_str = s[:-1]
    suit_char = s[-1]
    if rank_str == 'T':
        rank_str = '10'
    if rank_str not in RANK_NAMES or suit_char not in SUIT_NAMES:
        raise ValueError(f"Invalid card string: {s!r}")
    return RANK_NAMES.index(rank_str) * 4 + SUIT_NAMES.index(suit_char)


def parse_hand(text: str) -> tuple[int, ...]:
    """Parse a whitespace- or comma-separated list of card strings.

    Examples:
        >>> parse_hand('10H JH QH KH 3C')
        (34, 38, 42, 46, 4)
    """
    return tuple(str_to_card(s) for s in text.replace(',', ' ').split())


def hand_to_str(cards) -> str:
    """Convert a hand (sequence of card ints) to a human-readable string.

    Examples:
        >>> hand_to_str((48, 51))
        'AC AS'
    """
    return ' '.join(card_to_str(int(c)) for c in cards)

"""
Exact expected-value analysis of every hold/discard choice for a dealt hand.

For a five-card hand there are 32 hold patterns. Pattern index i holds
position j exactly when bit j of i is set, so index 0 discards everything and
index 31 holds everything.

For each pattern with d discards the expected value is the mean payout over
all C(47, d) ways to draw d replacements from the 47 cards not in the dealt
hand:

    d    draws
    0    1          (the dealt hand itself — no averaging)
    1    47
    2    1,081
    3    16,215
    4    178,365
    5    1,533,939

Draw sets are enumerated as index-combination arrays (see
combination_indices) and the completed hands are classified in bulk with
classify_many(), so even the 1.5M-draw discard-all case is enumerated exactly.
A full exact analysis classifies about 2.6M hands.

Sampling is opt-in: pass ``sample_size`` to estimate patterns with four or
five discards from that many uniformly drawn combinations. Any analysis that
used sampling reports ``is_complete=False`` and the affected entries report
``is_exact=False``.
"""

from __future__ import annotations

import functools
import itertools
import logging
import math
import threading
import time
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from videopoker.engine.cards import (
    HAND_SIZE,
    HIGH_RANKS,
    RANK_NAMES,
    card_rank,
    card_suit,
    rank_value,
)
from videopoker.engine.deck import remaining_cards, validate_hand
from videopoker.engine.hand_evaluator import HandType, classify, classify_many
from videopoker.engine.pay_table import (
    JACKS_OR_BETTER_9_6,
    MAX_BET,
    MIN_BET,
    PayTable,
    payout,
    payout_vector,
)

logger = logging.getLogger(__name__)

# ─── Constants ────────────────────────────────────────────────────────────────

NUM_HOLD_PATTERNS: int = 2 ** HAND_SIZE

DEFAULT_SAMPLE_SIZE: int = 1000
"""Draws per pattern used when sampling is requested without an explicit size."""

DEFAULT_CACHE_SIZE: int = 20_000
"""Entries kept by the module-level EV cache, roughly 600 fully analysed hands."""

SAMPLED_DISCARD_THRESHOLD: int = 4
"""Smallest discard count that is sampled when sampling is enabled."""

_CHUNK_ROWS: int = 250_000
"""Rows classified per numpy batch; bounds peak memory for the 1.5M-draw case."""

_EV_TOLERANCE: float = 1e-9

HoldPattern = tuple[bool, ...]


# ─── Hold patterns and combinations ───────────────────────────────────────────


def pattern_from_index(index: int) -> HoldPattern:
    """Return the hold pattern for enumeration index 0..31.

    Examples:
        >>> pattern_from_index(0)
        (False, False, False, False, False)
        >>> pattern_from_index(0b01111)
        (True, True, True, True, False)
    """
    if not 0 <= index < NUM_HOLD_PATTERNS:
        raise ValueError(f"Hold pattern index must be in 0..{NUM_HOLD_PATTERNS - 1}, got {index}.")
    return tuple(bool(index & (1 << j)) for j in range(HAND_SIZE))


def pattern_to_index(holds: Sequence[bool]) -> int:
    """Inverse of pattern_from_index()."""
    return sum(1 << j for j, held in enumerate(holds) if held)


ALL_HOLD_PATTERNS: tuple[HoldPattern, ...] = tuple(
    pattern_from_index(i) for i in range(NUM_HOLD_PATTERNS)
)


@functools.cache
def combination_indices(n: int, k: int) -> np.ndarray:
    """Return every k-subset of range(n) as rows of an index array.

    Rows are in lexicographic order. The array is built once per (n, k) by
    iterating itertools.combinations straight into a flat numpy buffer, then
    cached read-only for reuse by every analysis.

    Returns:
        np.ndarray: int8 array of shape (C(n, k), k).

    Examples:
        >>> combination_indices(4, 2).tolist()
        [[0, 1], [0, 2], [0, 3], [1, 2], [1, 3], [2, 3]]
        >>> combination_indices(47, 5).shape
        (1533939, 5)
    """
    if not 0 <= k <= n:
        raise ValueError(f"Cannot choose {k} of {n}.")
    count = math.comb(n, k)
    flat = np.fromiter(
        itertools.chain.from_iterable(itertools.combinations(range(n), k)),
        dtype=np.int8,
        count=count * k,
    )
    out = flat.reshape(count, k)
    out.flags.writeable = False
    return out


# ─── Result types ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class HoldCombination:
    """Expected value of one hold pattern.

    Attributes:
        holds:          Hold flag per hand position.
        pattern_index:  Enumeration index 0..31.
        kept_cards:     The held cards, in hand order.
        discard_count:  Number of cards replaced (5 - len(kept_cards)).
        expected_value: Mean payout in credits at the analysed bet.
        description:    Human-readable summary, e.g. 'Keep pair of Js'.
        hand_type:      Category of the dealt hand when every card is held;
                        None for patterns that draw.
        is_exact:       False when the value is a sampled estimate.
    """
    holds: HoldPattern
    pattern_index: int
    kept_cards: tuple[int, ...]
    discard_count: int
    expected_value: float
    description: str
    hand_type: HandType | None = None
    is_exact: bool = True


@dataclass(frozen=True)
class EVAnalysis:
    """All analysed hold patterns for one hand, best first.

    Attributes:
        hand:            The analysed hand.
        bet:             Bet size the payouts were computed at.
        combinations:    HoldCombinations sorted by descending expected value.
                         Equal values keep enumeration order.
        optimal_choice:  combinations[0].
        player_choice:   The entry matching the player's holds, if supplied.
        player_rank:     1-based position of player_choice in combinations.
        player_tie_rank: 1 + number of entries with strictly greater EV, so
                         a hold tied with the optimum reports 1.
        is_complete:     True only when all 32 patterns were enumerated
                         exactly.
        round_id:        Identity of the round this analysis belongs to.
    """
    hand: tuple[int, ...]
    bet: int
    combinations: tuple[HoldCombination, ...]
    optimal_choice: HoldCombination
    player_choice: HoldCombination | None = None
    player_rank: int | None = None
    player_tie_rank: int | None = None
    is_complete: bool = True
    round_id: int | None = None

    def find(self, holds: Sequence[bool]) -> HoldCombination | None:
        """Return the entry whose hold pattern equals ``holds`` exactly."""
        target = tuple(bool(h) for h in holds)
        for combo in self.combinations:
            if combo.holds == target:
                return combo
        return None

    @property
    def ev_loss(self) -> float | None:
        """Expected credits given up by the player's choice versus optimal."""
        if self.player_choice is None:
            return None
        return self.optimal_choice.expected_value - self.player_choice.expected_value


# ─── Cache ────────────────────────────────────────────────────────────────────


class EVCache:
    """Memo of exact per-pattern expected values, least recently used evicted first.

    Keys are (dealt card set, kept card set, bet, pay table). Using card sets
    instead of positions means the same hand dealt in another order reuses
    entries, while different kept cards can never collide. Only exact values
    are stored, so a cache hit returns precisely what recomputation would.

    Args:
        maxsize: Most entries held at once; None for no limit.
    """

    def __init__(self, maxsize: int | None = DEFAULT_CACHE_SIZE) -> None:
        if maxsize is not None and maxsize < 1:
            raise ValueError(f"maxsize must be positive or None, got {maxsize}.")
        self.maxsize = maxsize
        self._values: OrderedDict[tuple, float] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: tuple) -> float | None:
        with self._lock:
            value = self._values.get(key)
            if value is None:
                self.misses += 1
            else:
                self.hits += 1
                self._values.move_to_end(key)
            return value

    def put(self, key: tuple, value: float) -> None:
        with self._lock:
            self._values[key] = value
            self._values.move_to_end(key)
            if self.maxsize is not None:
                while len(self._values) > self.maxsize:
                    self._values.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self.hits = 0
            self.misses = 0

    def __contains__(self, key: tuple) -> bool:
        with self._lock:
            return key in self._values

    def __len__(self) -> int:
        return len(self._values)


DEFAULT_CACHE = EVCache()


def clear_ev_cache() -> None:
    """Empty the module-level cache. Results are unaffected."""
    DEFAULT_CACHE.clear()


def _table_key(table: PayTable) -> tuple:
    return tuple(sorted((int(k), tuple(v)) for k, v in table.items()))


def _cache_key(hand: tuple[int, ...], kept: tuple[int, ...], bet: int, table_key: tuple) -> tuple:
    return (frozenset(hand), frozenset(kept), bet, table_key)


# ─── Per-pattern expectation ──────────────────────────────────────────────────


def _mean_payout(
    kept: np.ndarray,
    universe: np.ndarray,
    rows: np.ndarray,
    pay: np.ndarray,
) -> float:
    """Mean payout over kept + universe[row] for every combination row."""
    n_kept = len(kept)
    total = 0
    for start in range(0, len(rows), _CHUNK_ROWS):
        chunk = rows[start:start + _CHUNK_ROWS]
        hands = np.empty((len(chunk), HAND_SIZE), dtype=np.int8)
        hands[:, :n_kept] = kept
        hands[:, n_kept:] = universe[chunk]
        total += int(pay[classify_many(hands)].sum())
    return total / len(rows)


def _payout_table(bet: int, table: PayTable) -> np.ndarray:
    return payout_vector(bet, table).astype(np.int64)


def expected_value_for_hold(
    hand: Sequence[int],
    holds: Sequence[bool],
    bet: int = 1,
    sample_size: int | None = None,
    rng: np.random.Generator | int | None = None,
    table: PayTable = JACKS_OR_BETTER_9_6,
    cache: EVCache | None = DEFAULT_CACHE,
) -> tuple[float, bool]:
    """Expected payout of holding ``holds`` on ``hand``.

    Args:
        hand:        The dealt five cards.
        holds:       One flag per position, True = keep.
        bet:         Bet size 1..5.
        sample_size: If given, patterns with four or five discards are
                     estimated from this many uniformly drawn combinations.
        rng:         Generator or seed for sampling.
        table:       Pay table.
        cache:       Memo for exact values; None disables caching.

    Returns:
        (expected_value, is_exact)
    """
    hand = validate_hand(hand)
    _check_bet(bet)
    holds = _check_holds(holds)
    return _expected_value(
        hand, holds, bet, sample_size, rng, table, cache,
        _payout_table(bet, table), _table_key(table),
    )


def _expected_value(
    hand: tuple[int, ...],
    holds: HoldPattern,
    bet: int,
    sample_size: int | None,
    rng: np.random.Generator | int | None,
    table: PayTable,
    cache: EVCache | None,
    pay: np.ndarray,
    table_key: tuple,
) -> tuple[float, bool]:
    kept = tuple(c for c, held in zip(hand, holds) if held)
    discard_count = HAND_SIZE - len(kept)

    if discard_count == 0:
        return float(payout(classify(hand).hand_type, bet, table)), True

    sampled = sample_size is not None and discard_count >= SAMPLED_DISCARD_THRESHOLD
    key = _cache_key(hand, kept, bet, table_key)
    if not sampled and cache is not None:
        cached = cache.get(key)
        if cached is not None:
            return cached, True

    universe = remaining_cards(hand)
    rows = combination_indices(len(universe), discard_count)
    if sampled:
        generator = rng if isinstance(rng, np.random.Generator) else np.random.default_rng(rng)
        rows = rows[generator.integers(0, len(rows), size=sample_size)]

    value = _mean_payout(np.array(kept, dtype=np.int8), universe, rows, pay)
    if not sampled and cache is not None:
        cache.put(key, value)
    return value, not sampled


# ─── Descriptions ─────────────────────────────────────────────────────────────


def hold_description(hand: Sequence[int], holds: Sequence[bool]) -> str:
    """Describe a hold pattern in a few words.

    Examples:
        >>> hold_description((36, 37, 12, 24, 30), (True, True, False, False, False))
        'Keep pair of Js'
        >>> hold_description((36, 37, 12, 24, 30), (False,) * 5)
        'Discard all'
    """
    kept = [c for c, held in zip(hand, holds) if held]
    if len(kept) == len(hand):
        return f"Keep all ({classify(hand).description})"
    if not kept:
        return "Discard all"
    names = [RANK_NAMES[card_rank(c)] for c in kept]
    if len(kept) == 2:
        a, b = kept
        if card_rank(a) == card_rank(b):
            return f"Keep pair of {names[0]}s"
        if card_rank(a) in HIGH_RANKS and card_rank(b) in HIGH_RANKS:
            suffix = " suited" if card_suit(a) == card_suit(b) else ""
            return f"Keep {names[0]} {names[1]}{suffix}"
    return "Keep " + " ".join(names)


# ─── Validation helpers ───────────────────────────────────────────────────────


def _check_bet(bet: int) -> None:
    if not MIN_BET <= bet <= MAX_BET:
        raise ValueError(f"Bet must be between {MIN_BET} and {MAX_BET}, got {bet}.")


def _check_holds(holds: Sequence[bool]) -> HoldPattern:
    if len(holds) != HAND_SIZE:
        raise ValueError(f"Hold pattern must have {HAND_SIZE} entries, got {len(holds)}.")
    return tuple(bool(h) for h in holds)


# ─── Analysis ─────────────────────────────────────────────────────────────────


def _build_combination(
    hand: tuple[int, ...],
    holds: HoldPattern,
    value: float,
    is_exact: bool,
) -> HoldCombination:
    kept = tuple(c for c, held in zip(hand, holds) if held)
    hand_type = classify(hand).hand_type if len(kept) == HAND_SIZE else None
    return HoldCombination(
        holds=holds,
        pattern_index=pattern_to_index(holds),
        kept_cards=kept,
        discard_count=HAND_SIZE - len(kept),
        expected_value=value,
        description=hold_description(hand, holds),
        hand_type=hand_type,
        is_exact=is_exact,
    )


def _rank_and_package(
    hand: tuple[int, ...],
    bet: int,
    results: list[HoldCombination],
    player_choice: Sequence[bool] | None,
    is_complete: bool,
    round_id: int | None,
) -> EVAnalysis:
    ordered = tuple(sorted(results, key=lambda c: -c.expected_value))

    player_combo = None
    player_rank = None
    player_tie_rank = None
    if player_choice is not None:
        target = _check_holds(player_choice)
        for position, combo in enumerate(ordered, start=1):
            if combo.holds == target:
                player_combo = combo
                player_rank = position
                break
        if player_combo is not None:
            player_tie_rank = 1 + sum(
                1 for c in ordered
                if c.expected_value > player_combo.expected_value + _EV_TOLERANCE
            )

    return EVAnalysis(
        hand=hand,
        bet=bet,
        combinations=ordered,
        optimal_choice=ordered[0],
        player_choice=player_combo,
        player_rank=player_rank,
        player_tie_rank=player_tie_rank,
        is_complete=is_complete,
        round_id=round_id,
    )


def analyze(
    hand: Sequence[int],
    bet: int = 1,
    player_choice: Sequence[bool] | None = None,
    *,
    sample_size: int | None = None,
    rng: np.random.Generator | int | None = None,
    table: PayTable = JACKS_OR_BETTER_9_6,
    cache: EVCache | None = DEFAULT_CACHE,
    workers: int | None = None,
    round_id: int | None = None,
) -> EVAnalysis:
    """Compute and rank the expected value of all 32 hold patterns.

    Args:
        hand:          The dealt five cards, in display order.
        bet:           Bet size; must be 1..5 (out-of-range bets are rejected).
        player_choice: Optional hold pattern to locate in the ranking.
        sample_size:   Enable sampling for four- and five-card draws.
        rng:           Generator or seed used when sampling.
        table:         Pay table.
        cache:         Memo for exact values; None disables caching.
        workers:       When > 1, patterns are evaluated on a thread pool. Each
                       pattern only reads the hand and writes its own slot.
        round_id:      Stamped on the result so callers can discard analyses
                       of superseded rounds.

    Returns:
        EVAnalysis with 32 entries sorted best first.

    Raises:
        ValueError: On a hand that is not five distinct cards, a bet outside
                    1..5, or a player_choice of the wrong length.
    """
    hand = validate_hand(hand)
    _check_bet(bet)
    if player_choice is not None:
        _check_holds(player_choice)

    pay = _payout_table(bet, table)
    table_key = _table_key(table)
    if sample_size is not None:
        base = rng if isinstance(rng, np.random.Generator) else np.random.default_rng(rng)
        pattern_rngs = base.spawn(NUM_HOLD_PATTERNS)
    else:
        pattern_rngs = [None] * NUM_HOLD_PATTERNS

    def evaluate(index: int) -> HoldCombination:
        holds = ALL_HOLD_PATTERNS[index]
        value, exact = _expected_value(
            hand, holds, bet, sample_size, pattern_rngs[index], table, cache, pay, table_key,
        )
        return _build_combination(hand, holds, value, exact)

    started = time.perf_counter()
    if workers is not None and workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(evaluate, range(NUM_HOLD_PATTERNS)))
    else:
        results = [evaluate(i) for i in range(NUM_HOLD_PATTERNS)]
    elapsed = time.perf_counter() - started

    is_complete = all(c.is_exact for c in results)
    logger.debug(
        "Analysed %s at bet %d in %.3fs (complete=%s, cache hits=%d, misses=%d)",
        hand, bet, elapsed, is_complete,
        cache.hits if cache is not None else 0,
        cache.misses if cache is not None else 0,
    )
    return _rank_and_package(hand, bet, results, player_choice, is_complete, round_id)


# ─── Fast partial analysis ────────────────────────────────────────────────────


def _is_four_card_straight_draw(values: list[int]) -> bool:
    """True if four sorted rank values (2..14) can make a straight with one card."""
    if len(values) != 4 or len(set(values)) != 4:
        return False
    span = values[3] - values[0]
    if span in (3, 4):
        return True
    if 14 in values:
        others = [v for v in values if v != 14]
        if max(others) <= 5:
            return True      # A-2-3-4, A-2-3-5, ...
        if min(others) >= 10:
            return True      # A-K-Q-J, A-K-Q-10, ...
    return False


def key_hold_patterns(hand: Sequence[int]) -> list[HoldPattern]:
    """Return the strategically interesting subset of hold patterns.

    Always includes hold-all and discard-all, then every made pair/trips/quads,
    four-card straight draws, four-card flush draws and each single high card.
    Duplicates are removed; first occurrence wins.
    """
    patterns: list[HoldPattern] = [(True,) * HAND_SIZE, (False,) * HAND_SIZE]

    by_rank: dict[int, list[int]] = {}
    by_suit: dict[int, list[int]] = {}
    for i, c in enumerate(hand):
        by_rank.setdefault(card_rank(c), []).append(i)
        by_suit.setdefault(card_suit(c), []).append(i)

    for positions in by_rank.values():
        if len(positions) >= 2:
            patterns.append(tuple(i in positions for i in range(HAND_SIZE)))

    for dropped in range(HAND_SIZE):
        values = sorted(rank_value(c) for i, c in enumerate(hand) if i != dropped)
        if _is_four_card_straight_draw(values):
            patterns.append(tuple(i != dropped for i in range(HAND_SIZE)))

    for positions in by_suit.values():
        if len(positions) >= 4:
            chosen = positions[:4]
            patterns.append(tuple(i in chosen for i in range(HAND_SIZE)))

    for i, c in enumerate(hand):
        if card_rank(c) in HIGH_RANKS:
            patterns.append(tuple(j == i for j in range(HAND_SIZE)))

    return list(dict.fromkeys(patterns))


def analyze_top_plays(
    hand: Sequence[int],
    bet: int = 1,
    player_choice: Sequence[bool] | None = None,
    *,
    sample_size: int | None = DEFAULT_SAMPLE_SIZE,
    rng: np.random.Generator | int | None = None,
    table: PayTable = JACKS_OR_BETTER_9_6,
    cache: EVCache | None = DEFAULT_CACHE,
    round_id: int | None = None,
) -> EVAnalysis:
    """Quick analysis over key_hold_patterns() only, for immediate feedback.

    The result is always flagged ``is_complete=False``: it covers a subset of
    the 32 patterns and, by default, samples the four- and five-card draws.
    The player's choice is evaluated even when it is outside the subset, and
    its tie rank counts the evaluated patterns with strictly greater EV.
    """
    hand = validate_hand(hand)
    _check_bet(bet)

    patterns = key_hold_patterns(hand)
    if player_choice is not None:
        choice = _check_holds(player_choice)
        if choice not in patterns:
            patterns.append(choice)

    pay = _payout_table(bet, table)
    table_key = _table_key(table)
    generator = rng if isinstance(rng, np.random.Generator) else np.random.default_rng(rng)

    results = []
    for holds in patterns:
        value, exact = _expected_value(
            hand, holds, bet, sample_size, generator, table, cache, pay, table_key,
        )
        results.append(_build_combination(hand, holds, value, exact))

    return _rank_and_package(hand, bet, results, player_choice, False, round_id)


def is_optimal_choice(analysis: EVAnalysis) -> bool:
    """True when the player's hold is worth as much as the best hold.

    Holds tied with the optimum count as correct, since the domain does not
    prefer one equal-EV hold over another.
    """
    if analysis.player_choice is None:
        raise ValueError("Analysis has no player choice to judge.")
    return (
        analysis.player_choice.expected_value
        >= analysis.optimal_choice.expected_value - _EV_TOLERANCE
    )


def with_player_choice(analysis: EVAnalysis, player_choice: Sequence[bool]) -> EVAnalysis:
    """Return ``analysis`` with the player's hold located in its ranking.

    Lets an analysis started at deal time, before the player has chosen, be
    scored once the holds are known without recomputing any expectation.
    """
    return _rank_and_package(
        analysis.hand,
        analysis.bet,
        list(analysis.combinations),
        player_choice,
        analysis.is_complete,
        analysis.round_id,
    )

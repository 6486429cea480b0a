"""
Round state and the deal → hold → draw flow.

Every transition is a pure function from one frozen RoundState to the next:

    INITIAL --deal_round--> DEALT --toggle_hold*--> DEALT --draw--> DRAWN
       ^                                                              |
       +---------------------------- deal_round ----------------------+

A rejected action raises ValueError and returns nothing, so the caller's
existing state remains the authoritative one. Each deal increments
``round_id``; asynchronous analyses are stamped with it so a result computed
for an earlier round is never shown against a new hand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum, auto

import numpy as np

from .cards import HAND_SIZE, hand_to_str
from .deck import create_deck, deal, replace_discards, shuffle_deck
from .hand_evaluator import HandResult, classify
from .pay_table import JACKS_OR_BETTER_9_6, MAX_BET, MIN_BET, PayTable, payout

logger = logging.getLogger(__name__)

DEFAULT_CREDITS: int = 1000


# ─── Enumerations ─────────────────────────────────────────────────────────────

class Phase(Enum):
    INITIAL = auto()
    DEALT = auto()
    DRAWN = auto()


# ─── State / Result types ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class RoundState:
    """Immutable snapshot of the game between player actions.

    Attributes:
        deck:        Undealt cards in deal order (empty before the first deal).
        hand:        The five cards on the table (empty before the first deal).
        holds:       Hold flag per position.
        credits:     Credit balance after the current bet was debited.
        bet:         Credits wagered per round, 1..5.
        phase:       Where the round is in the deal/draw cycle.
        round_id:    Incremented on every deal.
        last_result: Classification of the final hand once drawn.
    """
    deck: tuple[int, ...] = ()
    hand: tuple[int, ...] = ()
    holds: tuple[bool, ...] = (False,) * HAND_SIZE
    credits: int = DEFAULT_CREDITS
    bet: int = MIN_BET
    phase: Phase = Phase.INITIAL
    round_id: int = 0
    last_result: HandResult | None = None

    def __str__(self) -> str:
        held = ''.join('H' if h else '.' for h in self.holds)
        return (
            f"Round {self.round_id} [{self.phase.name}] "
            f"hand={hand_to_str(self.hand) or '-'} holds={held} "
            f"credits={self.credits} bet={self.bet}"
        )


@dataclass(frozen=True)
class DrawResult:
    """Outcome of the draw, from the player's perspective.

    Attributes:
        final_hand:    The hand after discards were replaced.
        hand_result:   Its classification.
        payout:        Credits returned by the pay table.
        credits_delta: Net change for the round: payout minus bet.
    """
    final_hand: tuple[int, ...]
    hand_result: HandResult
    payout: int
    credits_delta: int


# ─── Transitions ──────────────────────────────────────────────────────────────

def new_game(credits: int = DEFAULT_CREDITS, bet: int = MIN_BET) -> RoundState:
    """Create the initial state: no hand, nothing held."""
    if credits < 0:
        raise ValueError(f"Credits cannot be negative, got {credits}.")
    if not MIN_BET <= bet <= MAX_BET:
        raise ValueError(f"Bet must be between {MIN_BET} and {MAX_BET}, got {bet}.")
    return RoundState(credits=credits, bet=bet)


def deal_round(
    state: RoundState,
    rng: np.random.Generator | int | None = None,
) -> RoundState:
    """Debit the bet, shuffle a fresh deck and deal five cards.

    Raises:
        ValueError: If a hand is already dealt and awaiting the draw, or the
                    credit balance is below the bet.
    """
    if state.phase == Phase.DEALT:
        raise ValueError("Cannot deal: the current hand has not been drawn yet.")
    if state.credits < state.bet:
        raise ValueError(
            f"Insufficient credits: {state.credits} available, bet is {state.bet}."
        )

    hand, rest = deal(shuffle_deck(create_deck(), rng), HAND_SIZE)
    new_state = replace(
        state,
        deck=tuple(int(c) for c in rest),
        hand=hand,
        holds=(False,) * HAND_SIZE,
        credits=state.credits - state.bet,
        phase=Phase.DEALT,
        round_id=state.round_id + 1,
        last_result=None,
    )
    logger.debug("Dealt %s", new_state)
    return new_state


def toggle_hold(state: RoundState, position: int) -> RoundState:
    """Flip the hold flag at ``position`` (0–4).

    Raises:
        ValueError: Outside the DEALT phase or for an invalid position.
    """
    if state.phase != Phase.DEALT:
        raise ValueError(f"Holds can only change after the deal, phase is {state.phase.name}.")
    if not 0 <= position < HAND_SIZE:
        raise ValueError(f"Hold position must be 0..{HAND_SIZE - 1}, got {position}.")
    holds = list(state.holds)
    holds[position] = not holds[position]
    return replace(state, holds=tuple(holds))


def set_holds(state: RoundState, holds: tuple[bool, ...]) -> RoundState:
    """Replace the whole hold pattern at once (e.g. to apply advice)."""
    if state.phase != Phase.DEALT:
        raise ValueError(f"Holds can only change after the deal, phase is {state.phase.name}.")
    if len(holds) != HAND_SIZE:
        raise ValueError(f"Hold pattern must have {HAND_SIZE} entries, got {len(holds)}.")
    return replace(state, holds=tuple(bool(h) for h in holds))


def draw(
    state: RoundState,
    table: PayTable = JACKS_OR_BETTER_9_6,
) -> tuple[RoundState, DrawResult]:
    """Replace the discarded cards, classify the final hand and pay it.

    Raises:
        ValueError: Outside the DEALT phase, or if the deck cannot cover the
                    discards.
    """
    if state.phase != Phase.DEALT:
        raise ValueError(f"Cannot draw in phase {state.phase.name}.")

    final_hand, rest = replace_discards(
        state.hand, state.holds, np.array(state.deck, dtype=np.int8)
    )
    result = classify(final_hand)
    paid = payout(result.hand_type, state.bet, table)

    new_state = replace(
        state,
        deck=tuple(int(c) for c in rest),
        hand=final_hand,
        credits=state.credits + paid,
        phase=Phase.DRAWN,
        last_result=result,
    )
    logger.debug("Drew %s -> %s, paid %d", hand_to_str(final_hand), result.description, paid)
    return new_state, DrawResult(
        final_hand=final_hand,
        hand_result=result,
        payout=paid,
        credits_delta=paid - state.bet,
    )


def set_bet(state: RoundState, bet: int) -> RoundState:
    """Change the bet between rounds.

    Raises:
        ValueError: While a hand is dealt, for a bet outside 1..5, or for a
                    bet larger than the credit balance.
    """
    if state.phase == Phase.DEALT:
        raise ValueError("Cannot change the bet while a hand is in play.")
    if not MIN_BET <= bet <= MAX_BET:
        raise ValueError(f"Bet must be between {MIN_BET} and {MAX_BET}, got {bet}.")
    if bet > state.credits:
        raise ValueError(f"Bet {bet} exceeds available credits {state.credits}.")
    return replace(state, bet=bet)


def reset_round(state: RoundState) -> RoundState:
    """Clear the table, keeping credits, bet and round counter."""
    return replace(
        state,
        deck=(),
        hand=(),
        holds=(False,) * HAND_SIZE,
        phase=Phase.INITIAL,
        last_result=None,
    )

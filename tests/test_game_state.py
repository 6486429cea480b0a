"""Tests for videopoker/engine/game_state.py — the deal → hold → draw round flow."""

from __future__ import annotations

from dataclasses import replace

import numpy as np
import pytest

from tests.conftest import hand
from videopoker.engine.deck import build_deck_from_strs
from videopoker.engine.game_state import (
    DEFAULT_CREDITS,
    Phase,
    RoundState,
    deal_round,
    draw,
    new_game,
    reset_round,
    set_bet,
    set_holds,
    toggle_hold,
)
from videopoker.engine.hand_evaluator import HandType


@pytest.fixture
def dealt() -> RoundState:
    return deal_round(new_game(credits=100, bet=5), rng=11)


def stacked_state(hand_strs, deck_strs, bet=1, credits=99) -> RoundState:
    """A DEALT state with a known hand and a stacked draw deck."""
    return RoundState(
        deck=tuple(build_deck_from_strs(*deck_strs).tolist()),
        hand=hand(*hand_strs),
        credits=credits,
        bet=bet,
        phase=Phase.DEALT,
        round_id=1,
    )


class TestNewGame:
    def test_defaults(self):
        state = new_game()
        assert state.credits == DEFAULT_CREDITS == 1000
        assert state.bet == 1
        assert state.phase == Phase.INITIAL
        assert state.hand == ()
        assert state.round_id == 0

    def test_bad_bet(self):
        with pytest.raises(ValueError):
            new_game(bet=6)

    def test_negative_credits(self):
        with pytest.raises(ValueError):
            new_game(credits=-1)


class TestDealRound:
    def test_deals_five_and_debits_bet(self, dealt):
        assert len(dealt.hand) == 5
        assert len(dealt.deck) == 47
        assert not set(dealt.hand) & set(dealt.deck)
        assert dealt.credits == 95
        assert dealt.phase == Phase.DEALT

    def test_clears_holds_and_increments_round(self, dealt):
        after_draw, _ = draw(toggle_hold(dealt, 0))
        again = deal_round(after_draw, rng=12)
        assert again.holds == (False,) * 5
        assert again.round_id == dealt.round_id + 1
        assert again.last_result is None

    def test_insufficient_credits(self):
        state = new_game(credits=3, bet=1)
        state = replace(state, bet=5)
        with pytest.raises(ValueError, match="Insufficient credits"):
            deal_round(state)

    def test_cannot_deal_twice(self, dealt):
        with pytest.raises(ValueError):
            deal_round(dealt)

    def test_seeded_deal_reproducible(self):
        a = deal_round(new_game(), rng=3)
        b = deal_round(new_game(), rng=3)
        assert a.hand == b.hand

    def test_accepts_generator(self):
        state = deal_round(new_game(), rng=np.random.default_rng(0))
        assert len(state.hand) == 5

    def test_rejection_leaves_state_untouched(self, dealt):
        with pytest.raises(ValueError):
            deal_round(dealt)
        assert dealt.phase == Phase.DEALT
        assert dealt.credits == 95


class TestHolds:
    def test_toggle_on_and_off(self, dealt):
        once = toggle_hold(dealt, 2)
        assert once.holds == (False, False, True, False, False)
        assert toggle_hold(once, 2).holds == (False,) * 5

    def test_toggle_does_not_mutate(self, dealt):
        toggle_hold(dealt, 0)
        assert dealt.holds == (False,) * 5

    @pytest.mark.parametrize("position", [-1, 5])
    def test_bad_position(self, dealt, position):
        with pytest.raises(ValueError):
            toggle_hold(dealt, position)

    def test_toggle_before_deal(self):
        with pytest.raises(ValueError):
            toggle_hold(new_game(), 0)

    def test_toggle_after_draw(self, dealt):
        drawn, _ = draw(dealt)
        with pytest.raises(ValueError):
            toggle_hold(drawn, 0)

    def test_set_holds(self, dealt):
        assert set_holds(dealt, (1, 0, 1, 0, 0)).holds == (True, False, True, False, False)

    def test_set_holds_wrong_length(self, dealt):
        with pytest.raises(ValueError):
            set_holds(dealt, (True,) * 4)


class TestDraw:
    def test_hold_all_keeps_hand_and_deck(self, dealt):
        held = set_holds(dealt, (True,) * 5)
        drawn, result = draw(held)
        assert drawn.hand == dealt.hand
        assert drawn.deck == dealt.deck
        assert result.final_hand == dealt.hand

    def test_replaces_from_top_of_deck(self):
        state = stacked_state(("10H", "JH", "QH", "KH", "3C"), ("AH", "2S"))
        state = set_holds(state, (True, True, True, True, False))
        drawn, result = draw(state)
        assert result.final_hand == hand("10H", "JH", "QH", "KH", "AH")
        assert result.hand_result.hand_type == HandType.ROYAL_FLUSH
        assert drawn.deck == hand("2S")

    def test_royal_at_max_bet_pays_4000(self):
        state = stacked_state(("10H", "JH", "QH", "KH", "3C"), ("AH",), bet=5, credits=95)
        drawn, result = draw(set_holds(state, (True, True, True, True, False)))
        assert result.payout == 4000
        assert result.credits_delta == 3995
        assert drawn.credits == 95 + 4000

    def test_losing_hand(self):
        state = stacked_state(("2C", "5D", "9H", "JS", "KC"), ("3S", "4S", "7D", "8C", "10D"))
        drawn, result = draw(state)
        assert result.payout == 0
        assert result.credits_delta == -1
        assert drawn.credits == 99
        assert drawn.phase == Phase.DRAWN
        assert drawn.last_result == result.hand_result

    def test_draw_twice_rejected(self, dealt):
        drawn, _ = draw(dealt)
        with pytest.raises(ValueError):
            draw(drawn)

    def test_exhausted_deck_rejected(self):
        state = stacked_state(("2C", "5D", "9H", "JS", "KC"), ("3S",))
        with pytest.raises(ValueError):
            draw(state)


class TestSetBet:
    def test_between_rounds(self):
        assert set_bet(new_game(), 5).bet == 5

    def test_not_while_dealt(self, dealt):
        with pytest.raises(ValueError):
            set_bet(dealt, 1)

    @pytest.mark.parametrize("bet", [0, 6])
    def test_out_of_range(self, bet):
        with pytest.raises(ValueError):
            set_bet(new_game(), bet)

    def test_more_than_credits(self):
        with pytest.raises(ValueError, match="exceeds"):
            set_bet(new_game(credits=2), 3)


class TestResetRound:
    def test_keeps_credits_and_bet(self, dealt):
        drawn, _ = draw(dealt)
        reset = reset_round(drawn)
        assert reset.phase == Phase.INITIAL
        assert reset.hand == ()
        assert reset.credits == drawn.credits
        assert reset.bet == drawn.bet
        assert reset.round_id == drawn.round_id

    def test_str_mentions_phase(self, dealt):
        assert "DEALT" in str(dealt)

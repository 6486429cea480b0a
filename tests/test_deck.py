"""Tests for videopoker/engine/deck.py — deck creation, shuffling, dealing, and draws."""

from __future__ import annotations

import numpy as np
import pytest

from tests.conftest import hand
from videopoker.engine.deck import (
    build_deck_from_strs,
    cards_remaining,
    create_deck,
    deal,
    remaining_cards,
    replace_discards,
    shuffle_deck,
    validate_hand,
)


class TestCreateDeck:
    def test_length(self, fresh_deck):
        assert len(fresh_deck) == 52

    def test_dtype_int8(self, fresh_deck):
        assert fresh_deck.dtype == np.int8

    def test_contains_every_card_once(self, fresh_deck):
        assert sorted(fresh_deck.tolist()) == list(range(52))

    def test_independent_between_calls(self):
        deck1 = create_deck()
        deck2 = create_deck()
        deck1[0] = 51
        assert deck2[0] == 0


class TestShuffleDeck:
    def test_is_permutation(self, fresh_deck):
        shuffled = shuffle_deck(fresh_deck, rng=1)
        assert sorted(shuffled.tolist()) == list(range(52))

    def test_does_not_mutate_input(self, fresh_deck):
        before = fresh_deck.copy()
        shuffle_deck(fresh_deck, rng=1)
        np.testing.assert_array_equal(fresh_deck, before)

    def test_seed_is_reproducible(self, fresh_deck):
        np.testing.assert_array_equal(shuffle_deck(fresh_deck, 5), shuffle_deck(fresh_deck, 5))

    def test_repeated_shuffles_differ(self, fresh_deck):
        rng = np.random.default_rng(0)
        orders = {tuple(shuffle_deck(fresh_deck, rng).tolist()) for _ in range(20)}
        assert len(orders) == 20

    def test_post_deal_remainder(self, fresh_deck):
        _, rest = deal(fresh_deck)
        shuffled = shuffle_deck(rest, rng=3)
        assert len(shuffled) == 47
        assert sorted(shuffled.tolist()) == sorted(rest.tolist())


class TestDeal:
    def test_deals_from_front(self, fresh_deck):
        dealt, rest = deal(fresh_deck)
        assert dealt == (0, 1, 2, 3, 4)
        assert rest[0] == 5
        assert cards_remaining(rest) == 47

    def test_returns_python_ints(self, fresh_deck):
        dealt, _ = deal(fresh_deck)
        assert all(type(c) is int for c in dealt)

    def test_deal_zero(self, fresh_deck):
        dealt, rest = deal(fresh_deck, 0)
        assert dealt == ()
        assert len(rest) == 52

    def test_too_many_raises(self):
        with pytest.raises(ValueError):
            deal(build_deck_from_strs("AS", "KS"), 3)

    def test_negative_raises(self, fresh_deck):
        with pytest.raises(ValueError):
            deal(fresh_deck, -1)


class TestReplaceDiscards:
    def test_hold_all_consumes_nothing(self, fresh_deck):
        dealt, rest = deal(fresh_deck)
        final, rest2 = replace_discards(dealt, [True] * 5, rest)
        assert final == dealt
        np.testing.assert_array_equal(rest2, rest)

    def test_discards_filled_left_to_right(self):
        stacked = build_deck_from_strs("2C", "3C")
        dealt = hand("AH", "KD", "QS", "JC", "9H")
        final, rest = replace_discards(dealt, [True, False, True, False, True], stacked)
        assert final == hand("AH", "2C", "QS", "3C", "9H")
        assert len(rest) == 0

    def test_discard_all(self, fresh_deck):
        dealt, rest = deal(fresh_deck)
        final, rest2 = replace_discards(dealt, [False] * 5, rest)
        assert final == (5, 6, 7, 8, 9)
        assert len(rest2) == 42

    def test_insufficient_deck_raises(self):
        dealt = hand("AH", "KD", "QS", "JC", "9H")
        with pytest.raises(ValueError, match="discards"):
            replace_discards(dealt, [False] * 5, build_deck_from_strs("2C", "3C"))

    def test_wrong_hold_length_raises(self, fresh_deck):
        dealt, rest = deal(fresh_deck)
        with pytest.raises(ValueError):
            replace_discards(dealt, [True] * 4, rest)


class TestValidateHand:
    def test_valid_hand_returned_as_tuple(self):
        assert validate_hand([34, 38, 42, 46, 4]) == (34, 38, 42, 46, 4)

    def test_wrong_count(self):
        with pytest.raises(ValueError, match="exactly 5"):
            validate_hand(hand("AH", "KH"))

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            validate_hand((0, 1, 2, 3, 52))

    def test_duplicates(self):
        with pytest.raises(ValueError, match="duplicate"):
            validate_hand(hand("AH", "AH", "2C", "3C", "4C"))


class TestRemainingCards:
    def test_excludes_hand(self):
        dealt = hand("10H", "JH", "QH", "KH", "3C")
        rest = remaining_cards(dealt)
        assert len(rest) == 47
        assert not set(rest.tolist()) & set(dealt)

    def test_sorted(self):
        rest = remaining_cards(hand("AS", "2C", "3C", "4C", "5C")).tolist()
        assert rest == sorted(rest)

    def test_multiple_hands(self):
        assert len(remaining_cards((0, 1), (2, 3))) == 48

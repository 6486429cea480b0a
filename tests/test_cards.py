"""Tests for videopoker/engine/cards.py — card constants, encoding, and string I/O."""

from __future__ import annotations

import pytest

from videopoker.engine.cards import (
    HIGH_RANKS,
    RANK_ACE,
    RANK_JACK,
    RANK_NAMES,
    RANK_TEN,
    ROYAL_RANKS,
    SUIT_NAMES,
    card_rank,
    card_suit,
    card_to_pretty,
    card_to_str,
    hand_to_str,
    make_card,
    parse_hand,
    rank_value,
    str_to_card,
)


class TestCardEncoding:
    def test_rank_range(self):
        for card in range(52):
            assert 0 <= card_rank(card) <= 12

    def test_suit_range(self):
        for card in range(52):
            assert 0 <= card_suit(card) <= 3

    def test_two_of_clubs_is_card_zero(self):
        assert card_rank(0) == 0
        assert card_suit(0) == 0

    def test_ace_of_spades_is_card_51(self):
        assert card_rank(51) == RANK_ACE
        assert card_suit(51) == 3

    def test_unique_cards(self):
        pairs = {(card_rank(c), card_suit(c)) for c in range(52)}
        assert len(pairs) == 52

    def test_make_card_inverts_rank_and_suit(self):
        for card in range(52):
            assert make_card(card_rank(card), card_suit(card)) == card

    def test_make_card_rejects_bad_indices(self):
        with pytest.raises(ValueError):
            make_card(13, 0)
        with pytest.raises(ValueError):
            make_card(0, 4)


class TestRankValue:
    def test_two_is_two(self):
        assert rank_value(str_to_card("2H")) == 2

    def test_ten_is_ten(self):
        assert rank_value(str_to_card("10S")) == 10

    def test_faces(self):
        assert [rank_value(str_to_card(s)) for s in ("JC", "QC", "KC", "AC")] == [11, 12, 13, 14]


class TestRankSets:
    def test_high_ranks_are_jack_through_ace(self):
        assert {RANK_NAMES[r] for r in HIGH_RANKS} == {"J", "Q", "K", "A"}

    def test_royal_ranks_are_ten_through_ace(self):
        assert ROYAL_RANKS == HIGH_RANKS | {RANK_TEN}
        assert min(ROYAL_RANKS) == RANK_TEN
        assert RANK_JACK in ROYAL_RANKS


class TestCardToStr:
    def test_two_of_clubs(self):
        assert card_to_str(0) == "2C"

    def test_ten_of_hearts(self):
        assert card_to_str(34) == "10H"

    def test_jack_of_diamonds(self):
        assert card_to_str(37) == "JD"

    def test_pretty_uses_suit_symbol(self):
        assert card_to_pretty(34) == "10♥"
        assert card_to_pretty(51) == "A♠"

    def test_roundtrip_all_cards(self):
        for card in range(52):
            assert str_to_card(card_to_str(card)) == card


class TestStrToCard:
    def test_ace_of_spades(self):
        assert str_to_card("AS") == 51

    def test_lowercase_accepted(self):
        assert str_to_card("kh") == str_to_card("KH")

    def test_t_means_ten(self):
        assert str_to_card("TH") == str_to_card("10H") == 34

    def test_whitespace_stripped(self):
        assert str_to_card(" 3c ") == 4

    @pytest.mark.parametrize("bad", ["", "X", "1H", "11S", "AX", "10"])
    def test_invalid_strings_raise(self, bad):
        with pytest.raises(ValueError):
            str_to_card(bad)

    def test_suit_names_cover_all_suits(self):
        assert SUIT_NAMES == ["C", "D", "H", "S"]


class TestHandStrings:
    def test_parse_hand_spaces(self):
        assert parse_hand("10H JH QH KH 3C") == (34, 38, 42, 46, 4)

    def test_parse_hand_commas(self):
        assert parse_hand("JH,JD, 5C 8S 9H") == parse_hand("JH JD 5C 8S 9H")

    def test_parse_hand_propagates_errors(self):
        with pytest.raises(ValueError):
            parse_hand("JH ZZ")

    def test_hand_to_str(self):
        assert hand_to_str((48, 51)) == "AC AS"

    def test_hand_to_str_empty(self):
        assert hand_to_str(()) == ""

    def test_roundtrip(self):
        text = "AH 2D 3C 4S 5H"
        assert hand_to_str(parse_hand(text)) == text

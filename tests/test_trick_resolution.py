import pytest

from bisca.cards import Suit, beats, deserialize_card
from bisca.trick import TablePlay, TrickError, leader_seat, led_suit, trick_points, winner_seat, winning_index


def cards(*tokens):
    return [deserialize_card(token) for token in tokens]


def test_marriage_ace_takes_seven_in_either_order():
    assert winning_index(cards("7S", "AS"), Suit.SPADES) == 1
    assert winning_index(cards("AS", "7S"), Suit.SPADES) == 0


def test_marriage_holds_after_other_plays():
    assert winning_index(cards("KS", "7S", "AS"), Suit.SPADES) == 2
    assert winning_index(cards("2H", "AS", "7S", "KS"), Suit.SPADES) == 1


def test_marriage_outside_trump_matches_rank_order():
    assert winning_index(cards("7H", "AH"), Suit.SPADES) == 1


def test_lowest_trump_beats_lead_suit():
    assert winning_index(cards("KH", "2S"), Suit.SPADES) == 1


def test_both_trump_compares_rank():
    assert winning_index(cards("KS", "7S"), Suit.SPADES) == 1
    assert winning_index(cards("JS", "QS"), Suit.SPADES) == 0
    assert winning_index(cards("2H", "2S", "3S"), Suit.SPADES) == 2


def test_following_suit_beats_discard():
    assert winning_index(cards("2H", "AD"), Suit.SPADES) == 0
    assert winning_index(cards("3H", "2H"), Suit.SPADES) == 0
    assert winning_index(cards("2H", "3H"), Suit.SPADES) == 1


def test_off_suit_discards_never_take_over():
    assert winning_index(cards("2H", "AD", "AC", "7D"), Suit.SPADES) == 0


def test_off_suit_discard_does_not_beat_another_discard():
    led = Suit.HEARTS
    assert not beats(deserialize_card("AC"), deserialize_card("2D"), led, Suit.SPADES)
    assert not beats(deserialize_card("2D"), deserialize_card("AC"), led, Suit.SPADES)


def test_four_player_trick():
    assert winning_index(cards("QH", "7H", "AD", "KS"), Suit.SPADES) == 3
    assert winning_index(cards("QH", "7H", "AD", "KC"), Suit.SPADES) == 1


def test_empty_trick_raises():
    with pytest.raises(TrickError):
        winning_index([], Suit.SPADES)


def test_trick_points():
    plays = [TablePlay(f"p{i}", f"P{i}", card) for i, card in enumerate(cards("7H", "AD", "KC", "QS"))]
    assert trick_points(plays) == 11 + 10 + 4 + 2
    zero = [TablePlay("p0", "P0", card) for card in cards("2H", "3H", "4H", "6H")]
    assert trick_points(zero) == 0


@pytest.mark.parametrize("player_count", [2, 3, 4])
def test_leader_and_winner_seat_matrix(player_count):
    for leader in range(player_count):
        turn_after_trick = (leader + player_count) % player_count
        assert leader_seat(turn_after_trick, player_count) == leader
        for index in range(player_count):
            assert winner_seat(turn_after_trick, player_count, index) == (leader + index) % player_count


def test_leader_seat_rejects_empty_table():
    with pytest.raises(ValueError):
        leader_seat(0, 0)


def test_led_suit_is_first_card():
    assert led_suit(cards("3H", "AS", "7H")) is Suit.HEARTS
    assert led_suit([]) is None

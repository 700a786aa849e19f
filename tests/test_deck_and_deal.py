from random import Random

import pytest

from bisca.cards import Card, Rank, Suit, deserialize_card
from bisca.deck import build_deck, choose_trump, deal_round_robin, shuffle_deck
from bisca.game import start_game
from bisca.mechanics import RejectReason
from bisca.state import GameState, Player, add_player, create_game


def seated(count: int, chips: int = 0) -> GameState:
    players = tuple(Player(id=f"p{i}", nickname=f"P{i}", chips=chips) for i in range(count))
    return GameState(players=players)


def test_deck_has_forty_unique_cards():
    deck = build_deck()
    assert len(deck) == 40
    assert len(set(deck)) == 40
    for suit in Suit:
        assert sum(1 for card in deck if card.suit is suit) == 10
    assert not any(card.token[0] in "89" for card in deck)


def test_deck_generation_order_is_suit_major():
    deck = build_deck()
    assert [card.token for card in deck[:11]] == [
        "AS", "2S", "3S", "4S", "5S", "6S", "7S", "JS", "QS", "KS", "AH",
    ]


def test_shuffle_returns_new_sequence():
    deck = build_deck()
    original = list(deck)
    shuffled = shuffle_deck(deck, Random(3))
    assert deck == original
    assert shuffled is not deck
    assert sorted(shuffled, key=lambda c: c.token) == sorted(original, key=lambda c: c.token)


def test_round_robin_deal():
    deck = build_deck()
    hands, remainder = deal_round_robin(deck, 3)
    assert hands[0][:2] == [deck[0], deck[3]]
    assert hands[1][0] == deck[1]
    assert hands[2][0] == deck[2]
    assert remainder == deck[30:]


def test_deal_needs_enough_cards():
    with pytest.raises(ValueError):
        deal_round_robin(build_deck()[:15], 2)


def test_choose_trump_comes_from_hands():
    hands = [[deserialize_card("2S")], [deserialize_card("KH")]]
    assert choose_trump(hands, Random(1)) in {deserialize_card("2S"), deserialize_card("KH")}
    with pytest.raises(ValueError):
        choose_trump([[], []])


@pytest.mark.parametrize("count", [2, 3, 4])
def test_start_game_deal_invariants(count):
    result = start_game(seated(count), rng=Random(count))
    assert result.applied
    state = result.state

    hands = [set(player.hand) for player in state.players]
    assert all(len(player.hand) == 10 for player in state.players)
    for i in range(count):
        for j in range(i + 1, count):
            assert hands[i].isdisjoint(hands[j])

    everything = [card for player in state.players for card in player.hand] + list(state.deck)
    assert len(everything) == 40
    assert len(set(everything)) == 40
    assert len(state.deck) == 40 - 10 * count

    holders = [player.id for player in state.players if state.trump_card in player.hand]
    assert len(holders) == 1

    assert state.turn == 0
    assert state.round_number == 1
    assert state.is_game_started
    assert state.table == ()


def test_start_game_resets_scores_and_keeps_chips():
    players = tuple(
        Player(id=f"p{i}", nickname=f"P{i}", score=33, captured_cards=(Card(Rank.ACE, Suit.CLUBS),), chips=5)
        for i in range(2)
    )
    state = start_game(GameState(players=players), rng=Random(11)).state
    for player in state.players:
        assert player.score == 0
        assert player.captured_cards == ()
        granted = sum(award.chips for award in state.deal_awards if award.player_id == player.id)
        assert player.chips == 5 + granted


@pytest.mark.parametrize("count", [0, 1, 5])
def test_start_game_rejects_bad_player_count(count):
    state = create_game()
    for i in range(count):
        state = add_player(state, f"p{i}", f"P{i}")
    result = start_game(state)
    assert not result.applied
    assert result.reason is RejectReason.WRONG_PLAYER_COUNT
    assert result.state is state


@pytest.mark.parametrize(
    "deck",
    [
        build_deck() * 2,
        build_deck()[:30],
        build_deck()[:39] + [build_deck()[0]],
    ],
    ids=["doubled", "short", "duplicate"],
)
def test_start_game_refuses_malformed_deck(deck):
    with pytest.raises(ValueError):
        start_game(seated(2), rng=Random(1), deck=deck)


def test_start_game_accepts_stacked_full_deck():
    deck = list(reversed(build_deck()))
    state = start_game(seated(2), rng=Random(1), deck=deck).unwrap()
    assert list(state.players[0].hand) == deck[0:20:2]
    assert list(state.players[1].hand) == deck[1:20:2]
    dealt = [card for player in state.players for card in player.hand] + list(state.deck)
    assert sorted(dealt, key=lambda c: c.token) == sorted(build_deck(), key=lambda c: c.token)

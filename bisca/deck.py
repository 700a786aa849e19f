"""Deck creation and dealing utilities for Bisca."""

from __future__ import annotations

from random import Random
from typing import List, Optional, Sequence, Tuple

from .cards import DECK_RANKS, DECK_SUITS, Card

DECK_SIZE = 40
HAND_SIZE = 10


def build_deck() -> List[Card]:
    """Return the ordered 40-card deck (no 8, 9 or 10)."""
    return [Card(rank, suit) for suit in DECK_SUITS for rank in DECK_RANKS]


def validate_deck(cards: Sequence[Card]) -> List[Card]:
    """Return ``cards`` as a list, raising unless it is a permutation of the full deck."""
    cards = list(cards)
    if len(cards) != DECK_SIZE:
        raise ValueError(f"Deck must contain exactly {DECK_SIZE} cards.")
    if set(cards) != set(build_deck()):
        raise ValueError("Deck must hold every card of the 40-card deck exactly once.")
    return cards


def shuffle_deck(cards: Sequence[Card], rng: Optional[Random] = None) -> List[Card]:
    """Return a shuffled copy of ``cards``; the input is left untouched."""
    shuffled = list(cards)
    if rng is None:
        rng = Random()
    rng.shuffle(shuffled)
    return shuffled


def deal_round_robin(
    cards: Sequence[Card],
    num_players: int,
    *,
    hand_size: int = HAND_SIZE,
) -> Tuple[List[List[Card]], List[Card]]:
    """Deal ``hand_size`` cards to each player, card ``i`` going to player ``i % num_players``."""
    if num_players <= 0:
        raise ValueError("At least one player is required to deal.")
    total = num_players * hand_size
    if len(cards) < total:
        raise ValueError(f"Cannot deal {total} cards from a deck of {len(cards)}.")

    hands: List[List[Card]] = [[] for _ in range(num_players)]
    for index in range(total):
        hands[index % num_players].append(cards[index])
    return hands, list(cards[total:])


def choose_trump(hands: Sequence[Sequence[Card]], rng: Optional[Random] = None) -> Card:
    """Draw the trump card uniformly from the union of the dealt hands."""
    candidates = [card for hand in hands for card in hand]
    if not candidates:
        raise ValueError("Cannot choose a trump card from empty hands.")
    if rng is None:
        rng = Random()
    return rng.choice(candidates)

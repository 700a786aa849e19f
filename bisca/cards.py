"""Card-related data structures and helpers for Bisca."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


class Suit(Enum):
    SPADES = "S"
    HEARTS = "H"
    DIAMONDS = "D"
    CLUBS = "C"

    def __str__(self) -> str:
        return self.name.lower()


class Rank(Enum):
    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"

    def __str__(self) -> str:
        return self.name.lower()


# Card point values; ranks not listed are worth nothing.
CARD_POINTS: dict[Rank, int] = {
    Rank.SEVEN: 11,
    Rank.ACE: 10,
    Rank.KING: 4,
    Rank.JACK: 3,
    Rank.QUEEN: 2,
}

# Rank order from lowest to highest for trick resolution.
RANK_ORDER: list[Rank] = [
    Rank.TWO,
    Rank.THREE,
    Rank.FOUR,
    Rank.FIVE,
    Rank.SIX,
    Rank.QUEEN,
    Rank.JACK,
    Rank.KING,
    Rank.SEVEN,
    Rank.ACE,
]

RANK_STRENGTH: dict[Rank, int] = {rank: index for index, rank in enumerate(RANK_ORDER)}

# Generation order of the deck, rank-minor within each suit.
DECK_RANKS: list[Rank] = list(Rank)
DECK_SUITS: list[Suit] = list(Suit)


@dataclass(frozen=True)
class Card:
    """Immutable representation of a playing card."""

    rank: Rank
    suit: Suit

    def point_value(self) -> int:
        return CARD_POINTS.get(self.rank, 0)

    @property
    def token(self) -> str:
        return self.rank.value + self.suit.value

    def __str__(self) -> str:
        return self.token


def card_strength(card: Card) -> int:
    """Return an integer strength used for ordering cards within a suit."""
    return RANK_STRENGTH[card.rank]


def card_points(cards: Iterable[Card]) -> int:
    return sum(card.point_value() for card in cards)


def is_marriage(seven: Card, ace: Card) -> bool:
    """Return True if ``seven`` is a 7 and ``ace`` the Ace of the same suit."""
    return seven.rank is Rank.SEVEN and ace.rank is Rank.ACE and seven.suit is ace.suit


def beats(candidate: Card, current: Card, led_suit: Suit, trump: Optional[Suit]) -> bool:
    """Return True if candidate takes over from current as the best play of the trick."""
    if candidate == current:
        return False

    # The Ace married to a 7 of its suit always takes it, whoever played first.
    if is_marriage(current, candidate):
        return True
    if is_marriage(candidate, current):
        return False

    candidate_trump = trump is not None and candidate.suit is trump
    current_trump = trump is not None and current.suit is trump

    if candidate_trump and not current_trump:
        return True
    if current_trump and not candidate_trump:
        return False
    if candidate_trump and current_trump:
        return card_strength(candidate) > card_strength(current)

    candidate_follows = candidate.suit is led_suit
    current_follows = current.suit is led_suit
    if candidate_follows and not current_follows:
        return True
    if candidate_follows and current_follows:
        return card_strength(candidate) > card_strength(current)

    # Two discards off the lead suit: the standing play keeps the trick.
    return False


def serialize_card(card: Card) -> str:
    return card.token


def deserialize_card(token: str) -> Card:
    if not isinstance(token, str) or len(token) != 2:
        raise ValueError(f"Invalid card token: {token!r}")
    try:
        return Card(Rank(token[0].upper()), Suit(token[1].upper()))
    except ValueError as exc:
        raise ValueError(f"Invalid card token: {token!r}") from exc


def card_label(card: Card) -> str:
    return f"{card.rank.name.title()} of {card.suit.name.title()}"

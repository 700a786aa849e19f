"""Trick representation and resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .cards import Card, Suit, beats, card_points


class TrickError(RuntimeError):
    """Raised when a trick cannot be resolved."""


@dataclass(frozen=True)
class TablePlay:
    player_id: str
    nickname: str
    card: Card


def led_suit(cards: Sequence[Card]) -> Optional[Suit]:
    return cards[0].suit if cards else None


def winning_index(cards: Sequence[Card], trump: Optional[Suit]) -> int:
    """Return the index, within the trick, of the winning play."""
    if not cards:
        raise TrickError("Cannot determine winner on empty trick.")
    led = led_suit(cards)
    best = 0
    for index in range(1, len(cards)):
        if beats(cards[index], cards[best], led, trump):
            best = index
    return best


def trick_points(plays: Sequence[TablePlay]) -> int:
    return card_points(play.card for play in plays)


def leader_seat(turn: int, player_count: int) -> int:
    """Seat that led the trick, given the turn after every player has played.

    ``turn`` has been advanced once per play, so it went all the way round
    the table and points back at the leader.
    """
    if player_count <= 0:
        raise ValueError("player_count must be positive.")
    return (turn - player_count) % player_count


def winner_seat(turn: int, player_count: int, index: int) -> int:
    """Map an index within a full trick back to an absolute seat."""
    return (leader_seat(turn, player_count) + index) % player_count

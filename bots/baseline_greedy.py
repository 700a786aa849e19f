"""Baseline greedy bot."""

from __future__ import annotations

from typing import Optional, Sequence

from bisca.cards import Card, beats, card_strength
from bisca.game import legal_cards
from bisca.state import GameState

from .base import BotStrategy


def _point_order(card: Card) -> tuple[int, int]:
    return card.point_value(), card_strength(card)


def _winning_cards(state: GameState, candidates: Sequence[Card]) -> list[Card]:
    """Cards from ``candidates`` that would take the trick as it currently stands."""
    if not state.table:
        return list(candidates)
    led = state.table[0].card.suit
    best: Optional[Card] = None
    for play in state.table:
        if best is None or beats(play.card, best, led, state.trump_suit):
            best = play.card
    assert best is not None
    return [card for card in candidates if beats(card, best, led, state.trump_suit)]


class GreedyBot(BotStrategy):
    """Take the trick with the richest card available, otherwise shed the cheapest."""

    name = "Greedy"

    def choose_card(self, state: GameState, player_id: str) -> Card:
        legal = legal_cards(state, player_id)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        winning = _winning_cards(state, legal)
        if winning:
            return max(winning, key=_point_order)
        return min(legal, key=_point_order)

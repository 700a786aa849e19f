"""Baseline counter bot aiming to shed points."""

from __future__ import annotations

from bisca.cards import Card
from bisca.game import legal_cards
from bisca.state import GameState

from .baseline_greedy import GreedyBot, _point_order


class CounterBot(GreedyBot):
    name = "Counter"

    def choose_card(self, state: GameState, player_id: str) -> Card:
        legal = legal_cards(state, player_id)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        return min(legal, key=_point_order)

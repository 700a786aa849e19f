"""Random baseline bot."""

from __future__ import annotations

import random
from typing import Optional

from bisca.cards import Card
from bisca.game import legal_cards
from bisca.state import GameState

from .base import BotStrategy


class RandomBot(BotStrategy):
    name = "Random"

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def choose_card(self, state: GameState, player_id: str) -> Card:
        legal = legal_cards(state, player_id)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        return self._rng.choice(legal)

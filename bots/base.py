"""Common bot strategy interfaces."""

from __future__ import annotations

from bisca.cards import Card
from bisca.game import legal_cards
from bisca.state import GameState


class BotStrategy:
    """Base class for bot policies."""

    name: str = "BaseBot"

    def on_hand_start(self, state: GameState, player_id: str) -> None:
        """Optional hook invoked after each deal."""
        return None

    def choose_card(self, state: GameState, player_id: str) -> Card:
        """Return the card to play; defaults to the first legal one."""
        legal = legal_cards(state, player_id)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        return legal[0]

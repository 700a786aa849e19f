"""Multi-hand match orchestration for Bisca."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from random import Random
from typing import List, Optional, Sequence

from .cards import Card
from .game import GameResult, is_hand_complete, play_card, reset_to_lobby, resolve_trick, start_game
from .rules_schema import RuleSet
from .scoring import HandSummary, match_winners, score_hand
from .state import GamePhase, GameState, add_player, create_game, remove_player

logger = logging.getLogger(__name__)


class MatchError(RuntimeError):
    """Raised when the match is driven out of order."""


@dataclass
class MatchSession:
    """Hold the single game state slot of a table and track chips across hands."""

    total_hands: int = 1
    seed: Optional[int] = None
    rules: RuleSet = field(default_factory=RuleSet.default)
    state: GameState = field(default_factory=create_game)
    current_hand: int = field(default=0, init=False)
    hand_history: List[HandSummary] = field(default_factory=list, init=False)
    rng: Random = field(init=False)

    def __post_init__(self) -> None:
        if self.total_hands < 1:
            raise MatchError("A match needs at least one hand.")
        self.rng = Random(self.seed)

    @classmethod
    def from_rules(cls, rules: RuleSet, *, seed: Optional[int] = None) -> "MatchSession":
        return cls(total_hands=rules.match.total_hands, seed=seed, rules=rules)

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    def add_player(self, player_id: str, nickname: str) -> GameState:
        if self.state.is_game_started:
            raise MatchError("Cannot join once the match has started.")
        self.state = add_player(self.state, player_id, nickname)
        return self.state

    def remove_player(self, player_id: str) -> GameState:
        """Remove a player; a departure mid-match sends the table back to the lobby."""
        was_started = self.state.is_game_started
        self.state = remove_player(self.state, player_id)
        if was_started:
            logger.info("Player %s left mid-match, resetting to lobby", player_id)
            self.reset()
        return self.state

    def start_hand(self, deck: Optional[Sequence[Card]] = None) -> GameState:
        if self.is_over():
            raise MatchError("Match is already over.")
        if self.state.is_game_started and self.phase is not GamePhase.HAND_COMPLETE:
            raise MatchError("A hand is already in progress.")
        if self.phase is GamePhase.HAND_COMPLETE and len(self.hand_history) < self.current_hand:
            raise MatchError("Finish the current hand before dealing the next one.")

        result = start_game(self.state, rng=self.rng, deck=deck)
        if not result.applied:
            raise MatchError(f"Cannot start hand: {result.reason}")
        self.state = result.state
        self.current_hand += 1
        logger.info(
            "Hand %d/%d dealt to %d players, trump %s",
            self.current_hand,
            self.total_hands,
            self.state.player_count,
            self.state.trump_card,
        )
        return self.state

    def play(self, player_id: str, card: Card) -> GameResult:
        result = play_card(self.state, player_id, card, rules=self.rules)
        if result.applied:
            self.state = result.state
        else:
            logger.debug("Rejected %s from %s: %s", card, player_id, result.reason)
        return result

    def resolve(self) -> GameResult:
        result = resolve_trick(self.state)
        if result.applied:
            self.state = result.state
            logger.debug(
                "Trick %d taken by %s with %s",
                self.state.round_number - 1,
                self.state.last_trick_winner_id,
                [str(play.card) for play in self.state.last_trick_cards],
            )
        return result

    def finish_hand(self) -> HandSummary:
        if not is_hand_complete(self.state):
            raise MatchError("Cannot finish hand before play is complete.")
        if len(self.hand_history) >= self.current_hand:
            raise MatchError("Hand has already been scored.")
        self.state, summary = score_hand(self.state)
        self.hand_history.append(summary)
        logger.info("Hand %d finished: scores=%s chips=%s", self.current_hand, summary.scores, summary.chips)
        return summary

    def hand_pending_score(self) -> bool:
        return is_hand_complete(self.state) and len(self.hand_history) < self.current_hand

    def is_over(self) -> bool:
        return self.current_hand >= self.total_hands and len(self.hand_history) >= self.total_hands

    def winners(self) -> List[str]:
        if not self.is_over():
            raise MatchError("Match is not over yet.")
        return match_winners(self.state.players)

    def reset(self) -> GameState:
        """Return to the lobby with the seated players and a fresh chip count."""
        self.state = reset_to_lobby(self.state)
        self.current_hand = 0
        self.hand_history = []
        return self.state

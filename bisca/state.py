"""Game state data model for Bisca.

Every structure here is immutable: engine operations build a new
``GameState`` with ``dataclasses.replace`` instead of mutating players,
hands or the table in place.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import FrozenSet, Optional, Tuple

from .cards import Card, Suit
from .trick import TablePlay

MIN_PLAYERS = 2
MAX_PLAYERS = 4


class GamePhase(Enum):
    LOBBY = auto()
    IN_PROGRESS = auto()
    HAND_COMPLETE = auto()


class ChipBonus(Enum):
    TRUMP_TWO = auto()
    TRUMP_MARRIAGE = auto()
    ACE_TOOK_SEVEN = auto()
    HIGHEST_SCORE = auto()
    KING_LAST_TRICK = auto()


@dataclass(frozen=True)
class ChipAward:
    player_id: str
    bonus: ChipBonus
    chips: int = 1


@dataclass(frozen=True)
class Player:
    id: str
    nickname: str
    hand: Tuple[Card, ...] = ()
    score: int = 0
    captured_cards: Tuple[Card, ...] = ()
    chips: int = 0

    def holds(self, card: Card) -> bool:
        return card in self.hand

    def holds_suit(self, suit: Suit) -> bool:
        return any(card.suit is suit for card in self.hand)


@dataclass(frozen=True)
class GameState:
    players: Tuple[Player, ...] = ()
    table: Tuple[TablePlay, ...] = ()
    turn: int = 0
    trump_card: Optional[Card] = None
    deck: Tuple[Card, ...] = ()
    round_number: int = 0
    is_game_started: bool = False
    last_trick_winner_id: Optional[str] = None
    last_trick_cards: Tuple[TablePlay, ...] = ()
    played_trump_ace_by: FrozenSet[str] = frozenset()
    captured_opp_trump_seven_by: FrozenSet[str] = frozenset()
    deal_awards: Tuple[ChipAward, ...] = ()

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def trump_suit(self) -> Optional[Suit]:
        return self.trump_card.suit if self.trump_card is not None else None

    @property
    def current_player(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.turn]

    @property
    def phase(self) -> GamePhase:
        if not self.is_game_started:
            return GamePhase.LOBBY
        if not self.table and all(not player.hand for player in self.players):
            return GamePhase.HAND_COMPLETE
        return GamePhase.IN_PROGRESS

    def trick_is_full(self) -> bool:
        return bool(self.players) and len(self.table) == len(self.players)

    def seat_of(self, player_id: str) -> Optional[int]:
        for index, player in enumerate(self.players):
            if player.id == player_id:
                return index
        return None

    def player(self, player_id: str) -> Optional[Player]:
        seat = self.seat_of(player_id)
        return self.players[seat] if seat is not None else None


def create_game() -> GameState:
    return GameState()


def add_player(state: GameState, player_id: str, nickname: str) -> GameState:
    """Seat a new player at the end of the table; known ids are left as they are."""
    if state.seat_of(player_id) is not None:
        return state
    return replace(state, players=state.players + (Player(id=player_id, nickname=nickname),))


def remove_player(state: GameState, player_id: str) -> GameState:
    seat = state.seat_of(player_id)
    if seat is None:
        return state
    players = state.players[:seat] + state.players[seat + 1 :]
    turn = state.turn
    if players:
        if seat < turn:
            turn -= 1
        turn %= len(players)
    else:
        turn = 0
    return replace(state, players=players, turn=turn)


def replace_player(players: Tuple[Player, ...], seat: int, player: Player) -> Tuple[Player, ...]:
    return players[:seat] + (player,) + players[seat + 1 :]

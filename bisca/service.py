"""Convenience service layer for the room server, UI and bots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from .cards import Card, card_label, deserialize_card, serialize_card
from .game import legal_cards
from .match import MatchSession
from .scoring import HandSummary
from .state import GameState
from .trick import TablePlay


@dataclass
class PlayerView:
    id: str
    nickname: str
    hand_size: int
    score: int
    chips: int
    captured_count: int


@dataclass
class TablePlayView:
    player_id: str
    nickname: str
    card: str
    label: str


@dataclass
class TableView:
    phase: str
    players: List[PlayerView]
    hand: List[str]
    hand_labels: List[str]
    legal_cards: List[str]
    table: List[TablePlayView]
    turn: int
    current_player_id: Optional[str]
    trump_card: Optional[str]
    round_number: int
    deck_size: int
    last_trick_winner_id: Optional[str]
    last_trick_cards: List[TablePlayView]
    played_trump_a_by_player_id: Dict[str, bool]
    captured_opp_trump7_by_player_id: Dict[str, bool]

    def as_payload(self) -> dict:
        return {
            "phase": self.phase,
            "players": [
                {
                    "id": player.id,
                    "nickname": player.nickname,
                    "handSize": player.hand_size,
                    "score": player.score,
                    "chips": player.chips,
                    "capturedCount": player.captured_count,
                }
                for player in self.players
            ],
            "hand": list(self.hand),
            "legalCards": list(self.legal_cards),
            "table": [_play_payload(play) for play in self.table],
            "turn": self.turn,
            "currentPlayerId": self.current_player_id,
            "trumpCard": self.trump_card,
            "roundNumber": self.round_number,
            "deckSize": self.deck_size,
            "lastTrickWinnerId": self.last_trick_winner_id,
            "lastTrickCards": [_play_payload(play) for play in self.last_trick_cards],
            "playedTrumpAByPlayerId": dict(self.played_trump_a_by_player_id),
            "capturedOppTrump7ByPlayerId": dict(self.captured_opp_trump7_by_player_id),
        }


def _play_payload(play: TablePlayView) -> dict:
    return {"playerId": play.player_id, "nickname": play.nickname, "card": play.card}


def _play_view(play: TablePlay) -> TablePlayView:
    return TablePlayView(
        player_id=play.player_id,
        nickname=play.nickname,
        card=serialize_card(play.card),
        label=card_label(play.card),
    )


def build_view(state: GameState, perspective: Optional[str] = None, *, rules=None) -> TableView:
    """Describe ``state`` as seen from the seat of ``perspective``; other hands stay hidden."""
    own = state.player(perspective) if perspective is not None else None
    hand: List[Card] = list(own.hand) if own is not None else []
    legal: List[Card] = legal_cards(state, perspective, rules=rules) if own is not None else []
    current = state.current_player if state.is_game_started else None

    return TableView(
        phase=state.phase.name.lower(),
        players=[
            PlayerView(
                id=player.id,
                nickname=player.nickname,
                hand_size=len(player.hand),
                score=player.score,
                chips=player.chips,
                captured_count=len(player.captured_cards),
            )
            for player in state.players
        ],
        hand=[serialize_card(card) for card in hand],
        hand_labels=[card_label(card) for card in hand],
        legal_cards=[serialize_card(card) for card in legal],
        table=[_play_view(play) for play in state.table],
        turn=state.turn,
        current_player_id=current.id if current is not None else None,
        trump_card=serialize_card(state.trump_card) if state.trump_card is not None else None,
        round_number=state.round_number,
        deck_size=len(state.deck),
        last_trick_winner_id=state.last_trick_winner_id,
        last_trick_cards=[_play_view(play) for play in state.last_trick_cards],
        played_trump_a_by_player_id={player_id: True for player_id in sorted(state.played_trump_ace_by)},
        captured_opp_trump7_by_player_id={
            player_id: True for player_id in sorted(state.captured_opp_trump_seven_by)
        },
    )


def serialize_state(state: GameState, perspective: Optional[str] = None, *, rules=None) -> dict:
    return build_view(state, perspective, rules=rules).as_payload()


def serialize_summary(summary: HandSummary) -> dict:
    return {
        "scores": dict(summary.scores),
        "chips": dict(summary.chips),
        "awards": [
            {"playerId": award.player_id, "bonus": award.bonus.name.lower(), "chips": award.chips}
            for award in summary.awards
        ],
        "lastTrickWinnerId": summary.last_trick_winner_id,
    }


class MatchService:
    """Facade around MatchSession for UI and server consumers."""

    def __init__(self, session: Optional[MatchSession] = None) -> None:
        self.session = session or MatchSession()

    # Lobby -------------------------------------------------------------

    def join(self, player_id: str, nickname: str) -> TableView:
        self.session.add_player(player_id, nickname)
        return self.get_view(player_id)

    def leave(self, player_id: str) -> TableView:
        self.session.remove_player(player_id)
        return self.get_view()

    def has_player(self, player_id: str) -> bool:
        return self.session.state.seat_of(player_id) is not None

    # Actions -----------------------------------------------------------

    def start_hand(self) -> TableView:
        self.session.start_hand()
        return self.get_view()

    def play_card(self, player_id: str, token: str) -> TableView:
        card = deserialize_card(token)
        self.session.play(player_id, card).unwrap()
        return self.get_view(player_id)

    def resolve_trick(self) -> TableView:
        self.session.resolve().unwrap()
        return self.get_view()

    def finish_hand(self) -> HandSummary:
        return self.session.finish_hand()

    # Views -------------------------------------------------------------

    @property
    def state(self) -> GameState:
        return self.session.state

    def get_view(self, perspective: Optional[str] = None) -> TableView:
        return build_view(self.session.state, perspective, rules=self.session.rules)

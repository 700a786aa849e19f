"""Room bookkeeping for the Bisca play service.

A room owns exactly one ``MatchService`` (and so one game state slot) and one
``asyncio.Lock``. Every method below is synchronous and must be called with
the room lock held; the transport layer sends the returned messages.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from bisca.cards import deserialize_card
from bisca.match import MatchError, MatchSession
from bisca.rules_schema import MatchConfig, RoomConfig, RuleSet
from bisca.service import MatchService, serialize_state, serialize_summary
from bisca.state import MIN_PLAYERS, GamePhase

logger = logging.getLogger(__name__)

# Message kind that each connection receives personalized to its own seat.
STATE = "gameState"


@dataclass
class Outbound:
    kind: str
    payload: dict = field(default_factory=dict)
    target: Optional[str] = None

    def message(self) -> dict:
        return {"type": self.kind, **self.payload}


@dataclass
class Room:
    id: str
    config: RoomConfig
    service: MatchService
    owner_id: Optional[str] = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    generation: int = 0
    pending_tasks: Set["asyncio.Task[None]"] = field(default_factory=set)

    @property
    def session(self) -> MatchSession:
        return self.service.session

    @property
    def player_ids(self) -> List[str]:
        return [player.id for player in self.session.state.players]

    def meta(self) -> dict:
        state = self.session.state
        return {
            "id": self.id,
            "capacity": self.config.capacity,
            "ownerId": self.owner_id,
            "isGameStarted": state.is_game_started,
            "totalRounds": self.session.total_hands,
            "currentRound": self.session.current_hand,
            "players": [{"id": player.id, "nickname": player.nickname} for player in state.players],
        }

    def view_for(self, player_id: Optional[str]) -> dict:
        return serialize_state(self.session.state, player_id, rules=self.session.rules)

    def _players_update(self) -> Outbound:
        return Outbound("playersUpdate", {"room": self.meta()})

    def _start_hand(self) -> List[Outbound]:
        self.service.start_hand()
        self.generation += 1
        return [
            Outbound(
                "gameStarted",
                {"hand": self.session.current_hand, "totalHands": self.session.total_hands},
            ),
            Outbound(STATE),
        ]

    # Lobby -------------------------------------------------------------

    def join(self, player_id: str, nickname: str) -> List[Outbound]:
        nickname = nickname.strip()
        if not nickname:
            return [Outbound("error", {"message": "Invalid nickname"}, target=player_id)]
        if self.service.has_player(player_id):
            return [Outbound(STATE, target=player_id), Outbound("playersUpdate", {"room": self.meta()}, target=player_id)]
        if len(self.player_ids) >= self.config.capacity:
            logger.info("Room %s full, refusing %s", self.id, player_id)
            return [Outbound("roomFull", target=player_id)]
        if self.session.state.is_game_started:
            return [Outbound("gameInProgress", target=player_id)]

        self.service.join(player_id, nickname)
        if self.owner_id is None:
            self.owner_id = player_id
        logger.info("%s (%s) joined room %s, %d/%d", nickname, player_id, self.id, len(self.player_ids), self.config.capacity)

        events = [self._players_update(), Outbound(STATE)]
        if self.config.auto_start_when_full and len(self.player_ids) == self.config.capacity:
            events.extend(self._start_hand())
        return events

    def start(self, player_id: str) -> List[Outbound]:
        if player_id != self.owner_id:
            return [Outbound("error", {"message": "Only the room owner can start"}, target=player_id)]
        if self.session.state.is_game_started:
            return [Outbound("error", {"message": "Game already started"}, target=player_id)]
        if len(self.player_ids) < MIN_PLAYERS:
            return [Outbound("error", {"message": "Not enough players"}, target=player_id)]
        return self._start_hand()

    def leave(self, player_id: str) -> List[Outbound]:
        if not self.service.has_player(player_id):
            return []
        was_started = self.session.state.is_game_started
        self.service.leave(player_id)
        if self.owner_id == player_id:
            remaining = self.player_ids
            self.owner_id = remaining[0] if remaining else None
        logger.info("Player %s left room %s", player_id, self.id)

        events = [self._players_update()]
        if was_started:
            self.generation += 1
            events.append(Outbound("gameReset", {"reason": "player_left"}))
        events.append(Outbound(STATE))
        return events

    def is_empty(self) -> bool:
        return not self.player_ids

    # Play --------------------------------------------------------------

    def play(self, player_id: str, token: str) -> Tuple[List[Outbound], bool]:
        """Apply a play; the flag says a full trick now waits for resolution."""
        try:
            card = deserialize_card(token)
        except ValueError as exc:
            return [Outbound("error", {"message": str(exc)}, target=player_id)], False

        result = self.session.play(player_id, card)
        if not result.applied:
            return [Outbound("rejected", {"reason": str(result.reason), "card": token}, target=player_id)], False
        return [Outbound(STATE)], self.session.state.trick_is_full()

    def resolve_pending(self, generation: int) -> List[Outbound]:
        """Resolve the staged trick unless the room moved on while waiting."""
        if generation != self.generation or not self.session.state.trick_is_full():
            return []

        self.session.resolve()
        state = self.session.state
        events = [
            Outbound(
                "trickResolved",
                {
                    "winnerId": state.last_trick_winner_id,
                    "cards": [str(play.card) for play in state.last_trick_cards],
                },
            )
        ]
        if state.phase is GamePhase.HAND_COMPLETE:
            events.extend(self._finish_hand())
        events.append(Outbound(STATE))
        return events

    def _finish_hand(self) -> List[Outbound]:
        summary = self.service.finish_hand()
        events = [Outbound("handFinished", {"hand": self.session.current_hand, "summary": serialize_summary(summary)})]
        if self.session.is_over():
            winners = self.session.winners()
            chips = {player.id: player.chips for player in self.session.state.players}
            logger.info("Match in room %s won by %s", self.id, winners)
            events.append(Outbound("matchFinished", {"winners": winners, "chips": chips}))
            self.session.reset()
            self.generation += 1
            return events
        try:
            events.extend(self._start_hand())
        except MatchError as exc:
            logger.warning("Could not deal next hand in room %s: %s", self.id, exc)
            self.session.reset()
            self.generation += 1
            events.append(Outbound("gameReset", {"reason": "deal_failed"}))
        return events


class RoomRegistry:
    """In-memory map of open rooms."""

    def __init__(self, rules: Optional[RuleSet] = None) -> None:
        self.rules = rules or RuleSet.default()
        self.rooms: Dict[str, Room] = {}

    def create(self, *, capacity: Optional[int] = None, total_hands: Optional[int] = None) -> Room:
        room_values = self.rules.room.model_dump()
        if capacity is not None:
            room_values["capacity"] = capacity
        match_values = self.rules.match.model_dump()
        if total_hands is not None:
            match_values["total_hands"] = total_hands
        room_config = RoomConfig(**room_values)
        rules = RuleSet(play=self.rules.play, match=MatchConfig(**match_values), room=room_config)

        room_id = uuid.uuid4().hex[:8]
        while room_id in self.rooms:
            room_id = uuid.uuid4().hex[:8]
        room = Room(id=room_id, config=room_config, service=MatchService(MatchSession.from_rules(rules)))
        self.rooms[room_id] = room
        logger.info("Room %s created (capacity=%d, hands=%d)", room_id, room_config.capacity, rules.match.total_hands)
        return room

    def get(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def list(self) -> List[Room]:
        return list(self.rooms.values())

    def discard_if_empty(self, room_id: str, *, connected: int = 0) -> bool:
        """Close a room once nobody is seated and no socket is attached to it."""
        room = self.rooms.get(room_id)
        if room is None or not room.is_empty() or connected > 0:
            return False
        del self.rooms[room_id]
        logger.info("Room %s closed", room_id)
        return True

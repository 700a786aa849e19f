"""Play legality checks for Bisca."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from .cards import Card
from .state import GameState


class RejectReason(Enum):
    WRONG_PLAYER_COUNT = "wrong_player_count"
    NOT_STARTED = "not_started"
    UNKNOWN_PLAYER = "unknown_player"
    NOT_YOUR_TURN = "not_your_turn"
    TRICK_PENDING = "trick_pending"
    CARD_NOT_IN_HAND = "card_not_in_hand"
    MUST_LEAD_TRUMP = "must_lead_trump"
    MUST_FOLLOW_SUIT = "must_follow_suit"
    TRICK_INCOMPLETE = "trick_incomplete"

    def __str__(self) -> str:
        return self.value


def is_first_lead(state: GameState) -> bool:
    return state.round_number == 1 and not state.table


def check_play(
    state: GameState,
    player_id: str,
    card: Card,
    *,
    first_lead_must_be_trump: bool = True,
) -> Optional[RejectReason]:
    """Return why ``card`` may not be played right now, or None if it may."""
    if not state.is_game_started:
        return RejectReason.NOT_STARTED

    seat = state.seat_of(player_id)
    if seat is None:
        return RejectReason.UNKNOWN_PLAYER
    if seat != state.turn:
        return RejectReason.NOT_YOUR_TURN
    if state.trick_is_full():
        return RejectReason.TRICK_PENDING

    player = state.players[seat]
    if not player.holds(card):
        return RejectReason.CARD_NOT_IN_HAND

    trump = state.trump_suit
    if first_lead_must_be_trump and is_first_lead(state) and trump is not None:
        if player.holds_suit(trump) and card.suit is not trump:
            return RejectReason.MUST_LEAD_TRUMP

    if state.table:
        led = state.table[0].card.suit
        if player.holds_suit(led) and card.suit is not led:
            return RejectReason.MUST_FOLLOW_SUIT

    return None


def legal_cards(
    state: GameState,
    player_id: str,
    *,
    first_lead_must_be_trump: bool = True,
) -> List[Card]:
    """Return the cards of ``player_id`` that would be accepted right now."""
    player = state.player(player_id)
    if player is None:
        return []
    return [
        card
        for card in player.hand
        if check_play(state, player_id, card, first_lead_must_be_trump=first_lead_must_be_trump) is None
    ]

"""Card engine for Bisca.

Each operation takes a ``GameState`` snapshot and returns a result wrapping
the next snapshot. Illegal actions never raise: they come back as
``Rejected`` holding the very same state object that was passed in, so the
caller can keep using ``result.state`` either way.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from random import Random
from typing import List, Optional, Sequence, Union

from .cards import Card, Rank
from .deck import HAND_SIZE, build_deck, choose_trump, deal_round_robin, shuffle_deck, validate_deck
from .mechanics import RejectReason, check_play
from .mechanics import legal_cards as _legal_cards
from .rules_schema import RuleSet
from .scoring import apply_awards, deal_awards
from .state import MAX_PLAYERS, MIN_PLAYERS, GamePhase, GameState, Player, replace_player
from .trick import TablePlay, trick_points, winner_seat, winning_index


class InvalidPlay(RuntimeError):
    """Raised by ``Rejected.unwrap`` for callers that want exceptions."""

    def __init__(self, reason: RejectReason) -> None:
        super().__init__(f"Action rejected: {reason}")
        self.reason = reason


@dataclass(frozen=True)
class Applied:
    state: GameState

    @property
    def applied(self) -> bool:
        return True

    def unwrap(self) -> GameState:
        return self.state


@dataclass(frozen=True)
class Rejected:
    state: GameState
    reason: RejectReason

    @property
    def applied(self) -> bool:
        return False

    def unwrap(self) -> GameState:
        raise InvalidPlay(self.reason)


GameResult = Union[Applied, Rejected]


def _rules(rules: Optional[RuleSet]) -> RuleSet:
    return rules if rules is not None else RuleSet.default()


def start_game(
    state: GameState,
    *,
    rng: Optional[Random] = None,
    deck: Optional[Sequence[Card]] = None,
) -> GameResult:
    """Deal a fresh hand to the seated players and fix the trump card.

    A ``deck`` given for a stacked deal must be an ordering of the full deck;
    anything else raises ``ValueError``.
    """
    count = state.player_count
    if count < MIN_PLAYERS or count > MAX_PLAYERS:
        return Rejected(state, RejectReason.WRONG_PLAYER_COUNT)

    if rng is None:
        rng = Random()
    cards = validate_deck(deck) if deck is not None else shuffle_deck(build_deck(), rng)
    hands, remainder = deal_round_robin(cards, count, hand_size=HAND_SIZE)
    trump_card = choose_trump(hands, rng)

    players = tuple(
        replace(player, hand=tuple(hands[seat]), score=0, captured_cards=())
        for seat, player in enumerate(state.players)
    )
    awards = deal_awards(players, trump_card.suit)
    players = apply_awards(players, awards)

    return Applied(
        replace(
            state,
            players=players,
            table=(),
            turn=0,
            trump_card=trump_card,
            deck=tuple(remainder),
            round_number=1,
            is_game_started=True,
            last_trick_winner_id=None,
            last_trick_cards=(),
            played_trump_ace_by=frozenset(),
            captured_opp_trump_seven_by=frozenset(),
            deal_awards=tuple(awards),
        )
    )


def play_card(
    state: GameState,
    player_id: str,
    card: Card,
    *,
    rules: Optional[RuleSet] = None,
) -> GameResult:
    """Put ``card`` from the player's hand on the table and pass the turn on."""
    reason = check_play(
        state,
        player_id,
        card,
        first_lead_must_be_trump=_rules(rules).play.first_lead_must_be_trump,
    )
    if reason is not None:
        return Rejected(state, reason)

    seat = state.turn
    player = state.players[seat]
    updated = replace(player, hand=tuple(c for c in player.hand if c != card))

    played_trump_ace_by = state.played_trump_ace_by
    if state.trump_suit is not None and card == Card(Rank.ACE, state.trump_suit):
        played_trump_ace_by = played_trump_ace_by | {player_id}

    return Applied(
        replace(
            state,
            players=replace_player(state.players, seat, updated),
            table=state.table + (TablePlay(player_id, player.nickname, card),),
            turn=(seat + 1) % state.player_count,
            played_trump_ace_by=played_trump_ace_by,
        )
    )


def resolve_trick(state: GameState) -> GameResult:
    """Award a full table to its winner and hand them the lead."""
    if not state.trick_is_full():
        return Rejected(state, RejectReason.TRICK_INCOMPLETE)

    cards = [play.card for play in state.table]
    index = winning_index(cards, state.trump_suit)
    seat = winner_seat(state.turn, state.player_count, index)
    winner = state.players[seat]

    credited = replace(
        winner,
        score=winner.score + trick_points(state.table),
        captured_cards=winner.captured_cards + tuple(cards),
    )

    captured_sevens = state.captured_opp_trump_seven_by
    if state.trump_suit is not None:
        seven = Card(Rank.SEVEN, state.trump_suit)
        if any(play.card == seven and play.player_id != winner.id for play in state.table):
            captured_sevens = captured_sevens | {winner.id}

    return Applied(
        replace(
            state,
            players=replace_player(state.players, seat, credited),
            table=(),
            turn=seat,
            round_number=state.round_number + 1,
            last_trick_winner_id=winner.id,
            last_trick_cards=state.table,
            captured_opp_trump_seven_by=captured_sevens,
        )
    )


def legal_cards(state: GameState, player_id: str, *, rules: Optional[RuleSet] = None) -> List[Card]:
    return _legal_cards(
        state,
        player_id,
        first_lead_must_be_trump=_rules(rules).play.first_lead_must_be_trump,
    )


def is_hand_complete(state: GameState) -> bool:
    return state.phase is GamePhase.HAND_COMPLETE


def reset_to_lobby(state: GameState) -> GameState:
    """Drop the hand in progress, keeping the seated players with empty hands and no chips."""
    players = tuple(Player(id=player.id, nickname=player.nickname) for player in state.players)
    return GameState(players=players)

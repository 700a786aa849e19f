"""Chip bonus rules evaluated at the deal and at the end of each hand."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .cards import Card, Rank, Suit
from .state import ChipAward, ChipBonus, GamePhase, GameState, Player


class ScoringError(ValueError):
    """Raised when chips are requested for a hand that is not finished."""


@dataclass(frozen=True)
class HandSummary:
    scores: Dict[str, int]
    awards: Tuple[ChipAward, ...]
    chips: Dict[str, int]
    last_trick_winner_id: Optional[str]

    def chips_awarded(self, player_id: str) -> int:
        return sum(award.chips for award in self.awards if award.player_id == player_id)


def deal_awards(players: Sequence[Player], trump: Suit) -> List[ChipAward]:
    """Chips earned by what each player was dealt."""
    two = Card(Rank.TWO, trump)
    ace = Card(Rank.ACE, trump)
    seven = Card(Rank.SEVEN, trump)

    awards: List[ChipAward] = []
    for player in players:
        if player.holds(two):
            awards.append(ChipAward(player.id, ChipBonus.TRUMP_TWO))
        if player.holds(ace) and player.holds(seven):
            awards.append(ChipAward(player.id, ChipBonus.TRUMP_MARRIAGE))
    return awards


def highest_score_player(players: Sequence[Player]) -> Optional[str]:
    """Return the id of the sole player with the strictly highest positive score."""
    if not players:
        return None
    best = max(player.score for player in players)
    if best <= 0:
        return None
    leaders = [player for player in players if player.score == best]
    if len(leaders) != 1:
        return None
    return leaders[0].id


def _king_took_last_trick(state: GameState) -> bool:
    trump = state.trump_suit
    winner_id = state.last_trick_winner_id
    if trump is None or winner_id is None or not state.last_trick_cards:
        return False

    king = Card(Rank.KING, trump)
    winning_play = next((play for play in state.last_trick_cards if play.player_id == winner_id), None)
    if winning_play is None or winning_play.card != king:
        return False

    blockers = {Card(Rank.ACE, trump), Card(Rank.SEVEN, trump)}
    return not any(
        play.card in blockers for play in state.last_trick_cards if play.player_id != winner_id
    )


def hand_end_awards(state: GameState) -> List[ChipAward]:
    """Chips earned by how the hand was played out."""
    awards: List[ChipAward] = []
    for player in state.players:
        if player.id in state.played_trump_ace_by and player.id in state.captured_opp_trump_seven_by:
            awards.append(ChipAward(player.id, ChipBonus.ACE_TOOK_SEVEN))

    leader = highest_score_player(state.players)
    if leader is not None:
        awards.append(ChipAward(leader, ChipBonus.HIGHEST_SCORE))

    if _king_took_last_trick(state):
        assert state.last_trick_winner_id is not None
        awards.append(ChipAward(state.last_trick_winner_id, ChipBonus.KING_LAST_TRICK))
    return awards


def apply_awards(players: Sequence[Player], awards: Iterable[ChipAward]) -> Tuple[Player, ...]:
    earned: Dict[str, int] = {}
    for award in awards:
        earned[award.player_id] = earned.get(award.player_id, 0) + award.chips
    return tuple(replace(player, chips=player.chips + earned.get(player.id, 0)) for player in players)


def match_winners(players: Sequence[Player]) -> List[str]:
    """Every player tied at the highest chip count."""
    if not players:
        return []
    best = max(player.chips for player in players)
    return [player.id for player in players if player.chips == best]


def score_hand(state: GameState) -> Tuple[GameState, HandSummary]:
    """Credit end-of-hand chips and summarize the hand."""
    if state.phase is not GamePhase.HAND_COMPLETE:
        raise ScoringError("Hand is not complete.")

    end_awards = hand_end_awards(state)
    players = apply_awards(state.players, end_awards)
    summary = HandSummary(
        scores={player.id: player.score for player in players},
        awards=tuple(state.deal_awards) + tuple(end_awards),
        chips={player.id: player.chips for player in players},
        last_trick_winner_id=state.last_trick_winner_id,
    )
    return replace(state, players=players), summary

import pytest
from pydantic import ValidationError

from bisca.service import build_view
from server.rooms import STATE, RoomRegistry


def kinds(events):
    return [event.kind for event in events]


def current_play(room):
    state = room.session.state
    player_id = state.current_player.id
    return player_id, build_view(state, player_id).legal_cards[0]


def play_trick(room):
    events = []
    for _ in range(room.session.state.player_count):
        player_id, token = current_play(room)
        step, trick_full = room.play(player_id, token)
        events.extend(step)
    assert trick_full
    return events + room.resolve_pending(room.generation)


def test_registry_create_and_discard():
    registry = RoomRegistry()
    room = registry.create(capacity=2, total_hands=1)
    assert registry.get(room.id) is room
    assert room.meta()["capacity"] == 2
    assert room.meta()["totalRounds"] == 1
    assert registry.list() == [room]
    assert registry.discard_if_empty(room.id)
    assert registry.get(room.id) is None


def test_registry_validates_parameters():
    registry = RoomRegistry()
    with pytest.raises(ValidationError):
        registry.create(capacity=6)
    with pytest.raises(ValidationError):
        registry.create(total_hands=0)


def test_join_fills_room_and_auto_starts():
    room = RoomRegistry().create(capacity=2, total_hands=1)
    assert kinds(room.join("a", "Ann")) == ["playersUpdate", STATE]
    assert room.owner_id == "a"

    events = room.join("b", "Bob")
    assert kinds(events) == ["playersUpdate", STATE, "gameStarted", STATE]
    assert room.session.state.is_game_started

    refused = room.join("c", "Cy")
    assert kinds(refused) == ["roomFull"]
    assert refused[0].target == "c"


def test_join_after_start_and_duplicates():
    room = RoomRegistry().create(capacity=3)
    room.join("a", "Ann")
    room.join("b", "Bob")
    assert [event.target for event in room.join("a", "Ann")] == ["a", "a"]
    assert kinds(room.join("c", "   ")) == ["error"]

    assert kinds(room.start("b")) == ["error"]
    assert kinds(room.start("a")) == ["gameStarted", STATE]
    assert kinds(room.join("c", "Cy")) == ["gameInProgress"]


def test_owner_needs_two_players_to_start():
    room = RoomRegistry().create(capacity=4)
    room.join("a", "Ann")
    assert kinds(room.start("a")) == ["error"]


def test_rejected_play_goes_to_player_only():
    room = RoomRegistry().create(capacity=2)
    room.join("a", "Ann")
    room.join("b", "Bob")

    events, trick_full = room.play("b", "AS")
    assert not trick_full
    assert kinds(events) == ["rejected"]
    assert events[0].target == "b"
    assert events[0].payload["reason"] == "not_your_turn"

    events, _ = room.play("a", "??")
    assert kinds(events) == ["error"]


def test_stale_resolution_is_ignored():
    room = RoomRegistry().create(capacity=2)
    room.join("a", "Ann")
    room.join("b", "Bob")
    generation = room.generation
    for _ in range(2):
        player_id, token = current_play(room)
        room.play(player_id, token)

    assert room.resolve_pending(generation - 1) == []
    events = room.resolve_pending(generation)
    assert kinds(events) == ["trickResolved", STATE]
    assert len(events[0].payload["cards"]) == 2
    assert room.resolve_pending(generation) == []


def test_leaving_mid_hand_resets_room():
    room = RoomRegistry().create(capacity=3)
    for player_id in ("a", "b", "c"):
        room.join(player_id, player_id.upper())
    generation = room.generation

    events = room.leave("a")
    assert kinds(events) == ["playersUpdate", "gameReset", STATE]
    assert room.generation == generation + 1
    assert room.owner_id == "b"
    assert not room.session.state.is_game_started
    assert room.player_ids == ["b", "c"]
    assert room.leave("a") == []


def test_full_match_in_room():
    room = RoomRegistry().create(capacity=2, total_hands=2)
    room.join("a", "Ann")
    room.join("b", "Bob")

    finished = []
    for _ in range(20):
        events = play_trick(room)
        finished.extend(event for event in events if event.kind in ("handFinished", "matchFinished"))

    assert [event.kind for event in finished] == ["handFinished", "handFinished", "matchFinished"]
    winners = finished[-1].payload["winners"]
    chips = finished[-1].payload["chips"]
    assert winners == [pid for pid, count in chips.items() if count == max(chips.values())]
    assert not room.session.state.is_game_started
    assert room.player_ids == ["a", "b"]


def test_room_kept_while_sockets_attached():
    registry = RoomRegistry()
    room = registry.create(capacity=2)
    assert not registry.discard_if_empty(room.id, connected=1)
    assert registry.get(room.id) is room

    room.join("a", "Ann")
    assert not registry.discard_if_empty(room.id)
    room.leave("a")
    assert registry.discard_if_empty(room.id)

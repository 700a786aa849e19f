"""Streamlit sandbox for Bisca: one human seat against bots."""

from __future__ import annotations

import streamlit as st

from bisca.game import InvalidPlay
from bisca.match import MatchError, MatchSession
from bisca.service import MatchService
from bots.baseline_greedy import GreedyBot

HUMAN_ID = "you"


def get_service(opponents: int, total_hands: int) -> MatchService:
    key = f"match_service_{opponents}_{total_hands}"
    if key not in st.session_state:
        service = MatchService(MatchSession(total_hands=total_hands))
        service.join(HUMAN_ID, "You")
        for seat in range(1, opponents + 1):
            service.join(f"bot-{seat}", f"Bot {seat}")
        st.session_state[key] = service
    return st.session_state[key]


def rerun() -> None:
    try:
        st.rerun()
    except AttributeError:
        st.experimental_rerun()


def advance_bots(service: MatchService) -> None:
    """Let bots play and resolve tricks until the human has to act or the hand ends."""
    bot = GreedyBot()
    session = service.session
    while session.state.is_game_started and not session.hand_pending_score():
        state = session.state
        if state.trick_is_full():
            if any(play.player_id == HUMAN_ID for play in state.table) and not st.session_state.get("trick_seen"):
                st.session_state["trick_seen"] = True
                return
            st.session_state["trick_seen"] = False
            session.resolve()
            continue
        current = state.current_player
        if current is None or current.id == HUMAN_ID:
            return
        session.play(current.id, bot.choose_card(state, current.id))


def render_table(view) -> None:
    st.subheader("Table")
    if view.trump_card:
        st.write(f"Trump card: {view.trump_card}")
    if view.table:
        for play in view.table:
            st.write(f"{play.nickname}: {play.label}")
    else:
        st.write("Empty")
    if view.last_trick_cards:
        with st.expander("Last trick"):
            for play in view.last_trick_cards:
                st.write(f"{play.nickname}: {play.label}")
            st.write(f"Taken by {view.last_trick_winner_id}")


def render_status(view) -> None:
    st.write(f"Phase: {view.phase}")
    st.write(f"Trick: {view.round_number}")
    for player in view.players:
        st.write(
            f"{player.nickname}: {player.hand_size} cards, "
            f"{player.score} points, {player.chips} chips"
        )


def render_play_controls(service: MatchService, view) -> None:
    st.subheader("Your hand")
    st.write(", ".join(view.hand_labels) or "No cards")
    if view.current_player_id != HUMAN_ID or len(view.table) == len(view.players):
        if st.button("Continue"):
            rerun()
        return
    if not view.legal_cards:
        st.warning("No legal moves available.")
        return

    labels = {token: label for token, label in zip(view.hand, view.hand_labels)}
    selection = st.selectbox("Play a card", view.legal_cards, format_func=lambda token: labels[token])
    if st.button("Play selected card"):
        try:
            service.play_card(HUMAN_ID, selection)
            rerun()
        except InvalidPlay as exc:
            st.error(str(exc))


def render_complete_controls(service: MatchService) -> None:
    st.subheader("Hand complete")
    if st.button("Score hand"):
        summary = service.finish_hand()
        st.session_state["last_summary"] = summary
        rerun()


def main() -> None:
    st.set_page_config(page_title="Bisca Sandbox", layout="wide")
    st.title("Bisca")

    st.sidebar.header("Match Controls")
    opponents = st.sidebar.selectbox("Opponents", [1, 2, 3], index=0)
    total_hands = st.sidebar.number_input("Hands per match", min_value=1, max_value=10, value=3)
    service = get_service(int(opponents), int(total_hands))
    session = service.session

    if st.sidebar.button("Deal next hand"):
        try:
            service.start_hand()
            rerun()
        except MatchError as exc:
            st.sidebar.error(str(exc))

    summary = st.session_state.get("last_summary")
    if summary is not None:
        st.sidebar.write(f"Last hand chips: {summary.chips}")
    if session.is_over():
        st.success(f"Match over. Winners: {', '.join(session.winners())}")
        return
    if not session.state.is_game_started:
        st.info("Deal a hand to begin.")
        return

    advance_bots(service)
    view = service.get_view(HUMAN_ID)
    cols = st.columns(2)
    with cols[0]:
        render_table(view)
    with cols[1]:
        render_status(view)

    if session.hand_pending_score():
        render_complete_controls(service)
    else:
        render_play_controls(service, view)


if __name__ == "__main__":
    main()

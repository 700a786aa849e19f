"""Simple bot arena for Bisca."""

from __future__ import annotations

import argparse
from typing import Dict, Iterable, Optional, Sequence

from bisca.match import MatchSession

from .base import BotStrategy
from .baseline_counter import CounterBot
from .baseline_greedy import GreedyBot
from .random_bot import RandomBot

BOT_REGISTRY: Dict[str, type[BotStrategy]] = {
    "greedy": GreedyBot,
    "counter": CounterBot,
    "random": RandomBot,
}


def _player_id(seat: int) -> str:
    return f"bot-{seat}"


def play_hand(session: MatchSession, bots: Sequence[BotStrategy]) -> None:
    state = session.start_hand()
    seats = {_player_id(seat): bot for seat, bot in enumerate(bots)}
    for player_id, bot in seats.items():
        bot.on_hand_start(state, player_id)

    while not session.hand_pending_score():
        state = session.state
        if state.trick_is_full():
            session.resolve().unwrap()
            continue
        current = state.current_player
        assert current is not None
        card = seats[current.id].choose_card(state, current.id)
        session.play(current.id, card).unwrap()


def run_match(
    bots: Sequence[BotStrategy],
    *,
    n_hands: int = 3,
    seed: Optional[int] = None,
) -> dict:
    session = MatchSession(total_hands=n_hands, seed=seed)
    for seat, bot in enumerate(bots):
        session.add_player(_player_id(seat), bot.name)

    history = []
    while not session.is_over():
        play_hand(session, bots)
        summary = session.finish_hand()
        history.append(
            {
                "scores": dict(summary.scores),
                "chips": dict(summary.chips),
                "awards": [(award.player_id, award.bonus.name) for award in summary.awards],
            }
        )
    chips = {player.id: player.chips for player in session.state.players}
    return {"chips": chips, "winners": session.winners(), "history": history}


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run a bot match.")
    parser.add_argument(
        "--bots",
        nargs="+",
        default=["greedy", "counter"],
        choices=BOT_REGISTRY.keys(),
        help="One bot per seat (2 to 4).",
    )
    parser.add_argument("--n", type=int, default=3, help="Number of hands to play.")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args(argv)

    if not 2 <= len(args.bots) <= 4:
        parser.error("Between 2 and 4 bots are required.")

    bots = [BOT_REGISTRY[name]() for name in args.bots]
    results = run_match(bots, n_hands=args.n, seed=args.seed)

    for idx, entry in enumerate(results["history"], start=1):
        print(f"Hand {idx}: scores={entry['scores']} chips={entry['chips']}")
    print(f"Chips after {args.n} hands: {results['chips']}")
    print(f"Winners: {', '.join(results['winners'])}")


if __name__ == "__main__":
    main()

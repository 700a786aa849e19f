"""Bot strategies for Bisca."""

from .baseline_counter import CounterBot
from .baseline_greedy import GreedyBot
from .random_bot import RandomBot

__all__ = ["GreedyBot", "CounterBot", "RandomBot"]

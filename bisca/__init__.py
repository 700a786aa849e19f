"""Core engine package for Bisca."""

__all__ = [
    "cards",
    "deck",
    "trick",
    "state",
    "mechanics",
    "game",
    "scoring",
    "match",
    "rules_schema",
    "service",
]

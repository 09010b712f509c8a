"""Content generators."""

from sideline.generators.league import (
    GeneratedLeague,
    generate_league,
    generate_matchups,
    generate_roster,
    generate_schedule,
)

__all__ = [
    "GeneratedLeague",
    "generate_league",
    "generate_matchups",
    "generate_roster",
    "generate_schedule",
]

"""Game simulation."""

from sideline.simulation.runner import (
    GameRunner,
    GameSetup,
    LiveGameState,
    PlayOutcome,
    PlayResult,
    PlayStep,
    setup_game,
)

__all__ = [
    "GameRunner",
    "GameSetup",
    "LiveGameState",
    "PlayOutcome",
    "PlayResult",
    "PlayStep",
    "setup_game",
]

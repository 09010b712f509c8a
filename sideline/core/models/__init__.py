"""Core data models."""

from sideline.core.models.game import (
    BoxScore,
    GameInjury,
    GameResult,
    StatLeader,
    TeamGameStats,
)
from sideline.core.models.player import (
    InjurySeverity,
    InjuryStatus,
    Player,
    normalize_injury_type,
)
from sideline.core.models.state import GameState
from sideline.core.models.team import Team, TeamRecord

__all__ = [
    # Game
    "BoxScore",
    "GameInjury",
    "GameResult",
    "StatLeader",
    "TeamGameStats",
    # Player
    "InjurySeverity",
    "InjuryStatus",
    "Player",
    "normalize_injury_type",
    # League state
    "GameState",
    # Team
    "Team",
    "TeamRecord",
]

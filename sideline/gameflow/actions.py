"""
Actions accepted by GameFlowManager.dispatch.

Each action is a small frozen dataclass; the manager selects the handler
by action class.
"""

from dataclasses import dataclass
from typing import Optional, Union

from sideline.gameflow.types import GamePrediction, SeasonPhase, SimulationSpeed


@dataclass(frozen=True)
class StartWeek:
    week_number: int
    season_phase: SeasonPhase = SeasonPhase.REGULAR_SEASON


@dataclass(frozen=True)
class ViewPreGame:
    pass


@dataclass(frozen=True)
class StartGameDay:
    pass


@dataclass(frozen=True)
class SetPrediction:
    prediction: Optional[GamePrediction] = None


@dataclass(frozen=True)
class SetSpeed:
    speed: SimulationSpeed = SimulationSpeed.NORMAL


@dataclass(frozen=True)
class PauseSimulation:
    pass


@dataclass(frozen=True)
class ResumeSimulation:
    pass


@dataclass(frozen=True)
class SkipToEnd:
    pass


@dataclass(frozen=True)
class MarkResultViewed:
    pass


@dataclass(frozen=True)
class SimOtherGames:
    pass


@dataclass(frozen=True)
class ViewWeekSummary:
    pass


@dataclass(frozen=True)
class MarkSummaryViewed:
    pass


@dataclass(frozen=True)
class AdvanceWeek:
    pass


@dataclass(frozen=True)
class SetLoading:
    is_loading: bool


@dataclass(frozen=True)
class SetError:
    error: Optional[str]


@dataclass(frozen=True)
class Reset:
    pass


GameFlowAction = Union[
    StartWeek,
    ViewPreGame,
    StartGameDay,
    SetPrediction,
    SetSpeed,
    PauseSimulation,
    ResumeSimulation,
    SkipToEnd,
    MarkResultViewed,
    SimOtherGames,
    ViewWeekSummary,
    MarkSummaryViewed,
    AdvanceWeek,
    SetLoading,
    SetError,
    Reset,
]

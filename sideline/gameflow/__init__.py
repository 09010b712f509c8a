"""Week and game day flow for GM mode."""

from sideline.gameflow.actions import GameFlowAction
from sideline.gameflow.engine import EngineConfig, GameSimulationEngine
from sideline.gameflow.game_day import GameDayFlow, GameDayFlowConfig, NextPlayResult
from sideline.gameflow.manager import GameFlowManager
from sideline.gameflow.types import (
    GameDayFlowState,
    GameDayPhase,
    GameFlowCallbacks,
    GameFlowState,
    GamePrediction,
    LiveGameDisplay,
    PostGameInfo,
    PreGameInfo,
    SeasonPhase,
    SimulationSpeed,
    WeekFlowPhase,
    WeekFlowState,
    WeekGates,
    WeekSummary,
)
from sideline.gameflow.week_progression import (
    AdvanceCheck,
    WeekAdvancementResult,
    WeekProgressionConfig,
    WeekProgressionService,
)

__all__ = [
    "AdvanceCheck",
    "EngineConfig",
    "GameDayFlow",
    "GameDayFlowConfig",
    "GameDayFlowState",
    "GameDayPhase",
    "GameFlowAction",
    "GameFlowCallbacks",
    "GameFlowManager",
    "GameFlowState",
    "GamePrediction",
    "GameSimulationEngine",
    "LiveGameDisplay",
    "NextPlayResult",
    "PostGameInfo",
    "PreGameInfo",
    "SeasonPhase",
    "SimulationSpeed",
    "WeekAdvancementResult",
    "WeekFlowPhase",
    "WeekFlowState",
    "WeekGates",
    "WeekProgressionConfig",
    "WeekProgressionService",
    "WeekSummary",
]

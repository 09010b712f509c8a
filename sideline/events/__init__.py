"""Event system for the week and game flow."""

from sideline.events.bus import EventBus, Subscription
from sideline.events.types import (
    EVENT_CLASSES,
    BigPlayEvent,
    EventType,
    FieldGoalEvent,
    FieldGoalPayload,
    GameEndEvent,
    GameFlowEvent,
    GameStartEvent,
    GameStartPayload,
    HalftimeEvent,
    InjuryOccurredEvent,
    LeadChangeEvent,
    LeadChangePayload,
    OtherGamesCompleteEvent,
    OtherGamesPayload,
    OvertimePayload,
    OvertimeStartEvent,
    PlayCompleteEvent,
    PlayCompletePayload,
    PlayerRecoveredEvent,
    QuarterEndEvent,
    QuarterPayload,
    QuarterStartEvent,
    RecoveryPayload,
    SafetyEvent,
    ScoreChangeEvent,
    ScoreChangePayload,
    SeasonPhaseChangeEvent,
    SeasonPhasePayload,
    SimulationPausedEvent,
    SimulationResumedEvent,
    SimulationSpeedChangedEvent,
    SimulationStatePayload,
    SpeedChangePayload,
    TouchdownEvent,
    TurnoverEvent,
    TwoMinuteWarningEvent,
    WeekEndEvent,
    WeekStartEvent,
    WeekStartPayload,
    check_lead_change,
    create_play_event,
    create_score_change_event,
)

__all__ = [
    "EVENT_CLASSES",
    "BigPlayEvent",
    "EventBus",
    "EventType",
    "FieldGoalEvent",
    "FieldGoalPayload",
    "GameEndEvent",
    "GameFlowEvent",
    "GameStartEvent",
    "GameStartPayload",
    "HalftimeEvent",
    "InjuryOccurredEvent",
    "LeadChangeEvent",
    "LeadChangePayload",
    "OtherGamesCompleteEvent",
    "OtherGamesPayload",
    "OvertimePayload",
    "OvertimeStartEvent",
    "PlayCompleteEvent",
    "PlayCompletePayload",
    "PlayerRecoveredEvent",
    "QuarterEndEvent",
    "QuarterPayload",
    "QuarterStartEvent",
    "RecoveryPayload",
    "SafetyEvent",
    "ScoreChangeEvent",
    "ScoreChangePayload",
    "SeasonPhaseChangeEvent",
    "SeasonPhasePayload",
    "SimulationPausedEvent",
    "SimulationResumedEvent",
    "SimulationSpeedChangedEvent",
    "SimulationStatePayload",
    "SpeedChangePayload",
    "Subscription",
    "TouchdownEvent",
    "TurnoverEvent",
    "TwoMinuteWarningEvent",
    "WeekEndEvent",
    "WeekStartEvent",
    "WeekStartPayload",
    "check_lead_change",
    "create_play_event",
    "create_score_change_event",
]

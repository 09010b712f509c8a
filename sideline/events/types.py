"""Event types for the week and game flow."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Optional

if TYPE_CHECKING:
    from sideline.core.models.game import GameResult
    from sideline.gameflow.types import HalftimeInfo, InjuryReport, PlayDisplay, WeekSummary


class EventType(str, Enum):
    """Tag of every event the flow can emit."""

    # Play
    PLAY_COMPLETE = "PLAY_COMPLETE"
    TOUCHDOWN = "TOUCHDOWN"
    TURNOVER = "TURNOVER"
    BIG_PLAY = "BIG_PLAY"
    FIELD_GOAL = "FIELD_GOAL"
    SAFETY = "SAFETY"
    # Score
    SCORE_CHANGE = "SCORE_CHANGE"
    LEAD_CHANGE = "LEAD_CHANGE"
    # Quarter
    QUARTER_START = "QUARTER_START"
    QUARTER_END = "QUARTER_END"
    HALFTIME = "HALFTIME"
    TWO_MINUTE_WARNING = "TWO_MINUTE_WARNING"
    OVERTIME_START = "OVERTIME_START"
    # Game state
    GAME_START = "GAME_START"
    GAME_END = "GAME_END"
    SIMULATION_PAUSED = "SIMULATION_PAUSED"
    SIMULATION_RESUMED = "SIMULATION_RESUMED"
    SIMULATION_SPEED_CHANGED = "SIMULATION_SPEED_CHANGED"
    # Week
    WEEK_START = "WEEK_START"
    WEEK_END = "WEEK_END"
    OTHER_GAMES_COMPLETE = "OTHER_GAMES_COMPLETE"
    SEASON_PHASE_CHANGE = "SEASON_PHASE_CHANGE"
    # Injury
    INJURY_OCCURRED = "INJURY_OCCURRED"
    PLAYER_RECOVERED = "PLAYER_RECOVERED"


# =============================================================================
# Payloads
# =============================================================================


@dataclass(frozen=True)
class PlayCompletePayload:
    play: "PlayDisplay"
    home_score: int
    away_score: int
    quarter: int
    time_remaining: int


@dataclass(frozen=True)
class FieldGoalPayload(PlayCompletePayload):
    made: bool = True
    distance: int = 0


@dataclass(frozen=True)
class ScoreChangePayload:
    home_score: int
    away_score: int
    scoring_team: str  # home or away
    points: int
    description: str


@dataclass(frozen=True)
class LeadChangePayload:
    new_leader: str  # home, away or tied
    home_score: int
    away_score: int


@dataclass(frozen=True)
class QuarterPayload:
    quarter: int
    home_score: int
    away_score: int


@dataclass(frozen=True)
class OvertimePayload:
    home_score: int
    away_score: int


@dataclass(frozen=True)
class GameStartPayload:
    game_id: str
    home_team_id: str
    away_team_id: str
    home_team_name: str
    away_team_name: str
    week: int


@dataclass(frozen=True)
class SimulationStatePayload:
    game_id: str
    current_quarter: int
    time_remaining: int
    home_score: int
    away_score: int


@dataclass(frozen=True)
class SpeedChangePayload:
    previous_speed: str
    new_speed: str


@dataclass(frozen=True)
class WeekStartPayload:
    week_number: int
    season_phase: str
    is_user_on_bye: bool = False


@dataclass(frozen=True)
class OtherGamesPayload:
    completed_games: int
    total_games: int


@dataclass(frozen=True)
class SeasonPhasePayload:
    previous_phase: str
    new_phase: str


@dataclass(frozen=True)
class RecoveryPayload:
    player_id: str
    player_name: str
    team_id: str


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class GameFlowEvent:
    """Base class for all flow events. ``type`` is the discriminating tag."""

    type: ClassVar[EventType]

    timestamp: datetime = field(default_factory=datetime.now, compare=False)


# Play events


@dataclass(frozen=True)
class PlayCompleteEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.PLAY_COMPLETE
    payload: PlayCompletePayload = None


@dataclass(frozen=True)
class TouchdownEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.TOUCHDOWN
    payload: PlayCompletePayload = None


@dataclass(frozen=True)
class TurnoverEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.TURNOVER
    payload: PlayCompletePayload = None


@dataclass(frozen=True)
class BigPlayEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.BIG_PLAY
    payload: PlayCompletePayload = None


@dataclass(frozen=True)
class FieldGoalEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.FIELD_GOAL
    payload: FieldGoalPayload = None


@dataclass(frozen=True)
class SafetyEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.SAFETY
    payload: PlayCompletePayload = None


# Score events


@dataclass(frozen=True)
class ScoreChangeEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.SCORE_CHANGE
    payload: ScoreChangePayload = None


@dataclass(frozen=True)
class LeadChangeEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.LEAD_CHANGE
    payload: LeadChangePayload = None


# Quarter events


@dataclass(frozen=True)
class QuarterStartEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.QUARTER_START
    payload: QuarterPayload = None


@dataclass(frozen=True)
class QuarterEndEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.QUARTER_END
    payload: QuarterPayload = None


@dataclass(frozen=True)
class HalftimeEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.HALFTIME
    payload: "HalftimeInfo" = None


@dataclass(frozen=True)
class TwoMinuteWarningEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.TWO_MINUTE_WARNING
    payload: QuarterPayload = None


@dataclass(frozen=True)
class OvertimeStartEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.OVERTIME_START
    payload: OvertimePayload = None


# Game state events


@dataclass(frozen=True)
class GameStartEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.GAME_START
    payload: GameStartPayload = None


@dataclass(frozen=True)
class GameEndEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.GAME_END
    payload: "GameResult" = None


@dataclass(frozen=True)
class SimulationPausedEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.SIMULATION_PAUSED
    payload: SimulationStatePayload = None


@dataclass(frozen=True)
class SimulationResumedEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.SIMULATION_RESUMED
    payload: SimulationStatePayload = None


@dataclass(frozen=True)
class SimulationSpeedChangedEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.SIMULATION_SPEED_CHANGED
    payload: SpeedChangePayload = None


# Week events


@dataclass(frozen=True)
class WeekStartEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.WEEK_START
    payload: WeekStartPayload = None


@dataclass(frozen=True)
class WeekEndEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.WEEK_END
    payload: "WeekSummary" = None


@dataclass(frozen=True)
class OtherGamesCompleteEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.OTHER_GAMES_COMPLETE
    payload: OtherGamesPayload = None


@dataclass(frozen=True)
class SeasonPhaseChangeEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.SEASON_PHASE_CHANGE
    payload: SeasonPhasePayload = None


# Injury events


@dataclass(frozen=True)
class InjuryOccurredEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.INJURY_OCCURRED
    payload: "InjuryReport" = None


@dataclass(frozen=True)
class PlayerRecoveredEvent(GameFlowEvent):
    type: ClassVar[EventType] = EventType.PLAYER_RECOVERED
    payload: RecoveryPayload = None


EVENT_CLASSES: dict[EventType, type[GameFlowEvent]] = {
    cls.type: cls
    for cls in (
        PlayCompleteEvent,
        TouchdownEvent,
        TurnoverEvent,
        BigPlayEvent,
        FieldGoalEvent,
        SafetyEvent,
        ScoreChangeEvent,
        LeadChangeEvent,
        QuarterStartEvent,
        QuarterEndEvent,
        HalftimeEvent,
        TwoMinuteWarningEvent,
        OvertimeStartEvent,
        GameStartEvent,
        GameEndEvent,
        SimulationPausedEvent,
        SimulationResumedEvent,
        SimulationSpeedChangedEvent,
        WeekStartEvent,
        WeekEndEvent,
        OtherGamesCompleteEvent,
        SeasonPhaseChangeEvent,
        InjuryOccurredEvent,
        PlayerRecoveredEvent,
    )
}


# =============================================================================
# Helpers
# =============================================================================


def create_play_event(
    play: "PlayDisplay",
    home_score: int,
    away_score: int,
    quarter: int,
    time_remaining: int,
) -> GameFlowEvent:
    """
    Build the event for a resolved play.

    Scoring plays described as touchdowns become TOUCHDOWN, then turnovers,
    then big plays; anything else is a plain PLAY_COMPLETE.
    """
    payload = PlayCompletePayload(
        play=play,
        home_score=home_score,
        away_score=away_score,
        quarter=quarter,
        time_remaining=time_remaining,
    )
    if play.is_scoring and "touchdown" in play.description.lower():
        return TouchdownEvent(payload=payload)
    if play.is_turnover:
        return TurnoverEvent(payload=payload)
    if play.is_big_play:
        return BigPlayEvent(payload=payload)
    return PlayCompleteEvent(payload=payload)


def create_score_change_event(
    home_score: int,
    away_score: int,
    previous_home_score: int,
    previous_away_score: int,
    description: str,
) -> ScoreChangeEvent:
    scoring_team = "home" if home_score != previous_home_score else "away"
    if scoring_team == "home":
        points = home_score - previous_home_score
    else:
        points = away_score - previous_away_score
    return ScoreChangeEvent(
        payload=ScoreChangePayload(
            home_score=home_score,
            away_score=away_score,
            scoring_team=scoring_team,
            points=points,
            description=description,
        )
    )


def _leader(home: int, away: int) -> str:
    if home > away:
        return "home"
    if away > home:
        return "away"
    return "tied"


def check_lead_change(
    previous_home: int,
    previous_away: int,
    current_home: int,
    current_away: int,
) -> Optional[LeadChangePayload]:
    """Return the new lead state if the leader changed, else None."""
    current = _leader(current_home, current_away)
    if _leader(previous_home, previous_away) == current:
        return None
    return LeadChangePayload(new_leader=current, home_score=current_home, away_score=current_away)

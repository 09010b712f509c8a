"""Pydantic schemas for the week/game flow API."""

from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from sideline.gameflow.types import (
    GameDayFlowState,
    GameDayPhase,
    GamePrediction,
    GameStakes,
    GameFlowState,
    HeadlineImportance,
    InjuryUpdateType,
    LiveGameDisplay,
    PlayoffImplicationType,
    PostGameInfo,
    Precipitation,
    PreGameInfo,
    SeasonPhase,
    SimulationSpeed,
    WeekFlowPhase,
    WeekFlowState,
    WeekSummary,
)
from sideline.gameflow.week_progression import AdvanceCheck, WeekAdvancementResult


# =============================================================================
# Requests
# =============================================================================


class CreateSessionRequest(BaseModel):
    """Start a franchise session on a freshly generated league."""

    team: str = "PHI"
    seed: Optional[int] = None
    season: int = 2025
    week: int = 1


class PredictionRequest(BaseModel):
    prediction: Optional[GamePrediction] = None


class SpeedRequest(BaseModel):
    speed: SimulationSpeed


# =============================================================================
# Shared pieces
# =============================================================================


class ScheduledGameSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    game_id: str
    week: int
    home_team_id: str
    away_team_id: str
    is_divisional: bool = False
    is_complete: bool = False
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    winner_id: Optional[str] = None


class InjuryReportSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    player_id: str
    player_name: str
    position: str
    injury: str
    status: str


class PlayDisplaySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    quarter: int
    time: str
    offense_team: str
    description: str
    yards_gained: int
    is_scoring: bool = False
    is_turnover: bool = False
    is_big_play: bool = False
    score: str = "0-0"


# =============================================================================
# Week flow
# =============================================================================


class WeekGatesSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    game_result_viewed: bool = False
    week_summary_viewed: bool = False


class WeekFlowSchema(BaseModel):
    phase: WeekFlowPhase
    week_number: int
    season_phase: SeasonPhase
    is_user_on_bye: bool
    user_game: Optional[ScheduledGameSchema] = None
    user_game_completed: bool = False
    user_game_score: Optional[str] = None
    other_games_total: int = 0
    other_games_completed: int = 0
    gates: WeekGatesSchema

    @classmethod
    def from_model(cls, week_flow: WeekFlowState) -> "WeekFlowSchema":
        user_game = None
        if week_flow.user_game is not None:
            user_game = ScheduledGameSchema.model_validate(week_flow.user_game)
        result = week_flow.user_game_result
        return cls(
            phase=week_flow.phase,
            week_number=week_flow.week_number,
            season_phase=week_flow.season_phase,
            is_user_on_bye=week_flow.is_user_on_bye,
            user_game=user_game,
            user_game_completed=week_flow.user_game_completed,
            user_game_score=result.score_string if result else None,
            other_games_total=len(week_flow.other_games),
            other_games_completed=week_flow.other_games_completed,
            gates=WeekGatesSchema.model_validate(week_flow.gates),
        )


# =============================================================================
# Game day
# =============================================================================


class WeatherSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    temperature: int
    condition: str
    wind: int
    precipitation: Precipitation
    is_dome: bool


class PreGameSchema(BaseModel):
    week: int
    user_team: str
    opponent: str
    opponent_record: str
    is_user_home: bool
    stakes: GameStakes
    key_matchup: str
    weather: WeatherSchema
    user_injuries: list[InjuryReportSchema] = []
    opponent_injuries: list[InjuryReportSchema] = []
    user_form: list[str] = []
    opponent_form: list[str] = []

    @classmethod
    def from_model(cls, info: PreGameInfo) -> "PreGameSchema":
        return cls(
            week=info.week,
            user_team=info.user_team.full_name,
            opponent=info.opponent.full_name,
            opponent_record=info.opponent.current_record.record_string,
            is_user_home=info.is_user_home,
            stakes=info.stakes,
            key_matchup=info.key_matchup,
            weather=WeatherSchema.model_validate(info.weather),
            user_injuries=[InjuryReportSchema.model_validate(r) for r in info.user_injuries],
            opponent_injuries=[InjuryReportSchema.model_validate(r) for r in info.opponent_injuries],
            user_form=[f"{g.result} {g.score} vs {g.opponent_abbr}" for g in info.user_form],
            opponent_form=[f"{g.result} {g.score} vs {g.opponent_abbr}" for g in info.opponent_form],
        )


class LiveGameSchema(BaseModel):
    game_id: str
    home_team: str
    away_team: str
    home_score: int
    away_score: int
    quarter: Union[int, str]
    time_remaining: int
    possession: str
    ball_position: int
    down: int
    yards_to_go: int
    is_complete: bool
    recent_plays: list[PlayDisplaySchema] = []

    @classmethod
    def from_model(cls, live: LiveGameDisplay) -> "LiveGameSchema":
        return cls(
            game_id=live.game_id,
            home_team=live.home_team.abbr,
            away_team=live.away_team.abbr,
            home_score=live.home_score,
            away_score=live.away_score,
            quarter=live.quarter,
            time_remaining=live.time_remaining,
            possession=live.possession,
            ball_position=live.ball_position,
            down=live.down,
            yards_to_go=live.yards_to_go,
            is_complete=live.is_complete,
            recent_plays=[PlayDisplaySchema.model_validate(p) for p in live.recent_plays],
        )


class PostGameSchema(BaseModel):
    score: str
    user_won: bool
    was_upset: bool
    prediction_correct: Optional[bool] = None
    new_user_record: str
    mvp: Optional[str] = None
    key_plays: list[PlayDisplaySchema] = []
    new_injuries: list[InjuryReportSchema] = []
    playoff_implication: Optional[str] = None

    @classmethod
    def from_model(cls, info: PostGameInfo) -> "PostGameSchema":
        user_score = info.result.score_for(info.user_team.id)
        opponent_score = info.result.score_for(info.opponent.id)
        mvp = None
        if info.mvp is not None:
            mvp = f"{info.mvp.player_name} ({info.mvp.position}): {info.mvp.stat_line}"
        return cls(
            score=f"{user_score}-{opponent_score}",
            user_won=info.user_won,
            was_upset=info.was_upset,
            prediction_correct=info.prediction_correct,
            new_user_record=info.new_user_record,
            mvp=mvp,
            key_plays=[PlayDisplaySchema.model_validate(p) for p in info.key_plays],
            new_injuries=[InjuryReportSchema.model_validate(r) for r in info.new_injuries],
            playoff_implication=info.playoff_implication,
        )


class GameDaySchema(BaseModel):
    phase: GameDayPhase
    simulation_speed: SimulationSpeed
    is_paused: bool
    prediction: Optional[GamePrediction] = None
    pre_game: Optional[PreGameSchema] = None
    live_game: Optional[LiveGameSchema] = None
    post_game: Optional[PostGameSchema] = None

    @classmethod
    def from_model(cls, state: GameDayFlowState) -> "GameDaySchema":
        return cls(
            phase=state.phase,
            simulation_speed=state.simulation_speed,
            is_paused=state.is_paused,
            prediction=state.prediction,
            pre_game=PreGameSchema.from_model(state.pre_game_info) if state.pre_game_info else None,
            live_game=LiveGameSchema.from_model(state.live_game) if state.live_game else None,
            post_game=PostGameSchema.from_model(state.post_game_info) if state.post_game_info else None,
        )


class FlowStateSchema(BaseModel):
    """Full manager state as returned by every action endpoint."""

    week_flow: WeekFlowSchema
    game_day: Optional[GameDaySchema] = None
    is_loading: bool = False
    error: Optional[str] = None

    @classmethod
    def from_model(cls, state: GameFlowState) -> "FlowStateSchema":
        return cls(
            week_flow=WeekFlowSchema.from_model(state.week_flow),
            game_day=GameDaySchema.from_model(state.game_day_flow) if state.game_day_flow else None,
            is_loading=state.is_loading,
            error=state.error,
        )


class SessionResponse(BaseModel):
    session_id: UUID
    user_team_id: str
    state: FlowStateSchema


class CanAdvanceSchema(BaseModel):
    can_advance: bool
    reason: Optional[str] = None

    @classmethod
    def from_model(cls, check: AdvanceCheck) -> "CanAdvanceSchema":
        return cls(can_advance=check.can_advance, reason=check.reason)


# =============================================================================
# Week summary and advancement
# =============================================================================


class UserResultSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    won: bool
    score: str
    opponent: str
    new_record: str


class GameSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    game_id: str
    home_team_abbr: str
    away_team_abbr: str
    home_score: int
    away_score: int
    is_user_game: bool = False


class StandingRowSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    team_id: str
    name: str
    abbr: str
    wins: int
    losses: int
    ties: int
    division_rank: int
    is_user_team: bool = False


class DivisionStandingSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    conference: str
    division: str
    teams: list[StandingRowSchema] = []


class PlayoffImplicationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    team_id: str
    team_name: str
    type: PlayoffImplicationType
    description: str


class HeadlineSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    text: str
    importance: HeadlineImportance
    team_ids: list[str] = []


class InjuryUpdateSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    player_id: str
    player_name: str
    team_id: str
    team_abbr: str
    type: InjuryUpdateType
    description: str


class WeekSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    week: int
    user_result: Optional[UserResultSchema] = None
    game_results: list[GameSummarySchema] = []
    standings: list[DivisionStandingSchema] = []
    playoff_implications: list[PlayoffImplicationSchema] = []
    headlines: list[HeadlineSchema] = []
    injury_updates: list[InjuryUpdateSchema] = []

    @classmethod
    def from_model(cls, summary: WeekSummary) -> "WeekSummarySchema":
        return cls.model_validate(summary)


class WeekSummaryResponse(BaseModel):
    summary: Optional[WeekSummarySchema] = None
    state: FlowStateSchema


class AdvancementSchema(BaseModel):
    new_week: int
    season_phase: SeasonPhase
    playoffs_start: bool
    season_ended: bool
    recovered_players: list[str] = []

    @classmethod
    def from_model(cls, result: WeekAdvancementResult) -> "AdvancementSchema":
        return cls(
            new_week=result.new_week,
            season_phase=result.season_phase,
            playoffs_start=result.playoffs_start,
            season_ended=result.season_ended,
            recovered_players=[p.player_name for p in result.recovered_players],
        )


class AdvanceResponse(BaseModel):
    result: Optional[AdvancementSchema] = None
    state: FlowStateSchema

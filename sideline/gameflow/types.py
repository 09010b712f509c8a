"""
Game Flow Types

State shapes for the week and game day flow. All snapshot types are frozen;
transitions build new instances with ``dataclasses.replace``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union

from sideline.core.league.schedule import ScheduledGame
from sideline.core.models.game import GameResult
from sideline.core.models.team import Team
from sideline.errors import InvalidWeekFlowState


# =============================================================================
# Game Day Flow Types
# =============================================================================


class GameDayPhase(str, Enum):
    """The user's journey through a single game."""

    IDLE = "idle"
    PRE_GAME = "pre_game"
    COIN_TOSS = "coin_toss"
    SIMULATING = "simulating"
    HALFTIME = "halftime"
    POST_GAME = "post_game"
    SAVING = "saving"


class SimulationSpeed(str, Enum):
    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"
    INSTANT = "instant"


# Pause between plays, in seconds
SIMULATION_DELAYS: dict[SimulationSpeed, float] = {
    SimulationSpeed.SLOW: 1.5,
    SimulationSpeed.NORMAL: 0.8,
    SimulationSpeed.FAST: 0.3,
    SimulationSpeed.INSTANT: 0.0,
}


class GamePrediction(str, Enum):
    """User prediction for the game outcome. ``None`` means no prediction."""

    WIN = "win"
    LOSS = "loss"


class Precipitation(str, Enum):
    NONE = "none"
    RAIN = "rain"
    SNOW = "snow"


class GameStakes(str, Enum):
    REGULAR = "regular"
    PLAYOFF = "playoff"


@dataclass(frozen=True)
class Weather:
    temperature: int
    condition: str
    wind: int
    precipitation: Precipitation = Precipitation.NONE
    is_dome: bool = False


@dataclass(frozen=True)
class InjuryReport:
    """Injury line shown on the pre-game and post-game screens."""

    player_id: str
    player_name: str
    position: str
    injury: str
    status: str  # out, doubtful, questionable, probable


@dataclass(frozen=True)
class GameOutcome:
    """One entry of a team's recent form."""

    result: str  # W, L or T
    opponent_abbr: str
    score: str


@dataclass(frozen=True)
class PreGameInfo:
    game: ScheduledGame
    user_team: Team
    opponent: Team
    is_user_home: bool
    weather: Weather
    stakes: GameStakes
    week: int
    key_matchup: str
    user_injuries: list[InjuryReport] = field(default_factory=list)
    opponent_injuries: list[InjuryReport] = field(default_factory=list)
    user_form: list[GameOutcome] = field(default_factory=list)
    opponent_form: list[GameOutcome] = field(default_factory=list)


@dataclass(frozen=True)
class PlayDisplay:
    """A play formatted for the play-by-play feed."""

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


@dataclass(frozen=True)
class TeamDisplay:
    id: str
    name: str
    abbr: str
    timeouts_remaining: int = 3


@dataclass(frozen=True)
class DriveDisplay:
    plays: int = 0
    yards: int = 0
    time_of_possession: int = 0


@dataclass(frozen=True)
class LiveGameDisplay:
    """UI projection of an in-progress game."""

    game_id: str
    home_score: int
    away_score: int
    quarter: Union[int, str]  # 1-4, "OT" or "Final"
    time_remaining: int
    is_clock_running: bool
    possession: str  # home or away
    ball_position: int  # yards from the home end zone
    down: int
    yards_to_go: int
    home_team: TeamDisplay
    away_team: TeamDisplay
    current_drive: DriveDisplay = field(default_factory=DriveDisplay)
    recent_plays: list[PlayDisplay] = field(default_factory=list)
    is_complete: bool = False


@dataclass(frozen=True)
class HalfStats:
    total_yards: int = 0
    passing_yards: int = 0
    rushing_yards: int = 0
    turnovers: int = 0
    time_of_possession: int = 0


@dataclass(frozen=True)
class HalftimeInfo:
    home_score: int
    away_score: int
    home_team_abbr: str
    away_team_abbr: str
    home_first_half_stats: HalfStats
    away_first_half_stats: HalfStats
    key_plays: list[PlayDisplay] = field(default_factory=list)


@dataclass(frozen=True)
class MvpInfo:
    player_id: str
    player_name: str
    position: str
    stat_line: str


@dataclass(frozen=True)
class PostGameInfo:
    result: GameResult
    user_team: Team
    opponent: Team
    user_won: bool
    was_upset: bool
    prediction_correct: Optional[bool]
    new_user_record: str
    key_plays: list[PlayDisplay] = field(default_factory=list)
    mvp: Optional[MvpInfo] = None
    new_injuries: list[InjuryReport] = field(default_factory=list)
    playoff_implication: Optional[str] = None


@dataclass(frozen=True)
class GameDayFlowState:
    phase: GameDayPhase = GameDayPhase.IDLE
    pre_game_info: Optional[PreGameInfo] = None
    live_game: Optional[LiveGameDisplay] = None
    simulation_speed: SimulationSpeed = SimulationSpeed.NORMAL
    is_paused: bool = False
    prediction: Optional[GamePrediction] = None
    halftime_info: Optional[HalftimeInfo] = None
    post_game_info: Optional[PostGameInfo] = None


# =============================================================================
# Week Flow Types
# =============================================================================


class WeekFlowPhase(str, Enum):
    """The user's journey through a week."""

    WEEK_START = "week_start"
    PRE_GAME = "pre_game"
    GAME_DAY = "game_day"
    POST_GAME = "post_game"
    OTHER_GAMES = "other_games"
    WEEK_SUMMARY = "week_summary"
    READY_TO_ADVANCE = "ready_to_advance"


class SeasonPhase(str, Enum):
    PRESEASON = "preseason"
    REGULAR_SEASON = "regularSeason"
    PLAYOFFS = "playoffs"
    OFFSEASON = "offseason"


@dataclass(frozen=True)
class WeekGates:
    """Acknowledgements the user must give before the week can advance."""

    game_result_viewed: bool = False
    week_summary_viewed: bool = False


@dataclass(frozen=True)
class WeekFlowState:
    phase: WeekFlowPhase
    week_number: int
    season_phase: SeasonPhase
    is_user_on_bye: bool = False
    user_game: Optional[ScheduledGame] = None
    user_game_completed: bool = False
    user_game_result: Optional[GameResult] = None
    other_games: tuple[ScheduledGame, ...] = ()
    other_games_completed: int = 0
    gates: WeekGates = field(default_factory=WeekGates)

    def __post_init__(self) -> None:
        if not 0 <= self.other_games_completed <= len(self.other_games):
            raise InvalidWeekFlowState(
                f"other_games_completed={self.other_games_completed} "
                f"with {len(self.other_games)} other games"
            )
        if (self.user_game_result is not None) != self.user_game_completed:
            raise InvalidWeekFlowState(
                "user_game_result must be set exactly when user_game_completed is true"
            )
        if self.is_user_on_bye and self.user_game is not None:
            raise InvalidWeekFlowState("a team on bye cannot have a user game")

    @property
    def all_other_games_completed(self) -> bool:
        return self.other_games_completed == len(self.other_games)


@dataclass(frozen=True)
class UserResultSummary:
    won: bool
    score: str
    opponent: str
    new_record: str


@dataclass(frozen=True)
class GameSummary:
    """Line score for the week summary."""

    game_id: str
    home_team_abbr: str
    away_team_abbr: str
    home_score: int
    away_score: int
    is_user_game: bool = False


@dataclass(frozen=True)
class StandingRow:
    team_id: str
    name: str
    abbr: str
    wins: int
    losses: int
    ties: int
    division_rank: int
    is_user_team: bool = False


@dataclass(frozen=True)
class DivisionStandingSummary:
    conference: str  # AFC or NFC
    division: str  # North, South, East or West
    teams: list[StandingRow] = field(default_factory=list)


class PlayoffImplicationType(str, Enum):
    CLINCHED_DIVISION = "clinched_division"
    CLINCHED_PLAYOFF = "clinched_playoff"
    ELIMINATED = "eliminated"
    CONTROLS_DESTINY = "controls_destiny"


@dataclass(frozen=True)
class PlayoffImplication:
    team_id: str
    team_name: str
    type: PlayoffImplicationType
    description: str


class HeadlineImportance(str, Enum):
    MAJOR = "major"
    NOTABLE = "notable"
    MINOR = "minor"


@dataclass(frozen=True)
class Headline:
    text: str
    importance: HeadlineImportance
    team_ids: tuple[str, ...] = ()


class InjuryUpdateType(str, Enum):
    NEW_INJURY = "new_injury"
    RECOVERED = "recovered"
    STATUS_CHANGE = "status_change"


@dataclass(frozen=True)
class InjuryUpdate:
    player_id: str
    player_name: str
    team_id: str
    team_abbr: str
    type: InjuryUpdateType
    description: str


@dataclass(frozen=True)
class WeekSummary:
    """Display-only aggregate of a completed week."""

    week: int
    user_result: Optional[UserResultSummary] = None
    game_results: list[GameSummary] = field(default_factory=list)
    standings: list[DivisionStandingSummary] = field(default_factory=list)
    playoff_implications: list[PlayoffImplication] = field(default_factory=list)
    headlines: list[Headline] = field(default_factory=list)
    injury_updates: list[InjuryUpdate] = field(default_factory=list)


# =============================================================================
# Game Flow Manager Types
# =============================================================================


@dataclass(frozen=True)
class GameFlowState:
    week_flow: WeekFlowState
    game_day_flow: Optional[GameDayFlowState] = None
    is_loading: bool = False
    error: Optional[str] = None


@dataclass
class GameFlowCallbacks:
    """Named hooks the presentation layer can register on the manager."""

    on_week_start: Optional[Callable[[int], None]] = None
    on_game_start: Optional[Callable[[PreGameInfo], None]] = None
    on_play_complete: Optional[Callable[[PlayDisplay], None]] = None
    on_game_complete: Optional[Callable[[GameResult], None]] = None
    on_week_complete: Optional[Callable[[WeekSummary], None]] = None

"""League structure, schedule and standings."""

from sideline.core.league.league_data import (
    Conference,
    Division,
    DIVISIONS_BY_CONFERENCE,
    FRANCHISES,
    FranchiseData,
    get_franchise,
    get_franchises_in_division,
)
from sideline.core.league.schedule import (
    ScheduledGame,
    SeasonSchedule,
    get_team_schedule,
    get_week_games,
    is_on_bye,
    recent_results,
    record_game_results,
)
from sideline.core.league.standings import (
    LeagueStandings,
    TeamStanding,
    calculate_standings,
)

__all__ = [
    "Conference",
    "Division",
    "DIVISIONS_BY_CONFERENCE",
    "FRANCHISES",
    "FranchiseData",
    "get_franchise",
    "get_franchises_in_division",
    "ScheduledGame",
    "SeasonSchedule",
    "get_team_schedule",
    "get_week_games",
    "is_on_bye",
    "recent_results",
    "record_game_results",
    "LeagueStandings",
    "TeamStanding",
    "calculate_standings",
]

"""
Season schedule.

The schedule is owned by the season subsystem. The week flow only reads
it, and records completed games back by building new ScheduledGame copies.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional


@dataclass(frozen=True)
class ScheduledGame:
    """
    A scheduled game between two teams.

    Can be in the future (not played) or the past (with result).
    """

    game_id: str
    week: int
    home_team_id: str
    away_team_id: str

    # Game type
    is_divisional: bool = False
    is_conference: bool = False
    is_playoff: bool = False

    # Result
    is_complete: bool = False
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    winner_id: Optional[str] = None

    def involves(self, team_id: str) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def opponent_of(self, team_id: str) -> Optional[str]:
        if team_id == self.home_team_id:
            return self.away_team_id
        if team_id == self.away_team_id:
            return self.home_team_id
        return None

    def completed(self, home_score: int, away_score: int) -> "ScheduledGame":
        """Return a completed copy with the final score recorded."""
        if home_score > away_score:
            winner = self.home_team_id
        elif away_score > home_score:
            winner = self.away_team_id
        else:
            winner = None
        return replace(
            self,
            is_complete=True,
            home_score=home_score,
            away_score=away_score,
            winner_id=winner,
        )


@dataclass(frozen=True)
class SeasonSchedule:
    """Regular season games, bye weeks and (once seeded) playoff games."""

    year: int
    regular_season: list[ScheduledGame] = field(default_factory=list)
    bye_weeks: dict[str, int] = field(default_factory=dict)
    playoffs: list[ScheduledGame] = field(default_factory=list)

    @property
    def all_games(self) -> list[ScheduledGame]:
        return [*self.regular_season, *self.playoffs]


def get_week_games(schedule: SeasonSchedule, week: int) -> list[ScheduledGame]:
    """All games (regular season and playoff) scheduled for a week."""
    return [g for g in schedule.all_games if g.week == week]


def get_team_schedule(schedule: SeasonSchedule, team_id: str) -> list[ScheduledGame]:
    """A team's games in week order."""
    return sorted(
        (g for g in schedule.all_games if g.involves(team_id)),
        key=lambda g: g.week,
    )


def is_on_bye(team_id: str, week: int, bye_weeks: dict[str, int]) -> bool:
    return bye_weeks.get(team_id) == week


def record_game_results(
    schedule: SeasonSchedule,
    games: Iterable[ScheduledGame],
) -> SeasonSchedule:
    """
    Return a new schedule with the given games replacing their originals.

    Games are matched by ``game_id``. Unknown ids are ignored.
    """
    by_id = {g.game_id: g for g in games}
    if not by_id:
        return schedule
    return replace(
        schedule,
        regular_season=[by_id.get(g.game_id, g) for g in schedule.regular_season],
        playoffs=[by_id.get(g.game_id, g) for g in schedule.playoffs],
    )


def recent_results(
    schedule: SeasonSchedule,
    team_id: str,
    before_week: int,
    limit: int = 3,
) -> list[ScheduledGame]:
    """The team's last ``limit`` completed games before ``before_week``, most recent first."""
    played = [
        g for g in get_team_schedule(schedule, team_id)
        if g.is_complete and g.week < before_week
    ]
    return list(reversed(played))[:limit]

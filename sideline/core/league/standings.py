"""
Standings calculation.

Standings are derived from each team's current record. Within a division
teams are ordered by win percentage, then wins, then point differential.
Teams level on win percentage share a division rank, so a leader is only a
clean rank 1 when strictly ahead of the runner-up.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

from sideline.core.league.league_data import Division, DIVISIONS_BY_CONFERENCE

if TYPE_CHECKING:
    from sideline.core.models.team import Team


@dataclass
class TeamStanding:
    """Standings record for a single team."""

    team_id: str
    abbreviation: str
    nickname: str
    division: Division
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: int = 0
    points_against: int = 0
    division_rank: int = 0

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def win_pct(self) -> float:
        """Winning percentage."""
        if self.games_played == 0:
            return 0.0
        return (self.wins + 0.5 * self.ties) / self.games_played

    @property
    def point_diff(self) -> int:
        return self.points_for - self.points_against

    @property
    def record_string(self) -> str:
        if self.ties > 0:
            return f"{self.wins}-{self.losses}-{self.ties}"
        return f"{self.wins}-{self.losses}"

    @classmethod
    def from_team(cls, team: Team) -> "TeamStanding":
        record = team.current_record
        return cls(
            team_id=team.id,
            abbreviation=team.abbreviation,
            nickname=team.nickname,
            division=team.division,
            wins=record.wins,
            losses=record.losses,
            ties=record.ties,
            points_for=record.points_for,
            points_against=record.points_against,
        )


@dataclass
class LeagueStandings:
    """Division standings for the whole league, best team first."""

    divisions: dict[Division, list[TeamStanding]] = field(default_factory=dict)

    def division(self, division: Division) -> list[TeamStanding]:
        return self.divisions.get(division, [])

    def leader(self, division: Division) -> TeamStanding | None:
        teams = self.division(division)
        return teams[0] if teams else None

    def is_clean_leader(self, division: Division) -> bool:
        """True when the division leader is strictly ahead of second place."""
        teams = self.division(division)
        if not teams:
            return False
        if len(teams) == 1:
            return True
        return teams[0].win_pct > teams[1].win_pct

    def find(self, team_id: str) -> TeamStanding | None:
        for teams in self.divisions.values():
            for standing in teams:
                if standing.team_id == team_id:
                    return standing
        return None


def _sort_key(standing: TeamStanding) -> tuple:
    return (-standing.win_pct, -standing.wins, -standing.point_diff, standing.abbreviation)


def calculate_standings(teams: Iterable[Team]) -> LeagueStandings:
    """
    Build division standings from team records.

    Division rank is positional, except that teams tied on win percentage
    with the team above them share that team's rank.
    """
    by_division: dict[Division, list[TeamStanding]] = {
        division: [] for divisions in DIVISIONS_BY_CONFERENCE.values() for division in divisions
    }
    for team in teams:
        by_division.setdefault(team.division, []).append(TeamStanding.from_team(team))

    for division, standings in by_division.items():
        standings.sort(key=_sort_key)
        for position, standing in enumerate(standings, start=1):
            previous = standings[position - 2] if position > 1 else None
            if previous is not None and previous.win_pct == standing.win_pct:
                standing.division_rank = previous.division_rank
            else:
                standing.division_rank = position

    return LeagueStandings(divisions=by_division)

"""Completed game results: final score, box score and injuries."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class GameInjury:
    """An injury suffered during a game."""

    player_id: str
    player_name: str
    team_id: str
    injury_type: str
    weeks_out: int


@dataclass(frozen=True)
class StatLeader:
    """A single leader line in a box score (e.g. top passer)."""

    player_id: str
    player_name: str
    position: str
    team_id: str
    yards: int
    stat_line: str


@dataclass
class TeamGameStats:
    """Team totals for one game."""

    total_yards: int = 0
    passing_yards: int = 0
    rushing_yards: int = 0
    turnovers: int = 0
    time_of_possession: int = 0  # seconds
    plays: int = 0


@dataclass(frozen=True)
class BoxScore:
    home_stats: TeamGameStats = field(default_factory=TeamGameStats)
    away_stats: TeamGameStats = field(default_factory=TeamGameStats)
    passing_leaders: list[StatLeader] = field(default_factory=list)
    rushing_leaders: list[StatLeader] = field(default_factory=list)


@dataclass(frozen=True)
class GameResult:
    """
    Output of a completed game.

    Produced once per game by the simulation and consumed once by the
    week progression service, which keeps it on the week flow state.
    """

    game_id: str
    week: int
    home_team_id: str
    away_team_id: str
    home_score: int
    away_score: int
    box_score: BoxScore = field(default_factory=BoxScore)
    injuries: list[GameInjury] = field(default_factory=list)
    total_plays: int = 0
    went_to_overtime: bool = False

    @property
    def is_tie(self) -> bool:
        return self.home_score == self.away_score

    @property
    def winner_id(self) -> Optional[str]:
        if self.home_score > self.away_score:
            return self.home_team_id
        if self.away_score > self.home_score:
            return self.away_team_id
        return None

    @property
    def loser_id(self) -> Optional[str]:
        if self.home_score > self.away_score:
            return self.away_team_id
        if self.away_score > self.home_score:
            return self.home_team_id
        return None

    def score_for(self, team_id: str) -> int:
        """Points scored by ``team_id`` (0 if not in this game)."""
        if team_id == self.home_team_id:
            return self.home_score
        if team_id == self.away_team_id:
            return self.away_score
        return 0

    def opponent_of(self, team_id: str) -> Optional[str]:
        if team_id == self.home_team_id:
            return self.away_team_id
        if team_id == self.away_team_id:
            return self.home_team_id
        return None

    @property
    def score_string(self) -> str:
        return f"{self.home_score}-{self.away_score}"

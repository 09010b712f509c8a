"""Team model and season record."""

from dataclasses import dataclass, field, replace

from sideline.core.league.league_data import Conference, Division


@dataclass(frozen=True)
class TeamRecord:
    """
    Win/loss/tie record for the current season.

    Records are immutable; ``with_result`` returns the record after one
    more game.
    """

    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: int = 0
    points_against: int = 0

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def win_pct(self) -> float:
        """Winning percentage (ties count as half a win)."""
        if self.games_played == 0:
            return 0.0
        return (self.wins + 0.5 * self.ties) / self.games_played

    @property
    def point_diff(self) -> int:
        return self.points_for - self.points_against

    @property
    def record_string(self) -> str:
        """Format record as string (e.g., '10-7' or '9-7-1')."""
        if self.ties > 0:
            return f"{self.wins}-{self.losses}-{self.ties}"
        return f"{self.wins}-{self.losses}"

    def with_result(self, points_for: int, points_against: int) -> "TeamRecord":
        """
        Return the record after a game with the given final score.

        Exactly one of wins/losses/ties is incremented.
        """
        won = points_for > points_against
        lost = points_against > points_for
        return TeamRecord(
            wins=self.wins + (1 if won else 0),
            losses=self.losses + (1 if lost else 0),
            ties=self.ties + (0 if won or lost else 1),
            points_for=self.points_for + points_for,
            points_against=self.points_against + points_against,
        )


@dataclass(frozen=True)
class Team:
    """A franchise as seen by the week flow."""

    id: str
    city: str
    nickname: str
    abbreviation: str
    division: Division
    current_record: TeamRecord = field(default_factory=TeamRecord)
    roster_player_ids: tuple[str, ...] = ()
    is_dome: bool = False

    @property
    def conference(self) -> Conference:
        return self.division.conference

    @property
    def full_name(self) -> str:
        return f"{self.city} {self.nickname}"

    def with_record(self, record: TeamRecord) -> "Team":
        return replace(self, current_record=record)

    def __str__(self) -> str:
        return f"{self.full_name} ({self.current_record.record_string})"

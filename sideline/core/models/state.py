"""
The league-wide aggregate the week flow reads and transforms.

GameState is owned by the host application. Flow services never mutate it;
every update returns a new GameState with fresh dicts so an instance the
caller still holds stays untouched.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from sideline.core.models.player import Player
from sideline.core.models.team import Team


@dataclass(frozen=True)
class GameState:
    teams: dict[str, Team] = field(default_factory=dict)
    players: dict[str, Player] = field(default_factory=dict)
    season: int = 2025
    current_week: int = 1

    def get_team(self, team_id: str) -> Optional[Team]:
        return self.teams.get(team_id)

    def get_player(self, player_id: str) -> Optional[Player]:
        return self.players.get(player_id)

    def roster(self, team_id: str) -> list[Player]:
        """Players on a team's roster, in roster order."""
        team = self.teams.get(team_id)
        if team is None:
            return []
        return [self.players[pid] for pid in team.roster_player_ids if pid in self.players]

    def team_of_player(self, player_id: str) -> Optional[Team]:
        player = self.players.get(player_id)
        if player is not None and player.team_id in self.teams:
            return self.teams[player.team_id]
        for team in self.teams.values():
            if player_id in team.roster_player_ids:
                return team
        return None

    def with_teams(self, teams: dict[str, Team]) -> "GameState":
        return replace(self, teams=dict(teams))

    def with_players(self, players: dict[str, Player]) -> "GameState":
        return replace(self, players=dict(players))

    def with_week(self, week: int) -> "GameState":
        return replace(self, current_week=week)

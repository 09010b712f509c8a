"""Shared pytest fixtures for Sideline tests."""

import random
from dataclasses import replace
from typing import Optional

import pytest

from sideline.config import FlowConfig
from sideline.core.league.league_data import FRANCHISES
from sideline.core.league.schedule import ScheduledGame, SeasonSchedule
from sideline.core.models.game import GameInjury, GameResult
from sideline.core.models.player import InjurySeverity, InjuryStatus, Player
from sideline.core.models.state import GameState
from sideline.core.models.team import Team, TeamRecord
from sideline.events.bus import EventBus
from sideline.generators import generate_league


USER_TEAM = "PHI"
LEAGUE_TEAMS = ["PHI", "DAL", "NYG", "WAS", "KC", "BUF"]
ROSTER_POSITIONS = ["QB", "RB", "WR", "TE", "DL", "LB", "CB", "K"]


def make_team(abbr: str, record: Optional[TeamRecord] = None) -> tuple[Team, list[Player]]:
    """Build a team and its roster from the franchise table."""
    franchise = FRANCHISES[abbr]
    roster = [
        Player(
            id=f"{abbr}-{position}",
            first_name=abbr.title(),
            last_name=position,
            position=position,
            team_id=abbr,
            overall=75,
        )
        for position in ROSTER_POSITIONS
    ]
    team = Team(
        id=abbr,
        city=franchise.city,
        nickname=franchise.nickname,
        abbreviation=abbr,
        division=franchise.division,
        current_record=record or TeamRecord(),
        roster_player_ids=tuple(p.id for p in roster),
        is_dome=franchise.is_dome,
    )
    return team, roster


def make_game(week: int, away: str, home: str, **kwargs) -> ScheduledGame:
    return ScheduledGame(
        game_id=f"2025-W{week:02d}-{away}@{home}",
        week=week,
        home_team_id=home,
        away_team_id=away,
        **kwargs,
    )


def make_result(game: ScheduledGame, home_score: int, away_score: int, **kwargs) -> GameResult:
    return GameResult(
        game_id=game.game_id,
        week=game.week,
        home_team_id=game.home_team_id,
        away_team_id=game.away_team_id,
        home_score=home_score,
        away_score=away_score,
        **kwargs,
    )


# =============================================================================
# Configuration and infrastructure
# =============================================================================


@pytest.fixture
def config(monkeypatch) -> FlowConfig:
    """Default configuration, isolated from the environment."""
    for name in (
        "SIDELINE_REGULAR_SEASON_WEEKS",
        "SIDELINE_PLAYOFF_WEEKS",
        "SIDELINE_MAX_PLAYS",
        "SIDELINE_DEFAULT_SPEED",
        "SIDELINE_HISTORY_SIZE",
        "SIDELINE_EMIT_EVENTS",
    ):
        monkeypatch.delenv(name, raising=False)
    return FlowConfig()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


# =============================================================================
# A small hand-built league
# =============================================================================


@pytest.fixture
def game_state() -> GameState:
    """
    Six teams with eight-man rosters.

    PHI's running back is one week from recovery; DAL's quarterback is out
    for three more weeks.
    """
    teams = {}
    players = {}
    for abbr in LEAGUE_TEAMS:
        team, roster = make_team(abbr)
        teams[abbr] = team
        players.update({p.id: p for p in roster})

    players["PHI-RB"] = players["PHI-RB"].with_injury(
        InjuryStatus(InjurySeverity.QUESTIONABLE, "hamstring", 1)
    )
    players["DAL-QB"] = players["DAL-QB"].with_injury(
        InjuryStatus(InjurySeverity.OUT, "ankle", 3)
    )
    players["PHI-QB"] = replace(players["PHI-QB"], fatigue=40)
    return GameState(teams=teams, players=players, season=2025, current_week=1)


@pytest.fixture
def schedule() -> SeasonSchedule:
    """
    Weeks 1, 2 and 5. PHI and BUF are on bye in week 5.
    """
    games = [
        make_game(1, "DAL", "PHI", is_divisional=True, is_conference=True),
        make_game(1, "NYG", "WAS", is_divisional=True, is_conference=True),
        make_game(1, "BUF", "KC", is_conference=True),
        make_game(2, "PHI", "NYG", is_divisional=True, is_conference=True),
        make_game(2, "KC", "DAL"),
        make_game(2, "WAS", "BUF"),
        make_game(5, "NYG", "DAL", is_divisional=True, is_conference=True),
        make_game(5, "WAS", "KC"),
    ]
    return SeasonSchedule(
        year=2025,
        regular_season=games,
        bye_weeks={"PHI": 5, "BUF": 5},
    )


@pytest.fixture
def week_one_game(schedule) -> ScheduledGame:
    return schedule.regular_season[0]


@pytest.fixture
def user_win(week_one_game) -> GameResult:
    """PHI beats DAL 28-21 at home; DAL's tight end is hurt for two weeks."""
    return make_result(
        week_one_game,
        28,
        21,
        injuries=[GameInjury("DAL-TE", "Dal TE", "DAL", "knee", 2)],
        total_plays=130,
    )


@pytest.fixture(scope="session")
def generated_league():
    """Full 32-team league with a reproducible schedule."""
    return generate_league(seed=7)

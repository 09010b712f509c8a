"""
League Generation.

Builds a 32-team league (teams, starting rosters, records at 0-0) and an
18-week regular season schedule with one bye per team, for the demo CLI,
the HTTP sessions and tests.
"""

import logging
import random
from dataclasses import dataclass
from itertools import combinations
from typing import Optional

import pulp

from sideline.core.league.league_data import (
    DIVISIONS_BY_CONFERENCE,
    FRANCHISES,
    Conference,
    Division,
    FranchiseData,
    get_franchises_in_division,
)
from sideline.core.league.schedule import ScheduledGame, SeasonSchedule
from sideline.core.models.player import Player
from sideline.core.models.state import GameState
from sideline.core.models.team import Team

logger = logging.getLogger(__name__)

FIRST_NAMES = [
    "James", "John", "Michael", "David", "Chris", "Matt", "Josh", "Ryan",
    "Tyler", "Brandon", "Justin", "Marcus", "Antonio", "DeShawn", "Malik",
    "Jamal", "Terrell", "Andre", "Darius", "Lamar", "Patrick", "Tom",
    "Aaron", "Derek", "Russell", "Cam", "Kyler", "Trevor", "Tua",
    "Cooper", "Chase", "Tyreek", "Davante", "Stefon", "Travis", "George",
]

LAST_NAMES = [
    "Johnson", "Williams", "Brown", "Jones", "Davis", "Miller", "Wilson",
    "Moore", "Taylor", "Anderson", "Thomas", "Jackson", "White", "Harris",
    "Martin", "Thompson", "Robinson", "Clark", "Lewis", "Walker", "Hall",
    "Allen", "Young", "King", "Wright", "Hill", "Scott", "Green", "Adams",
    "Baker", "Nelson", "Carter", "Mitchell", "Murray", "Herbert", "Fields",
]

# Starting lineup: slot -> position
ROSTER_SLOTS: dict[str, str] = {
    "QB1": "QB",
    "RB1": "RB",
    "WR1": "WR",
    "WR2": "WR",
    "WR3": "WR",
    "TE1": "TE",
    "LT": "OL",
    "LG": "OL",
    "C": "OL",
    "RG": "OL",
    "RT": "OL",
    "DE1": "DL",
    "DT1": "DL",
    "DT2": "DL",
    "DE2": "DL",
    "LB1": "LB",
    "LB2": "LB",
    "LB3": "LB",
    "CB1": "CB",
    "CB2": "CB",
    "FS": "S",
    "SS": "S",
    "K": "K",
    "P": "P",
}

REGULAR_SEASON_WEEKS = 18
GAMES_PER_TEAM = 17
# Weeks in which every team must play
NO_BYE_WEEKS = (1, 2, 3, 4, 16, 17, 18)
BYE_WEEKS = range(5, 16)
MIN_GAMES_PER_WEEK = 14
MAX_GAMES_PER_WEEK = 16

# Intra-conference division pairings, rotated by season
INTRA_PAIRINGS = [
    [(0, 1), (2, 3)],
    [(0, 2), (1, 3)],
    [(0, 3), (1, 2)],
]


@dataclass(frozen=True)
class GeneratedLeague:
    game_state: GameState
    schedule: SeasonSchedule


@dataclass(frozen=True)
class Matchup:
    home: str
    away: str
    is_divisional: bool = False
    is_conference: bool = False


def generate_roster(
    franchise: FranchiseData,
    rng: random.Random,
    overall_range: tuple[int, int] = (62, 88),
) -> list[Player]:
    """Generate the starting lineup for a franchise."""
    strength = rng.gauss(0, 4)
    low = max(40, int(overall_range[0] + strength))
    high = min(99, int(overall_range[1] + strength))

    return [
        Player(
            id=f"{franchise.abbreviation}-{slot}",
            first_name=rng.choice(FIRST_NAMES),
            last_name=rng.choice(LAST_NAMES),
            position=position,
            team_id=franchise.abbreviation,
            overall=rng.randint(low, high),
        )
        for slot, position in ROSTER_SLOTS.items()
    ]


def generate_team(franchise: FranchiseData, roster: list[Player]) -> Team:
    return Team(
        id=franchise.abbreviation,
        city=franchise.city,
        nickname=franchise.nickname,
        abbreviation=franchise.abbreviation,
        division=franchise.division,
        roster_player_ids=tuple(p.id for p in roster),
        is_dome=franchise.is_dome,
    )


def generate_matchups(season: int) -> list[Matchup]:
    """
    Generate all 272 regular season matchups (17 per team).

    - 6 division games (home and away vs each rival)
    - 4 games vs a same-conference division (rotating yearly)
    - 4 games vs an opposite-conference division (rotating yearly)
    - 2 games vs the same-slot teams of the two remaining conference divisions
    - 1 game vs the same-slot team of another opposite-conference division
    """
    matchups: list[Matchup] = []
    rotation = season % 3

    def slots(division: Division) -> list[str]:
        return [f.abbreviation for f in get_franchises_in_division(division)]

    def add_block(teams1: list[str], teams2: list[str], is_conference: bool) -> None:
        for j, team in enumerate(teams1):
            for k, opponent in enumerate(teams2):
                if (j + k) % 2 == 0:
                    matchups.append(Matchup(team, opponent, is_conference=is_conference))
                else:
                    matchups.append(Matchup(opponent, team, is_conference=is_conference))

    def add_same_slot(teams1: list[str], teams2: list[str], is_conference: bool) -> None:
        for slot, (team, opponent) in enumerate(zip(teams1, teams2)):
            if (slot + season) % 2 == 0:
                matchups.append(Matchup(team, opponent, is_conference=is_conference))
            else:
                matchups.append(Matchup(opponent, team, is_conference=is_conference))

    # Division games
    for divisions in DIVISIONS_BY_CONFERENCE.values():
        for division in divisions:
            for team1, team2 in combinations(slots(division), 2):
                matchups.append(Matchup(team1, team2, is_divisional=True, is_conference=True))
                matchups.append(Matchup(team2, team1, is_divisional=True, is_conference=True))

    # Intra-conference games
    pairings = INTRA_PAIRINGS[rotation]
    paired = {idx1: idx2 for idx1, idx2 in pairings} | {idx2: idx1 for idx1, idx2 in pairings}
    for divisions in DIVISIONS_BY_CONFERENCE.values():
        for idx1, idx2 in pairings:
            add_block(slots(divisions[idx1]), slots(divisions[idx2]), is_conference=True)
        for idx1, idx2 in combinations(range(4), 2):
            if paired[idx1] != idx2:
                add_same_slot(slots(divisions[idx1]), slots(divisions[idx2]), is_conference=True)

    # Inter-conference games
    afc = DIVISIONS_BY_CONFERENCE[Conference.AFC]
    nfc = DIVISIONS_BY_CONFERENCE[Conference.NFC]
    for idx in range(4):
        add_block(slots(afc[idx]), slots(nfc[(idx + rotation) % 4]), is_conference=False)
        add_same_slot(slots(afc[idx]), slots(nfc[(idx + rotation + 2) % 4]), is_conference=False)

    return matchups


def _schedule_problem(
    matchups: list[Matchup],
    team_ids: list[str],
    weeks: list[int],
    strict: bool,
) -> tuple[pulp.LpProblem, dict]:
    """
    Build the week-assignment problem.

    x[g, w] = 1 if game g is played in week w. Every game is played once and
    no team plays twice in a week. The strict version also balances games
    per week and keeps byes out of the opening and closing weeks.
    """
    prob = pulp.LpProblem("Season_Schedule" if strict else "Season_Schedule_Relaxed", pulp.LpMinimize)
    x = pulp.LpVariable.dicts(
        "game",
        ((g, w) for g in range(len(matchups)) for w in weeks),
        cat="Binary",
    )
    # Feasibility only
    prob += 0, "Dummy_Objective"

    for g in range(len(matchups)):
        prob += pulp.lpSum(x[g, w] for w in weeks) == 1, f"Game_{g}_played_once"

    team_games: dict[str, list[int]] = {team_id: [] for team_id in team_ids}
    for g, matchup in enumerate(matchups):
        team_games[matchup.home].append(g)
        team_games[matchup.away].append(g)

    for team_id in team_ids:
        for w in weeks:
            prob += (
                pulp.lpSum(x[g, w] for g in team_games[team_id]) <= 1,
                f"Team_{team_id}_week_{w}_max_one",
            )

    if strict:
        for w in weeks:
            week_games = pulp.lpSum(x[g, w] for g in range(len(matchups)))
            prob += week_games >= MIN_GAMES_PER_WEEK, f"Week_{w}_min_games"
            prob += week_games <= MAX_GAMES_PER_WEEK, f"Week_{w}_max_games"

        for team_id in team_ids:
            for w in NO_BYE_WEEKS:
                if w in weeks:
                    prob += (
                        pulp.lpSum(x[g, w] for g in team_games[team_id]) >= 1,
                        f"Team_{team_id}_no_bye_week_{w}",
                    )

    return prob, x


def assign_weeks(
    matchups: list[Matchup],
    team_ids: list[str],
    weeks: int = REGULAR_SEASON_WEEKS,
) -> dict[int, int]:
    """
    Assign each matchup to a week using Integer Programming.

    Returns:
        Mapping of matchup index to week number

    Raises:
        RuntimeError: if no valid assignment exists
    """
    week_numbers = list(range(1, weeks + 1))
    prob, x = _schedule_problem(matchups, team_ids, week_numbers, strict=True)
    prob.solve(pulp.PULP_CBC_CMD(msg=0))

    if prob.status != pulp.LpStatusOptimal:
        logger.warning("Strict schedule infeasible, relaxing week balance and bye window")
        prob, x = _schedule_problem(matchups, team_ids, week_numbers, strict=False)
        prob.solve(pulp.PULP_CBC_CMD(msg=0))
        if prob.status != pulp.LpStatusOptimal:
            raise RuntimeError("Could not find valid season schedule")

    assignment: dict[int, int] = {}
    for g in range(len(matchups)):
        for w in week_numbers:
            if pulp.value(x[g, w]) > 0.5:
                assignment[g] = w
                break
    return assignment


def generate_schedule(
    season: int,
    teams: dict[str, Team],
    rng: random.Random,
    weeks: int = REGULAR_SEASON_WEEKS,
) -> SeasonSchedule:
    """
    Generate a regular season schedule.

    Matchups come from the division rotation; the integer program places
    them in weeks. A team's bye is the one week it does not play.
    """
    team_ids = sorted(teams)
    matchups = generate_matchups(season)
    rng.shuffle(matchups)
    assignment = assign_weeks(matchups, team_ids, weeks)

    games = [
        ScheduledGame(
            game_id=f"{season}-W{assignment[g]:02d}-{m.away}@{m.home}",
            week=assignment[g],
            home_team_id=m.home,
            away_team_id=m.away,
            is_divisional=m.is_divisional,
            is_conference=m.is_conference,
        )
        for g, m in enumerate(matchups)
    ]
    games.sort(key=lambda game: (game.week, game.home_team_id))

    playing: dict[str, set[int]] = {team_id: set() for team_id in team_ids}
    for game in games:
        playing[game.home_team_id].add(game.week)
        playing[game.away_team_id].add(game.week)
    byes = {
        team_id: min(set(range(1, weeks + 1)) - played)
        for team_id, played in playing.items()
        if len(played) < weeks
    }

    logger.debug(f"Generated {len(games)} games for {season}")
    return SeasonSchedule(year=season, regular_season=games, bye_weeks=byes)


def generate_league(
    seed: Optional[int] = None,
    season: int = 2025,
    current_week: int = 1,
) -> GeneratedLeague:
    """
    Generate a complete 32-team league with schedule.

    Args:
        seed: Seed for reproducible leagues
        season: Season year
        current_week: Week stored on the GameState

    Returns:
        GeneratedLeague holding the GameState and SeasonSchedule
    """
    rng = random.Random(seed)
    teams: dict[str, Team] = {}
    players: dict[str, Player] = {}

    for abbr, franchise in FRANCHISES.items():
        roster = generate_roster(franchise, rng)
        teams[abbr] = generate_team(franchise, roster)
        players.update({p.id: p for p in roster})

    game_state = GameState(teams=teams, players=players, season=season, current_week=current_week)
    schedule = generate_schedule(season, teams, rng)
    return GeneratedLeague(game_state=game_state, schedule=schedule)

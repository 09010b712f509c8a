"""
Statistical play-by-play game runner.

Resolves one play at a time using simple probability tables weighted by
the overall ratings of the two rosters. Tracks clock, downs, field
position and score, and builds the final GameResult (box score and
injuries) once the game is over.
"""

import logging
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from sideline.core.league.schedule import ScheduledGame
from sideline.core.models.game import (
    BoxScore,
    GameInjury,
    GameResult,
    StatLeader,
    TeamGameStats,
)
from sideline.core.models.player import Player
from sideline.core.models.state import GameState
from sideline.core.models.team import Team

logger = logging.getLogger(__name__)


QUARTER_SECONDS = 900
OVERTIME_SECONDS = 600
TWO_MINUTE_MARK = 120
KICKOFF_YARD_LINE = 25
INJURY_CHANCE = 0.004

INJURY_TYPES = [
    "hamstring", "ankle", "knee", "shoulder", "concussion",
    "back", "foot", "groin", "ribs", "hand",
]


class PlayOutcome(str, Enum):
    RUN = "run"
    PASS_COMPLETE = "pass_complete"
    PASS_INCOMPLETE = "pass_incomplete"
    SACK = "sack"
    INTERCEPTION = "interception"
    FUMBLE = "fumble"
    PUNT = "punt"
    FIELD_GOAL_MADE = "field_goal_made"
    FIELD_GOAL_MISSED = "field_goal_missed"


@dataclass(frozen=True)
class PlayResult:
    """Outcome of a single resolved play."""

    outcome: PlayOutcome
    description: str
    yards_gained: int = 0
    touchdown: bool = False
    turnover: bool = False
    safety: bool = False
    field_goal_distance: int = 0
    injury: Optional[GameInjury] = None

    @property
    def field_goal_attempt(self) -> bool:
        return self.outcome in (PlayOutcome.FIELD_GOAL_MADE, PlayOutcome.FIELD_GOAL_MISSED)

    @property
    def is_scoring(self) -> bool:
        return self.touchdown or self.outcome == PlayOutcome.FIELD_GOAL_MADE


@dataclass
class SideState:
    """One team inside a running game."""

    team_id: str
    name: str
    abbr: str
    timeouts_remaining: int = 3


@dataclass
class LiveGameState:
    """Mutable in-game state owned by the runner."""

    game_id: str
    week: int
    home: SideState
    away: SideState
    home_score: int = 0
    away_score: int = 0
    quarter: int = 1  # 5 and above are overtime periods
    time_remaining: int = QUARTER_SECONDS
    is_clock_running: bool = False
    possession: str = "home"
    yard_line: int = KICKOFF_YARD_LINE  # yards from the offense's own goal line
    down: int = 1
    yards_to_go: int = 10
    is_complete: bool = False

    @property
    def is_overtime(self) -> bool:
        return self.quarter > 4

    @property
    def ball_position(self) -> int:
        """Ball position measured from the home end zone."""
        if self.possession == "home":
            return self.yard_line
        return 100 - self.yard_line

    def snapshot(self) -> "LiveGameState":
        return replace(self, home=replace(self.home), away=replace(self.away))


@dataclass(frozen=True)
class PlayStep:
    play: PlayResult
    state: LiveGameState
    is_complete: bool
    two_minute_warning: bool = False


@dataclass
class GameSetup:
    """Teams and rosters for one game."""

    game_id: str
    week: int
    home_team: Team
    away_team: Team
    home_roster: list[Player] = field(default_factory=list)
    away_roster: list[Player] = field(default_factory=list)
    is_playoff: bool = False


def setup_game(
    game: ScheduledGame,
    game_state: GameState,
    is_playoff: bool = False,
) -> GameSetup:
    """Collect teams and healthy rosters for a scheduled game."""
    home_team = game_state.teams[game.home_team_id]
    away_team = game_state.teams[game.away_team_id]
    return GameSetup(
        game_id=game.game_id,
        week=game.week,
        home_team=home_team,
        away_team=away_team,
        home_roster=[p for p in game_state.roster(home_team.id) if not p.injury_status.is_injured],
        away_roster=[p for p in game_state.roster(away_team.id) if not p.injury_status.is_injured],
        is_playoff=is_playoff or game.is_playoff,
    )


@dataclass
class _PlayerLine:
    player: Player
    team_id: str
    pass_attempts: int = 0
    completions: int = 0
    passing_yards: int = 0
    passing_tds: int = 0
    interceptions: int = 0
    rush_attempts: int = 0
    rushing_yards: int = 0
    rushing_tds: int = 0


def _team_rating(roster: list[Player]) -> float:
    if not roster:
        return 70.0
    return sum(p.overall for p in roster) / len(roster)


class GameRunner:
    """
    Play-by-play game runner.

    Example:
        runner = GameRunner(setup_game(game, state))
        while not runner.is_complete:
            step = runner.run_next_play()
        result = runner.get_result()
    """

    def __init__(self, setup: GameSetup, rng: Optional[random.Random] = None) -> None:
        self.setup = setup
        self.rng = rng or random.Random()

        self.state = LiveGameState(
            game_id=setup.game_id,
            week=setup.week,
            home=SideState(setup.home_team.id, setup.home_team.nickname, setup.home_team.abbreviation),
            away=SideState(setup.away_team.id, setup.away_team.nickname, setup.away_team.abbreviation),
        )

        self._rosters = {"home": setup.home_roster, "away": setup.away_roster}
        self._ratings = {side: _team_rating(roster) for side, roster in self._rosters.items()}
        self._team_stats = {"home": TeamGameStats(), "away": TeamGameStats()}
        self._player_lines: dict[str, _PlayerLine] = {}
        self._injuries: list[GameInjury] = []
        self._injured_ids: set[str] = set()
        self._total_plays = 0
        self._result: Optional[GameResult] = None

        # Coin toss: the other team receives the second-half kickoff
        opening = self.rng.choice(["home", "away"])
        self._second_half_receiver = _other(opening)
        self._start_possession(opening, KICKOFF_YARD_LINE)

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def is_complete(self) -> bool:
        return self.state.is_complete

    @property
    def total_plays(self) -> int:
        return self._total_plays

    def team_stats(self, side: str) -> TeamGameStats:
        """Copy of the running team totals for 'home' or 'away'."""
        return replace(self._team_stats[side])

    def run_next_play(self) -> PlayStep:
        """Resolve one play. Raises RuntimeError if the game is already over."""
        if self.state.is_complete:
            raise RuntimeError(f"Game {self.state.game_id} is already complete")

        offense = self.state.possession
        time_before = self.state.time_remaining

        if self.state.down == 4:
            play = self._fourth_down_play(offense)
        else:
            play = self._scrimmage_play(offense)

        self._total_plays += 1
        self._team_stats[offense].plays += 1

        if self.rng.random() < INJURY_CHANCE:
            injury = self._roll_injury(offense)
            if injury is not None:
                play = replace(play, injury=injury)

        elapsed = self._run_clock(play)
        self._team_stats[offense].time_of_possession += elapsed

        warning = (
            self.state.quarter in (2, 4)
            and time_before > TWO_MINUTE_MARK >= self.state.time_remaining
            and self.state.time_remaining > 0
        )

        if self.state.is_overtime and (play.is_scoring or play.safety):
            self._finish()
        elif self.state.time_remaining <= 0:
            self._end_period()

        return PlayStep(
            play=play,
            state=self.state.snapshot(),
            is_complete=self.state.is_complete,
            two_minute_warning=warning,
        )

    def force_complete(self) -> GameResult:
        """End the game immediately with the current score."""
        if not self.state.is_complete:
            logger.warning(
                f"Forcing end of game {self.state.game_id} after {self._total_plays} plays"
            )
            self._finish()
        return self._result

    def get_result(self) -> Optional[GameResult]:
        """Final result, or None while the game is still running."""
        return self._result

    # =========================================================================
    # Play resolution
    # =========================================================================

    def _edge(self, offense: str) -> float:
        return (self._ratings[offense] - self._ratings[_other(offense)]) / 100.0

    def _fourth_down_play(self, offense: str) -> PlayResult:
        s = self.state
        if s.yard_line >= 60:
            return self._field_goal(offense)
        if s.yards_to_go <= 1 and s.yard_line >= 45 and self.rng.random() < 0.5:
            return self._scrimmage_play(offense)
        return self._punt(offense)

    def _scrimmage_play(self, offense: str) -> PlayResult:
        if self.rng.random() < 0.55:
            return self._pass_play(offense)
        return self._run_play(offense)

    def _run_play(self, offense: str) -> PlayResult:
        abbr = self._side(offense).abbr
        rusher = self._pick_player(offense, ("RB", "QB"))
        name = rusher.player.full_name if rusher else f"{abbr} runner"

        if self.rng.random() < 0.012:
            yards = self.rng.randint(-2, 4)
            self._team_stats[offense].rushing_yards += yards
            self._team_stats[offense].total_yards += yards
            self._team_stats[offense].turnovers += 1
            if rusher:
                rusher.rush_attempts += 1
                rusher.rushing_yards += yards
            self._turnover_at(self.state.yard_line + yards)
            return PlayResult(
                outcome=PlayOutcome.FUMBLE,
                description=f"{name} fumbles, recovered by the defense",
                yards_gained=yards,
                turnover=True,
            )

        yards = max(-5, round(self.rng.gauss(4.2 + self._edge(offense) * 10, 5)))
        yards, touchdown, safety = self._advance(offense, yards)
        self._team_stats[offense].rushing_yards += yards
        self._team_stats[offense].total_yards += yards
        if rusher:
            rusher.rush_attempts += 1
            rusher.rushing_yards += yards
            if touchdown:
                rusher.rushing_tds += 1

        if touchdown:
            description = f"{name} runs {yards} yards for a touchdown"
        elif safety:
            description = f"{name} tackled in the end zone for a safety"
        else:
            description = f"{name} runs for {yards} yards"
        return PlayResult(
            outcome=PlayOutcome.RUN,
            description=description,
            yards_gained=yards,
            touchdown=touchdown,
            safety=safety,
        )

    def _pass_play(self, offense: str) -> PlayResult:
        abbr = self._side(offense).abbr
        passer = self._pick_player(offense, ("QB",))
        qb_name = passer.player.full_name if passer else f"{abbr} quarterback"
        edge = self._edge(offense)
        roll = self.rng.random()

        if roll < 0.06:
            loss = -self.rng.randint(3, 10)
            yards, _, safety = self._advance(offense, loss)
            self._team_stats[offense].passing_yards += yards
            self._team_stats[offense].total_yards += yards
            return PlayResult(
                outcome=PlayOutcome.SACK,
                description=(
                    f"{qb_name} sacked in the end zone for a safety" if safety
                    else f"{qb_name} sacked for a loss of {-yards}"
                ),
                yards_gained=yards,
                safety=safety,
            )

        if passer:
            passer.pass_attempts += 1

        if roll < 0.085:
            if passer:
                passer.interceptions += 1
            self._team_stats[offense].turnovers += 1
            air_yards = self.rng.randint(5, 25)
            self._turnover_at(self.state.yard_line + air_yards)
            return PlayResult(
                outcome=PlayOutcome.INTERCEPTION,
                description=f"{qb_name} pass intercepted",
                turnover=True,
            )

        if self.rng.random() < 0.63 + edge:
            target = self._pick_player(offense, ("WR", "TE", "RB"))
            target_name = target.player.full_name if target else "receiver"
            yards = max(0, round(self.rng.gauss(11 + edge * 10, 8)))
            yards, touchdown, _ = self._advance(offense, yards)
            self._team_stats[offense].passing_yards += yards
            self._team_stats[offense].total_yards += yards
            if passer:
                passer.completions += 1
                passer.passing_yards += yards
                if touchdown:
                    passer.passing_tds += 1
            if touchdown:
                description = f"{qb_name} pass to {target_name} for {yards} yards, touchdown"
            else:
                description = f"{qb_name} pass to {target_name} for {yards} yards"
            return PlayResult(
                outcome=PlayOutcome.PASS_COMPLETE,
                description=description,
                yards_gained=yards,
                touchdown=touchdown,
            )

        self._advance_down(0)
        return PlayResult(
            outcome=PlayOutcome.PASS_INCOMPLETE,
            description=f"{qb_name} pass incomplete",
        )

    def _punt(self, offense: str) -> PlayResult:
        distance = self.rng.randint(35, 50)
        landing = self.state.yard_line + distance
        receiver_line = KICKOFF_YARD_LINE if landing >= 100 else max(1, 100 - landing)
        self._start_possession(_other(offense), receiver_line)
        return PlayResult(
            outcome=PlayOutcome.PUNT,
            description=f"{self._side(offense).abbr} punts {distance} yards",
        )

    def _field_goal(self, offense: str) -> PlayResult:
        distance = 100 - self.state.yard_line + 17
        make_chance = max(0.2, min(0.97, 0.97 - (distance - 20) * 0.012))
        abbr = self._side(offense).abbr
        if self.rng.random() < make_chance:
            self._score(offense, 3)
            self._start_possession(_other(offense), KICKOFF_YARD_LINE)
            return PlayResult(
                outcome=PlayOutcome.FIELD_GOAL_MADE,
                description=f"{abbr} {distance}-yard field goal is good",
                field_goal_distance=distance,
            )
        self._start_possession(_other(offense), max(20, 100 - self.state.yard_line))
        return PlayResult(
            outcome=PlayOutcome.FIELD_GOAL_MISSED,
            description=f"{abbr} {distance}-yard field goal is no good",
            field_goal_distance=distance,
        )

    # =========================================================================
    # Field, downs and score
    # =========================================================================

    def _advance(self, offense: str, yards: int) -> tuple[int, bool, bool]:
        """Move the ball; returns (yards actually gained, touchdown, safety)."""
        s = self.state
        target = s.yard_line + yards
        if target >= 100:
            gained = 100 - s.yard_line
            self._score(offense, 7)
            self._start_possession(_other(offense), KICKOFF_YARD_LINE)
            return gained, True, False
        if target <= 0:
            gained = -s.yard_line
            self._score(_other(offense), 2)
            self._start_possession(_other(offense), KICKOFF_YARD_LINE)
            return gained, False, True
        s.yard_line = target
        self._advance_down(yards)
        return yards, False, False

    def _advance_down(self, yards: int) -> None:
        s = self.state
        if yards >= s.yards_to_go:
            s.down = 1
            s.yards_to_go = min(10, 100 - s.yard_line)
            return
        s.yards_to_go -= yards
        s.down += 1
        if s.down > 4:
            # Turnover on downs
            self._start_possession(_other(s.possession), 100 - s.yard_line)

    def _turnover_at(self, offense_yard_line: int) -> None:
        spot = min(99, max(1, offense_yard_line))
        self._start_possession(_other(self.state.possession), 100 - spot)

    def _start_possession(self, side: str, yard_line: int) -> None:
        s = self.state
        s.possession = side
        s.yard_line = min(99, max(1, yard_line))
        s.down = 1
        s.yards_to_go = min(10, 100 - s.yard_line)

    def _score(self, side: str, points: int) -> None:
        if side == "home":
            self.state.home_score += points
        else:
            self.state.away_score += points

    # =========================================================================
    # Clock
    # =========================================================================

    def _run_clock(self, play: PlayResult) -> int:
        if play.outcome == PlayOutcome.PASS_INCOMPLETE:
            elapsed = self.rng.randint(5, 8)
            running = False
        elif play.outcome in (PlayOutcome.PUNT, PlayOutcome.FIELD_GOAL_MADE, PlayOutcome.FIELD_GOAL_MISSED):
            elapsed = self.rng.randint(5, 10)
            running = False
        elif play.turnover or play.touchdown or play.safety:
            elapsed = self.rng.randint(8, 15)
            running = False
        else:
            elapsed = self.rng.randint(25, 42)
            running = True

        elapsed = min(elapsed, self.state.time_remaining)
        self.state.time_remaining -= elapsed
        self.state.is_clock_running = running
        return elapsed

    def _end_period(self) -> None:
        s = self.state
        tied = s.home_score == s.away_score

        if s.quarter in (1, 3):
            s.quarter += 1
            s.time_remaining = QUARTER_SECONDS
        elif s.quarter == 2:
            s.quarter = 3
            s.time_remaining = QUARTER_SECONDS
            s.home.timeouts_remaining = 3
            s.away.timeouts_remaining = 3
            self._start_possession(self._second_half_receiver, KICKOFF_YARD_LINE)
        elif s.quarter == 4 and not tied:
            self._finish()
            return
        elif s.quarter >= 4 and tied and (s.quarter == 4 or self.setup.is_playoff):
            s.quarter += 1
            s.time_remaining = OVERTIME_SECONDS
            s.home.timeouts_remaining = 2
            s.away.timeouts_remaining = 2
            self._start_possession(self.rng.choice(["home", "away"]), KICKOFF_YARD_LINE)
        else:
            self._finish()
            return
        s.is_clock_running = False

    # =========================================================================
    # Injuries and results
    # =========================================================================

    def _roll_injury(self, offense: str) -> Optional[GameInjury]:
        side = self.rng.choice([offense, _other(offense)])
        candidates = [p for p in self._rosters[side] if p.id not in self._injured_ids]
        if not candidates:
            return None
        player = self.rng.choice(candidates)
        injury = GameInjury(
            player_id=player.id,
            player_name=player.full_name,
            team_id=self._side(side).team_id,
            injury_type=self.rng.choice(INJURY_TYPES),
            weeks_out=self.rng.randint(1, 6),
        )
        self._injured_ids.add(player.id)
        self._injuries.append(injury)
        logger.debug(f"{injury.player_name} injured ({injury.injury_type}, {injury.weeks_out} weeks)")
        return injury

    def _finish(self) -> None:
        s = self.state
        s.is_complete = True
        s.is_clock_running = False
        self._result = GameResult(
            game_id=s.game_id,
            week=s.week,
            home_team_id=s.home.team_id,
            away_team_id=s.away.team_id,
            home_score=s.home_score,
            away_score=s.away_score,
            box_score=self._build_box_score(),
            injuries=list(self._injuries),
            total_plays=self._total_plays,
            went_to_overtime=s.is_overtime,
        )
        logger.debug(
            f"Final: {s.away.abbr} {s.away_score} @ {s.home.abbr} {s.home_score} "
            f"({self._total_plays} plays)"
        )

    def _build_box_score(self) -> BoxScore:
        lines = list(self._player_lines.values())
        passers = sorted(
            (l for l in lines if l.pass_attempts > 0),
            key=lambda l: l.passing_yards,
            reverse=True,
        )
        rushers = sorted(
            (l for l in lines if l.rush_attempts > 0),
            key=lambda l: l.rushing_yards,
            reverse=True,
        )
        return BoxScore(
            home_stats=replace(self._team_stats["home"]),
            away_stats=replace(self._team_stats["away"]),
            passing_leaders=[
                StatLeader(
                    player_id=l.player.id,
                    player_name=l.player.full_name,
                    position=l.player.position,
                    team_id=l.team_id,
                    yards=l.passing_yards,
                    stat_line=(
                        f"{l.completions}/{l.pass_attempts}, {l.passing_yards} YDS, "
                        f"{l.passing_tds} TD, {l.interceptions} INT"
                    ),
                )
                for l in passers
            ],
            rushing_leaders=[
                StatLeader(
                    player_id=l.player.id,
                    player_name=l.player.full_name,
                    position=l.player.position,
                    team_id=l.team_id,
                    yards=l.rushing_yards,
                    stat_line=f"{l.rush_attempts} CAR, {l.rushing_yards} YDS, {l.rushing_tds} TD",
                )
                for l in rushers
            ],
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _side(self, side: str) -> SideState:
        return self.state.home if side == "home" else self.state.away

    def _pick_player(self, side: str, positions: tuple[str, ...]) -> Optional[_PlayerLine]:
        """Pick a healthy player at one of ``positions``; the first listed position is preferred."""
        roster = [p for p in self._rosters[side] if p.id not in self._injured_ids]
        for position in positions:
            options = [p for p in roster if p.position == position]
            if not options:
                continue
            # Starters (best overall) get most of the touches
            options.sort(key=lambda p: p.overall, reverse=True)
            player = options[0] if self.rng.random() < 0.7 else self.rng.choice(options)
            line = self._player_lines.get(player.id)
            if line is None:
                line = _PlayerLine(player=player, team_id=self._side(side).team_id)
                self._player_lines[player.id] = line
            return line
        return None


def _other(side: str) -> str:
    return "away" if side == "home" else "home"

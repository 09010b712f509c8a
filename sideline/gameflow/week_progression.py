"""
Week Progression Service

Handles the between-week updates of a season: building the week's flow
state from the schedule, recording the user's result, simulating the rest
of the league, injury recovery, fatigue reset and week summaries.

Every operation takes the current WeekFlowState / GameState and returns new
values. The only state the service holds is its configuration, the event
bus and the random source.
"""

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from sideline.config import FlowConfig
from sideline.core.league.league_data import DIVISIONS_BY_CONFERENCE, Conference
from sideline.core.league.schedule import (
    ScheduledGame,
    SeasonSchedule,
    get_week_games,
    is_on_bye,
)
from sideline.core.league.standings import LeagueStandings, calculate_standings
from sideline.core.models.game import GameInjury, GameResult
from sideline.core.models.player import (
    InjurySeverity,
    InjuryStatus,
    Player,
    normalize_injury_type,
)
from sideline.core.models.state import GameState
from sideline.core.models.team import Team
from sideline.events.bus import EventBus
from sideline.events.types import (
    GameEndEvent,
    GameFlowEvent,
    OtherGamesCompleteEvent,
    OtherGamesPayload,
    PlayerRecoveredEvent,
    RecoveryPayload,
    SeasonPhaseChangeEvent,
    SeasonPhasePayload,
    WeekStartEvent,
    WeekStartPayload,
)
from sideline.gameflow.types import (
    DivisionStandingSummary,
    GameSummary,
    Headline,
    HeadlineImportance,
    InjuryUpdate,
    InjuryUpdateType,
    PlayoffImplication,
    PlayoffImplicationType,
    SeasonPhase,
    StandingRow,
    UserResultSummary,
    WeekFlowPhase,
    WeekFlowState,
    WeekSummary,
)

logger = logging.getLogger(__name__)

# Other-game score model: BASE_SCORE plus a uniform offset, floored at zero
BASE_SCORE = 21
SCORE_OFFSET_MIN = -7
SCORE_OFFSET_MAX = 12

IMPLICATIONS_FROM_WEEK = 10
CONTROLS_DESTINY_FROM_WEEK = 14
CONTROLS_DESTINY_WINS = 10

SHOOTOUT_POINTS = 70
THRILLER_MARGIN = 3
MAX_HEADLINES = 5


@dataclass
class WeekProgressionConfig:
    emit_events: bool = True
    regular_season_weeks: int = 18
    playoff_weeks: int = 4

    @classmethod
    def from_flow_config(cls, config: FlowConfig) -> "WeekProgressionConfig":
        return cls(
            emit_events=config.emit_events,
            regular_season_weeks=config.regular_season_weeks,
            playoff_weeks=config.playoff_weeks,
        )


@dataclass(frozen=True)
class RecordedGame:
    """Outcome of recording the user's game."""

    updated_week_flow: WeekFlowState
    updated_game_state: GameState


@dataclass(frozen=True)
class SimulatedGame:
    game: ScheduledGame
    home_score: int
    away_score: int
    winner_id: Optional[str]


@dataclass(frozen=True)
class OtherGamesResult:
    results: list[SimulatedGame] = field(default_factory=list)
    standings: LeagueStandings = field(default_factory=LeagueStandings)
    playoff_implications: list[PlayoffImplication] = field(default_factory=list)
    headlines: list[Headline] = field(default_factory=list)


@dataclass(frozen=True)
class OtherGamesOutcome:
    updated_week_flow: WeekFlowState
    updated_game_state: GameState
    results: OtherGamesResult


@dataclass(frozen=True)
class RecoveredPlayer:
    player_id: str
    player_name: str
    position: str
    team_id: str
    injury_type: str


@dataclass(frozen=True)
class WeekAdvancementResult:
    new_week: int
    season_phase: SeasonPhase
    recovered_players: list[RecoveredPlayer] = field(default_factory=list)
    fatigue_reset: bool = True
    season_ended: bool = False
    playoffs_start: bool = False


@dataclass(frozen=True)
class WeekAdvancement:
    result: WeekAdvancementResult
    updated_game_state: GameState


@dataclass(frozen=True)
class AdvanceCheck:
    can_advance: bool
    reason: Optional[str] = None


def apply_score(teams: dict[str, Team], home_id: str, away_id: str, home_score: int, away_score: int) -> None:
    """Apply a final score to both teams' records in ``teams`` (a fresh dict)."""
    home = teams.get(home_id)
    away = teams.get(away_id)
    if home is None or away is None:
        logger.warning(f"Cannot record {home_id} vs {away_id}: unknown team")
        return
    teams[home_id] = home.with_record(home.current_record.with_result(home_score, away_score))
    teams[away_id] = away.with_record(away.current_record.with_result(away_score, home_score))


class WeekProgressionService:
    """
    Manages all week-to-week progression logic.

    Args:
        config: season length and event settings
        event_bus: bus for GAME_END, OTHER_GAMES_COMPLETE, WEEK_START,
            SEASON_PHASE_CHANGE and PLAYER_RECOVERED
        rng: random source for other-game scores
    """

    def __init__(
        self,
        config: Optional[WeekProgressionConfig] = None,
        event_bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or WeekProgressionConfig()
        self.event_bus = event_bus or EventBus()
        self.rng = rng or random.Random()

    def _emit(self, event: GameFlowEvent) -> None:
        if self.config.emit_events:
            self.event_bus.emit(event)

    # =========================================================================
    # Week setup
    # =========================================================================

    def create_week_flow_state(
        self,
        week: int,
        season_phase: SeasonPhase,
        user_team_id: str,
        schedule: SeasonSchedule,
    ) -> WeekFlowState:
        """Fresh flow state for ``week``: phase week_start, gates closed, nothing completed."""
        user_game = self.get_user_game(schedule, week, user_team_id)
        return WeekFlowState(
            phase=WeekFlowPhase.WEEK_START,
            week_number=week,
            season_phase=SeasonPhase(season_phase),
            is_user_on_bye=user_game is None,
            user_game=user_game,
            other_games=tuple(self.get_other_games(schedule, week, user_team_id)),
        )

    def get_user_game(
        self,
        schedule: SeasonSchedule,
        week: int,
        user_team_id: str,
    ) -> Optional[ScheduledGame]:
        if is_on_bye(user_team_id, week, schedule.bye_weeks):
            return None
        for game in get_week_games(schedule, week):
            if game.involves(user_team_id):
                return game
        return None

    def get_other_games(
        self,
        schedule: SeasonSchedule,
        week: int,
        user_team_id: str,
    ) -> list[ScheduledGame]:
        return [g for g in get_week_games(schedule, week) if not g.involves(user_team_id)]

    # =========================================================================
    # Results
    # =========================================================================

    def record_user_game_result(
        self,
        state: WeekFlowState,
        result: GameResult,
        game_state: GameState,
        user_team_id: str,
    ) -> RecordedGame:
        """
        Apply the user's game to records and injuries, and move to post_game.

        Emits GAME_END with the result. ``other_games`` is left untouched.
        """
        teams = dict(game_state.teams)
        apply_score(teams, result.home_team_id, result.away_team_id, result.home_score, result.away_score)
        players = self._apply_game_injuries(game_state.players, result.injuries)

        updated_game_state = game_state.with_teams(teams).with_players(players)
        updated_week_flow = replace(
            state,
            phase=WeekFlowPhase.POST_GAME,
            user_game_completed=True,
            user_game_result=result,
        )

        logger.debug(f"Recorded week {state.week_number} result for {user_team_id}: {result.score_string}")
        self._emit(GameEndEvent(payload=result))
        return RecordedGame(updated_week_flow, updated_game_state)

    def _apply_game_injuries(
        self,
        players: dict[str, Player],
        injuries: Iterable[GameInjury],
    ) -> dict[str, Player]:
        updated = dict(players)
        for injury in injuries:
            player = updated.get(injury.player_id)
            if player is None or injury.weeks_out <= 0:
                continue
            updated[injury.player_id] = player.with_injury(InjuryStatus(
                severity=InjurySeverity.from_weeks_out(injury.weeks_out),
                injury_type=normalize_injury_type(injury.injury_type),
                weeks_remaining=injury.weeks_out,
            ))
        return updated

    def simulate_other_games(
        self,
        state: WeekFlowState,
        game_state: GameState,
        user_team_id: str,
    ) -> OtherGamesOutcome:
        """
        Quick-sim every incomplete non-user game of the week.

        Completed copies of the games replace the originals in
        ``other_games``; the flow moves to week_summary.
        """
        teams = dict(game_state.teams)
        results: list[SimulatedGame] = []
        games: list[ScheduledGame] = []

        for game in state.other_games:
            if game.is_complete:
                games.append(game)
                continue

            home_score = self._generate_score()
            away_score = self._generate_score()
            apply_score(teams, game.home_team_id, game.away_team_id, home_score, away_score)

            completed = game.completed(home_score, away_score)
            games.append(completed)
            results.append(SimulatedGame(completed, home_score, away_score, completed.winner_id))

        standings = calculate_standings(teams.values())
        other_results = OtherGamesResult(
            results=results,
            standings=standings,
            playoff_implications=self._playoff_implications(standings, teams, state.week_number),
            headlines=self._headlines([r.game for r in results], teams),
        )

        updated_week_flow = replace(
            state,
            phase=WeekFlowPhase.WEEK_SUMMARY,
            other_games=tuple(games),
            other_games_completed=len(games),
        )
        updated_game_state = game_state.with_teams(teams)

        logger.info(f"Week {state.week_number}: simulated {len(results)} other games")
        self._emit(OtherGamesCompleteEvent(payload=OtherGamesPayload(
            completed_games=len(results),
            total_games=len(state.other_games),
        )))
        return OtherGamesOutcome(updated_week_flow, updated_game_state, other_results)

    def _generate_score(self) -> int:
        return max(0, BASE_SCORE + self.rng.randint(SCORE_OFFSET_MIN, SCORE_OFFSET_MAX))

    def _playoff_implications(
        self,
        standings: LeagueStandings,
        teams: dict[str, Team],
        week: int,
    ) -> list[PlayoffImplication]:
        implications: list[PlayoffImplication] = []
        if week < IMPLICATIONS_FROM_WEEK:
            return implications

        # Clinch and elimination math is not modelled; only division leaders are flagged
        if week < CONTROLS_DESTINY_FROM_WEEK:
            return implications

        for conference in Conference:
            for division in DIVISIONS_BY_CONFERENCE[conference]:
                leader = standings.leader(division)
                if leader is None or leader.wins < CONTROLS_DESTINY_WINS:
                    continue
                if not standings.is_clean_leader(division):
                    continue
                team = teams.get(leader.team_id)
                implications.append(PlayoffImplication(
                    team_id=leader.team_id,
                    team_name=team.full_name if team else leader.team_id,
                    type=PlayoffImplicationType.CONTROLS_DESTINY,
                    description=f"{conference.value} {division.region} in driver's seat",
                ))
        return implications

    def _headlines(self, games: Iterable[ScheduledGame], teams: dict[str, Team]) -> list[Headline]:
        """Headlines for completed games in order, capped at MAX_HEADLINES."""
        headlines: list[Headline] = []

        for game in games:
            home = teams.get(game.home_team_id)
            away = teams.get(game.away_team_id)
            if home is None or away is None:
                continue

            home_score, away_score = game.home_score, game.away_score
            team_ids = (game.home_team_id, game.away_team_id)
            winner, loser = (home, away) if home_score >= away_score else (away, home)
            tied = home_score == away_score

            total = home_score + away_score
            if total >= SHOOTOUT_POINTS:
                headlines.append(Headline(
                    text=f"Shootout! {home.nickname} and {away.nickname} combine for {total} points",
                    importance=HeadlineImportance.MAJOR,
                    team_ids=team_ids,
                ))

            if home_score == 0 or away_score == 0:
                if tied:
                    text = f"{home.nickname} and {away.nickname} play to a scoreless tie"
                else:
                    text = f"{winner.nickname} defense shuts out {loser.nickname}"
                headlines.append(Headline(text=text, importance=HeadlineImportance.MAJOR, team_ids=team_ids))

            if abs(home_score - away_score) <= THRILLER_MARGIN:
                if tied:
                    text = f"{home.nickname} and {away.nickname} battle to a {home_score}-{away_score} draw"
                else:
                    text = f"{winner.nickname} win thriller"
                headlines.append(Headline(text=text, importance=HeadlineImportance.NOTABLE, team_ids=team_ids))

        return headlines[:MAX_HEADLINES]

    # =========================================================================
    # Advancement
    # =========================================================================

    def advance_week(
        self,
        current_week: int,
        season_phase: SeasonPhase,
        game_state: GameState,
        schedule: Optional[SeasonSchedule] = None,
        user_team_id: Optional[str] = None,
    ) -> WeekAdvancement:
        """
        Heal injuries by one week, reset fatigue and compute the next week.

        ``schedule`` and ``user_team_id`` are only used to fill the bye flag
        of the WEEK_START event.
        """
        season_phase = SeasonPhase(season_phase)
        recovered: list[RecoveredPlayer] = []
        players: dict[str, Player] = {}

        for player_id, player in game_state.players.items():
            status = player.injury_status
            if status.weeks_remaining > 0:
                weeks_remaining = status.weeks_remaining - 1
                player = player.with_injury(replace(
                    status,
                    weeks_remaining=weeks_remaining,
                    severity=InjurySeverity.NONE if weeks_remaining == 0 else status.severity,
                ))
                if weeks_remaining == 0:
                    team = game_state.team_of_player(player_id)
                    recovered.append(RecoveredPlayer(
                        player_id=player_id,
                        player_name=player.full_name,
                        position=player.position,
                        team_id=team.id if team else "",
                        injury_type=status.injury_type,
                    ))
            players[player_id] = player.rested()

        new_week = current_week + 1
        new_phase = season_phase
        playoffs_start = False
        season_ended = False

        if season_phase == SeasonPhase.REGULAR_SEASON and current_week >= self.config.regular_season_weeks:
            new_phase = SeasonPhase.PLAYOFFS
            playoffs_start = True
        elif (
            season_phase == SeasonPhase.PLAYOFFS
            and current_week >= self.config.regular_season_weeks + self.config.playoff_weeks
        ):
            new_phase = SeasonPhase.OFFSEASON
            season_ended = True

        result = WeekAdvancementResult(
            new_week=new_week,
            season_phase=new_phase,
            recovered_players=recovered,
            fatigue_reset=True,
            season_ended=season_ended,
            playoffs_start=playoffs_start,
        )
        updated_game_state = game_state.with_players(players).with_week(new_week)

        is_user_on_bye = False
        if schedule is not None and user_team_id:
            is_user_on_bye = self.get_user_game(schedule, new_week, user_team_id) is None

        logger.info(f"Advanced to week {new_week} ({new_phase.value}), {len(recovered)} players recovered")
        self._emit(WeekStartEvent(payload=WeekStartPayload(
            week_number=new_week,
            season_phase=new_phase.value,
            is_user_on_bye=is_user_on_bye,
        )))
        if playoffs_start or season_ended:
            self._emit(SeasonPhaseChangeEvent(payload=SeasonPhasePayload(
                previous_phase=season_phase.value,
                new_phase=new_phase.value,
            )))
        for player in recovered:
            self._emit(PlayerRecoveredEvent(payload=RecoveryPayload(
                player_id=player.player_id,
                player_name=player.player_name,
                team_id=player.team_id,
            )))

        return WeekAdvancement(result, updated_game_state)

    # =========================================================================
    # Summary and gating
    # =========================================================================

    def generate_week_summary(
        self,
        week_flow: WeekFlowState,
        game_state: GameState,
        user_team_id: str,
    ) -> WeekSummary:
        """Display-only aggregate of the week. No mutation, no events."""
        teams = game_state.teams
        result = week_flow.user_game_result

        def abbr(team_id: str) -> str:
            team = teams.get(team_id)
            return team.abbreviation if team else "???"

        user_result = None
        user_team = teams.get(user_team_id)
        if result is not None and user_team is not None:
            opponent = teams.get(result.opponent_of(user_team_id))
            user_score = result.score_for(user_team_id)
            opponent_score = result.score_for(opponent.id) if opponent else 0
            user_result = UserResultSummary(
                won=result.winner_id == user_team_id,
                score=f"{user_score}-{opponent_score}",
                opponent=opponent.nickname if opponent else "Unknown",
                new_record=user_team.current_record.record_string,
            )

        game_results: list[GameSummary] = []
        if week_flow.user_game is not None and result is not None:
            game_results.append(GameSummary(
                game_id=result.game_id,
                home_team_abbr=abbr(result.home_team_id),
                away_team_abbr=abbr(result.away_team_id),
                home_score=result.home_score,
                away_score=result.away_score,
                is_user_game=True,
            ))
        completed_others = [g for g in week_flow.other_games if g.is_complete]
        for game in completed_others:
            game_results.append(GameSummary(
                game_id=game.game_id,
                home_team_abbr=abbr(game.home_team_id),
                away_team_abbr=abbr(game.away_team_id),
                home_score=game.home_score,
                away_score=game.away_score,
            ))

        standings = calculate_standings(teams.values())
        standings_summary = [
            DivisionStandingSummary(
                conference=conference.value,
                division=division.region,
                teams=[
                    StandingRow(
                        team_id=row.team_id,
                        name=row.nickname,
                        abbr=row.abbreviation,
                        wins=row.wins,
                        losses=row.losses,
                        ties=row.ties,
                        division_rank=row.division_rank,
                        is_user_team=row.team_id == user_team_id,
                    )
                    for row in standings.division(division)
                ],
            )
            for conference in Conference
            for division in DIVISIONS_BY_CONFERENCE[conference]
        ]

        injury_updates: list[InjuryUpdate] = []
        if result is not None:
            for injury in result.injuries:
                weeks = "week" if injury.weeks_out == 1 else "weeks"
                injury_updates.append(InjuryUpdate(
                    player_id=injury.player_id,
                    player_name=injury.player_name,
                    team_id=injury.team_id,
                    team_abbr=abbr(injury.team_id),
                    type=InjuryUpdateType.NEW_INJURY,
                    description=f"{injury.injury_type} - Out {injury.weeks_out} {weeks}",
                ))

        return WeekSummary(
            week=week_flow.week_number,
            user_result=user_result,
            game_results=game_results,
            standings=standings_summary,
            playoff_implications=self._playoff_implications(standings, teams, week_flow.week_number),
            headlines=self._headlines(completed_others, teams),
            injury_updates=injury_updates,
        )

    def can_advance_week(self, state: WeekFlowState) -> AdvanceCheck:
        """
        Whether the week can be advanced, with the first unmet condition.

        Bye week: other games simulated, then summary viewed. Game week:
        game played, result viewed, other games simulated, summary viewed.
        """
        if not state.is_user_on_bye:
            if not state.user_game_completed:
                return AdvanceCheck(False, "Play your game")
            if not state.gates.game_result_viewed:
                return AdvanceCheck(False, "View game result")

        if not state.all_other_games_completed:
            return AdvanceCheck(False, "Simulate remaining games")
        if not state.gates.week_summary_viewed:
            return AdvanceCheck(False, "View week summary")
        return AdvanceCheck(True)

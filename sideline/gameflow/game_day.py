"""
Game Day Flow

Orchestrates the pre-game -> game -> post-game flow for the user's game
and wraps the simulation engine with prediction tracking, speed control,
pause/resume and skip-to-end.

Calls that arrive in the wrong phase are no-ops (logged), never errors,
except initializing with a game the user's team is not playing in.
"""

import logging
import random
from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

from sideline.config import FlowConfig
from sideline.core.league.schedule import ScheduledGame, SeasonSchedule, recent_results
from sideline.core.models.game import GameResult
from sideline.core.models.state import GameState
from sideline.core.models.team import Team
from sideline.errors import GameDayNotInitializedError, TeamNotInGameError
from sideline.events.bus import EventBus
from sideline.gameflow.engine import EngineConfig, GameSimulationEngine
from sideline.gameflow.types import (
    GameDayFlowState,
    GameDayPhase,
    GameOutcome,
    GamePrediction,
    GameStakes,
    InjuryReport,
    LiveGameDisplay,
    MvpInfo,
    PlayDisplay,
    PostGameInfo,
    Precipitation,
    PreGameInfo,
    SimulationSpeed,
    Weather,
)
from sideline.simulation.runner import setup_game

logger = logging.getLogger(__name__)

KEY_MATCHUPS = [
    "Your offense vs their defense",
    "Your offensive line vs their pass rush",
    "Your secondary vs their receiving corps",
    "Your run game vs their run defense",
    "Your pass rush vs their offensive line",
]

DOME_TEMPERATURE = 72
SNOW_BELOW = 35
PRECIPITATION_CHANCE = 0.2


def generate_weather(week: int, is_dome: bool, rng: random.Random) -> Weather:
    """Seasonal weather; domes are always 72 and calm."""
    if is_dome:
        return Weather(
            temperature=DOME_TEMPERATURE,
            condition="dome",
            wind=0,
            precipitation=Precipitation.NONE,
            is_dome=True,
        )

    late_season = week > 14
    base_temp = 35 if late_season else 65
    temperature = base_temp + rng.randint(-10, 9)
    wind = rng.randint(0, 19)

    precipitation = Precipitation.NONE
    if rng.random() < PRECIPITATION_CHANCE:
        precipitation = Precipitation.SNOW if temperature < SNOW_BELOW else Precipitation.RAIN

    if precipitation != Precipitation.NONE:
        condition = precipitation.value
    elif late_season:
        condition = rng.choice(["clear", "cloudy", "cold"])
    else:
        condition = rng.choice(["clear", "sunny", "cloudy"])

    return Weather(
        temperature=temperature,
        condition=condition,
        wind=wind,
        precipitation=precipitation,
        is_dome=False,
    )


@dataclass
class GameDayFlowConfig:
    emit_events: bool = True
    regular_season_weeks: int = 18

    @classmethod
    def from_flow_config(cls, config: FlowConfig) -> "GameDayFlowConfig":
        return cls(
            emit_events=config.emit_events,
            regular_season_weeks=config.regular_season_weeks,
        )


@dataclass(frozen=True)
class NextPlayResult:
    play: PlayDisplay
    live_game: LiveGameDisplay
    is_complete: bool


PredictionInput = Union[GamePrediction, str, None]


class GameDayFlow:
    """
    Manages the complete game day experience from pre-game through post-game.

    State is published as immutable GameDayFlowState snapshots through the
    ``on_state_change`` callback.
    """

    def __init__(
        self,
        config: Optional[GameDayFlowConfig] = None,
        event_bus: Optional[EventBus] = None,
        engine: Optional[GameSimulationEngine] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or GameDayFlowConfig()
        self.event_bus = event_bus or EventBus()
        self.rng = rng or random.Random()
        self.engine = engine or GameSimulationEngine(
            EngineConfig(emit_events=self.config.emit_events),
            event_bus=self.event_bus,
            rng=self.rng,
        )
        self.engine.set_on_state_update(self._handle_live_update)

        self._state = GameDayFlowState(simulation_speed=self.engine.speed)
        self._game_state: Optional[GameState] = None
        self._user_team_id = ""
        self._scheduled_game: Optional[ScheduledGame] = None

        self._on_state_change: Optional[Callable[[GameDayFlowState], None]] = None
        self._on_live_game_update: Optional[Callable[[LiveGameDisplay], None]] = None

    # =========================================================================
    # Callbacks and accessors
    # =========================================================================

    def set_on_state_change(self, callback: Optional[Callable[[GameDayFlowState], None]]) -> None:
        self._on_state_change = callback

    def set_on_live_game_update(self, callback: Optional[Callable[[LiveGameDisplay], None]]) -> None:
        self._on_live_game_update = callback

    def get_state(self) -> GameDayFlowState:
        return self._state

    @property
    def phase(self) -> GameDayPhase:
        return self._state.phase

    def get_game_result(self) -> Optional[GameResult]:
        """Final result, available once the game reached post_game."""
        if self._state.phase not in (GameDayPhase.POST_GAME, GameDayPhase.SAVING):
            return None
        if self._state.post_game_info is None:
            return None
        return self._state.post_game_info.result

    # =========================================================================
    # Pre-game
    # =========================================================================

    def initialize_game_day(
        self,
        game: ScheduledGame,
        game_state: GameState,
        user_team_id: str,
        schedule: Optional[SeasonSchedule] = None,
    ) -> PreGameInfo:
        """
        Build pre-game info for the user's game and enter pre_game.

        Raises:
            TeamNotInGameError: if ``user_team_id`` is not playing in ``game``
        """
        if not game.involves(user_team_id):
            raise TeamNotInGameError(user_team_id, game.game_id)

        is_user_home = game.home_team_id == user_team_id
        opponent_id = game.opponent_of(user_team_id)
        user_team = game_state.teams[user_team_id]
        opponent = game_state.teams[opponent_id]
        home_team = user_team if is_user_home else opponent

        self._game_state = game_state
        self._user_team_id = user_team_id
        self._scheduled_game = game

        is_playoff = game.is_playoff or game.week > self.config.regular_season_weeks
        pre_game_info = PreGameInfo(
            game=game,
            user_team=user_team,
            opponent=opponent,
            is_user_home=is_user_home,
            weather=generate_weather(game.week, home_team.is_dome, self.rng),
            stakes=GameStakes.PLAYOFF if is_playoff else GameStakes.REGULAR,
            week=game.week,
            key_matchup=self.rng.choice(KEY_MATCHUPS),
            user_injuries=self._team_injuries(game_state, user_team_id),
            opponent_injuries=self._team_injuries(game_state, opponent_id),
            user_form=self._recent_form(schedule, game_state, user_team_id, game.week),
            opponent_form=self._recent_form(schedule, game_state, opponent_id, game.week),
        )

        self._set_state(GameDayFlowState(
            phase=GameDayPhase.PRE_GAME,
            pre_game_info=pre_game_info,
            simulation_speed=self.engine.speed,
        ))
        logger.debug(f"Game day initialized: {opponent.abbreviation} {'at' if is_user_home else 'vs'} week {game.week}")
        return pre_game_info

    def set_prediction(self, prediction: PredictionInput) -> None:
        """Store the user's prediction. Ignored once the game is over."""
        if self._state.phase in (GameDayPhase.POST_GAME, GameDayPhase.SAVING):
            logger.warning("Prediction ignored: game already finished")
            return
        value = GamePrediction(prediction) if prediction is not None else None
        self._set_state(replace(self._state, prediction=value))

    # =========================================================================
    # Simulation controls
    # =========================================================================

    def start_game(self) -> None:
        """Set up the engine from both rosters and move to simulating."""
        info = self._state.pre_game_info
        if info is None or self._game_state is None or self._scheduled_game is None:
            logger.error("Game day not initialized")
            return
        if self._state.phase != GameDayPhase.PRE_GAME:
            logger.warning(f"Cannot start game from phase {self._state.phase.value}")
            return

        setup = setup_game(
            self._scheduled_game,
            self._game_state,
            is_playoff=info.stakes == GameStakes.PLAYOFF,
        )
        self.engine.initialize(setup)

        self._set_state(replace(self._state, phase=GameDayPhase.COIN_TOSS))
        self._set_state(replace(
            self._state,
            phase=GameDayPhase.SIMULATING,
            live_game=self.engine.get_current_state(),
            is_paused=False,
        ))

    def set_speed(self, speed: Union[SimulationSpeed, str]) -> None:
        speed = SimulationSpeed(speed)
        self.engine.set_speed(speed)
        self._set_state(replace(self._state, simulation_speed=speed))

    def pause(self) -> None:
        if self._state.is_paused:
            return
        self.engine.pause()
        self._set_state(replace(self._state, is_paused=True))

    def resume(self) -> None:
        if not self._state.is_paused:
            return
        self.engine.resume()
        self._set_state(replace(self._state, is_paused=False))

    def stop(self) -> None:
        self.engine.stop()

    # =========================================================================
    # Running plays
    # =========================================================================

    def _is_live(self) -> bool:
        return (
            self._state.phase in (GameDayPhase.SIMULATING, GameDayPhase.HALFTIME)
            and self.engine.is_initialized
        )

    async def run_next_play(self) -> Optional[NextPlayResult]:
        """Resolve exactly one play; None before start_game or after the final whistle."""
        if not self._is_live():
            return None

        step = await self.engine.run_single_play()
        if step is None:
            return None

        if step.halftime is not None:
            self._state = replace(
                self._state,
                phase=GameDayPhase.HALFTIME,
                halftime_info=step.halftime,
                live_game=step.state,
            )
        else:
            self._state = replace(self._state, phase=GameDayPhase.SIMULATING, live_game=step.state)

        if step.is_complete:
            self._handle_game_complete()
        else:
            self._notify()

        return NextPlayResult(play=step.play, live_game=step.state, is_complete=step.is_complete)

    async def run_continuous(self) -> Optional[GameResult]:
        """
        Resolve plays with pacing until the game ends.

        Returns None if paused or stopped before the final whistle.
        """
        if not self._is_live():
            return None

        self.engine.resume()
        self._set_state(replace(self._state, phase=GameDayPhase.SIMULATING, is_paused=False))

        result = await self.engine.run_to_completion(include_delays=True)
        self._sync_halftime()
        if result is None:
            self._notify()
            return None

        self._handle_game_complete()
        return result

    async def skip_to_end(self) -> Optional[GameResult]:
        """Resolve all remaining plays with no delay."""
        if not self._is_live():
            return None

        result = await self.engine.skip_to_end()
        self._sync_halftime()
        self._state = replace(self._state, is_paused=False)
        if result is None:
            self._notify()
            return None

        self._handle_game_complete()
        return result

    def mark_saving(self) -> None:
        """Enter the terminal saving phase once the result has been recorded."""
        if self._state.phase == GameDayPhase.POST_GAME:
            self._set_state(replace(self._state, phase=GameDayPhase.SAVING))

    def reset(self) -> None:
        """Return to idle, discarding all per-game state."""
        self.engine.stop()
        self._game_state = None
        self._user_team_id = ""
        self._scheduled_game = None
        self._set_state(GameDayFlowState(simulation_speed=self.engine.speed))

    # =========================================================================
    # Internals
    # =========================================================================

    def _handle_live_update(self, live_game: LiveGameDisplay) -> None:
        self._state = replace(self._state, live_game=live_game)
        if self._on_live_game_update is not None:
            self._on_live_game_update(live_game)

    def _sync_halftime(self) -> None:
        if self._state.halftime_info is None and self.engine.halftime_info is not None:
            self._state = replace(self._state, halftime_info=self.engine.halftime_info)

    def _handle_game_complete(self) -> None:
        result = self.engine.get_result()
        info = self._state.pre_game_info
        if result is None or info is None or self._game_state is None:
            raise GameDayNotInitializedError("Game completed without an initialized game day")

        user_team, opponent = info.user_team, info.opponent
        user_score = result.score_for(user_team.id)
        opponent_score = result.score_for(opponent.id)
        user_won = user_score > opponent_score

        prediction = self._state.prediction
        prediction_correct = None
        if prediction is not None:
            prediction_correct = (prediction == GamePrediction.WIN) == user_won

        # Upset: the winner came in with a worse record than the loser
        was_upset = False
        if not result.is_tie:
            winner, loser = (user_team, opponent) if user_won else (opponent, user_team)
            was_upset = winner.current_record.win_pct < loser.current_record.win_pct

        new_record = user_team.current_record.with_result(user_score, opponent_score)
        key_plays = [
            p for p in self.engine.get_recent_plays()
            if p.is_scoring or p.is_turnover or p.is_big_play
        ]

        post_game_info = PostGameInfo(
            result=result,
            user_team=user_team,
            opponent=opponent,
            user_won=user_won,
            was_upset=was_upset,
            prediction_correct=prediction_correct,
            new_user_record=new_record.record_string,
            key_plays=key_plays,
            mvp=self._determine_mvp(result),
            new_injuries=[
                InjuryReport(
                    player_id=injury.player_id,
                    player_name=injury.player_name,
                    position=self._position_of(injury.player_id),
                    injury=injury.injury_type,
                    status="questionable" if injury.weeks_out <= 1 else "out",
                )
                for injury in result.injuries
            ],
            playoff_implication=self._playoff_implication(info, user_won, result.is_tie, new_record),
        )

        self._set_state(replace(
            self._state,
            phase=GameDayPhase.POST_GAME,
            post_game_info=post_game_info,
            live_game=self.engine.get_current_state(),
        ))
        logger.info(
            f"Game final: {user_team.abbreviation} {user_score} - {opponent_score} "
            f"{opponent.abbreviation}"
        )

    def _determine_mvp(self, result: GameResult) -> Optional[MvpInfo]:
        leaders = result.box_score.passing_leaders
        if not leaders:
            return None
        leader = leaders[0]
        return MvpInfo(
            player_id=leader.player_id,
            player_name=leader.player_name,
            position=leader.position,
            stat_line=leader.stat_line,
        )

    def _playoff_implication(self, info: PreGameInfo, user_won: bool, tie: bool, record) -> Optional[str]:
        nickname = info.user_team.nickname
        if info.stakes == GameStakes.PLAYOFF:
            if user_won:
                return f"{nickname} advance to the next round"
            return f"{nickname} season is over"
        if info.week < 14 or tie:
            return None
        if user_won and record.wins >= 10:
            return f"{nickname} ({record.record_string}) strengthen their playoff position"
        if not user_won and record.losses >= 8:
            return f"{nickname} ({record.record_string}) playoff hopes fading"
        return None

    def _position_of(self, player_id: str) -> str:
        player = self._game_state.players.get(player_id) if self._game_state else None
        return player.position if player else "Unknown"

    def _team_injuries(self, game_state: GameState, team_id: str) -> list[InjuryReport]:
        reports = []
        for player in game_state.roster(team_id):
            status = player.injury_status
            if status.weeks_remaining <= 0:
                continue
            reports.append(InjuryReport(
                player_id=player.id,
                player_name=player.full_name,
                position=player.position,
                injury=status.injury_type,
                status="questionable" if status.weeks_remaining == 1 else "out",
            ))
        return reports

    def _recent_form(
        self,
        schedule: Optional[SeasonSchedule],
        game_state: GameState,
        team_id: str,
        week: int,
    ) -> list[GameOutcome]:
        """Last three completed games before ``week``, most recent first."""
        if schedule is None:
            return []
        form = []
        for game in recent_results(schedule, team_id, before_week=week):
            team_score = game.home_score if game.home_team_id == team_id else game.away_score
            opp_score = game.away_score if game.home_team_id == team_id else game.home_score
            if team_score > opp_score:
                outcome = "W"
            elif team_score < opp_score:
                outcome = "L"
            else:
                outcome = "T"
            opponent: Optional[Team] = game_state.teams.get(game.opponent_of(team_id))
            form.append(GameOutcome(
                result=outcome,
                opponent_abbr=opponent.abbreviation if opponent else "???",
                score=f"{team_score}-{opp_score}",
            ))
        return form

    def _set_state(self, state: GameDayFlowState) -> None:
        self._state = state
        self._notify()

    def _notify(self) -> None:
        if self._on_state_change is not None:
            self._on_state_change(self._state)

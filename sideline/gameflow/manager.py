"""
Game Flow Manager

Central state machine for a franchise season: coordinates the week
progression service and the game day flow, and exposes one interface to
the presentation layer.

The manager exclusively owns a single GameFlowState and replaces it on
every transition. Each mutating method ends by handing the new snapshot to
the registered ``on_state_change`` callback. Precondition failures set
``GameFlowState.error`` and return None instead of raising.

There is no process-wide instance; hosts construct a manager and inject it.
"""

import logging
import random
from dataclasses import replace
from typing import Callable, Optional

from sideline.config import FlowConfig
from sideline.core.league.schedule import SeasonSchedule, record_game_results
from sideline.core.models.game import GameResult
from sideline.core.models.state import GameState
from sideline.events.bus import EventBus
from sideline.events.types import WeekEndEvent
from sideline.gameflow import actions
from sideline.gameflow.engine import EngineConfig, GameSimulationEngine
from sideline.gameflow.game_day import GameDayFlow, GameDayFlowConfig
from sideline.gameflow.types import (
    GameDayFlowState,
    GameDayPhase,
    GameFlowCallbacks,
    GameFlowState,
    GamePrediction,
    LiveGameDisplay,
    PreGameInfo,
    SeasonPhase,
    SimulationSpeed,
    WeekFlowPhase,
    WeekFlowState,
    WeekSummary,
)
from sideline.gameflow.week_progression import (
    AdvanceCheck,
    WeekAdvancementResult,
    WeekProgressionConfig,
    WeekProgressionService,
)

logger = logging.getLogger(__name__)


def initial_state() -> GameFlowState:
    return GameFlowState(
        week_flow=WeekFlowState(
            phase=WeekFlowPhase.WEEK_START,
            week_number=1,
            season_phase=SeasonPhase.REGULAR_SEASON,
        ),
    )


class GameFlowManager:
    """
    Coordinates all game flow components for the UI layer.

    Args:
        config: season and simulation settings (defaults from the environment)
        event_bus: bus shared by every service of this manager
        rng: random source shared by the simulation and other-game scores
    """

    def __init__(
        self,
        config: Optional[FlowConfig] = None,
        event_bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or FlowConfig.from_env()
        self.event_bus = event_bus or EventBus(history_size=self.config.history_size)
        rng = rng or random.Random()

        engine = GameSimulationEngine(
            EngineConfig.from_flow_config(self.config),
            event_bus=self.event_bus,
            rng=rng,
        )
        self.game_day_flow = GameDayFlow(
            GameDayFlowConfig.from_flow_config(self.config),
            event_bus=self.event_bus,
            engine=engine,
            rng=rng,
        )
        self.week_service = WeekProgressionService(
            WeekProgressionConfig.from_flow_config(self.config),
            event_bus=self.event_bus,
            rng=rng,
        )

        self._state = initial_state()
        self._game_state: Optional[GameState] = None
        self._schedule: Optional[SeasonSchedule] = None
        self._user_team_id = ""

        self._callbacks = GameFlowCallbacks()
        self._on_state_change: Optional[Callable[[GameFlowState], None]] = None

        self.game_day_flow.set_on_state_change(self._handle_game_day_state)
        self.game_day_flow.set_on_live_game_update(self._handle_live_game)

    # =========================================================================
    # Callbacks and accessors
    # =========================================================================

    def set_callbacks(self, callbacks: GameFlowCallbacks) -> None:
        """Merge ``callbacks`` into the registered ones; None entries keep the old hook."""
        for name in ("on_week_start", "on_game_start", "on_play_complete", "on_game_complete", "on_week_complete"):
            hook = getattr(callbacks, name)
            if hook is not None:
                setattr(self._callbacks, name, hook)

    def set_on_state_change(self, callback: Optional[Callable[[GameFlowState], None]]) -> None:
        self._on_state_change = callback

    def get_state(self) -> GameFlowState:
        return self._state

    def get_week_flow_state(self) -> WeekFlowState:
        return self._state.week_flow

    def get_game_day_flow_state(self) -> Optional[GameDayFlowState]:
        return self._state.game_day_flow

    def get_game_state(self) -> Optional[GameState]:
        return self._game_state

    def get_schedule(self) -> Optional[SeasonSchedule]:
        return self._schedule

    @property
    def user_team_id(self) -> str:
        return self._user_team_id

    def get_live_game(self) -> Optional[LiveGameDisplay]:
        game_day = self._state.game_day_flow
        return game_day.live_game if game_day else None

    # =========================================================================
    # Initialization
    # =========================================================================

    def initialize(
        self,
        game_state: GameState,
        schedule: SeasonSchedule,
        user_team_id: str,
        current_week: int,
        season_phase: SeasonPhase = SeasonPhase.REGULAR_SEASON,
    ) -> None:
        self._game_state = game_state
        self._schedule = schedule
        self._user_team_id = user_team_id

        week_flow = self.week_service.create_week_flow_state(
            current_week, season_phase, user_team_id, schedule
        )
        self.game_day_flow.reset()
        self._state = GameFlowState(week_flow=week_flow)
        self._notify()

        logger.info(f"Game flow initialized for {user_team_id} at week {current_week}")
        if self._callbacks.on_week_start:
            self._callbacks.on_week_start(current_week)

    # =========================================================================
    # Week flow actions
    # =========================================================================

    def start_week(self, week_number: int, season_phase: SeasonPhase) -> None:
        if self._schedule is None:
            self._set_error("No schedule loaded")
            return

        week_flow = self.week_service.create_week_flow_state(
            week_number, season_phase, self._user_team_id, self._schedule
        )
        self.game_day_flow.reset()
        self._state = replace(self._state, week_flow=week_flow, game_day_flow=None)
        self._notify()

        logger.debug(f"Week {week_number} started (bye={week_flow.is_user_on_bye})")
        if self._callbacks.on_week_start:
            self._callbacks.on_week_start(week_number)

    def view_pre_game(self) -> Optional[PreGameInfo]:
        user_game = self._state.week_flow.user_game
        if self._game_state is None or user_game is None:
            self._set_error("No game scheduled")
            return None
        if self._state.week_flow.user_game_completed:
            self._set_error("Game already played")
            return None

        pre_game_info = self.game_day_flow.initialize_game_day(
            user_game, self._game_state, self._user_team_id, schedule=self._schedule
        )
        self._state = replace(
            self._state,
            week_flow=replace(self._state.week_flow, phase=WeekFlowPhase.PRE_GAME),
            game_day_flow=self.game_day_flow.get_state(),
        )
        self._notify()

        if self._callbacks.on_game_start:
            self._callbacks.on_game_start(pre_game_info)
        return pre_game_info

    def set_prediction(self, prediction: Optional[GamePrediction]) -> None:
        self.game_day_flow.set_prediction(prediction)

    def start_game_simulation(self) -> None:
        if self.game_day_flow.phase != GameDayPhase.PRE_GAME:
            self._set_error("View the pre-game before starting the game")
            return

        self.game_day_flow.start_game()
        self._state = replace(
            self._state,
            week_flow=replace(self._state.week_flow, phase=WeekFlowPhase.GAME_DAY),
        )
        self._notify()

    def set_simulation_speed(self, speed: SimulationSpeed) -> None:
        self.game_day_flow.set_speed(speed)

    def pause_simulation(self) -> None:
        self.game_day_flow.pause()

    def resume_simulation(self) -> None:
        self.game_day_flow.resume()

    async def run_next_play(self) -> None:
        step = await self.game_day_flow.run_next_play()
        if step is not None and step.is_complete:
            self._handle_user_game_complete()

    async def run_continuous_simulation(self) -> None:
        result = await self.game_day_flow.run_continuous()
        if result is not None:
            self._handle_user_game_complete()

    async def skip_to_end(self) -> None:
        self._set_loading(True)
        try:
            result = await self.game_day_flow.skip_to_end()
            if result is not None:
                self._handle_user_game_complete()
        finally:
            self._set_loading(False)

    def _handle_user_game_complete(self) -> None:
        result = self.game_day_flow.get_game_result()
        if result is None or self._game_state is None:
            return
        if self._state.week_flow.user_game_completed:
            logger.warning(f"Result for {result.game_id} already recorded")
            return

        recorded = self.week_service.record_user_game_result(
            self._state.week_flow, result, self._game_state, self._user_team_id
        )
        self._game_state = recorded.updated_game_state
        self._record_in_schedule(result)
        self._state = replace(self._state, week_flow=recorded.updated_week_flow)
        self._notify()

        if self._callbacks.on_game_complete:
            self._callbacks.on_game_complete(result)

    def _record_in_schedule(self, result: GameResult) -> None:
        user_game = self._state.week_flow.user_game
        if self._schedule is None or user_game is None:
            return
        completed = user_game.completed(result.home_score, result.away_score)
        self._schedule = record_game_results(self._schedule, [completed])

    def mark_game_result_viewed(self) -> None:
        week_flow = self._state.week_flow
        self._state = replace(
            self._state,
            week_flow=replace(
                week_flow,
                gates=replace(week_flow.gates, game_result_viewed=True),
                phase=WeekFlowPhase.OTHER_GAMES,
            ),
        )
        self.game_day_flow.mark_saving()
        self._notify()

    def simulate_other_games(self) -> None:
        if self._game_state is None:
            self._set_error("No game state")
            return

        self._set_loading(True)
        try:
            outcome = self.week_service.simulate_other_games(
                self._state.week_flow, self._game_state, self._user_team_id
            )
            self._game_state = outcome.updated_game_state
            if self._schedule is not None:
                self._schedule = record_game_results(
                    self._schedule, outcome.updated_week_flow.other_games
                )
            self._state = replace(self._state, week_flow=outcome.updated_week_flow)
            self._notify()
        finally:
            self._set_loading(False)

    def view_week_summary(self) -> Optional[WeekSummary]:
        if self._game_state is None:
            self._set_error("No game state")
            return None

        summary = self.week_service.generate_week_summary(
            self._state.week_flow, self._game_state, self._user_team_id
        )
        self._state = replace(
            self._state,
            week_flow=replace(self._state.week_flow, phase=WeekFlowPhase.WEEK_SUMMARY),
        )
        self._notify()
        return summary

    def mark_week_summary_viewed(self) -> None:
        week_flow = self._state.week_flow
        self._state = replace(
            self._state,
            week_flow=replace(
                week_flow,
                gates=replace(week_flow.gates, week_summary_viewed=True),
                phase=WeekFlowPhase.READY_TO_ADVANCE,
            ),
        )
        self._notify()

    def can_advance_week(self) -> AdvanceCheck:
        return self.week_service.can_advance_week(self._state.week_flow)

    def advance_week(self) -> Optional[WeekAdvancementResult]:
        """
        Cross the week boundary once every gate is satisfied.

        The completed week's summary is built before advancing, published as
        WEEK_END and handed to ``on_week_complete``.
        """
        if self._game_state is None:
            self._set_error("No game state")
            return None

        check = self.can_advance_week()
        if not check.can_advance:
            logger.warning(f"Week advance rejected: {check.reason}")
            self._set_error(check.reason or "Cannot advance week")
            return None

        completed_week = self._state.week_flow
        summary = self.week_service.generate_week_summary(
            completed_week, self._game_state, self._user_team_id
        )
        if self.config.emit_events:
            self.event_bus.emit(WeekEndEvent(payload=summary))

        advancement = self.week_service.advance_week(
            completed_week.week_number,
            completed_week.season_phase,
            self._game_state,
            schedule=self._schedule,
            user_team_id=self._user_team_id,
        )
        self._game_state = advancement.updated_game_state
        result = advancement.result
        self.start_week(result.new_week, result.season_phase)

        # Summary of the week just finished; the new week has no results yet
        if self._callbacks.on_week_complete:
            self._callbacks.on_week_complete(summary)
        return result

    # =========================================================================
    # Utility
    # =========================================================================

    def clear_error(self) -> None:
        self._set_error(None)

    def reset(self) -> None:
        self.game_day_flow.reset()
        self._state = initial_state()
        self._game_state = None
        self._schedule = None
        self._user_team_id = ""
        self._notify()

    async def dispatch(self, action: object) -> None:
        """Alternate entry point mapping each action class onto its method."""
        if isinstance(action, actions.StartWeek):
            self.start_week(action.week_number, action.season_phase)
        elif isinstance(action, actions.ViewPreGame):
            self.view_pre_game()
        elif isinstance(action, actions.StartGameDay):
            self.start_game_simulation()
        elif isinstance(action, actions.SetPrediction):
            self.set_prediction(action.prediction)
        elif isinstance(action, actions.SetSpeed):
            self.set_simulation_speed(action.speed)
        elif isinstance(action, actions.PauseSimulation):
            self.pause_simulation()
        elif isinstance(action, actions.ResumeSimulation):
            self.resume_simulation()
        elif isinstance(action, actions.SkipToEnd):
            await self.skip_to_end()
        elif isinstance(action, actions.MarkResultViewed):
            self.mark_game_result_viewed()
        elif isinstance(action, actions.SimOtherGames):
            self.simulate_other_games()
        elif isinstance(action, actions.ViewWeekSummary):
            self.view_week_summary()
        elif isinstance(action, actions.MarkSummaryViewed):
            self.mark_week_summary_viewed()
        elif isinstance(action, actions.AdvanceWeek):
            self.advance_week()
        elif isinstance(action, actions.SetLoading):
            self._set_loading(action.is_loading)
        elif isinstance(action, actions.SetError):
            self._set_error(action.error)
        elif isinstance(action, actions.Reset):
            self.reset()
        else:
            logger.warning(f"Unknown action: {action!r}")

    # =========================================================================
    # Internals
    # =========================================================================

    def _handle_game_day_state(self, game_day_state: GameDayFlowState) -> None:
        mirrored = None if game_day_state.phase == GameDayPhase.IDLE else game_day_state
        if mirrored is None and self._state.game_day_flow is None:
            return
        self._state = replace(self._state, game_day_flow=mirrored)
        self._notify()

    def _handle_live_game(self, live_game: LiveGameDisplay) -> None:
        if self._callbacks.on_play_complete and live_game.recent_plays:
            self._callbacks.on_play_complete(live_game.recent_plays[-1])

    def _set_loading(self, is_loading: bool) -> None:
        self._state = replace(self._state, is_loading=is_loading)
        self._notify()

    def _set_error(self, error: Optional[str]) -> None:
        if error is not None:
            logger.warning(f"Game flow error: {error}")
        self._state = replace(self._state, error=error)
        self._notify()

    def _notify(self) -> None:
        if self._on_state_change is not None:
            self._on_state_change(self._state)

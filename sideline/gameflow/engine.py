"""
Game Simulation Engine

Drives a single game play-by-play over a GameRunner and publishes what
happens on the event bus:
- play, score and lead-change events for every play
- quarter, two-minute warning, overtime and halftime events
- injury events
- speed changes and pause/resume
"""

import asyncio
import logging
import random
from collections import deque
from dataclasses import dataclass, replace
from typing import Callable, Optional

from sideline.config import FlowConfig
from sideline.events.bus import EventBus
from sideline.events.types import (
    FieldGoalEvent,
    FieldGoalPayload,
    GameFlowEvent,
    GameStartEvent,
    GameStartPayload,
    HalftimeEvent,
    InjuryOccurredEvent,
    LeadChangeEvent,
    OvertimeStartEvent,
    OvertimePayload,
    PlayCompletePayload,
    QuarterEndEvent,
    QuarterPayload,
    QuarterStartEvent,
    SafetyEvent,
    SimulationPausedEvent,
    SimulationResumedEvent,
    SimulationSpeedChangedEvent,
    SimulationStatePayload,
    SpeedChangePayload,
    TwoMinuteWarningEvent,
    check_lead_change,
    create_play_event,
    create_score_change_event,
)
from sideline.core.models.game import GameResult, TeamGameStats
from sideline.gameflow.types import (
    SIMULATION_DELAYS,
    DriveDisplay,
    HalfStats,
    HalftimeInfo,
    InjuryReport,
    LiveGameDisplay,
    PlayDisplay,
    SimulationSpeed,
    TeamDisplay,
)
from sideline.simulation.runner import GameRunner, GameSetup, LiveGameState, PlayStep

logger = logging.getLogger(__name__)

RECENT_PLAYS_KEPT = 10
BIG_PLAY_YARDS = 20


@dataclass
class EngineConfig:
    """Engine configuration options."""

    default_speed: SimulationSpeed = SimulationSpeed.NORMAL
    emit_events: bool = True
    max_plays: int = 350

    @classmethod
    def from_flow_config(cls, config: FlowConfig) -> "EngineConfig":
        return cls(
            default_speed=SimulationSpeed(config.default_speed),
            emit_events=config.emit_events,
            max_plays=config.max_plays,
        )


@dataclass(frozen=True)
class EngineStep:
    """What one resolved play looks like to the flow layer."""

    play: PlayDisplay
    state: LiveGameDisplay
    is_complete: bool
    halftime: Optional[HalftimeInfo] = None


@dataclass
class _DriveState:
    team: str
    plays: int = 0
    yards: int = 0
    start_time: int = 0


def _format_time(seconds: int) -> str:
    """Format seconds as M:SS."""
    return f"{seconds // 60}:{seconds % 60:02d}"


def _half_stats(stats: TeamGameStats) -> HalfStats:
    return HalfStats(
        total_yards=stats.total_yards,
        passing_yards=stats.passing_yards,
        rushing_yards=stats.rushing_yards,
        turnovers=stats.turnovers,
        time_of_possession=stats.time_of_possession,
    )


class GameSimulationEngine:
    """
    Manages the execution of one game with event emission for UI feeds.

    The engine is reusable: ``initialize`` starts a fresh game and discards
    any previous one.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        event_bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            config: Engine options (defaults if None)
            event_bus: Event bus for notifications (creates new if None)
            rng: Random source handed to each GameRunner
        """
        self.config = config or EngineConfig()
        self.event_bus = event_bus or EventBus()
        self.rng = rng or random.Random()

        self._runner: Optional[GameRunner] = None
        self._speed = self.config.default_speed
        self._on_state_update: Optional[Callable[[LiveGameDisplay], None]] = None
        self._reset_tracking()

    def _reset_tracking(self) -> None:
        self._running = False
        self._paused = False
        self._should_stop = False
        self._play_count = 0
        self._previous_score = (0, 0)
        self._current_quarter = 1
        self._recent_plays: deque[PlayDisplay] = deque(maxlen=RECENT_PLAYS_KEPT)
        self._drive: Optional[_DriveState] = None
        self._halftime_info: Optional[HalftimeInfo] = None

    # =========================================================================
    # Setup and controls
    # =========================================================================

    def initialize(self, setup: GameSetup) -> None:
        """Start a new game from a prepared setup and emit GAME_START."""
        self._runner = GameRunner(setup, rng=self.rng)
        self._reset_tracking()
        logger.debug(
            f"Engine initialized for {setup.away_team.abbreviation} @ "
            f"{setup.home_team.abbreviation} (week {setup.week})"
        )
        self._emit(GameStartEvent(payload=GameStartPayload(
            game_id=setup.game_id,
            home_team_id=setup.home_team.id,
            away_team_id=setup.away_team.id,
            home_team_name=setup.home_team.full_name,
            away_team_name=setup.away_team.full_name,
            week=setup.week,
        )))

    def set_on_state_update(self, callback: Optional[Callable[[LiveGameDisplay], None]]) -> None:
        self._on_state_update = callback

    @property
    def speed(self) -> SimulationSpeed:
        return self._speed

    def set_speed(self, speed: SimulationSpeed) -> None:
        previous = self._speed
        self._speed = SimulationSpeed(speed)
        self._emit(SimulationSpeedChangedEvent(payload=SpeedChangePayload(
            previous_speed=previous.value,
            new_speed=self._speed.value,
        )))

    @property
    def is_initialized(self) -> bool:
        return self._runner is not None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def is_complete(self) -> bool:
        return self._runner is not None and self._runner.is_complete

    @property
    def play_count(self) -> int:
        return self._play_count

    @property
    def halftime_info(self) -> Optional[HalftimeInfo]:
        return self._halftime_info

    def pause(self) -> None:
        """Pause between plays. No-op if already paused or no game is live."""
        if self._paused or self._runner is None or self._runner.is_complete:
            return
        self._paused = True
        self._emit(SimulationPausedEvent(payload=self._simulation_state()))

    def resume(self) -> None:
        """Clear a pause. No-op if not paused."""
        if not self._paused:
            return
        self._paused = False
        if self._runner is not None:
            self._emit(SimulationResumedEvent(payload=self._simulation_state()))

    def stop(self) -> None:
        """Force a running continuous simulation to return before the next play."""
        self._should_stop = True
        self._paused = False

    # =========================================================================
    # Running
    # =========================================================================

    async def run_single_play(self) -> Optional[EngineStep]:
        """Resolve one play; None if no game is initialized or it is over."""
        if self._runner is None:
            logger.error("Engine not initialized")
            return None
        if self._runner.is_complete:
            return None
        return self._advance()

    async def run_to_completion(self, include_delays: bool = True) -> Optional[GameResult]:
        """
        Resolve plays until the game ends.

        Waits ``SIMULATION_DELAYS[speed]`` between plays when
        ``include_delays`` is set. Returns None without a result if
        ``pause()`` or ``stop()`` is called before the game finishes.
        """
        if self._runner is None:
            logger.error("Engine not initialized")
            return None

        self._running = True
        self._should_stop = False
        self._paused = False
        try:
            while not self._runner.is_complete:
                if self._should_stop or self._paused:
                    logger.debug(f"Simulation interrupted after {self._play_count} plays")
                    return None

                step = self._advance()
                if step.is_complete:
                    break

                delay = SIMULATION_DELAYS[self._speed] if include_delays else 0
                if delay > 0:
                    await asyncio.sleep(delay)

            return self._runner.get_result()
        finally:
            self._running = False

    async def skip_to_end(self) -> Optional[GameResult]:
        """Resolve all remaining plays with no delay."""
        return await self.run_to_completion(include_delays=False)

    def get_current_state(self) -> Optional[LiveGameDisplay]:
        if self._runner is None:
            return None
        return self._create_display(self._runner.state)

    def get_result(self) -> Optional[GameResult]:
        if self._runner is None:
            return None
        return self._runner.get_result()

    def get_recent_plays(self) -> list[PlayDisplay]:
        return list(self._recent_plays)

    # =========================================================================
    # Play processing
    # =========================================================================

    def _advance(self) -> EngineStep:
        runner = self._runner
        quarter_before = runner.state.quarter
        offense_before = runner.state.possession
        time_before = runner.state.time_remaining

        step = runner.run_next_play()
        self._play_count += 1

        if not step.is_complete and self._play_count >= self.config.max_plays:
            logger.warning("Max plays reached, ending simulation")
            runner.force_complete()
            step = replace(step, state=runner.state.snapshot(), is_complete=True)

        play = self._process_play(step, quarter_before, offense_before, time_before)
        display = self._create_display(step.state)

        if self._on_state_update is not None:
            self._on_state_update(display)

        halftime = self._check_halftime(step.state)
        return EngineStep(play=play, state=display, is_complete=step.is_complete, halftime=halftime)

    def _process_play(
        self,
        step: PlayStep,
        quarter: int,
        offense: str,
        time_before: int,
    ) -> PlayDisplay:
        state = step.state
        result = step.play
        offense_abbr = state.home.abbr if offense == "home" else state.away.abbr
        time_remaining = state.time_remaining if state.quarter == quarter else 0

        play = PlayDisplay(
            id=f"play-{self._play_count}",
            quarter=quarter,
            time=_format_time(time_remaining),
            offense_team=offense_abbr,
            description=result.description,
            yards_gained=result.yards_gained,
            is_scoring=result.is_scoring,
            is_turnover=result.turnover,
            is_big_play=result.yards_gained >= BIG_PLAY_YARDS,
            score=f"{state.home_score}-{state.away_score}",
        )
        self._recent_plays.append(play)
        self._track_drive(offense, result.yards_gained, time_before)

        if not self.config.emit_events:
            self._previous_score = (state.home_score, state.away_score)
            self._current_quarter = state.quarter
            return play

        payload = PlayCompletePayload(
            play=play,
            home_score=state.home_score,
            away_score=state.away_score,
            quarter=quarter,
            time_remaining=time_remaining,
        )
        if result.field_goal_attempt:
            self.event_bus.emit(FieldGoalEvent(payload=FieldGoalPayload(
                play=play,
                home_score=state.home_score,
                away_score=state.away_score,
                quarter=quarter,
                time_remaining=time_remaining,
                made=result.is_scoring,
                distance=result.field_goal_distance,
            )))
        elif result.safety:
            self.event_bus.emit(SafetyEvent(payload=payload))
        else:
            self.event_bus.emit(create_play_event(
                play, state.home_score, state.away_score, quarter, time_remaining
            ))

        previous_home, previous_away = self._previous_score
        if (state.home_score, state.away_score) != self._previous_score:
            self.event_bus.emit(create_score_change_event(
                state.home_score, state.away_score, previous_home, previous_away, result.description
            ))
            lead_change = check_lead_change(
                previous_home, previous_away, state.home_score, state.away_score
            )
            if lead_change is not None:
                self.event_bus.emit(LeadChangeEvent(payload=lead_change))
            self._previous_score = (state.home_score, state.away_score)

        if step.two_minute_warning:
            self.event_bus.emit(TwoMinuteWarningEvent(payload=QuarterPayload(
                quarter=state.quarter,
                home_score=state.home_score,
                away_score=state.away_score,
            )))

        if state.quarter != self._current_quarter:
            self.event_bus.emit(QuarterEndEvent(payload=QuarterPayload(
                quarter=self._current_quarter,
                home_score=state.home_score,
                away_score=state.away_score,
            )))
            self.event_bus.emit(QuarterStartEvent(payload=QuarterPayload(
                quarter=state.quarter,
                home_score=state.home_score,
                away_score=state.away_score,
            )))
            if state.is_overtime:
                self.event_bus.emit(OvertimeStartEvent(payload=OvertimePayload(
                    home_score=state.home_score,
                    away_score=state.away_score,
                )))
            self._current_quarter = state.quarter

        if result.injury is not None:
            injury = result.injury
            self.event_bus.emit(InjuryOccurredEvent(payload=InjuryReport(
                player_id=injury.player_id,
                player_name=injury.player_name,
                position=self._position_of(injury.player_id),
                injury=injury.injury_type,
                status="questionable" if injury.weeks_out <= 1 else "out",
            )))

        return play

    def _track_drive(self, offense: str, yards: int, time_before: int) -> None:
        if self._drive is None or self._drive.team != offense:
            self._drive = _DriveState(team=offense, start_time=time_before)
        self._drive.plays += 1
        self._drive.yards += yards

    def _check_halftime(self, state: LiveGameState) -> Optional[HalftimeInfo]:
        if self._halftime_info is not None or state.quarter < 3 or state.is_complete:
            return None

        self._halftime_info = HalftimeInfo(
            home_score=state.home_score,
            away_score=state.away_score,
            home_team_abbr=state.home.abbr,
            away_team_abbr=state.away.abbr,
            home_first_half_stats=_half_stats(self._runner.team_stats("home")),
            away_first_half_stats=_half_stats(self._runner.team_stats("away")),
            key_plays=[p for p in self._recent_plays if p.is_scoring or p.is_big_play],
        )
        self._emit(HalftimeEvent(payload=self._halftime_info))
        return self._halftime_info

    def _create_display(self, state: LiveGameState) -> LiveGameDisplay:
        if state.is_complete:
            quarter = "Final"
        elif state.is_overtime:
            quarter = "OT"
        else:
            quarter = state.quarter

        if self._drive is not None and self._drive.plays > 0:
            drive = DriveDisplay(
                plays=self._drive.plays,
                yards=self._drive.yards,
                time_of_possession=max(0, self._drive.start_time - state.time_remaining),
            )
        else:
            drive = DriveDisplay()

        return LiveGameDisplay(
            game_id=state.game_id,
            home_score=state.home_score,
            away_score=state.away_score,
            quarter=quarter,
            time_remaining=state.time_remaining,
            is_clock_running=state.is_clock_running,
            possession=state.possession,
            ball_position=state.ball_position,
            down=state.down,
            yards_to_go=state.yards_to_go,
            home_team=TeamDisplay(
                id=state.home.team_id,
                name=state.home.name,
                abbr=state.home.abbr,
                timeouts_remaining=state.home.timeouts_remaining,
            ),
            away_team=TeamDisplay(
                id=state.away.team_id,
                name=state.away.name,
                abbr=state.away.abbr,
                timeouts_remaining=state.away.timeouts_remaining,
            ),
            current_drive=drive,
            recent_plays=list(self._recent_plays),
            is_complete=state.is_complete,
        )

    def _simulation_state(self) -> SimulationStatePayload:
        state = self._runner.state
        return SimulationStatePayload(
            game_id=state.game_id,
            current_quarter=state.quarter,
            time_remaining=state.time_remaining,
            home_score=state.home_score,
            away_score=state.away_score,
        )

    def _position_of(self, player_id: str) -> str:
        setup = self._runner.setup
        for player in [*setup.home_roster, *setup.away_roster]:
            if player.id == player_id:
                return player.position
        return "Unknown"

    def _emit(self, event: GameFlowEvent) -> None:
        if self.config.emit_events:
            self.event_bus.emit(event)

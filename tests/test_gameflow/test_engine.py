"""Tests for GameSimulationEngine."""

import asyncio
import random

import pytest

from sideline.events.bus import EventBus
from sideline.events.types import EventType
from sideline.gameflow.engine import RECENT_PLAYS_KEPT, EngineConfig, GameSimulationEngine
from sideline.gameflow.types import SimulationSpeed
from sideline.simulation.runner import setup_game


PLAY_EVENT_TYPES = {
    EventType.PLAY_COMPLETE,
    EventType.TOUCHDOWN,
    EventType.TURNOVER,
    EventType.BIG_PLAY,
    EventType.FIELD_GOAL,
    EventType.SAFETY,
}


@pytest.fixture
def bus() -> EventBus:
    return EventBus(history_size=5000)


@pytest.fixture
def engine(bus) -> GameSimulationEngine:
    return GameSimulationEngine(EngineConfig(), event_bus=bus, rng=random.Random(9))


@pytest.fixture
def live_engine(engine, week_one_game, game_state) -> GameSimulationEngine:
    engine.initialize(setup_game(week_one_game, game_state))
    return engine


class TestEngineSetup:
    """Tests for initialization and controls."""

    def test_defaults(self):
        engine = GameSimulationEngine()
        assert engine.speed == SimulationSpeed.NORMAL
        assert not engine.is_initialized
        assert engine.get_current_state() is None
        assert engine.get_result() is None

    def test_uninitialized_play_returns_none(self, engine):
        assert asyncio.run(engine.run_single_play()) is None
        assert asyncio.run(engine.run_to_completion()) is None

    def test_initialize_emits_game_start(self, live_engine, bus):
        """GAME_START carries both teams and the week."""
        events = bus.get_events_by_type(EventType.GAME_START)

        assert len(events) == 1
        payload = events[0].payload
        assert payload.home_team_id == "PHI"
        assert payload.away_team_name == "Dallas Cowboys"
        assert payload.week == 1

    def test_initial_display(self, live_engine):
        display = live_engine.get_current_state()

        assert display.quarter == 1
        assert display.home_score == display.away_score == 0
        assert display.home_team.abbr == "PHI"
        assert display.recent_plays == []
        assert not display.is_complete

    def test_set_speed_emits(self, engine, bus):
        engine.set_speed(SimulationSpeed.FAST)

        assert engine.speed == SimulationSpeed.FAST
        event = bus.get_events_by_type(EventType.SIMULATION_SPEED_CHANGED)[0]
        assert event.payload.previous_speed == "normal"
        assert event.payload.new_speed == "fast"

    def test_pause_without_game_is_noop(self, engine, bus):
        engine.pause()
        assert not engine.is_paused
        assert bus.get_events_by_type(EventType.SIMULATION_PAUSED) == []

    def test_pause_and_resume(self, live_engine, bus):
        """Pause and resume emit once each and are idempotent."""
        live_engine.pause()
        live_engine.pause()
        assert live_engine.is_paused

        live_engine.resume()
        live_engine.resume()
        assert not live_engine.is_paused

        assert len(bus.get_events_by_type(EventType.SIMULATION_PAUSED)) == 1
        assert len(bus.get_events_by_type(EventType.SIMULATION_RESUMED)) == 1


class TestRunSinglePlay:
    """Tests for run_single_play."""

    def test_one_play(self, live_engine, bus):
        step = asyncio.run(live_engine.run_single_play())

        assert step.play.id == "play-1"
        assert step.play.quarter == 1
        assert live_engine.play_count == 1
        assert step.state.recent_plays[-1] == step.play
        assert not step.is_complete
        play_events = [e for e in bus.get_history() if e.type in PLAY_EVENT_TYPES]
        assert len(play_events) == 1

    def test_state_update_callback(self, live_engine):
        updates = []
        live_engine.set_on_state_update(updates.append)

        asyncio.run(live_engine.run_single_play())
        asyncio.run(live_engine.run_single_play())

        assert len(updates) == 2
        assert updates[-1].recent_plays[-1].id == "play-2"

    def test_recent_plays_bounded(self, live_engine):
        """Only the last plays are kept, newest last."""
        async def run():
            for _ in range(RECENT_PLAYS_KEPT + 5):
                await live_engine.run_single_play()

        asyncio.run(run())
        recent = live_engine.get_recent_plays()

        assert len(recent) == RECENT_PLAYS_KEPT
        assert recent[-1].id == f"play-{RECENT_PLAYS_KEPT + 5}"

    def test_none_after_final(self, live_engine):
        asyncio.run(live_engine.skip_to_end())
        assert asyncio.run(live_engine.run_single_play()) is None


class TestRunToCompletion:
    """Tests for continuous simulation."""

    def test_skip_to_end(self, live_engine, bus):
        """Skipping produces a result and a Final display."""
        result = asyncio.run(live_engine.skip_to_end())

        assert result is not None
        assert live_engine.is_complete
        assert live_engine.get_result() is result
        display = live_engine.get_current_state()
        assert display.quarter == "Final"
        assert display.is_complete
        assert result.total_plays == live_engine.play_count

    def test_one_play_event_per_play(self, live_engine, bus):
        asyncio.run(live_engine.skip_to_end())
        play_events = [e for e in bus.get_history() if e.type in PLAY_EVENT_TYPES]
        assert len(play_events) == live_engine.play_count

    def test_score_changes_add_up(self, live_engine, bus):
        """SCORE_CHANGE points sum to the final score for each side."""
        result = asyncio.run(live_engine.skip_to_end())
        changes = bus.get_events_by_type(EventType.SCORE_CHANGE)

        home = sum(e.payload.points for e in changes if e.payload.scoring_team == "home")
        away = sum(e.payload.points for e in changes if e.payload.scoring_team == "away")
        assert (home, away) == (result.home_score, result.away_score)

    def test_halftime_reported_once(self, live_engine, bus):
        asyncio.run(live_engine.skip_to_end())

        assert live_engine.halftime_info is not None
        assert live_engine.halftime_info.home_team_abbr == "PHI"
        assert len(bus.get_events_by_type(EventType.HALFTIME)) == 1

    def test_halftime_step(self, live_engine):
        """Exactly one step carries halftime info, the first play of the third quarter state."""
        async def run():
            steps = []
            while True:
                step = await live_engine.run_single_play()
                if step is None:
                    return steps
                steps.append(step)

        steps = asyncio.run(run())
        halftime_steps = [s for s in steps if s.halftime is not None]

        assert len(halftime_steps) == 1
        assert halftime_steps[0].state.quarter == 3
        assert steps[-1].is_complete

    def test_engine_does_not_emit_game_end(self, live_engine, bus):
        asyncio.run(live_engine.skip_to_end())
        assert bus.get_events_by_type(EventType.GAME_END) == []

    def test_max_plays_forces_final(self, bus, week_one_game, game_state):
        engine = GameSimulationEngine(EngineConfig(max_plays=5), event_bus=bus, rng=random.Random(1))
        engine.initialize(setup_game(week_one_game, game_state))

        result = asyncio.run(engine.skip_to_end())

        assert result.total_plays == 5
        assert engine.play_count == 5
        assert engine.is_complete

    def test_stop_interrupts(self, live_engine):
        """stop() during a run returns None before the final whistle."""
        def stop_after_three(display):
            if live_engine.play_count == 3:
                live_engine.stop()

        live_engine.set_on_state_update(stop_after_three)
        result = asyncio.run(live_engine.run_to_completion(include_delays=False))

        assert result is None
        assert live_engine.play_count == 3
        assert not live_engine.is_complete
        assert not live_engine.is_running

    def test_pause_interrupts_and_run_restarts(self, live_engine):
        """A paused run returns None; the next run clears the pause and finishes."""
        def pause_after_two(display):
            if live_engine.play_count == 2:
                live_engine.pause()

        live_engine.set_on_state_update(pause_after_two)
        assert asyncio.run(live_engine.run_to_completion(include_delays=False)) is None
        assert live_engine.is_paused

        live_engine.set_on_state_update(None)
        result = asyncio.run(live_engine.run_to_completion(include_delays=False))
        assert result is not None
        assert not live_engine.is_paused

    def test_instant_speed_with_delays(self, live_engine):
        live_engine.set_speed(SimulationSpeed.INSTANT)
        assert asyncio.run(live_engine.run_to_completion(include_delays=True)) is not None

    def test_reinitialize_starts_fresh(self, live_engine, week_one_game, game_state):
        asyncio.run(live_engine.skip_to_end())
        live_engine.initialize(setup_game(week_one_game, game_state))

        assert not live_engine.is_complete
        assert live_engine.play_count == 0
        assert live_engine.halftime_info is None
        assert live_engine.get_recent_plays() == []

    def test_emit_events_disabled(self, week_one_game, game_state):
        bus = EventBus()
        engine = GameSimulationEngine(EngineConfig(emit_events=False), event_bus=bus, rng=random.Random(4))
        engine.initialize(setup_game(week_one_game, game_state))
        asyncio.run(engine.skip_to_end())

        assert bus.get_history() == []

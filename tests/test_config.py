"""Tests for FlowConfig."""

import pytest

from sideline.config import FlowConfig
from sideline.gameflow.engine import EngineConfig
from sideline.gameflow.game_day import GameDayFlowConfig
from sideline.gameflow.types import SimulationSpeed
from sideline.gameflow.week_progression import WeekProgressionConfig


class TestFlowConfig:
    """Tests for defaults, environment overrides and validation."""

    def test_defaults(self, config):
        assert config.regular_season_weeks == 18
        assert config.playoff_weeks == 4
        assert config.final_week == 22
        assert config.max_plays == 350
        assert config.default_speed == "normal"
        assert config.history_size == 100
        assert config.emit_events
        assert config.validate() == []

    def test_environment_overrides(self, config, monkeypatch):
        monkeypatch.setenv("SIDELINE_REGULAR_SEASON_WEEKS", "17")
        monkeypatch.setenv("SIDELINE_MAX_PLAYS", "200")
        monkeypatch.setenv("SIDELINE_DEFAULT_SPEED", "fast")
        monkeypatch.setenv("SIDELINE_EMIT_EVENTS", "false")

        config = FlowConfig.from_env()

        assert config.regular_season_weeks == 17
        assert config.final_week == 21
        assert config.max_plays == 200
        assert config.default_speed == "fast"
        assert not config.emit_events

    def test_blank_value_uses_default(self, config, monkeypatch):
        monkeypatch.setenv("SIDELINE_PLAYOFF_WEEKS", " ")
        assert FlowConfig.from_env().playoff_weeks == 4

    def test_non_numeric_raises(self, config, monkeypatch):
        monkeypatch.setenv("SIDELINE_MAX_PLAYS", "lots")
        with pytest.raises(ValueError):
            FlowConfig.from_env()

    @pytest.mark.parametrize("field,value", [
        ("regular_season_weeks", 0),
        ("playoff_weeks", -1),
        ("max_plays", 0),
        ("history_size", 0),
        ("default_speed", "warp"),
    ])
    def test_validation(self, config, field, value):
        setattr(config, field, value)
        errors = config.validate()
        assert len(errors) == 1

    def test_component_configs(self, config):
        """Each service picks its settings out of the shared config."""
        config.max_plays = 120
        config.default_speed = "slow"
        config.emit_events = False
        config.regular_season_weeks = 17

        engine = EngineConfig.from_flow_config(config)
        assert engine.max_plays == 120
        assert engine.default_speed == SimulationSpeed.SLOW
        assert not engine.emit_events

        assert GameDayFlowConfig.from_flow_config(config).regular_season_weeks == 17
        week = WeekProgressionConfig.from_flow_config(config)
        assert (week.regular_season_weeks, week.playoff_weeks, week.emit_events) == (17, 4, False)

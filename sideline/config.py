"""
Flow configuration.

Season length, engine safety limits and event settings. Every value can be
overridden through environment variables.
"""

import os
from dataclasses import dataclass, field


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


@dataclass
class FlowConfig:
    """Configuration shared by the week/game flow services."""

    # Season structure
    regular_season_weeks: int = field(
        default_factory=lambda: _env_int("SIDELINE_REGULAR_SEASON_WEEKS", 18)
    )
    playoff_weeks: int = field(default_factory=lambda: _env_int("SIDELINE_PLAYOFF_WEEKS", 4))

    # Simulation engine
    max_plays: int = field(default_factory=lambda: _env_int("SIDELINE_MAX_PLAYS", 350))
    default_speed: str = field(
        default_factory=lambda: os.getenv("SIDELINE_DEFAULT_SPEED", "normal")
    )

    # Event bus
    history_size: int = field(default_factory=lambda: _env_int("SIDELINE_HISTORY_SIZE", 100))
    emit_events: bool = field(
        default_factory=lambda: os.getenv("SIDELINE_EMIT_EVENTS", "true").lower() == "true"
    )

    @classmethod
    def from_env(cls) -> "FlowConfig":
        """Create config from environment variables."""
        return cls()

    @property
    def final_week(self) -> int:
        """Last week number of the postseason."""
        return self.regular_season_weeks + self.playoff_weeks

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []
        if self.regular_season_weeks < 1:
            errors.append("SIDELINE_REGULAR_SEASON_WEEKS must be at least 1")
        if self.playoff_weeks < 0:
            errors.append("SIDELINE_PLAYOFF_WEEKS cannot be negative")
        if self.max_plays < 1:
            errors.append("SIDELINE_MAX_PLAYS must be at least 1")
        if self.history_size < 1:
            errors.append("SIDELINE_HISTORY_SIZE must be at least 1")
        if self.default_speed not in ("slow", "normal", "fast", "instant"):
            errors.append(f"Unknown SIDELINE_DEFAULT_SPEED: {self.default_speed}")
        return errors

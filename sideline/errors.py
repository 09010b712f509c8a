"""Exceptions for contract violations in the flow layer.

Recoverable conditions (no schedule loaded, gates not satisfied, ...) are
reported through ``GameFlowState.error`` instead. These exceptions signal
that a caller broke the API contract.
"""


class SidelineError(Exception):
    """Base class for all Sideline errors."""


class GameDayNotInitializedError(SidelineError):
    """Raised when game day data is required but was never initialized."""


class TeamNotInGameError(SidelineError):
    """Raised when a scheduled game does not involve the expected team."""

    def __init__(self, team_id: str, game_id: str) -> None:
        super().__init__(f"Team {team_id} is not playing in game {game_id}")
        self.team_id = team_id
        self.game_id = game_id


class InvalidWeekFlowState(SidelineError, ValueError):
    """Raised when a week flow snapshot violates its invariants."""

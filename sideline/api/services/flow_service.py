"""Franchise flow sessions: one GameFlowManager per session."""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sideline.config import FlowConfig
from sideline.core.league.league_data import get_franchise
from sideline.gameflow.manager import GameFlowManager
from sideline.gameflow.types import SeasonPhase
from sideline.generators import generate_league

logger = logging.getLogger(__name__)


@dataclass
class FlowSession:
    """A franchise session with its manager."""

    session_id: UUID
    user_team_id: str
    manager: GameFlowManager
    created_at: datetime = field(default_factory=datetime.now)

    def stop(self) -> None:
        """Halt any running simulation."""
        self.manager.game_day_flow.stop()


class FlowSessionManager:
    """Manages active flow sessions for one application instance."""

    def __init__(self, config: Optional[FlowConfig] = None) -> None:
        self.config = config or FlowConfig.from_env()
        self._sessions: dict[UUID, FlowSession] = {}

    def create_session(
        self,
        team: str,
        seed: Optional[int] = None,
        season: int = 2025,
        week: int = 1,
    ) -> FlowSession:
        """
        Generate a league and start a manager on it.

        Raises:
            ValueError: unknown team abbreviation or week out of range
        """
        franchise = get_franchise(team)
        if franchise is None:
            raise ValueError(f"Unknown team: {team}")
        if not 1 <= week <= self.config.regular_season_weeks:
            raise ValueError(f"Week must be between 1 and {self.config.regular_season_weeks}")

        league = generate_league(seed=seed, season=season, current_week=week)
        manager = GameFlowManager(self.config, rng=random.Random(seed))
        manager.initialize(
            league.game_state,
            league.schedule,
            franchise.abbreviation,
            week,
            SeasonPhase.REGULAR_SEASON,
        )

        session = FlowSession(
            session_id=uuid4(),
            user_team_id=franchise.abbreviation,
            manager=manager,
        )
        self._sessions[session.session_id] = session
        logger.info(f"Created flow session {session.session_id} for {franchise.abbreviation}")
        return session

    def get_session(self, session_id: UUID) -> Optional[FlowSession]:
        return self._sessions.get(session_id)

    def remove_session(self, session_id: UUID) -> bool:
        """Remove and stop a session. Returns False if it did not exist."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.stop()
        return True

    @property
    def active_sessions(self) -> list[UUID]:
        return list(self._sessions.keys())

    def cleanup_all(self) -> None:
        for session in list(self._sessions.values()):
            session.stop()
        self._sessions.clear()

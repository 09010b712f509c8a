"""Player model with injury status and fatigue."""

from dataclasses import dataclass, field, replace
from enum import Enum


class InjurySeverity(str, Enum):
    """How badly a player is hurt."""

    NONE = "none"
    QUESTIONABLE = "questionable"
    DOUBTFUL = "doubtful"
    OUT = "out"
    IR = "ir"

    @classmethod
    def from_weeks_out(cls, weeks_out: int) -> "InjurySeverity":
        """Severity for a fresh injury expected to last ``weeks_out`` weeks."""
        if weeks_out > 4:
            return cls.IR
        if weeks_out > 1:
            return cls.OUT
        return cls.QUESTIONABLE


# Injury types the rest of the game knows how to describe
KNOWN_INJURY_TYPES = frozenset({
    "concussion",
    "hamstring",
    "knee",
    "ankle",
    "shoulder",
    "back",
    "foot",
    "hand",
    "elbow",
    "groin",
    "ribs",
    "neck",
    "achilles",
    "acl",
    "mcl",
})


def normalize_injury_type(injury_type: str | None) -> str:
    """Map a raw injury description onto a known type, else 'other'."""
    if injury_type and injury_type.lower() in KNOWN_INJURY_TYPES:
        return injury_type.lower()
    return "other"


@dataclass(frozen=True)
class InjuryStatus:
    severity: InjurySeverity = InjurySeverity.NONE
    injury_type: str = ""
    weeks_remaining: int = 0

    @property
    def is_injured(self) -> bool:
        return self.weeks_remaining > 0


@dataclass(frozen=True)
class Player:
    """
    A rostered player.

    Only the attributes the week flow reads or updates are modelled here.
    """

    id: str
    first_name: str
    last_name: str
    position: str
    team_id: str
    overall: int = 70
    injury_status: InjuryStatus = field(default_factory=InjuryStatus)
    fatigue: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def with_injury(self, status: InjuryStatus) -> "Player":
        return replace(self, injury_status=status)

    def rested(self) -> "Player":
        """Copy with fatigue cleared."""
        return replace(self, fatigue=0)

    def __str__(self) -> str:
        return f"{self.full_name} ({self.position}, {self.overall} OVR)"

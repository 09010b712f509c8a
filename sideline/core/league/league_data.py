"""
League Structure Data.

This module contains the static league structure:
- 32 franchises
- 2 conferences (AFC, NFC)
- 8 divisions (4 per conference)
- Franchise metadata (city, nickname, abbreviation, stadium type)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Conference(str, Enum):
    """League conferences."""
    AFC = "AFC"
    NFC = "NFC"


class Division(str, Enum):
    """League divisions."""
    # AFC
    AFC_EAST = "AFC East"
    AFC_NORTH = "AFC North"
    AFC_SOUTH = "AFC South"
    AFC_WEST = "AFC West"
    # NFC
    NFC_EAST = "NFC East"
    NFC_NORTH = "NFC North"
    NFC_SOUTH = "NFC South"
    NFC_WEST = "NFC West"

    @property
    def conference(self) -> Conference:
        """Get the conference this division belongs to."""
        if self.name.startswith("AFC"):
            return Conference.AFC
        return Conference.NFC

    @property
    def region(self) -> str:
        """Region part of the division name ('East', 'North', ...)."""
        return self.value.split(" ", 1)[1]


@dataclass(frozen=True)
class FranchiseData:
    """
    Static data for a franchise.

    This is the "template" data - immutable information about each team
    that the league generator turns into a mutable-by-copy Team.
    """
    nickname: str  # "Eagles"
    city: str  # "Philadelphia"
    abbreviation: str  # "PHI"
    division: Division
    is_dome: bool = False


def _franchise(abbr: str, city: str, nickname: str, division: Division, is_dome: bool = False) -> FranchiseData:
    return FranchiseData(
        nickname=nickname,
        city=city,
        abbreviation=abbr,
        division=division,
        is_dome=is_dome,
    )


FRANCHISES: dict[str, FranchiseData] = {
    f.abbreviation: f
    for f in [
        # AFC EAST
        _franchise("BUF", "Buffalo", "Bills", Division.AFC_EAST),
        _franchise("MIA", "Miami", "Dolphins", Division.AFC_EAST),
        _franchise("NE", "New England", "Patriots", Division.AFC_EAST),
        _franchise("NYJ", "New York", "Jets", Division.AFC_EAST),
        # AFC NORTH
        _franchise("BAL", "Baltimore", "Ravens", Division.AFC_NORTH),
        _franchise("CIN", "Cincinnati", "Bengals", Division.AFC_NORTH),
        _franchise("CLE", "Cleveland", "Browns", Division.AFC_NORTH),
        _franchise("PIT", "Pittsburgh", "Steelers", Division.AFC_NORTH),
        # AFC SOUTH
        _franchise("HOU", "Houston", "Texans", Division.AFC_SOUTH, is_dome=True),
        _franchise("IND", "Indianapolis", "Colts", Division.AFC_SOUTH, is_dome=True),
        _franchise("JAX", "Jacksonville", "Jaguars", Division.AFC_SOUTH),
        _franchise("TEN", "Tennessee", "Titans", Division.AFC_SOUTH),
        # AFC WEST
        _franchise("DEN", "Denver", "Broncos", Division.AFC_WEST),
        _franchise("KC", "Kansas City", "Chiefs", Division.AFC_WEST),
        _franchise("LV", "Las Vegas", "Raiders", Division.AFC_WEST, is_dome=True),
        _franchise("LAC", "Los Angeles", "Chargers", Division.AFC_WEST, is_dome=True),
        # NFC EAST
        _franchise("DAL", "Dallas", "Cowboys", Division.NFC_EAST, is_dome=True),
        _franchise("NYG", "New York", "Giants", Division.NFC_EAST),
        _franchise("PHI", "Philadelphia", "Eagles", Division.NFC_EAST),
        _franchise("WAS", "Washington", "Commanders", Division.NFC_EAST),
        # NFC NORTH
        _franchise("CHI", "Chicago", "Bears", Division.NFC_NORTH),
        _franchise("DET", "Detroit", "Lions", Division.NFC_NORTH, is_dome=True),
        _franchise("GB", "Green Bay", "Packers", Division.NFC_NORTH),
        _franchise("MIN", "Minnesota", "Vikings", Division.NFC_NORTH, is_dome=True),
        # NFC SOUTH
        _franchise("ATL", "Atlanta", "Falcons", Division.NFC_SOUTH, is_dome=True),
        _franchise("CAR", "Carolina", "Panthers", Division.NFC_SOUTH),
        _franchise("NO", "New Orleans", "Saints", Division.NFC_SOUTH, is_dome=True),
        _franchise("TB", "Tampa Bay", "Buccaneers", Division.NFC_SOUTH),
        # NFC WEST
        _franchise("ARI", "Arizona", "Cardinals", Division.NFC_WEST, is_dome=True),
        _franchise("LAR", "Los Angeles", "Rams", Division.NFC_WEST, is_dome=True),
        _franchise("SF", "San Francisco", "49ers", Division.NFC_WEST),
        _franchise("SEA", "Seattle", "Seahawks", Division.NFC_WEST),
    ]
}


DIVISIONS_BY_CONFERENCE: dict[Conference, list[Division]] = {
    Conference.AFC: [Division.AFC_EAST, Division.AFC_NORTH, Division.AFC_SOUTH, Division.AFC_WEST],
    Conference.NFC: [Division.NFC_EAST, Division.NFC_NORTH, Division.NFC_SOUTH, Division.NFC_WEST],
}


def get_franchises_in_division(division: Division) -> list[FranchiseData]:
    """Get all franchises in a division."""
    return [f for f in FRANCHISES.values() if f.division == division]


def get_franchise(abbreviation: str) -> Optional[FranchiseData]:
    """Look up a franchise by abbreviation (case-insensitive)."""
    return FRANCHISES.get(abbreviation.upper())

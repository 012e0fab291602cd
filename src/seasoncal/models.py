"""Data models for the season calendar generator."""

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Optional


class DayOfWeek(Enum):
    Mon = 0
    Tue = 1
    Wed = 2
    Thu = 3
    Fri = 4
    Sat = 5
    Sun = 6


class ErrorKind(Enum):
    INSUFFICIENT_TEAMS = "insufficient_teams"
    INVALID_LEG_COUNT = "invalid_leg_count"
    DUPLICATE_TEAM = "duplicate_team"
    INVALID_CAPACITY = "invalid_capacity"
    MISSING_RESOURCE = "missing_resource"
    INVALID_DATE_RANGE = "invalid_date_range"


class MatchdayKind(Enum):
    REGULAR = "regular"
    FLEX = "flex"  # reserve week; filled only when no regular Saturday follows


@dataclass(frozen=True)
class Team:
    """A team in the league. Only the id takes part in equality."""
    id: str
    name: str = field(default="", compare=False)
    active: bool = field(default=True, compare=False)

    @property
    def display_name(self) -> str:
        return self.name or self.id


@dataclass
class Match:
    """A pairing of two teams, or a bye for the home team (away is None)."""
    home_team: Optional[Team]
    away_team: Optional[Team]
    is_bye: bool
    leg: int
    round: int

    @property
    def teams(self) -> list[Team]:
        return [t for t in (self.home_team, self.away_team) if t is not None]

    def involves(self, team: Team) -> bool:
        return team in self.teams

    def opponent(self, team: Team) -> Optional[Team]:
        if team == self.home_team:
            return self.away_team
        return self.home_team


@dataclass
class Round:
    """A set of matches where each team plays at most once."""
    leg_number: int
    round_number: int
    matches: list[Match] = field(default_factory=list)

    @property
    def real_matches(self) -> list[Match]:
        return [m for m in self.matches if not m.is_bye]

    @property
    def resting_teams(self) -> list[Team]:
        return [m.home_team for m in self.matches if m.is_bye]


@dataclass
class Field:
    """A playing field, used cyclically by the calendar."""
    id: str
    name: str
    active: bool = True
    order: int = 0


@dataclass
class TimeSlot:
    """A time window on a matchday, used cyclically by the calendar."""
    id: str
    name: str
    start_time: time
    end_time: time
    order: int = 0


@dataclass
class ScheduledMatch:
    """A match bound to a field and a time slot within a matchday."""
    match: Match
    sequence_number: int
    field: Field
    time_slot: TimeSlot


@dataclass
class Matchday:
    """A dated set of matches bounded by capacity."""
    number: int
    date: date
    leg_number: int
    capacity: int
    scheduled_matches: list[ScheduledMatch] = field(default_factory=list)
    round_number: int = 0
    byes: list[Match] = field(default_factory=list)  # first matchday of a round only
    kind: MatchdayKind = MatchdayKind.REGULAR


@dataclass
class SchedulingError:
    """An expected input error: machine-readable kind plus a message."""
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.name}: {self.message}"


@dataclass
class PairingResult:
    rounds: list[Round] = field(default_factory=list)
    error: Optional[SchedulingError] = None
    summary: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CalendarResult:
    matchdays: list[Matchday] = field(default_factory=list)
    error: Optional[SchedulingError] = None
    warnings: list[str] = field(default_factory=list)
    summary: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SeasonResult:
    """Combined pairing + calendar result for one season."""
    rounds: list[Round] = field(default_factory=list)
    matchdays: list[Matchday] = field(default_factory=list)
    error: Optional[SchedulingError] = None
    warnings: list[str] = field(default_factory=list)
    summary: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

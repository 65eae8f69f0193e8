"""
Central data model definitions used across the project.

This module defines the canonical structure of TimeSlot, Section, Course,
Constraints and Routine objects so that:
- catalog loading, the routine engine and the terminal UI share the same field names
- everything handed to the engine is immutable for the duration of a search
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Tuple


# Week order used by the catalog (and by the routine grid)
DAYS: Tuple[str, ...] = ("Saturday", "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday")

MINUTES_PER_DAY = 24 * 60

# Faculty priority levels: 1 = preferred, 2 = acceptable, 3 = neutral (default)
PRIORITY_LEVELS: Tuple[int, ...] = (1, 2, 3)
DEFAULT_PRIORITY = 3


class PreconditionError(ValueError):
    """
    Raised when input handed to the engine (or read from the catalog) is malformed.

    The message always names the offending course / section / slot.
    """


class TimePreference(str, Enum):
    ANY = "any"
    EARLY = "early"
    LATE = "late"


def normalize_day(day: str) -> str:
    """
    Map 'sat', 'SATURDAY', ' Saturday ' ... to the canonical day name.
    Raises PreconditionError for anything that is not a weekday.
    """
    raw = str(day).strip().lower()
    if raw:
        for d in DAYS:
            if d.lower() == raw or d[:3].lower() == raw:
                return d
    raise PreconditionError(f"Unknown weekday: {day!r}")


def time_to_minutes(hhmm: str) -> int:
    """
    Convert 'HH:MM' to minutes since midnight.
    '24:00' is accepted (end of day). Raises ValueError for invalid formats.
    """
    parts = str(hhmm).strip().split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid time format: {hhmm!r}")
    try:
        h = int(parts[0])
        m = int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid time format: {hhmm!r}") from None
    if h == 24 and m == 0:
        return MINUTES_PER_DAY
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValueError(f"Invalid time value: {hhmm!r}")
    return h * 60 + m


def minutes_to_time(minutes: int) -> str:
    """Inverse of time_to_minutes: 510 -> '08:30'."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class TimeSlot:
    """
    One weekly time slot, half-open interval [start, end) in minutes since midnight.
    """

    day: str
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.day not in DAYS:
            raise PreconditionError(f"Unknown weekday in time slot: {self.day!r}")
        if not (0 <= self.start < self.end <= MINUTES_PER_DAY):
            raise PreconditionError(
                f"Invalid time slot on {self.day}: start={self.start} end={self.end} "
                f"(need 0 <= start < end <= {MINUTES_PER_DAY})"
            )

    @classmethod
    def from_strings(cls, day: str, start: str, end: str) -> "TimeSlot":
        try:
            start_min = time_to_minutes(start)
            end_min = time_to_minutes(end)
        except ValueError as e:
            raise PreconditionError(str(e)) from None
        return cls(day=normalize_day(day), start=start_min, end=end_min)


@dataclass(frozen=True)
class Section:
    """
    One offered section of a course. Each section owns a fixed set of weekly slots.
    """

    section_id: str
    course_code: str
    faculty_code: str
    faculty_name: str
    slots: Tuple[TimeSlot, ...]
    label: str
    room: Optional[str] = None
    credits: Optional[float] = None
    formal_code: Optional[str] = None

    def display_code(self) -> str:
        return self.formal_code or self.course_code

    def days(self) -> FrozenSet[str]:
        return frozenset(s.day for s in self.slots)


@dataclass(frozen=True)
class Course:
    """
    Represents one course of the catalog with its interchangeable sections.
    """

    code: str
    name: str
    sections: Tuple[Section, ...]
    formal_code: Optional[str] = None
    credits: Optional[float] = None

    def display_code(self) -> str:
        return self.formal_code or self.code


@dataclass(frozen=True)
class Constraints:
    """
    Per-invocation user preferences handed to the engine.

    faculty_priority may be given as a mapping; it is stored as a sorted
    tuple of (faculty_code, level) pairs so the whole object stays hashable.
    """

    excluded_days: FrozenSet[str] = frozenset()
    faculty_priority: Tuple[Tuple[str, int], ...] = ()
    time_preference: TimePreference = TimePreference.ANY
    maximize_free_days: bool = True
    _lookup: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        items = self.faculty_priority
        if isinstance(items, Mapping):
            items = items.items()
        pairs = tuple(sorted((str(k), v) for k, v in items))
        object.__setattr__(self, "faculty_priority", pairs)
        object.__setattr__(self, "excluded_days", frozenset(self.excluded_days))
        object.__setattr__(self, "_lookup", MappingProxyType(dict(pairs)))

    def priority_of(self, faculty_code: str) -> int:
        return self._lookup.get(faculty_code, DEFAULT_PRIORITY)

    def priority_map(self) -> Dict[str, int]:
        return dict(self.faculty_priority)


@dataclass(frozen=True)
class ScoreResult:
    score: int
    free_day_count: int
    match_percentage: int
    faculty_bonus_total: int


@dataclass(frozen=True)
class Routine:
    """
    One complete, conflict-free pick of exactly one section per basket course.
    """

    sections: Tuple[Section, ...]
    score: int
    free_day_count: int
    match_percentage: int
    faculty_bonus_total: int

    @classmethod
    def from_score(cls, sections: Tuple[Section, ...], result: ScoreResult) -> "Routine":
        return cls(
            sections=sections,
            score=result.score,
            free_day_count=result.free_day_count,
            match_percentage=result.match_percentage,
            faculty_bonus_total=result.faculty_bonus_total,
        )

    def total_credits(self) -> float:
        return sum(s.credits or 0 for s in self.sections)

"""
Routine generation engine.

Pipeline:
    validate basket + constraints
    -> depth-first enumeration of every conflict-free section assignment
    -> score each complete assignment
    -> stable sort by score (desc) and keep the top N

The search is exhaustive on purpose. There is no pruning on partial scores,
because the free-day term is only known once every course has a section.
Its cost is the product of the per-course section counts, which is why the
basket is capped at MAX_BASKET_SIZE courses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from routinegen.conflicts import conflicts, is_excluded
from routinegen.model import (
    DAYS,
    PRIORITY_LEVELS,
    Constraints,
    Course,
    PreconditionError,
    Routine,
    Section,
)
from routinegen.scoring import score_routine


MAX_BASKET_SIZE = 8
DEFAULT_LIMIT = 100

CancelCheck = Callable[[], bool]


class SearchCancelled(Exception):
    """
    Raised by enumerate_routines when the caller's cancel check returns True.

    Not an error: `partial` holds the routines found before the abort,
    in discovery order.
    """

    def __init__(self, partial: List[Routine]) -> None:
        super().__init__(f"Search cancelled after {len(partial)} routines")
        self.partial = partial


@dataclass(frozen=True)
class GenerationResult:
    routines: List[Routine]
    total_found: int
    cancelled: bool = False


def validate_inputs(basket: Sequence[Course], constraints: Constraints) -> None:
    """
    Fail fast on malformed input, before any search work is done.
    """
    if len(basket) > MAX_BASKET_SIZE:
        raise PreconditionError(f"Basket has {len(basket)} courses (max {MAX_BASKET_SIZE})")

    seen: set[str] = set()
    for course in basket:
        if course.code in seen:
            raise PreconditionError(f"Course {course.code!r} appears twice in the basket")
        seen.add(course.code)
        if not course.sections:
            raise PreconditionError(f"Course {course.code!r} has no sections")

    for day in constraints.excluded_days:
        if day not in DAYS:
            raise PreconditionError(f"Unknown excluded day: {day!r}")

    for faculty, level in constraints.faculty_priority:
        if level not in PRIORITY_LEVELS:
            raise PreconditionError(f"Faculty {faculty!r} has invalid priority {level!r} (expected 1, 2 or 3)")


def enumerate_routines(
    basket: Sequence[Course],
    constraints: Constraints,
    should_cancel: Optional[CancelCheck] = None,
) -> List[Routine]:
    """
    Return every conflict-free complete assignment (one section per course),
    scored, in discovery order.

    Sections are tried in catalog order. A section is skipped if it meets on
    an excluded day or clashes with a section already chosen. A course with
    no usable section simply yields nothing.
    """
    results: List[Routine] = []

    def backtrack(course_idx: int, chosen: List[Section]) -> None:
        if should_cancel is not None and should_cancel():
            raise SearchCancelled(results)

        if course_idx == len(basket):
            stats = score_routine(chosen, constraints)
            results.append(Routine.from_score(tuple(chosen), stats))
            return

        for section in basket[course_idx].sections:
            if is_excluded(section, constraints.excluded_days):
                continue
            if any(conflicts(s, section) for s in chosen):
                continue
            # each branch gets its own list (no undo step)
            backtrack(course_idx + 1, chosen + [section])

    backtrack(0, [])
    return results


def rank_routines(routines: Sequence[Routine], limit: int = DEFAULT_LIMIT) -> List[Routine]:
    """
    Best score first. sorted() is stable, so ties keep discovery order.
    """
    if limit < 0:
        raise PreconditionError(f"limit must be >= 0, got {limit}")
    return sorted(routines, key=lambda r: r.score, reverse=True)[:limit]


def generate_routines(
    basket: Sequence[Course],
    constraints: Constraints,
    limit: int = DEFAULT_LIMIT,
    should_cancel: Optional[CancelCheck] = None,
) -> GenerationResult:
    """
    Validate, enumerate and rank. On cancellation the partial results are
    ranked and returned with cancelled=True.
    """
    validate_inputs(basket, constraints)

    try:
        found = enumerate_routines(basket, constraints, should_cancel=should_cancel)
    except SearchCancelled as e:
        return GenerationResult(routines=rank_routines(e.partial, limit), total_found=len(e.partial), cancelled=True)

    return GenerationResult(routines=rank_routines(found, limit), total_found=len(found))

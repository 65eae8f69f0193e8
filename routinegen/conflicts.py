"""
Conflict detection.

Two sections clash if any of their weekly slots overlap on the same day.
Overlap rule (half-open intervals):
    max(start, other_start) < min(end, other_end)
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from routinegen.model import Constraints, Course, Section, TimeSlot


def overlaps(a: TimeSlot, b: TimeSlot) -> bool:
    # touching endpoints (a.end == b.start) is NOT an overlap
    return a.day == b.day and max(a.start, b.start) < min(a.end, b.end)


def conflicts(s1: Section, s2: Section) -> bool:
    """
    True if the two sections cannot be taken together.
    """
    for slot1 in s1.slots:
        for slot2 in s2.slots:
            if overlaps(slot1, slot2):
                return True
    return False


def is_excluded(section: Section, excluded_days: frozenset[str] | set[str]) -> bool:
    """
    True if the section meets on any excluded day.
    """
    return not section.days().isdisjoint(excluded_days)


def eligible_sections(course: Course, constraints: Constraints) -> List[Section]:
    return [s for s in course.sections if not is_excluded(s, constraints.excluded_days)]


def find_blocking_pairs(
    basket: Sequence[Course], constraints: Constraints
) -> Tuple[List[Course], List[Tuple[Course, Course]]]:
    """
    Explain why a basket may produce no routines.

    Returns:
        (courses without any eligible section, course pairs that can never coexist)

    A pair is blocking if every eligible section of the first course clashes
    with every eligible section of the second one. Pairs appear once (i<j).
    """
    eligible = [eligible_sections(c, constraints) for c in basket]
    empty = [c for c, secs in zip(basket, eligible) if not secs]

    blocking: List[Tuple[Course, Course]] = []
    for i in range(len(basket)):
        if not eligible[i]:
            continue
        for j in range(i + 1, len(basket)):
            if not eligible[j]:
                continue
            if all(conflicts(a, b) for a in eligible[i] for b in eligible[j]):
                blocking.append((basket[i], basket[j]))

    return empty, blocking

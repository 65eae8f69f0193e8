"""
Routine scoring.

A routine is rated by a simple weighted sum:

    score = 500
          + faculty bonus   (100 per level-1 section, 40 per level-2 section)
          + free days * 80  (only if free days are maximized)
          - time penalty    (distance of the average start from 08:30 / 15:00, divided by 5)

The constants are calibration values; changing them changes the ranking.
"""

from __future__ import annotations

import math
from typing import Sequence

from routinegen.model import DAYS, Constraints, ScoreResult, Section, TimePreference


BASE_SCORE = 500
FREE_DAY_BONUS = 80
FACULTY_BONUS = {1: 100, 2: 40, 3: 0}

EARLY_ANCHOR = 510  # 08:30
LATE_ANCHOR = 900  # 15:00
TIME_PENALTY_DIVISOR = 5

# Score that counts as a 100% match (display only, never used for sorting)
MATCH_SCALE = 1200


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _time_term(total_start: int, slot_count: int, preference: TimePreference) -> float:
    if slot_count == 0:
        # nothing scheduled -> no average start to judge
        return 0.0
    average_start = total_start / slot_count
    if preference == TimePreference.EARLY:
        return -(average_start - EARLY_ANCHOR) / TIME_PENALTY_DIVISOR
    if preference == TimePreference.LATE:
        return -(LATE_ANCHOR - average_start) / TIME_PENALTY_DIVISOR
    return 0.0


def match_percentage(score: int) -> int:
    return min(100, max(0, _round_half_up(score * 100 / MATCH_SCALE)))


def score_routine(sections: Sequence[Section], constraints: Constraints) -> ScoreResult:
    """
    Score one complete assignment. Pure and deterministic.
    """
    days_used: set[str] = set()
    total_start = 0
    slot_count = 0
    faculty_bonus = 0

    for sec in sections:
        # a faculty teaching several chosen sections earns the bonus each time
        faculty_bonus += FACULTY_BONUS.get(constraints.priority_of(sec.faculty_code), 0)
        for slot in sec.slots:
            days_used.add(slot.day)
            total_start += slot.start
            slot_count += 1

    free_day_count = len(DAYS) - len(days_used)
    free_day_term = free_day_count * FREE_DAY_BONUS if constraints.maximize_free_days else 0

    raw = BASE_SCORE + faculty_bonus + free_day_term + _time_term(total_start, slot_count, constraints.time_preference)
    score = _round_half_up(raw)

    return ScoreResult(
        score=score,
        free_day_count=free_day_count,
        match_percentage=match_percentage(score),
        faculty_bonus_total=faculty_bonus,
    )

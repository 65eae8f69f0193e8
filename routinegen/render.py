"""
Terminal rendering of routines (rich tables).

The weekly grid uses six fixed teaching bands; a section shows up in every
band its slot touches on that day.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from rich import box
from rich.markup import escape
from rich.table import Table

from routinegen.model import DAYS, DEFAULT_PRIORITY, Course, Routine, Section, minutes_to_time


# (start, end) in minutes since midnight
TIME_BANDS: Tuple[Tuple[int, int], ...] = (
    (510, 590),  # 08:30 - 09:50
    (591, 670),  # 09:51 - 11:10
    (671, 750),  # 11:11 - 12:30
    (751, 830),  # 12:31 - 13:50
    (831, 910),  # 13:51 - 15:10
    (911, 990),  # 15:11 - 16:30
)


def to_12h(minutes: int) -> str:
    """
    510 -> '8:30 AM', 780 -> '1:00 PM'
    """
    hrs, mins = divmod(minutes, 60)
    suffix = "PM" if hrs >= 12 else "AM"
    h12 = hrs % 12 or 12
    return f"{h12}:{mins:02d} {suffix}"


def band_label(band: Tuple[int, int]) -> str:
    return f"{to_12h(band[0])} - {to_12h(band[1])}"


def _cell_text(sections: Sequence[Section], day: str, band: Tuple[int, int]) -> str:
    lines: List[str] = []
    for sec in sections:
        if any(slot.day == day and slot.start < band[1] and slot.end > band[0] for slot in sec.slots):
            lines.append(escape(f"{sec.display_code()} Sec {sec.label} • {sec.faculty_name}"))
    return "\n".join(lines)


def grid_rows(routine: Routine) -> List[List[str]]:
    """
    One row per time band: [band label, Saturday cell, ..., Friday cell].
    """
    rows: List[List[str]] = []
    for band in TIME_BANDS:
        row = [band_label(band)]
        for day in DAYS:
            row.append(_cell_text(routine.sections, day, band))
        rows.append(row)
    return rows


def routine_grid_table(routine: Routine, title: str = "") -> Table:
    table = Table(title=title or None, box=box.SIMPLE_HEAVY, show_lines=True)
    table.add_column("12HR TIME", style="dim", no_wrap=True)
    for day in DAYS:
        table.add_column(day[:3].upper(), justify="center")
    for row in grid_rows(routine):
        table.add_row(*row)
    return table


def routine_sections_table(routine: Routine, priorities: dict[str, int] | None = None) -> Table:
    priorities = priorities or {}
    table = Table(box=box.SIMPLE)
    table.add_column("Course", style="bold cyan")
    table.add_column("Sec")
    table.add_column("Faculty")
    table.add_column("P", justify="right")
    table.add_column("Times")
    table.add_column("Room")
    for sec in routine.sections:
        times = ", ".join(
            f"{slot.day[:3]} {to_12h(slot.start)}-{to_12h(slot.end)}" for slot in sec.slots
        )
        table.add_row(
            escape(sec.display_code()),
            escape(sec.label),
            escape(f"{sec.faculty_name} ({sec.faculty_code})"),
            str(priorities.get(sec.faculty_code, DEFAULT_PRIORITY)),
            times or "-",
            escape(sec.room or "-"),
        )
    return table


def routine_summary(rank: int, routine: Routine) -> str:
    credits = routine.total_credits()
    credit_text = f" • {credits:g} credits" if credits else ""
    return (
        f"[bold]#{rank}[/] [bold orange1]{routine.match_percentage}%[/] match "
        f"(score {routine.score}) • {routine.free_day_count} free days • "
        f"faculty bonus {routine.faculty_bonus_total}{credit_text}"
    )


def course_label(course: Course) -> str:
    return escape(f"{course.display_code()} | {course.name} | {len(course.sections)} sections")


def section_line(sec: Section) -> str:
    times = ", ".join(f"{s.day[:3]} {minutes_to_time(s.start)}-{minutes_to_time(s.end)}" for s in sec.slots)
    return escape(f"Sec {sec.label} • {sec.faculty_name} ({sec.faculty_code}) • {times or 'no slots'}")

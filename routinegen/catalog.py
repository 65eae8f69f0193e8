"""
Catalog loading (JSON -> Course / Section objects).

- Reads data/processed/courses.json (or any path given explicitly)
- Accepts the portal export shape {"status": ..., "data": {"courses": [...]}}
  as well as a bare list of courses
- Every schedule entry becomes exactly ONE TimeSlot

Malformed records are not skipped: they raise PreconditionError naming the
course / section, so bad data is noticed before a search starts.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from routinegen.model import Course, PreconditionError, Section, TimeSlot


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

PACKAGE_DIR = Path(__file__).resolve().parent
PROCESSED_DIR = PACKAGE_DIR / "data" / "processed"
DEFAULT_CATALOG_PATH = PROCESSED_DIR / "courses.json"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _safe_str(x: Any) -> str:
    return "" if x is None else str(x).strip()


def _opt_float(x: Any) -> Optional[float]:
    if x is None or x == "":
        return None
    try:
        return float(x)
    except (TypeError, ValueError):
        return None


def _course_records(raw: Any) -> List[Dict[str, Any]]:
    if isinstance(raw, dict):
        data = raw.get("data")
        if isinstance(data, dict):
            raw = data.get("courses")
        else:
            raw = raw.get("courses")
    if not isinstance(raw, list):
        raise PreconditionError("Catalog does not contain a list of courses")
    return raw


# ---------------------------------------------------------------------------
# Record parsing (CORE LOGIC)
# ---------------------------------------------------------------------------


def parse_section(rec: Dict[str, Any], course_code: str, formal_code: Optional[str] = None) -> Section:
    """
    Parse one section record. The course code of the parent course wins over
    the section's own course_code field.
    """
    section_id = _safe_str(rec.get("section_id"))
    if not section_id:
        raise PreconditionError(f"Course {course_code!r}: section without section_id")

    where = f"Course {course_code!r} section {section_id!r}"

    schedule = rec.get("schedule", [])
    if not isinstance(schedule, list):
        raise PreconditionError(f"{where}: schedule is not a list")

    slots: List[TimeSlot] = []
    for entry in schedule:
        if not isinstance(entry, dict):
            raise PreconditionError(f"{where}: schedule entry is not an object")
        try:
            slots.append(
                TimeSlot.from_strings(
                    _safe_str(entry.get("day")),
                    _safe_str(entry.get("start_time")),
                    _safe_str(entry.get("end_time")),
                )
            )
        except PreconditionError as e:
            raise PreconditionError(f"{where}: {e}") from None

    return Section(
        section_id=section_id,
        course_code=course_code,
        faculty_code=_safe_str(rec.get("faculty_code")) or "TBA",
        faculty_name=_safe_str(rec.get("faculty_name")) or "TBA",
        slots=tuple(slots),
        label=_safe_str(rec.get("section_name")) or section_id,
        room=_safe_str(rec.get("room_details")) or None,
        credits=_opt_float(rec.get("credits")),
        formal_code=_safe_str(rec.get("formal_code")) or formal_code,
    )


def parse_course(rec: Dict[str, Any]) -> Course:
    if not isinstance(rec, dict):
        raise PreconditionError("Course record is not an object")

    code = _safe_str(rec.get("course_code"))
    if not code:
        raise PreconditionError("Course record without course_code")

    sections_raw = rec.get("sections")
    if not isinstance(sections_raw, list) or not sections_raw:
        raise PreconditionError(f"Course {code!r} has no sections")

    formal_code = _safe_str(rec.get("formal_code")) or None
    sections = tuple(parse_section(s, code, formal_code) for s in sections_raw)

    return Course(
        code=code,
        name=_safe_str(rec.get("course_name")) or code,
        sections=sections,
        formal_code=formal_code,
        credits=_opt_float(rec.get("credits")),
    )


def parse_catalog(raw: Any) -> List[Course]:
    """
    Turn decoded catalog JSON into Course objects (catalog order kept).
    Duplicate course codes keep the first occurrence.
    """
    out: List[Course] = []
    seen: set[str] = set()
    for rec in _course_records(raw):
        course = parse_course(rec)
        if course.code in seen:
            continue
        seen.add(course.code)
        out.append(course)
    return out


def load_catalog(path: str | Path | None = None) -> List[Course]:
    """
    Load and parse the catalog file.

    Raises FileNotFoundError if the file is missing, PreconditionError if it
    is not valid catalog JSON.
    """
    catalog_path = Path(path) if path is not None else DEFAULT_CATALOG_PATH
    try:
        raw = json.loads(catalog_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PreconditionError(f"Catalog {catalog_path} is not valid JSON: {e}") from None
    return parse_catalog(raw)


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def find_course(courses: Iterable[Course], code: str) -> Optional[Course]:
    """
    Find a course by course code or formal code (case-insensitive).
    """
    key = code.strip().upper()
    if not key:
        return None
    for c in courses:
        if c.code.upper() == key or (c.formal_code or "").upper() == key:
            return c
    return None


def search_courses(courses: Iterable[Course], text: str) -> List[Course]:
    """
    Plain substring search in course name and formal code.
    """
    query = text.strip().lower()
    if not query:
        return []
    return [c for c in courses if query in c.name.lower() or query in (c.formal_code or c.code).lower()]

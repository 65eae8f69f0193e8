"""
Unit tests for catalog loading.

Catalog contract:
- {"status": ..., "data": {"courses": [...]}} or a bare list of courses
- every schedule entry becomes one TimeSlot
- malformed records raise PreconditionError naming the course / section
"""

import json
import tempfile
import unittest
from pathlib import Path

from routinegen.catalog import find_course, load_catalog, parse_catalog, parse_course, search_courses
from routinegen.model import PreconditionError, TimeSlot


def _course_rec(code: str = "CSE110", name: str = "Programming Language I", formal: str = "CSE110") -> dict:
    return {
        "course_code": code,
        "course_name": name,
        "formal_code": formal,
        "credits": 3,
        "sections": [
            {
                "section_id": "101",
                "section_name": "01",
                "faculty_name": "Ada Lovelace",
                "faculty_code": "ADL",
                "room_details": "UB1-101",
                "credits": 3,
                "schedule": [
                    {"day": "Sunday", "start_time": "08:30", "end_time": "09:50"},
                    {"day": "Tuesday", "start_time": "08:30", "end_time": "09:50"},
                ],
            },
            {
                "section_id": "102",
                "section_name": "02",
                "faculty_name": "Alan Turing",
                "faculty_code": "ATG",
                "schedule": [{"day": "MON", "start_time": "15:11", "end_time": "16:30"}],
            },
        ],
    }


class TestParseCourse(unittest.TestCase):
    def test_normal_course(self) -> None:
        course = parse_course(_course_rec())
        self.assertEqual(course.code, "CSE110")
        self.assertEqual(course.name, "Programming Language I")
        self.assertEqual(course.credits, 3.0)
        self.assertEqual(len(course.sections), 2)

        sec = course.sections[0]
        self.assertEqual(sec.section_id, "101")
        self.assertEqual(sec.label, "01")
        self.assertEqual(sec.course_code, "CSE110")
        self.assertEqual(sec.faculty_code, "ADL")
        self.assertEqual(sec.room, "UB1-101")
        self.assertEqual(sec.display_code(), "CSE110")
        self.assertEqual(sec.slots, (TimeSlot("Sunday", 510, 590), TimeSlot("Tuesday", 510, 590)))

    def test_short_day_names_are_normalized(self) -> None:
        sec = parse_course(_course_rec()).sections[1]
        self.assertEqual(sec.slots, (TimeSlot("Monday", 911, 990),))

    def test_course_without_sections(self) -> None:
        rec = _course_rec()
        rec["sections"] = []
        with self.assertRaises(PreconditionError) as ctx:
            parse_course(rec)
        self.assertIn("CSE110", str(ctx.exception))

    def test_bad_time_names_section(self) -> None:
        rec = _course_rec()
        rec["sections"][1]["schedule"][0]["start_time"] = "25:99"
        with self.assertRaises(PreconditionError) as ctx:
            parse_course(rec)
        self.assertIn("102", str(ctx.exception))

    def test_end_before_start(self) -> None:
        rec = _course_rec()
        rec["sections"][0]["schedule"][0]["end_time"] = "08:00"
        with self.assertRaises(PreconditionError):
            parse_course(rec)

    def test_unknown_day(self) -> None:
        rec = _course_rec()
        rec["sections"][0]["schedule"][0]["day"] = "Someday"
        with self.assertRaises(PreconditionError):
            parse_course(rec)


class TestParseCatalog(unittest.TestCase):
    def test_wrapped_and_bare_list(self) -> None:
        wrapped = {"status": "success", "data": {"courses": [_course_rec()]}}
        self.assertEqual(parse_catalog(wrapped), parse_catalog([_course_rec()]))

    def test_duplicates_keep_first(self) -> None:
        courses = parse_catalog([_course_rec(name="First"), _course_rec(name="Second")])
        self.assertEqual([c.name for c in courses], ["First"])

    def test_not_a_catalog(self) -> None:
        with self.assertRaises(PreconditionError):
            parse_catalog({"status": "error"})

    def test_load_from_file(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "courses.json"
            p.write_text(json.dumps({"data": {"courses": [_course_rec()]}}), encoding="utf-8")
            courses = load_catalog(p)
            self.assertEqual(len(courses), 1)

    def test_load_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(FileNotFoundError):
                load_catalog(Path(d) / "missing.json")

    def test_load_broken_json(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "courses.json"
            p.write_text("{not json", encoding="utf-8")
            with self.assertRaises(PreconditionError):
                load_catalog(p)


class TestLookup(unittest.TestCase):
    def setUp(self) -> None:
        self.courses = parse_catalog(
            [
                _course_rec("1001", "Programming Language I", "CSE110"),
                _course_rec("1002", "Data Structures", "CSE220"),
            ]
        )

    def test_search_by_name_and_code(self) -> None:
        self.assertEqual([c.code for c in search_courses(self.courses, "data")], ["1002"])
        self.assertEqual([c.code for c in search_courses(self.courses, "cse1")], ["1001"])
        self.assertEqual(search_courses(self.courses, "   "), [])

    def test_find_course_by_code_or_formal_code(self) -> None:
        self.assertEqual(find_course(self.courses, "1002").name, "Data Structures")
        self.assertEqual(find_course(self.courses, "cse110").code, "1001")
        self.assertIsNone(find_course(self.courses, "MAT999"))


if __name__ == "__main__":
    unittest.main()

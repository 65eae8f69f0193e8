"""
Unit tests for the basket / preferences file.

Storage contract:
- Missing/invalid file -> empty basket, default preferences
- Basket codes are normalized (strip + uppercase, no duplicates, order kept)
- Saving the basket keeps the preferences and vice versa
"""

import json
import tempfile
import unittest
from pathlib import Path

from routinegen.model import Constraints, TimePreference
from routinegen.storage import load_basket_codes, load_constraints, save_basket_codes, save_constraints


class TestStorage(unittest.TestCase):
    def test_load_missing_file_returns_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "missing.json"
            self.assertEqual(load_basket_codes(p), [])
            self.assertEqual(load_constraints(p), Constraints())

    def test_corrupted_file_returns_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "selection.json"
            p.write_text("[broken", encoding="utf-8")
            self.assertEqual(load_basket_codes(p), [])
            self.assertEqual(load_constraints(p), Constraints())

    def test_basket_roundtrip_normalizes(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "selection.json"
            save_basket_codes(["cse220", " CSE110 ", "CSE220", ""], p)
            self.assertEqual(load_basket_codes(p), ["CSE220", "CSE110"])

            data = json.loads(p.read_text(encoding="utf-8"))
            self.assertEqual(data["basket"], ["CSE220", "CSE110"])

    def test_constraints_roundtrip_keeps_basket(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "selection.json"
            save_basket_codes(["CSE110"], p)
            c = Constraints(
                excluded_days=frozenset({"Friday", "Saturday"}),
                faculty_priority={"ADL": 1, "ATG": 2},
                time_preference=TimePreference.LATE,
                maximize_free_days=False,
            )
            save_constraints(c, p)
            self.assertEqual(load_constraints(p), c)
            self.assertEqual(load_basket_codes(p), ["CSE110"])

            data = json.loads(p.read_text(encoding="utf-8"))
            # stored in week order
            self.assertEqual(data["excluded_days"], ["Saturday", "Friday"])

    def test_invalid_entries_are_dropped(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "selection.json"
            p.write_text(
                json.dumps(
                    {
                        "excluded_days": ["fri", "Someday", 3],
                        "faculty_priority": {"ADL": 1, "BAD": 7, "X": "1"},
                        "time_preference": "noon",
                        "maximize_free_days": "yes",
                    }
                ),
                encoding="utf-8",
            )
            c = load_constraints(p)
            self.assertEqual(c.excluded_days, frozenset({"Friday"}))
            self.assertEqual(c.priority_map(), {"ADL": 1})
            self.assertEqual(c.time_preference, TimePreference.ANY)
            self.assertTrue(c.maximize_free_days)


if __name__ == "__main__":
    unittest.main()

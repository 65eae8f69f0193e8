"""
Persistent storage for the CLI user's basket and preferences.

This module manages the file:

    data/processed/selection.json

Schema:
    {
      "basket": ["CSE110", ...],
      "excluded_days": ["Friday", ...],
      "faculty_priority": {"ABC": 1, ...},
      "time_preference": "any" | "early" | "late",
      "maximize_free_days": true
    }

The catalog (courses.json) is replaced on every fetch; the user's own choices
live here so they survive catalog updates. The engine never reads this file;
the CLI turns it into a Constraints object.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

from routinegen.model import DAYS, PRIORITY_LEVELS, Constraints, PreconditionError, TimePreference, normalize_day


def _default_selection_path() -> Path:
    """
    Return the default path of selection.json inside the package.

    A function instead of a constant, so tests can pass their own path.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "processed" / "selection.json"


def _read(path: str | Path | None) -> Dict[str, Any]:
    selection_path = Path(path) if path is not None else _default_selection_path()
    if not selection_path.exists():
        return {}
    try:
        data = json.loads(selection_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def _write(data: Dict[str, Any], path: str | Path | None) -> None:
    selection_path = Path(path) if path is not None else _default_selection_path()
    selection_path.parent.mkdir(parents=True, exist_ok=True)
    selection_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def _normalize_codes(codes: Iterable[Any]) -> List[str]:
    # strip + uppercase, drop empties and duplicates, keep first-seen order
    out: List[str] = []
    for x in codes:
        if not isinstance(x, str):
            continue
        code = x.strip().upper()
        if code and code not in out:
            out.append(code)
    return out


def load_basket_codes(path: str | Path | None = None) -> List[str]:
    """
    Load the basket (ordered course codes). Missing or broken file -> [].
    """
    codes = _read(path).get("basket", [])
    if not isinstance(codes, list):
        return []
    return _normalize_codes(codes)


def save_basket_codes(codes: Iterable[str], path: str | Path | None = None) -> None:
    """
    Save the basket, keeping the other keys of selection.json untouched.
    """
    data = _read(path)
    data["basket"] = _normalize_codes(codes)
    _write(data, path)


def load_constraints(path: str | Path | None = None) -> Constraints:
    """
    Load preferences as Constraints. Invalid entries are dropped, so a
    hand-edited file never blocks the CLI.
    """
    data = _read(path)

    excluded: set[str] = set()
    days_raw = data.get("excluded_days", [])
    if isinstance(days_raw, list):
        for d in days_raw:
            try:
                excluded.add(normalize_day(d))
            except PreconditionError:
                continue

    priority: Dict[str, int] = {}
    prio_raw = data.get("faculty_priority", {})
    if isinstance(prio_raw, dict):
        for code, level in prio_raw.items():
            if isinstance(code, str) and code.strip() and isinstance(level, int) and level in PRIORITY_LEVELS:
                priority[code.strip()] = level

    try:
        time_pref = TimePreference(data.get("time_preference", TimePreference.ANY.value))
    except ValueError:
        time_pref = TimePreference.ANY

    free_days = data.get("maximize_free_days", True)

    return Constraints(
        excluded_days=frozenset(excluded),
        faculty_priority=priority,
        time_preference=time_pref,
        maximize_free_days=free_days if isinstance(free_days, bool) else True,
    )


def save_constraints(constraints: Constraints, path: str | Path | None = None) -> None:
    data = _read(path)
    data["excluded_days"] = [d for d in DAYS if d in constraints.excluded_days]
    data["faculty_priority"] = constraints.priority_map()
    data["time_preference"] = constraints.time_preference.value
    data["maximize_free_days"] = constraints.maximize_free_days
    _write(data, path)

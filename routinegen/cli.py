"""
CLI (Command Line Interface).

Terminal commands around the routine engine, e.g.:

    routinegen search <text>
    routinegen add <course_code>
    routinegen remove <course_code>
    routinegen basket
    routinegen prefs --exclude Friday --faculty ABC=1 --time early
    routinegen generate --limit 100 --show 3
    routinegen conflicts
    routinegen fetch <url>

Note:
- The engine lives in routinegen/engine.py and never prints
- Basket and preferences are persisted in data/processed/selection.json
"""

from __future__ import annotations

import argparse
import time
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional

import requests
from rich.console import Console

from routinegen.catalog import DEFAULT_CATALOG_PATH, find_course, load_catalog, search_courses
from routinegen.conflicts import find_blocking_pairs
from routinegen.engine import DEFAULT_LIMIT, MAX_BASKET_SIZE, CancelCheck, generate_routines
from routinegen.fetch import fetch_catalog
from routinegen.model import DAYS, PRIORITY_LEVELS, Constraints, Course, PreconditionError, TimePreference, normalize_day
from routinegen.render import course_label, routine_grid_table, routine_sections_table, routine_summary, section_line
from routinegen.storage import load_basket_codes, load_constraints, save_basket_codes, save_constraints

console = Console()


def _load_courses(catalog_path: Path) -> Optional[List[Course]]:
    """
    Load the catalog for a command. Prints a message and returns None if it
    is missing or malformed, so the command can exit with a non-zero code.
    """
    try:
        return load_catalog(catalog_path)
    except FileNotFoundError:
        console.print(f"[red]Catalog not found:[/] {catalog_path}")
        console.print("Run 'routinegen fetch <url>' first or pass --catalog PATH.")
        return None
    except PreconditionError as e:
        console.print(f"[red]Invalid catalog:[/] {e}")
        return None


def _basket_courses(codes: List[str], courses: List[Course]) -> List[Course]:
    """
    Resolve basket codes to catalog courses (basket order). Unknown codes are
    reported and skipped.
    """
    out: List[Course] = []
    for code in codes:
        c = find_course(courses, code)
        if c is None:
            console.print(f"[yellow]Warning:[/] {code} is no longer in the catalog (skipped).")
            continue
        if any(x.code == c.code for x in out):
            continue
        out.append(c)
    return out


def _deadline_check(timeout: Optional[float]) -> Optional[CancelCheck]:
    if timeout is None or timeout <= 0:
        return None
    deadline = time.monotonic() + timeout

    def check() -> bool:
        return time.monotonic() >= deadline

    return check


def _cmd_search(args: argparse.Namespace) -> int:
    """
    Search courses by substring match in course name or code.
    """
    query = (args.text or "").strip()
    if not query:
        console.print("Please provide a search text.")
        return 1

    courses = _load_courses(args.catalog)
    if courses is None:
        return 1

    matches = search_courses(courses, query)
    if not matches:
        console.print("No results.")
        return 0

    # show max 20
    for c in matches[:20]:
        console.print(course_label(c))
    if len(matches) > 20:
        console.print(f"... and {len(matches) - 20} more results")

    return 0


def _cmd_add(args: argparse.Namespace) -> int:
    """
    Add a course to the basket (max MAX_BASKET_SIZE courses).
    """
    code = (args.course_code or "").strip().upper()
    if not code:
        console.print("Please provide a course code.")
        return 1

    courses = _load_courses(args.catalog)
    if courses is None:
        return 1

    course = find_course(courses, code)
    if course is None:
        console.print(f"Unknown course: {code}")
        return 1

    basket = load_basket_codes(args.selection)
    if course.code.upper() in basket:
        console.print(f"Already in basket: {course.display_code()}")
        return 0

    if len(basket) >= MAX_BASKET_SIZE:
        console.print(f"[red]Basket is full[/] ({MAX_BASKET_SIZE} courses). Remove one first.")
        return 1

    basket.append(course.code)
    save_basket_codes(basket, args.selection)
    console.print(f"Added: {course.display_code()} (basket: {len(basket)})")
    return 0


def _cmd_remove(args: argparse.Namespace) -> int:
    code = (args.course_code or "").strip().upper()
    if not code:
        console.print("Please provide a course code.")
        return 1

    basket = load_basket_codes(args.selection)

    # allow removing by formal code too, if the catalog is available
    if code not in basket and args.catalog.exists():
        try:
            course = find_course(load_catalog(args.catalog), code)
        except PreconditionError:
            course = None
        if course is not None:
            code = course.code.upper()

    if code not in basket:
        console.print(f"Not in basket: {code}")
        return 0

    basket.remove(code)
    save_basket_codes(basket, args.selection)
    console.print(f"Removed: {code} (basket: {len(basket)})")
    return 0


def _cmd_basket(args: argparse.Namespace) -> int:
    codes = load_basket_codes(args.selection)
    if not codes:
        console.print("Basket is empty.")
        return 0

    courses = _load_courses(args.catalog)
    if courses is None:
        return 1

    for course in _basket_courses(codes, courses):
        console.print(f"[bold cyan]{course_label(course)}[/]")
        if args.sections:
            for sec in course.sections:
                console.print(f"    {section_line(sec)}")
    return 0


def _parse_faculty_assignment(text: str) -> tuple[str, int]:
    code, sep, level = text.partition("=")
    code = code.strip()
    if not sep or not code:
        raise PreconditionError(f"Expected CODE=LEVEL, got {text!r}")
    try:
        lvl = int(level)
    except ValueError:
        raise PreconditionError(f"Invalid priority level in {text!r}") from None
    if lvl not in PRIORITY_LEVELS:
        raise PreconditionError(f"Priority level must be 1, 2 or 3, got {lvl}")
    return code, lvl


def _print_constraints(constraints: Constraints) -> None:
    excluded = [d for d in DAYS if d in constraints.excluded_days]
    console.print(f"Excluded days : {', '.join(excluded) if excluded else '-'}")
    console.print(f"Time priority : {constraints.time_preference.value}")
    console.print(f"Free days     : {'maximized' if constraints.maximize_free_days else 'ignored'}")
    if constraints.faculty_priority:
        prios = ", ".join(f"{k}=P{v}" for k, v in constraints.faculty_priority)
        console.print(f"Faculty       : {prios}")
    else:
        console.print("Faculty       : all P3 (neutral)")


def _cmd_prefs(args: argparse.Namespace) -> int:
    """
    Show preferences; update them first if any option was given.
    """
    constraints = load_constraints(args.selection)

    try:
        excluded = set(constraints.excluded_days)
        for d in args.exclude or []:
            excluded.add(normalize_day(d))
        for d in args.include or []:
            excluded.discard(normalize_day(d))

        priority: Dict[str, int] = constraints.priority_map()
        for item in args.faculty or []:
            code, lvl = _parse_faculty_assignment(item)
            if lvl == 3:
                # neutral is the default, no need to store it
                priority.pop(code, None)
            else:
                priority[code] = lvl
    except PreconditionError as e:
        console.print(f"[red]{e}[/]")
        return 1

    updated = replace(constraints, excluded_days=frozenset(excluded), faculty_priority=priority)
    if args.time is not None:
        updated = replace(updated, time_preference=TimePreference(args.time))
    if args.free_days is not None:
        updated = replace(updated, maximize_free_days=args.free_days == "on")

    if updated != constraints:
        save_constraints(updated, args.selection)
        console.print("Preferences saved.")

    _print_constraints(updated)
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    """
    Run the engine on the basket and print the best routines.
    """
    codes = load_basket_codes(args.selection)
    if not codes:
        console.print("Basket is empty. Add courses with 'routinegen add <course_code>'.")
        return 1

    courses = _load_courses(args.catalog)
    if courses is None:
        return 1

    basket = _basket_courses(codes, courses)
    if not basket:
        console.print("None of the basket courses exist in the catalog.")
        return 1

    constraints = load_constraints(args.selection)

    try:
        with console.status("Computing routines..."):
            result = generate_routines(
                basket, constraints, limit=args.limit, should_cancel=_deadline_check(args.timeout)
            )
    except PreconditionError as e:
        console.print(f"[red]Cannot generate routines:[/] {e}")
        return 1

    if result.cancelled:
        console.print(f"[yellow]Search stopped after {args.timeout}s[/] (partial results).")

    if not result.routines:
        console.print("No non-clashing routine found. Try 'routinegen conflicts'.")
        return 0

    console.print(f"Found {result.total_found} routines, showing top {min(args.show, len(result.routines))}.")
    for rank, routine in enumerate(result.routines[: args.show], start=1):
        console.print()
        console.print(routine_summary(rank, routine))
        console.print(routine_grid_table(routine))
        console.print(routine_sections_table(routine, constraints.priority_map()))

    return 0


def _cmd_conflicts(args: argparse.Namespace) -> int:
    """
    Explain which basket courses can never be scheduled together.
    """
    codes = load_basket_codes(args.selection)
    if not codes:
        console.print("Basket is empty.")
        return 0

    courses = _load_courses(args.catalog)
    if courses is None:
        return 1

    basket = _basket_courses(codes, courses)
    empty, blocking = find_blocking_pairs(basket, load_constraints(args.selection))

    if not empty and not blocking:
        console.print("No blocking conflicts found.")
        return 0

    for c in empty:
        console.print(f"- {c.display_code()} has no section outside the excluded days")
    for a, b in blocking:
        console.print(f"- {a.display_code()}  <->  {b.display_code()}: every section pair clashes")

    return 0


def _cmd_fetch(args: argparse.Namespace) -> int:
    url = (args.url or "").strip()
    if not url:
        console.print("Please provide the catalog URL.")
        return 1
    try:
        fetch_catalog(url, out_path=args.catalog, timeout=args.timeout)
    except requests.RequestException as e:
        console.print(f"[red]Download failed:[/] {e}")
        return 1
    except (ValueError, PreconditionError) as e:
        console.print(f"[red]Invalid catalog:[/] {e}")
        return 1
    return 0


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a whole number, got {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="routinegen", description="Clash-free class routine generator")
    parser.add_argument("--catalog", type=Path, default=DEFAULT_CATALOG_PATH, help="Catalog JSON path")
    parser.add_argument("--selection", type=Path, default=None, help="Basket/preferences JSON path")
    sub = parser.add_subparsers(dest="command", required=True)

    p_search = sub.add_parser("search", help="Search for courses")
    p_search.add_argument("text", type=str, help="Search text")

    p_add = sub.add_parser("add", help="Add course to the basket")
    p_add.add_argument("course_code", type=str, help="Course code (e.g. CSE110)")

    p_remove = sub.add_parser("remove", help="Remove course from the basket")
    p_remove.add_argument("course_code", type=str, help="Course code (e.g. CSE110)")

    p_basket = sub.add_parser("basket", help="Show the basket")
    p_basket.add_argument("--sections", action="store_true", help="List every section")

    p_prefs = sub.add_parser("prefs", help="Show or change preferences")
    p_prefs.add_argument("--exclude", action="append", metavar="DAY", help="Exclude a day (repeatable)")
    p_prefs.add_argument("--include", action="append", metavar="DAY", help="Allow an excluded day again")
    p_prefs.add_argument("--faculty", action="append", metavar="CODE=LEVEL", help="Faculty priority 1-3")
    p_prefs.add_argument("--time", choices=[t.value for t in TimePreference], help="Time-of-day priority")
    p_prefs.add_argument("--free-days", choices=["on", "off"], help="Prioritize free days")

    p_gen = sub.add_parser("generate", help="Generate ranked routines")
    p_gen.add_argument("--limit", type=_positive_int, default=DEFAULT_LIMIT, help="Keep the best N routines")
    p_gen.add_argument("--show", type=_positive_int, default=3, help="Print the top K routines")
    p_gen.add_argument("--timeout", type=float, default=None, help="Stop searching after SECONDS")

    sub.add_parser("conflicts", help="Explain clashes that block the basket")

    p_fetch = sub.add_parser("fetch", help="Download the catalog JSON")
    p_fetch.add_argument("url", type=str, help="Catalog URL")
    p_fetch.add_argument("--timeout", type=float, default=30, help="HTTP timeout in seconds")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    handlers = {
        "search": _cmd_search,
        "add": _cmd_add,
        "remove": _cmd_remove,
        "basket": _cmd_basket,
        "prefs": _cmd_prefs,
        "generate": _cmd_generate,
        "conflicts": _cmd_conflicts,
        "fetch": _cmd_fetch,
    }
    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(2)
    raise SystemExit(handler(args))

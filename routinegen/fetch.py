from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

import requests

from routinegen.catalog import DEFAULT_CATALOG_PATH, parse_catalog


# ---------------------------------------------------------------------------
# Core logic
# ---------------------------------------------------------------------------


def _download_json(url: str, timeout: float) -> Any:
    """
    GET the catalog and decode it. HTTP errors raise requests.HTTPError.
    """
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp.json()


def fetch_catalog(url: str, out_path: str | Path | None = None, timeout: float = 30) -> int:
    """
    Download the course catalog, make sure it parses, and store it as
    data/processed/courses.json. Returns the number of courses.

    The existing file is only replaced once the new catalog is known to be valid.
    """
    out = Path(out_path) if out_path is not None else DEFAULT_CATALOG_PATH

    print(f"FETCH {url}")
    raw = _download_json(url, timeout)

    # raises PreconditionError on malformed data
    courses = parse_catalog(raw)

    out.parent.mkdir(parents=True, exist_ok=True)
    # write next to the target, then swap it in
    tmp = out.with_name(out.name + ".tmp")
    try:
        tmp.write_text(json.dumps(raw, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(out)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
    print(f"Saved {len(courses)} courses to {out}")
    return len(courses)


# ---------------------------------------------------------------------------
# CLI entry
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="routinegen.fetch", description="Download the course catalog (JSON)")
    p.add_argument("url", type=str, help="Catalog URL (e.g. https://example.edu/courses.json)")
    p.add_argument("--out", type=Path, default=DEFAULT_CATALOG_PATH, help="Where to store the catalog")
    p.add_argument("--timeout", type=float, default=30, help="HTTP timeout in seconds")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    fetch_catalog(args.url.strip(), out_path=args.out, timeout=args.timeout)


if __name__ == "__main__":
    main()

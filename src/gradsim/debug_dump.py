from __future__ import annotations

import argparse
import re
from pathlib import Path
from typing import List, Optional, Pattern, Set

from .paste_import import find_course_code, find_credit_token, guess_course_name
from .pdf_rows import CELL_GAP, extract_rows


def parse_pages_arg(p: Optional[str]) -> Optional[Set[int]]:
    """Page spec such as "1-2,4" -> {1, 2, 4}; unparsable chunks are ignored."""
    pages: Set[int] = set()
    for chunk in (p or "").split(","):
        lo, _, hi = chunk.strip().partition("-")
        try:
            a = int(lo)
            b = int(hi) if hi else a
        except ValueError:
            continue
        pages.update(range(min(a, b), max(a, b) + 1))
    return pages or None


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(
        prog="gradsim-pdf-dump",
        description="Show the cells a transcript PDF yields and what the row parser reads from them",
    )
    ap.add_argument("pdf", help="Path to PDF")
    ap.add_argument("--pages", help="Pages to include, e.g. 1-2,4", default=None)
    ap.add_argument("--grep", help="Regex to filter rows", default=None)
    ap.add_argument("--cell-gap", type=float, default=CELL_GAP, help="Gap (pt) that starts a new cell")
    args = ap.parse_args(argv)

    path = Path(args.pdf)
    if not path.exists():
        print("File not found:", path)
        return

    rx: Optional[Pattern[str]] = re.compile(args.grep, re.I) if args.grep else None

    for r in extract_rows(path, pages=parse_pages_arg(args.pages)):
        cells = r.cells(args.cell_gap)
        joined = " | ".join(cells)
        if rx and not rx.search(joined):
            continue
        print(f"[page {r.page} y={r.y:.1f}] {joined}")
        for tok in r.toks:
            print(f"   - {tok.text!r} @ x0={tok.x0:.1f}..{tok.x1:.1f} y={tok.y0:.1f}")
        code = find_course_code(cells)
        credit = find_credit_token(cells)
        if code and credit:
            name = guess_course_name(cells, credit.idx)
            print(f"   => {code} / {name or code} / {credit.credits:g} credits (cell {credit.idx})")
        else:
            print(f"   => skipped (code={code!r}, credits={credit.credits if credit else None!r})")
        print("-" * 60)


if __name__ == "__main__":
    main()

"""Rebuild table rows from a transcript PDF saved out of the portal.

pdfplumber gives positioned words. Words are grouped into rows by their
vertical position, and a row is cut into cells wherever the horizontal gap
between neighbouring words is wider than ``cell_gap``. Each row is returned
as a tab-joined line so it can go through the pasted-table parser unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import pdfplumber

logger = logging.getLogger(__name__)

ROW_Y_TOL = 3.2
CELL_GAP = 6.0


@dataclass
class Tok:
    text: str
    x0: float
    x1: float
    y0: float
    y1: float
    page: int


@dataclass
class Row:
    page: int
    y: float
    toks: list[Tok]

    def cells(self, cell_gap: float = CELL_GAP) -> list[str]:
        cells: list[list[str]] = []
        prev: Tok | None = None
        for t in self.toks:
            if prev is None or t.x0 - prev.x1 > cell_gap:
                cells.append([t.text])
            else:
                cells[-1].append(t.text)
            prev = t
        return [" ".join(parts) for parts in cells]

    def line(self, cell_gap: float = CELL_GAP) -> str:
        return "\t".join(self.cells(cell_gap))


def _to_float(v: object, default: float = 0.0) -> float:
    try:
        return float(v)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def group_words_into_rows(words: Sequence[dict], page: int, y_tol: float = ROW_Y_TOL) -> list[Row]:  # type: ignore[type-arg]
    rows: list[Row] = []
    cur: Row | None = None
    for w in sorted(words, key=lambda w: (_to_float(w.get("top")), _to_float(w.get("x0")))):
        text = str(w.get("text") or "").strip()
        if not text:
            continue
        top = _to_float(w.get("top"))
        x0 = _to_float(w.get("x0"))
        tok = Tok(text, x0, _to_float(w.get("x1"), x0), top, _to_float(w.get("bottom"), top + 8.0), page)
        if cur is None or abs(top - cur.y) > y_tol:
            if cur is not None:
                cur.toks.sort(key=lambda t: t.x0)
                rows.append(cur)
            cur = Row(page, top, [tok])
        else:
            cur.toks.append(tok)
    if cur is not None:
        cur.toks.sort(key=lambda t: t.x0)
        rows.append(cur)
    return rows


def extract_rows(path: Path, pages: set[int] | None = None, y_tol: float = ROW_Y_TOL) -> list[Row]:
    rows: list[Row] = []
    with pdfplumber.open(path) as pdf:
        for pidx, page in enumerate(pdf.pages, start=1):
            if pages and pidx not in pages:
                continue
            words = page.extract_words() or []
            rows.extend(group_words_into_rows(words, pidx, y_tol=y_tol))
    logger.debug("extracted %d rows from %s", len(rows), path)
    return rows


def rows_to_text(rows: Sequence[Row], cell_gap: float = CELL_GAP) -> str:
    return "\n".join(r.line(cell_gap) for r in rows)


def pdf_to_text(path: Path, cell_gap: float = CELL_GAP) -> str:
    return rows_to_text(extract_rows(path), cell_gap)

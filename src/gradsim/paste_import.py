"""Course rows recovered from a transcript table pasted out of the web portal.

Pasted rows have no fixed schema. Each non-blank line is split into cells
(tabs when present, otherwise runs of two or more spaces), then a course code,
a credit value and a course name are picked out of the cells heuristically.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from .classify import classify
from .models import Course, normalize_code
from .requirements import TrackSpec

logger = logging.getLogger(__name__)

# ---------- Regexes ----------
# BS105a, HSS109a, GC101
CODE_TOKEN_PAT = re.compile(r"^[A-Za-z]{1,6}\d{2,4}[A-Za-z]?$", re.ASCII)
CODE_SEARCH_PAT = re.compile(r"[A-Za-z]{1,6}\d{2,4}[A-Za-z]?", re.ASCII)

GRADE_TOKEN_PAT = re.compile(
    r"(?i)^(S|U|P|NP|A\+|A0|A-|B\+|B0|B-|C\+|C0|C-|D\+|D0|D-|F)$"
)
NUMBER_PAT = re.compile(r"\d+(?:\.\d+)?", re.ASCII)
PLAIN_NUMBER_PAT = re.compile(r"^\d+(\.\d+)?$", re.ASCII)
MULTI_SPACE_PAT = re.compile(r"\s{2,}")

MIN_CREDITS = 0.5
MAX_CREDITS = 6.0

# Category/status labels that show up as cells but are never a course title
NAME_STOP_WORDS = {
    "기초",
    "심화",
    "교과",
    "전공",
    "필수",
    "선택",
    "인문사회",
    "기초과학",
    "기초공학",
    "영어",
    "글로벌커뮤니케이션",
    "쓰기·읽기 중점",
    "미래소양강좌",
}


@dataclass
class CreditToken:
    idx: int
    credits: float


@dataclass
class PasteImport:
    courses: list[Course] = field(default_factory=list)
    parsed: int = 0
    added: int = 0
    skipped: int = 0


def _normalize_text(s: str) -> str:
    return s.replace("\xa0", " ").replace("\u3000", " ")


def _grade_text(s: str) -> str:
    # dashes are only folded for the grade check; names keep them
    return s.strip().replace("\u2013", "-").replace("\u2014", "-").replace("\u2212", "-")


def iter_lines(text: str) -> Iterator[str]:
    for raw in _normalize_text(text or "").replace("\r", "").split("\n"):
        line = raw.strip()
        if line:
            yield line


def split_cells(line: str) -> list[str]:
    parts = line.split("\t") if "\t" in line else MULTI_SPACE_PAT.split(line)
    return [p.strip() for p in parts if p.strip()]


def find_course_code(cells: list[str]) -> str | None:
    for c in cells:
        if CODE_TOKEN_PAT.fullmatch(c.strip()):
            return c.strip()
    for c in cells:
        m = CODE_SEARCH_PAT.search(c)
        if m:
            return m.group(0)
    return None


def normalize_number(x: object) -> float | None:
    s = ("" if x is None else str(x)).replace(",", ".", 1).strip()
    m = NUMBER_PAT.search(s)
    return float(m.group(0)) if m else None


def _plausible_credits(cells: list[str]) -> Iterator[CreditToken]:
    for i, c in enumerate(cells):
        v = normalize_number(c)
        if v is None or v < MIN_CREDITS or v > MAX_CREDITS:
            continue
        yield CreditToken(i, v)


def credit_before_grade(cells: list[str]) -> CreditToken | None:
    """First plausible credit number whose next cell is a letter grade."""
    for tok in _plausible_credits(cells):
        nxt = _grade_text(cells[tok.idx + 1]) if tok.idx + 1 < len(cells) else ""
        if GRADE_TOKEN_PAT.fullmatch(nxt):
            return tok
    return None


def credit_last_plausible(cells: list[str]) -> CreditToken | None:
    # may pick up a GPA column, only used when no grade follows any number
    best = None
    for tok in _plausible_credits(cells):
        best = tok
    return best


CREDIT_STRATEGIES: tuple[tuple[str, Callable[[list[str]], CreditToken | None]], ...] = (
    ("grade-adjacent", credit_before_grade),
    ("last-plausible", credit_last_plausible),
)


def find_credit_token(cells: list[str]) -> CreditToken | None:
    for _label, strategy in CREDIT_STRATEGIES:
        tok = strategy(cells)
        if tok is not None:
            return tok
    return None


def guess_course_name(cells: list[str], credit_idx: int | None = None) -> str:
    """Longest cell before the credit column that is not a number, code or category label."""
    end = len(cells) if credit_idx is None else min(len(cells), credit_idx)
    best = ""
    for c in cells[:end]:
        t = c.strip()
        if not t or t in NAME_STOP_WORDS:
            continue
        if PLAIN_NUMBER_PAT.fullmatch(t) or CODE_TOKEN_PAT.fullmatch(t):
            continue
        if len(t) > len(best):
            best = t
    return best


def parse_pasted_table(
    text: str, known_codes: Iterable[str] = (), track: TrackSpec | None = None
) -> PasteImport:
    """Recognize course rows in ``text``.

    ``known_codes`` are the codes already held; a row whose code matches one of
    them (or a row added earlier in the same paste) is skipped. New courses are
    returned in the order their lines appear.
    """
    seen = {normalize_code(c) for c in known_codes}
    result = PasteImport()

    for line in iter_lines(text):
        result.parsed += 1
        cells = split_cells(line)
        code = find_course_code(cells)
        tok = find_credit_token(cells)

        if not code or tok is None or tok.credits <= 0:
            logger.debug("skipped unparsable line: %r", line)
            result.skipped += 1
            continue

        if normalize_code(code) in seen:
            logger.debug("skipped duplicate %s", code)
            result.skipped += 1
            continue

        name = guess_course_name(cells, tok.idx)
        result.courses.append(
            Course(code=code, name=name or code, credits=tok.credits, bucket=classify(code, name, track))
        )
        seen.add(normalize_code(code))
        result.added += 1

    return result

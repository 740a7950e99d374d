"""Bucket suggestion for a course from its code, name and the active track.

Strategies run in a fixed order and the first one that returns a bucket
wins: explicit code identity, then the track's code prefixes, then keywords
in the course name. Anything left over lands in ``adv-other``.
"""

from __future__ import annotations

from collections.abc import Callable

from .models import Bucket, normalize_code
from .requirements import TrackSpec

# ---------- Known codes per family ----------
MATH_CODES = {"BS102A", "BS101", "BS201A", "BS203", "BS202"}
PHYSICS_CODES = {"BS103A", "BS104A", "BS105A", "BS106A"}
CHEM_CODES = {"BS118", "BS113", "BS119", "CHEM206"}
BIO_CODES = {"BS114", "BS115", "BS116", "BS117"}
SCIENCE_CODES = PHYSICS_CODES | CHEM_CODES | BIO_CODES

ENG_CORE_CODES = {"BE101A", "BE202", "BE201"}
ENG_SELECT_CODES = {"BE203", "BE204", "BE205", "BE206"}

ARTSPE_CODES = {"PE1", "PE2"}

# ---------- Name keywords ----------
INTERN_KEYWORDS = ("인턴", "intern")
UGRP_KEYWORD = "UGRP"

Strategy = Callable[[str, str, TrackSpec | None], Bucket | None]


def by_code_family(code: str, name: str, track: TrackSpec | None) -> Bucket | None:
    up = normalize_code(code)
    # listed science codes without the BS prefix (CHEM206) count as science too
    if up.startswith("BS") or up in SCIENCE_CODES:
        if up in MATH_CODES:
            return Bucket.BASIC_MATH
        if up in PHYSICS_CODES:
            return Bucket.BASIC_SCIENCE_PHYSICS
        if up in CHEM_CODES:
            return Bucket.BASIC_SCIENCE_CHEM
        if up in BIO_CODES:
            return Bucket.BASIC_SCIENCE_BIO
        # unknown science code: physics is the family default
        return Bucket.BASIC_SCIENCE_PHYSICS
    if up.startswith("BE"):
        if up in ENG_CORE_CODES:
            return Bucket.BASIC_ENG_CORE
        if up in ENG_SELECT_CODES:
            return Bucket.BASIC_ENG_SELECT
        # family default
        return Bucket.BASIC_ENG_SELECT
    if up.startswith("HSS"):
        return Bucket.BASIC_HSS
    if up.startswith("ENG_"):
        return Bucket.BASIC_ENGLISH
    if up.startswith("ART_") or up in ARTSPE_CODES:
        return Bucket.BASIC_ARTSPE
    if up.startswith("UGRP"):
        return Bucket.ADV_UGRP
    if up.startswith("INT"):
        return Bucket.ADV_INTERN
    return None


def by_track_prefix(code: str, name: str, track: TrackSpec | None) -> Bucket | None:
    if track is None:
        return None
    up = normalize_code(code)
    if any(px and up.startswith(px) for px in track.prefixes):
        return Bucket.ADV_TRACK
    return None


def by_name_keyword(code: str, name: str, track: TrackSpec | None) -> Bucket | None:
    nm = (name or "").strip()
    if any(kw in nm.lower() for kw in INTERN_KEYWORDS):
        return Bucket.ADV_INTERN
    if UGRP_KEYWORD in nm.upper():
        return Bucket.ADV_UGRP
    return None


STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("code-family", by_code_family),
    ("track-prefix", by_track_prefix),
    ("name-keyword", by_name_keyword),
)

DEFAULT_BUCKET = Bucket.ADV_OTHER


def suggest_strategy(
    code: str | None, name: str | None = "", track: TrackSpec | None = None
) -> tuple[Bucket, str]:
    """Return the suggested bucket and the name of the strategy that chose it."""
    for label, strategy in STRATEGIES:
        bucket = strategy(code or "", name or "", track)
        if bucket is not None:
            return bucket, label
    return DEFAULT_BUCKET, "default"


def classify(code: str | None, name: str | None = "", track: TrackSpec | None = None) -> Bucket:
    return suggest_strategy(code, name, track)[0]

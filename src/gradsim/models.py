from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


class Bucket(Enum):
    BASIC_MATH = "basic-math"
    BASIC_SCIENCE_PHYSICS = "basic-science-physics"
    BASIC_SCIENCE_CHEM = "basic-science-chem"
    BASIC_SCIENCE_BIO = "basic-science-bio"
    BASIC_ENG_CORE = "basic-eng-core"
    BASIC_ENG_SELECT = "basic-eng-select"
    BASIC_HSS = "basic-hss"
    BASIC_ENGLISH = "basic-english"
    BASIC_ARTSPE = "basic-artspe"
    ADV_TRACK = "adv-track"
    ADV_NONTRACK = "adv-nontrack"
    ADV_UGRP = "adv-ugrp"
    ADV_INTERN = "adv-intern"
    ADV_OTHER = "adv-other"

    @property
    def label(self) -> str:
        return BUCKET_LABELS[self]

    @property
    def is_basic(self) -> bool:
        return self.value.startswith("basic-")

    @property
    def is_advanced(self) -> bool:
        return self.value.startswith("adv-")

    @classmethod
    def parse(cls, value: object) -> Bucket | None:
        """Return the bucket for ``value`` (a Bucket or its id), or None if unknown."""
        if isinstance(value, Bucket):
            return value
        try:
            return cls(str(value).strip())
        except ValueError:
            return None


BUCKET_LABELS: dict[Bucket, str] = {
    Bucket.BASIC_MATH: "기초 · 수학",
    Bucket.BASIC_SCIENCE_PHYSICS: "기초 · 과학(물리)",
    Bucket.BASIC_SCIENCE_CHEM: "기초 · 과학(화학)",
    Bucket.BASIC_SCIENCE_BIO: "기초 · 과학(생명)",
    Bucket.BASIC_ENG_CORE: "기초 · 공학(컴퓨터공학)",
    Bucket.BASIC_ENG_SELECT: "기초 · 공학선택",
    Bucket.BASIC_HSS: "기초 · 인문사회(쓰기·읽기·말하기)",
    Bucket.BASIC_ENGLISH: "기초 · 영어",
    Bucket.BASIC_ARTSPE: "기초 · 예체능(2020만)",
    Bucket.ADV_TRACK: "심화 · 트랙(전공)",
    Bucket.ADV_NONTRACK: "심화 · 비트랙/융합",
    Bucket.ADV_UGRP: "심화 · UGRP",
    Bucket.ADV_INTERN: "심화 · 인턴십",
    Bucket.ADV_OTHER: "심화 · 기타",
}

SCIENCE_BUCKETS = (
    Bucket.BASIC_SCIENCE_PHYSICS,
    Bucket.BASIC_SCIENCE_CHEM,
    Bucket.BASIC_SCIENCE_BIO,
)


class TrackType(Enum):
    MAJOR = "major"
    MINOR = "minor"

    @classmethod
    def parse(cls, value: object, default: TrackType | None = None) -> TrackType | None:
        if isinstance(value, TrackType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return default


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Course:
    code: str
    name: str
    credits: float
    bucket: Bucket
    id: str = field(default_factory=new_id)

    @property
    def key(self) -> str:
        return normalize_code(self.code)


@dataclass(frozen=True)
class CatalogEntry:
    code: str
    name: str
    credits: float


class CourseIndex:
    """Read-only lookups over a course list, keyed by normalized code."""

    def __init__(self, courses: Iterable[Course]) -> None:
        self._courses = tuple(courses)
        self._codes = {c.key for c in self._courses}

    def __len__(self) -> int:
        return len(self._courses)

    def has(self, code: str) -> bool:
        return normalize_code(code) in self._codes

    def has_all(self, codes: Iterable[str]) -> bool:
        return all(self.has(c) for c in codes)

    def has_any(self, codes: Iterable[str]) -> bool:
        return any(self.has(c) for c in codes)

    def missing(self, codes: Iterable[str]) -> list[str]:
        return [c for c in codes if not self.has(c)]

    def credits_for(self, codes: Iterable[str]) -> float:
        wanted = {normalize_code(c) for c in codes}
        return sum(c.credits for c in self._courses if c.key in wanted)

    def bucket_credits(self, *buckets: Bucket) -> float:
        return sum(c.credits for c in self._courses if c.bucket in buckets)

    def total_credits(self) -> float:
        return sum(c.credits for c in self._courses)

    def basic_credits(self) -> float:
        return sum(c.credits for c in self._courses if c.bucket.is_basic)

    def advanced_credits(self) -> float:
        return sum(c.credits for c in self._courses if c.bucket.is_advanced)

    def bucket_totals(self) -> dict[Bucket, float]:
        totals: dict[Bucket, float] = {b: 0 for b in Bucket}
        for c in self._courses:
            totals[c.bucket] += c.credits
        return totals

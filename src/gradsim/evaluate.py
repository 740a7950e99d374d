"""Graduation requirement evaluation.

``evaluate`` is a pure function of the course list, the cohort and track
specifications and the declared track type. Every clause result carries the
numbers it was decided on ("have X / need Y") next to its boolean, and the
overall verdict is the strict AND of all of them.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import asdict, dataclass, field
from typing import Any

from .models import SCIENCE_BUCKETS, Bucket, Course, CourseIndex, TrackType
from .requirements import CohortSpec, CreditArea, TheoryLab, TrackSpec


@dataclass
class TotalsResult:
    total: float
    basic: float
    advanced: float
    total_min: float
    basic_min: float
    advanced_min: float
    total_ok: bool
    basic_ok: bool
    advanced_ok: bool


@dataclass
class MathResult:
    credits: float
    need: float
    required_all: list[str]
    missing: list[str]
    all_ok: bool
    group_credits: float
    group_need: float
    group_ok: bool
    ok: bool


@dataclass
class SubAreaResult:
    credits: float
    theory_all_ok: bool
    theory_any_ok: bool
    lab_ok: bool
    ok: bool


@dataclass
class ScienceResult:
    total: float
    need: float
    total_ok: bool
    physics: SubAreaResult
    chem: SubAreaResult
    bio: SubAreaResult
    adds: list[str]
    adds_ok: bool
    ok: bool


@dataclass
class AreaResult:
    credits: float
    need: float
    credits_ok: bool
    required_all: list[str]
    missing: list[str]
    required_ok: bool
    any_of: list[str] | None
    any_ok: bool | None
    ok: bool


@dataclass
class FloorResult:
    credits: float
    need: float
    ok: bool


@dataclass
class ExtraTrackResult:
    must_all: list[str]
    missing: list[str]
    must_all_ok: bool
    must_one: list[str] | None
    must_one_ok: bool
    ok: bool


@dataclass
class Report:
    cohort_id: str
    track_id: str
    track_type: str
    totals: TotalsResult
    math: MathResult
    science: ScienceResult
    eng_core: AreaResult
    eng_select: AreaResult
    hss: AreaResult
    english: AreaResult
    arts_pe: AreaResult | None
    track: FloorResult
    non_track: FloorResult
    ugrp: FloorResult
    intern: FloorResult
    extra_track: ExtraTrackResult | None
    bucket_totals: dict[str, float] = field(default_factory=dict)

    def clauses(self) -> Iterator[tuple[str, bool]]:
        """Every boolean the overall verdict depends on, by clause name."""
        yield "totals.total", self.totals.total_ok
        yield "totals.basic", self.totals.basic_ok
        yield "totals.advanced", self.totals.advanced_ok
        yield "math.required", self.math.all_ok
        yield "math.elective", self.math.group_ok
        yield "science", self.science.ok
        yield "eng_core", self.eng_core.ok
        yield "eng_select", self.eng_select.ok
        yield "hss", self.hss.ok
        yield "english", self.english.ok
        yield "arts_pe", self.arts_pe.ok if self.arts_pe is not None else True
        yield "advanced.track", self.track.ok
        yield "advanced.non_track", self.non_track.ok
        yield "advanced.ugrp", self.ugrp.ok
        yield "advanced.intern", self.intern.ok
        yield "extra_track", self.extra_track.ok if self.extra_track is not None else True

    @property
    def satisfied(self) -> bool:
        return all(ok for _name, ok in self.clauses())

    def unmet(self) -> list[str]:
        return [name for name, ok in self.clauses() if not ok]

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["satisfied"] = self.satisfied
        return d


def _sub_area(area: TheoryLab, index: CourseIndex, bucket: Bucket) -> SubAreaResult:
    return SubAreaResult(
        credits=index.bucket_credits(bucket),
        theory_all_ok=area.theory_all_ok(index),
        theory_any_ok=area.theory_any_ok(index),
        lab_ok=area.lab_ok(index),
        ok=area.check(index),
    )


def _area(area: CreditArea, index: CourseIndex, bucket: Bucket) -> AreaResult:
    credits = index.bucket_credits(bucket)
    credits_ok = credits >= area.min_credits
    required_ok = area.required.check(index)
    any_ok = area.any_of.check(index) if area.any_of is not None else None
    return AreaResult(
        credits=credits,
        need=area.min_credits,
        credits_ok=credits_ok,
        required_all=list(area.required.codes),
        missing=area.required.missing(index),
        required_ok=required_ok,
        any_of=area.any_of.labels if area.any_of is not None else None,
        any_ok=any_ok,
        ok=credits_ok and required_ok and any_ok is not False,
    )


def _floor(index: CourseIndex, bucket: Bucket, need: float) -> FloorResult:
    credits = index.bucket_credits(bucket)
    return FloorResult(credits, need, credits >= need)


def evaluate(
    courses: Iterable[Course],
    cohort: CohortSpec,
    track: TrackSpec,
    track_type: TrackType = TrackType.MAJOR,
) -> Report:
    index = CourseIndex(courses)

    total = index.total_credits()
    basic = index.basic_credits()
    advanced = index.advanced_credits()
    t = cohort.totals
    totals = TotalsResult(
        total=total,
        basic=basic,
        advanced=advanced,
        total_min=t.total_min,
        basic_min=t.basic_min,
        advanced_min=t.advanced_min,
        total_ok=total >= t.total_min,
        basic_ok=basic >= t.basic_min,
        advanced_ok=advanced >= t.advanced_min,
    )

    m = cohort.math
    math_all_ok = m.required.check(index)
    group_credits = m.elective.credits(index)
    group_ok = m.elective.check(index)
    math = MathResult(
        credits=index.bucket_credits(Bucket.BASIC_MATH),
        need=m.min_credits,
        required_all=list(m.required.codes),
        missing=m.required.missing(index),
        all_ok=math_all_ok,
        group_credits=group_credits,
        group_need=m.elective.min_credits,
        group_ok=group_ok,
        ok=math_all_ok and group_ok,
    )

    s = cohort.science
    physics = _sub_area(s.physics, index, Bucket.BASIC_SCIENCE_PHYSICS)
    chem = _sub_area(s.chem, index, Bucket.BASIC_SCIENCE_CHEM)
    bio = _sub_area(s.bio, index, Bucket.BASIC_SCIENCE_BIO)
    sci_total = index.bucket_credits(*SCIENCE_BUCKETS)
    adds_ok = track.science_adds.check(index)
    science = ScienceResult(
        total=sci_total,
        need=s.min_credits,
        total_ok=sci_total >= s.min_credits,
        physics=physics,
        chem=chem,
        bio=bio,
        adds=list(track.science_adds.codes),
        adds_ok=adds_ok,
        ok=sci_total >= s.min_credits and physics.ok and chem.ok and bio.ok and adds_ok,
    )

    extra_track = None
    rule = track.extra_rule(track_type)
    if rule is not None:
        must_all_ok = rule.must_all.check(index)
        must_one_ok = rule.must_one.check(index) if rule.must_one is not None else True
        extra_track = ExtraTrackResult(
            must_all=list(rule.must_all.codes),
            missing=rule.must_all.missing(index),
            must_all_ok=must_all_ok,
            must_one=rule.must_one.labels if rule.must_one is not None else None,
            must_one_ok=must_one_ok,
            ok=must_all_ok and must_one_ok,
        )

    adv = cohort.advanced
    return Report(
        cohort_id=cohort.id,
        track_id=track.id,
        track_type=track_type.value,
        totals=totals,
        math=math,
        science=science,
        eng_core=_area(cohort.eng_core, index, Bucket.BASIC_ENG_CORE),
        eng_select=_area(cohort.eng_select, index, Bucket.BASIC_ENG_SELECT),
        hss=_area(cohort.hss, index, Bucket.BASIC_HSS),
        english=_area(cohort.english, index, Bucket.BASIC_ENGLISH),
        arts_pe=_area(cohort.arts_pe, index, Bucket.BASIC_ARTSPE) if cohort.arts_pe else None,
        track=_floor(index, Bucket.ADV_TRACK, adv.track_min),
        non_track=_floor(index, Bucket.ADV_NONTRACK, adv.non_track_min),
        ugrp=_floor(index, Bucket.ADV_UGRP, adv.ugrp_min),
        intern=_floor(index, Bucket.ADV_INTERN, adv.intern_min),
        extra_track=extra_track,
        bucket_totals={b.value: v for b, v in index.bucket_totals().items()},
    )

"""Requirement specification: cohorts, tracks and the clause types they are built from.

The specification is read once from JSON and kept as frozen dataclasses.
Every clause is one of a closed set of variants, each with a single
``check`` rule:

- ``AllOf``        every listed code is held
- ``AnyOf``        at least one option is held; an option may be a compound
                   group such as ``BE205+BE206`` that needs all its parts
- ``CreditsFrom``  credits held among the listed codes reach a minimum
- ``TheoryLab``    (all theory OR any alternate theory) AND any lab
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import RequirementDataError
from .models import CourseIndex, TrackType, normalize_code

logger = logging.getLogger(__name__)

COMPOUND_SEP = "+"


def split_compound(option: str) -> tuple[str, ...]:
    return tuple(p.strip() for p in option.split(COMPOUND_SEP) if p.strip())


def _codes(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


@dataclass(frozen=True)
class AllOf:
    codes: tuple[str, ...] = ()

    def check(self, index: CourseIndex) -> bool:
        return index.has_all(self.codes)

    def missing(self, index: CourseIndex) -> list[str]:
        return index.missing(self.codes)


@dataclass(frozen=True)
class AnyOf:
    options: tuple[tuple[str, ...], ...] = ()

    @classmethod
    def of(cls, values: Iterable[str]) -> AnyOf:
        return cls(tuple(split_compound(v) for v in values if split_compound(v)))

    @property
    def labels(self) -> list[str]:
        return [COMPOUND_SEP.join(opt) for opt in self.options]

    @staticmethod
    def option_held(index: CourseIndex, option: tuple[str, ...]) -> bool:
        # A single course entered under the compound code also counts.
        if len(option) > 1 and index.has(COMPOUND_SEP.join(normalize_code(p) for p in option)):
            return True
        return index.has_all(option)

    def check(self, index: CourseIndex) -> bool:
        return any(self.option_held(index, opt) for opt in self.options)


@dataclass(frozen=True)
class CreditsFrom:
    codes: tuple[str, ...] = ()
    min_credits: float = 0

    def credits(self, index: CourseIndex) -> float:
        return index.credits_for(self.codes)

    def check(self, index: CourseIndex) -> bool:
        return self.credits(index) >= self.min_credits


@dataclass(frozen=True)
class TheoryLab:
    theory_all: tuple[str, ...] | None = None
    theory_any: tuple[str, ...] = ()
    lab_any: tuple[str, ...] = ()

    def theory_all_ok(self, index: CourseIndex) -> bool:
        return self.theory_all is not None and index.has_all(self.theory_all)

    def theory_any_ok(self, index: CourseIndex) -> bool:
        return index.has_any(self.theory_any)

    def lab_ok(self, index: CourseIndex) -> bool:
        return index.has_any(self.lab_any)

    def check(self, index: CourseIndex) -> bool:
        theory = self.theory_all_ok(index) or self.theory_any_ok(index)
        return theory and self.lab_ok(index)


@dataclass(frozen=True)
class Totals:
    total_min: float
    basic_min: float
    advanced_min: float


@dataclass(frozen=True)
class MathSpec:
    min_credits: float
    required: AllOf
    elective: CreditsFrom


@dataclass(frozen=True)
class ScienceSpec:
    min_credits: float
    physics: TheoryLab
    chem: TheoryLab
    bio: TheoryLab


@dataclass(frozen=True)
class CreditArea:
    """A bucket credit floor with optional mandatory and choose-one clauses."""

    min_credits: float
    required: AllOf = AllOf()
    any_of: AnyOf | None = None


@dataclass(frozen=True)
class AdvancedSpec:
    track_min: float
    non_track_min: float
    ugrp_min: float
    intern_min: float


@dataclass(frozen=True)
class ExtraChecklist:
    must_all: AllOf
    must_one: AnyOf | None = None


@dataclass(frozen=True)
class CohortSpec:
    id: str
    label: str
    totals: Totals
    math: MathSpec
    science: ScienceSpec
    eng_core: CreditArea
    eng_select: CreditArea
    hss: CreditArea
    english: CreditArea
    arts_pe: CreditArea | None
    advanced: AdvancedSpec


@dataclass(frozen=True)
class TrackSpec:
    id: str
    label: str
    prefixes: tuple[str, ...] = ()
    science_adds: AllOf = AllOf()
    extra_rules: Mapping[TrackType, ExtraChecklist] = field(default_factory=dict, hash=False)

    def extra_rule(self, track_type: TrackType) -> ExtraChecklist | None:
        return self.extra_rules.get(track_type)


@dataclass(frozen=True)
class RequirementSpec:
    cohorts: tuple[CohortSpec, ...]
    tracks: tuple[TrackSpec, ...]

    def cohort(self, cohort_id: str | None) -> CohortSpec:
        """Cohort by id; unknown ids fall back to the first cohort."""
        if not self.cohorts:
            raise RequirementDataError("requirement specification has no cohorts")
        for c in self.cohorts:
            if c.id == cohort_id:
                return c
        return self.cohorts[0]

    def track(self, track_id: str | None) -> TrackSpec:
        """Track by id; unknown ids fall back to the first track."""
        if not self.tracks:
            raise RequirementDataError("requirement specification has no tracks")
        for t in self.tracks:
            if t.id == track_id:
                return t
        return self.tracks[0]

    def has_cohort(self, cohort_id: str) -> bool:
        return any(c.id == cohort_id for c in self.cohorts)

    def has_track(self, track_id: str) -> bool:
        return any(t.id == track_id for t in self.tracks)

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> RequirementSpec:
        try:
            extra = doc.get("trackExtraRules") or {}
            cohorts = tuple(_cohort_from_dict(c) for c in doc["cohorts"])
            tracks = tuple(_track_from_dict(t, extra.get(t["id"]) or {}) for t in doc["tracks"])
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise RequirementDataError(f"invalid requirement specification: {exc!r}") from exc
        if not cohorts or not tracks:
            raise RequirementDataError("requirement specification needs at least one cohort and track")
        return cls(cohorts, tracks)


def _credit_area(d: Mapping[str, Any], choose_one: bool = False) -> CreditArea:
    # an absent choose-one list is never satisfied
    any_of = AnyOf() if choose_one else None
    for key in ("chooseAnyOf", "mustIncludeAnyOf"):
        if key in d:
            any_of = AnyOf.of(_codes(d[key]))
    return CreditArea(
        min_credits=float(d["minCredits"]),
        required=AllOf(_codes(d.get("requiredAll"))),
        any_of=any_of,
    )


def _theory_lab(d: Mapping[str, Any]) -> TheoryLab:
    return TheoryLab(
        theory_all=_codes(d["theory"]) if "theory" in d else None,
        theory_any=_codes(d.get("theoryAnyOf")),
        lab_any=_codes(d.get("lab")),
    )


def _cohort_from_dict(d: Mapping[str, Any]) -> CohortSpec:
    basic = d["basic"]
    totals = d["totals"]
    adv = d["advanced"]
    math = basic["math"]
    sci = basic["science"]
    areas = sci["areas"]
    arts = basic.get("artsPE")
    return CohortSpec(
        id=str(d["id"]),
        label=str(d.get("label", d["id"])),
        totals=Totals(
            float(totals["totalMin"]), float(totals["basicMin"]), float(totals["advancedMin"])
        ),
        math=MathSpec(
            min_credits=float(math.get("minCredits", 0)),
            required=AllOf(_codes(math.get("requiredAll"))),
            elective=CreditsFrom(
                _codes(math["chooseCreditsFrom"]["codes"]),
                float(math["chooseCreditsFrom"]["minCredits"]),
            ),
        ),
        science=ScienceSpec(
            min_credits=float(sci["minCredits"]),
            physics=_theory_lab(areas["physics"]),
            chem=_theory_lab(areas["chem"]),
            bio=_theory_lab(areas["bio"]),
        ),
        eng_core=_credit_area(basic["engCore"]),
        eng_select=_credit_area(basic["engSelect"], choose_one=True),
        hss=_credit_area(basic["hssWriting"], choose_one=True),
        english=_credit_area(basic["english"]),
        arts_pe=_credit_area(arts) if arts else None,
        advanced=AdvancedSpec(
            float(adv.get("trackMin", 0)),
            float(adv.get("nonTrackMin", 0)),
            float(adv.get("ugrpMin", 0)),
            float(adv.get("internMin", 0)),
        ),
    )


def _track_from_dict(d: Mapping[str, Any], extra: Mapping[str, Any]) -> TrackSpec:
    rules: dict[TrackType, ExtraChecklist] = {}
    for key, rule in extra.items():
        track_type = TrackType.parse(key)
        if track_type is None or not rule:
            logger.warning("ignoring extra rule %r for track %s", key, d["id"])
            continue
        one = rule.get("mustTakeOneOf")
        rules[track_type] = ExtraChecklist(
            must_all=AllOf(_codes(rule.get("mustTakeAll"))),
            must_one=AnyOf.of(_codes(one)) if one else None,
        )
    adds = (d.get("basicScienceAdds") or {}).get("mustTake")
    return TrackSpec(
        id=str(d["id"]),
        label=str(d.get("label", d["id"])),
        prefixes=tuple(normalize_code(p) for p in _codes(d.get("prefixes")) if p.strip()),
        science_adds=AllOf(_codes(adds)),
        extra_rules=rules,
    )


def load_requirements(path: Path) -> RequirementSpec:
    try:
        with path.open(encoding="utf-8") as f:
            doc = json.load(f)
    except FileNotFoundError as exc:
        raise RequirementDataError(f"requirement specification not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise RequirementDataError(f"cannot read requirement specification {path}: {exc}") from exc
    if not isinstance(doc, dict):
        raise RequirementDataError(f"requirement specification {path} is not a JSON object")
    spec = RequirementSpec.from_dict(doc)
    logger.debug("loaded %d cohorts and %d tracks from %s", len(spec.cohorts), len(spec.tracks), path)
    return spec

"""The planner's single mutable store and the operations that change it.

Classification, evaluation and paste parsing are pure; this module is the
thin layer that applies their results to a ``PlannerState`` and moves the
state in and out of its JSON snapshot form.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .catalog import Catalog
from .classify import classify
from .config import DEFAULT_COHORT_ID, DEFAULT_TRACK_ID, DEFAULT_TRACK_TYPE
from .errors import CourseNotFoundError
from .evaluate import Report, evaluate
from .models import Bucket, Course, TrackType, new_id, normalize_code
from .paste_import import PasteImport, parse_pasted_table
from .requirements import COMPOUND_SEP, RequirementSpec, TrackSpec

logger = logging.getLogger(__name__)

DEFAULT_CODE = "NO_CODE"
DEFAULT_NAME = "(unnamed)"
DEFAULT_CREDITS = 3.0


@dataclass
class PlannerState:
    cohort_id: str = DEFAULT_COHORT_ID
    track_id: str = DEFAULT_TRACK_ID
    track_type: TrackType = TrackType(DEFAULT_TRACK_TYPE)
    courses: list[Course] = field(default_factory=list)


def _track(state: PlannerState, spec: RequirementSpec | None) -> TrackSpec | None:
    return spec.track(state.track_id) if spec is not None else None


def _find(state: PlannerState, course_id: str) -> Course:
    for c in state.courses:
        if c.id == course_id:
            return c
    raise CourseNotFoundError(course_id)


def _credits(v: object) -> float:
    if isinstance(v, bool):
        return 0.0
    try:
        n = float(v)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    # NaN fails the comparison and lands on 0 as well
    return n if n >= 0 else 0.0


def normalize_compound(code: str) -> str:
    """``be205 + be206`` -> ``BE205+BE206``; plain codes are only trimmed."""
    code = code.strip()
    if COMPOUND_SEP not in code:
        return code
    return COMPOUND_SEP.join(normalize_code(p) for p in code.split(COMPOUND_SEP) if p.strip())


# ---------- Course list operations ----------


def add_course(
    state: PlannerState,
    spec: RequirementSpec | None,
    code: str,
    name: str = "",
    credits: float | None = None,
    bucket: Bucket | str | None = None,
    catalog: Catalog | None = None,
) -> Course:
    """Prepend a manually entered course.

    Missing name and credits are taken from the catalog when it knows the code.
    An empty bucket is filled in by the classifier.
    """
    code = normalize_compound(code or "") or DEFAULT_CODE
    entry = catalog.find(code) if catalog is not None else None
    if not (name or "").strip() and entry is not None:
        name = entry.name
    if credits is None:
        credits = entry.credits if entry is not None else DEFAULT_CREDITS
    name = (name or "").strip() or DEFAULT_NAME

    chosen = Bucket.parse(bucket) if bucket else None
    if chosen is None:
        chosen = classify(code, name, _track(state, spec))

    course = Course(code=code, name=name, credits=_credits(credits), bucket=chosen)
    state.courses.insert(0, course)
    logger.debug("added %s (%s) to %s", course.code, course.id, chosen.value)
    return course


def remove_course(state: PlannerState, course_id: str) -> Course:
    course = _find(state, course_id)
    state.courses = [c for c in state.courses if c.id != course_id]
    return course


def reclassify_course(state: PlannerState, course_id: str, bucket: Bucket) -> Course:
    course = _find(state, course_id)
    course.bucket = bucket
    return course


def change_cohort(state: PlannerState, cohort_id: str) -> None:
    state.cohort_id = cohort_id


def change_track(state: PlannerState, spec: RequirementSpec, track_id: str) -> list[Course]:
    """Switch tracks and move catch-all courses that now match the track prefixes.

    Only courses still in ``adv-other`` are re-suggested; any other bucket is
    treated as the user's choice. Returns the courses that moved.
    """
    state.track_id = track_id
    track = spec.track(track_id)
    moved = []
    for c in state.courses:
        if c.bucket is not Bucket.ADV_OTHER:
            continue
        if classify(c.code, c.name, track) is Bucket.ADV_TRACK:
            c.bucket = Bucket.ADV_TRACK
            moved.append(c)
    return moved


def change_track_type(state: PlannerState, track_type: TrackType) -> None:
    state.track_type = track_type


def import_pasted_text(state: PlannerState, spec: RequirementSpec | None, text: str) -> PasteImport:
    result = parse_pasted_table(text, (c.code for c in state.courses), _track(state, spec))
    for course in result.courses:
        state.courses.insert(0, course)
    logger.info(
        "paste import: %d lines, %d added, %d skipped", result.parsed, result.added, result.skipped
    )
    return result


def reset(state: PlannerState) -> None:
    fresh = PlannerState()
    state.cohort_id = fresh.cohort_id
    state.track_id = fresh.track_id
    state.track_type = fresh.track_type
    state.courses = fresh.courses


def evaluate_state(state: PlannerState, spec: RequirementSpec) -> Report:
    return evaluate(
        state.courses, spec.cohort(state.cohort_id), spec.track(state.track_id), state.track_type
    )


# ---------- Snapshots ----------


def export_snapshot(state: PlannerState) -> dict[str, Any]:
    return {
        "cohortId": state.cohort_id,
        "trackId": state.track_id,
        "trackType": state.track_type.value,
        "courses": [
            {"id": c.id, "code": c.code, "name": c.name, "credits": c.credits, "bucket": c.bucket.value}
            for c in state.courses
        ],
    }


def _course_from_dict(d: Mapping[str, Any], track: TrackSpec | None) -> Course:
    code = str(d.get("code") or DEFAULT_CODE)
    name = str(d.get("name") or DEFAULT_NAME)
    bucket = Bucket.parse(d["bucket"]) if d.get("bucket") else None
    if bucket is None:
        bucket = classify(code, name, track)
    return Course(
        code=code,
        name=name,
        credits=_credits(d.get("credits")),
        bucket=bucket,
        id=str(d.get("id") or new_id()),
    )


def parse_snapshot(
    document: str | bytes | Mapping[str, Any],
    spec: RequirementSpec | None = None,
    base: PlannerState | None = None,
) -> tuple[PlannerState | None, str | None]:
    """Build a state from an exported snapshot.

    Returns ``(state, None)`` on success and ``(None, reason)`` when the
    document is not a snapshot. Fields missing from the document keep the
    values of ``base`` (defaults when not given).
    """
    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except (ValueError, RecursionError) as exc:
            return None, f"not valid JSON: {exc}"
    if not isinstance(document, Mapping):
        return None, "snapshot must be a JSON object"
    raw_courses = document.get("courses")
    if not isinstance(raw_courses, list):
        return None, "snapshot has no course list"

    base = base or PlannerState()
    state = PlannerState(
        cohort_id=str(document.get("cohortId") or base.cohort_id),
        track_id=str(document.get("trackId") or base.track_id),
        track_type=TrackType.parse(document.get("trackType"), base.track_type) or base.track_type,
    )
    track = _track(state, spec)
    for item in raw_courses:
        if not isinstance(item, Mapping):
            logger.warning("ignoring non-object course entry in snapshot: %r", item)
            continue
        state.courses.append(_course_from_dict(item, track))
    return state, None


# ---------- Persistence ----------


def load_state(
    path: Path, spec: RequirementSpec | None = None
) -> tuple[PlannerState, str | None]:
    """Load the stored state; absent or unreadable state gives the defaults.

    The second element is a notice describing why stored state was ignored,
    or None.
    """
    if not path.exists():
        return PlannerState(), None
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("ignoring unreadable stored state %s: %s", path, exc)
        return PlannerState(), f"cannot read stored state: {exc}"
    state, error = parse_snapshot(raw, spec)
    if state is None:
        logger.warning("ignoring malformed stored state %s: %s", path, error)
        return PlannerState(), f"stored state ignored ({error})"
    return state, None


def save_state(state: PlannerState, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=path.name, suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(export_snapshot(state), f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise

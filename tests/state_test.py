import json

import pytest

from gradsim.errors import CourseNotFoundError
from gradsim.models import Bucket, TrackType
from gradsim.state import (
    PlannerState,
    add_course,
    change_track,
    change_track_type,
    evaluate_state,
    export_snapshot,
    import_pasted_text,
    load_state,
    parse_snapshot,
    reclassify_course,
    remove_course,
    reset,
    save_state,
)


@pytest.fixture
def state():
    return PlannerState()


def test_defaults(state):
    assert (state.cohort_id, state.track_id, state.track_type) == ("2023_2024", "EE", TrackType.MAJOR)
    assert state.courses == []


def test_add_course_prepends_and_classifies(state, spec):
    first = add_course(state, spec, "BS101", "다변수미적분학", 3)
    second = add_course(state, spec, "EC301", "전자회로", 3)
    assert state.courses == [second, first]
    assert first.bucket is Bucket.BASIC_MATH
    assert second.bucket is Bucket.ADV_TRACK
    assert first.id != second.id


def test_add_course_explicit_bucket_and_catalog_fill(state, spec, catalog):
    c = add_course(state, spec, "BS105a", bucket="adv-other", catalog=catalog)
    assert c.bucket is Bucket.ADV_OTHER
    assert c.name == "일반물리학실험Ⅰ"
    assert c.credits == 1


def test_add_course_defaults(state, spec):
    c = add_course(state, spec, "   ", "", None)
    assert (c.code, c.name, c.credits) == ("NO_CODE", "(unnamed)", 3.0)
    neg = add_course(state, spec, "XX100", "x", -2)
    assert neg.credits == 0


def test_add_compound_course(state, spec):
    c = add_course(state, spec, "be205 + be206", "창의공학설계", 3)
    assert c.code == "BE205+BE206"
    assert c.bucket is Bucket.BASIC_ENG_SELECT
    assert evaluate_state(state, spec).eng_select.any_ok is True


def test_remove_and_reclassify(state, spec):
    c = add_course(state, spec, "XX100", "Seminar", 2)
    reclassify_course(state, c.id, Bucket.ADV_NONTRACK)
    assert state.courses[0].bucket is Bucket.ADV_NONTRACK
    remove_course(state, c.id)
    assert state.courses == []
    with pytest.raises(CourseNotFoundError):
        remove_course(state, c.id)
    with pytest.raises(KeyError):
        reclassify_course(state, "missing", Bucket.ADV_OTHER)


def test_change_track_moves_only_catch_all(state, spec):
    state.track_id = "CSE"
    catch_all = add_course(state, spec, "EC301", "전자회로", 3)
    chosen = add_course(state, spec, "EC302", "신호 및 시스템", 3, bucket=Bucket.ADV_NONTRACK)
    assert catch_all.bucket is Bucket.ADV_OTHER

    moved = change_track(state, spec, "EE")
    assert moved == [catch_all]
    assert catch_all.bucket is Bucket.ADV_TRACK
    assert chosen.bucket is Bucket.ADV_NONTRACK
    assert state.track_id == "EE"


def test_change_track_type_affects_checklist(state, spec):
    state.track_id = "PHY"
    for code in ("PH301", "PH302"):
        add_course(state, spec, code, "", 3)
    assert evaluate_state(state, spec).extra_track.ok is False
    change_track_type(state, TrackType.MINOR)
    assert evaluate_state(state, spec).extra_track.ok is True


def test_import_pasted_text_dedupes_against_state(state, spec):
    add_course(state, spec, "BS101", "다변수미적분학", 3)
    res = import_pasted_text(state, spec, "bs101\t다변수미적분학\t3\tA0\nBS102a\t공학수학Ⅰ\t3\tB0\nBS201a\t공학수학Ⅱ\t3\tA-")
    assert (res.parsed, res.added, res.skipped) == (3, 2, 1)
    assert [c.code for c in state.courses] == ["BS201a", "BS102a", "BS101"]


def test_unknown_ids_fall_back_to_first(state, spec):
    state.cohort_id = "1999"
    state.track_id = "NOPE"
    report = evaluate_state(state, spec)
    assert report.cohort_id == spec.cohorts[0].id
    assert report.track_id == spec.tracks[0].id


def test_snapshot_round_trip(state, spec):
    state.track_type = TrackType.MINOR
    add_course(state, spec, "BS101", "다변수미적분학", 3)
    add_course(state, spec, "BE205", "창의공학설계Ⅰ", 1.5, bucket=Bucket.ADV_NONTRACK)
    doc = export_snapshot(state)
    assert set(doc) == {"cohortId", "trackId", "trackType", "courses"}
    assert doc["trackType"] == "minor"

    restored, error = parse_snapshot(json.dumps(doc, ensure_ascii=False), spec)
    assert error is None
    assert restored == state


@pytest.mark.parametrize("raw", ["{not json", "[1, 2]", '{"cohortId": "2020"}', '{"courses": {}}', "null"])
def test_bad_snapshot_is_an_error_value(raw, spec):
    restored, error = parse_snapshot(raw, spec)
    assert restored is None
    assert error


def test_snapshot_fills_missing_fields(spec):
    doc = {
        "trackType": "bogus",
        "courses": [
            {"code": "BS101", "credits": "3"},
            {"code": "XX1", "bucket": "not-a-bucket", "credits": "abc"},
            "junk",
            {},
        ],
    }
    restored, error = parse_snapshot(doc, spec)
    assert error is None
    assert restored.track_type is TrackType.MAJOR
    assert len(restored.courses) == 3
    first, second, third = restored.courses
    assert (first.credits, first.bucket, first.name) == (3.0, Bucket.BASIC_MATH, "(unnamed)")
    assert (second.credits, second.bucket) == (0.0, Bucket.ADV_OTHER)
    assert third.code == "NO_CODE"
    assert len({c.id for c in restored.courses}) == 3


def test_save_and_load(tmp_path, state, spec):
    path = tmp_path / "nested" / "gradsim_state_v1.json"
    add_course(state, spec, "HSS109a", "학술 글쓰기", 3)
    save_state(state, path)
    loaded, notice = load_state(path, spec)
    assert notice is None
    assert loaded == state


def test_load_absent_state(tmp_path):
    loaded, notice = load_state(tmp_path / "missing.json")
    assert loaded == PlannerState()
    assert notice is None


def test_load_corrupt_state_falls_back(tmp_path):
    path = tmp_path / "gradsim_state_v1.json"
    path.write_text("{{{", encoding="utf-8")
    loaded, notice = load_state(path)
    assert loaded == PlannerState()
    assert "ignored" in notice


def test_load_state_with_invalid_utf8(tmp_path):
    path = tmp_path / "gradsim_state_v1.json"
    path.write_bytes(b'{"courses": [], "cohortId": "\xff\xfe"}')
    loaded, notice = load_state(path)
    assert loaded == PlannerState()
    assert notice


def test_load_state_with_deep_nesting(tmp_path):
    path = tmp_path / "gradsim_state_v1.json"
    path.write_text("[" * 200000, encoding="utf-8")
    loaded, notice = load_state(path)
    assert loaded == PlannerState()
    assert "ignored" in notice


def test_reset(state, spec):
    state.cohort_id = "2020"
    add_course(state, spec, "BS101", "", 3)
    reset(state)
    assert state == PlannerState()

import pytest

from gradsim.classify import STRATEGIES, classify, suggest_strategy
from gradsim.models import Bucket


@pytest.mark.parametrize(
    "code,expected",
    [
        ("BS102A", Bucket.BASIC_MATH),
        ("bs102a", Bucket.BASIC_MATH),
        (" BS201a ", Bucket.BASIC_MATH),
        ("BS105a", Bucket.BASIC_SCIENCE_PHYSICS),
        ("BS119", Bucket.BASIC_SCIENCE_CHEM),
        ("CHEM206", Bucket.BASIC_SCIENCE_CHEM),
        ("BS117", Bucket.BASIC_SCIENCE_BIO),
        ("BS999", Bucket.BASIC_SCIENCE_PHYSICS),
        ("BE201", Bucket.BASIC_ENG_CORE),
        ("BE204", Bucket.BASIC_ENG_SELECT),
        ("BE299", Bucket.BASIC_ENG_SELECT),
        ("HSS109a", Bucket.BASIC_HSS),
        ("ENG_AE1", Bucket.BASIC_ENGLISH),
        ("ART_101", Bucket.BASIC_ARTSPE),
        ("PE2", Bucket.BASIC_ARTSPE),
        ("UGRP401", Bucket.ADV_UGRP),
        ("INT300", Bucket.ADV_INTERN),
    ],
)
def test_code_family(code, expected):
    assert classify(code, "") is expected


def test_track_prefix_depends_on_active_track(spec):
    assert classify("EC301", "전자회로", spec.track("EE")) is Bucket.ADV_TRACK
    assert classify("EC301", "전자회로", spec.track("PHY")) is Bucket.ADV_OTHER
    assert classify("PH301", "고전역학", spec.track("PHY")) is Bucket.ADV_TRACK
    assert classify("EC301", "전자회로", None) is Bucket.ADV_OTHER


def test_code_family_beats_track_prefix(spec):
    # CH prefix belongs to the CHEM track, but CHEM206 is a known science code
    assert classify("CHEM206", "", spec.track("CHEM")) is Bucket.BASIC_SCIENCE_CHEM


def test_track_prefix_beats_name_keyword(spec):
    assert classify("EC390", "Industry internship", spec.track("EE")) is Bucket.ADV_TRACK


@pytest.mark.parametrize(
    "name,expected",
    [
        ("현장실습(인턴십)", Bucket.ADV_INTERN),
        ("Summer INTERNSHIP", Bucket.ADV_INTERN),
        ("ugrp capstone", Bucket.ADV_UGRP),
        ("Modern Poetry", Bucket.ADV_OTHER),
    ],
)
def test_name_keyword_fallback(name, expected):
    assert classify("XYZ500", name) is expected


def test_total_over_odd_input(spec):
    for code, name in [("", ""), (None, None), ("+", "??"), ("12345", "3.0"), ("BS", "")]:
        bucket = classify(code, name, spec.track("EE"))
        assert isinstance(bucket, Bucket)


def test_idempotent(spec):
    track = spec.track("CSE")
    first = classify("SE301", "운영체제", track)
    assert classify("SE301", "운영체제", track) is first


def test_suggest_strategy_reports_source(spec):
    assert suggest_strategy("BS101", "", None) == (Bucket.BASIC_MATH, "code-family")
    assert suggest_strategy("EC301", "", spec.track("EE")) == (Bucket.ADV_TRACK, "track-prefix")
    assert suggest_strategy("XYZ1", "intern", None) == (Bucket.ADV_INTERN, "name-keyword")
    assert suggest_strategy("XYZ1", "", None) == (Bucket.ADV_OTHER, "default")
    assert [label for label, _fn in STRATEGIES] == ["code-family", "track-prefix", "name-keyword"]

import json

import pytest

from gradsim import config
from gradsim.catalog import Catalog, load_catalog
from gradsim.errors import RequirementDataError
from gradsim.evaluate import evaluate
from gradsim.models import CourseIndex, TrackType
from gradsim.requirements import AllOf, AnyOf, RequirementSpec, TheoryLab, load_requirements


def test_packaged_spec_shape(spec):
    assert [c.id for c in spec.cohorts] == ["2020", "2023_2024", "2025_plus"]
    ee = spec.track("EE")
    assert ee.prefixes == ("EC", "EE")
    assert ee.science_adds == AllOf(("BS104A",))
    assert ee.extra_rule(TrackType.MAJOR) is None
    phy = spec.track("PHY")
    assert phy.extra_rule(TrackType.MAJOR).must_one == AnyOf((("PH401L",), ("PH402L",)))
    assert spec.cohort("2020").arts_pe is not None
    assert spec.cohort("2025_plus").hss.required.codes == ("HSS190", "HSS191", "HSS192")


def test_compound_options_are_split():
    any_of = AnyOf.of(["BE203", "BE205 + BE206", ""])
    assert any_of.options == (("BE203",), ("BE205", "BE206"))
    assert any_of.labels == ["BE203", "BE205+BE206"]


def test_theory_lab_without_theory_list(make_course):
    area = TheoryLab(theory_all=None, theory_any=("BS115",), lab_any=("BS116",))
    index = CourseIndex([make_course("BS116", 1)])
    assert area.theory_all_ok(index) is False
    assert area.check(index) is False
    assert area.check(CourseIndex([make_course("BS116", 1), make_course("BS115")])) is True


def test_missing_file(tmp_path):
    with pytest.raises(RequirementDataError):
        load_requirements(tmp_path / "nope.json")


@pytest.mark.parametrize("doc", ["[]", "{}", '{"cohorts": [], "tracks": []}', '{"cohorts": [{"id": "x"}], "tracks": []}', "{oops"])
def test_invalid_spec(tmp_path, doc):
    path = tmp_path / "requirements.json"
    path.write_text(doc, encoding="utf-8")
    with pytest.raises(RequirementDataError):
        load_requirements(path)


def test_spec_without_cohorts_cannot_resolve():
    empty = RequirementSpec(cohorts=(), tracks=())
    with pytest.raises(RequirementDataError):
        empty.cohort("2020")


def test_unknown_extra_rule_key_ignored():
    doc = json.loads((config.DATA_DIR / "requirements.json").read_text(encoding="utf-8"))
    doc["trackExtraRules"]["PHY"]["double"] = {"mustTakeAll": ["PH301"]}
    loaded = RequirementSpec.from_dict(doc)
    assert set(loaded.track("PHY").extra_rules) == {TrackType.MAJOR, TrackType.MINOR}


def test_absent_choose_one_list_never_holds(make_course):
    doc = json.loads((config.DATA_DIR / "requirements.json").read_text(encoding="utf-8"))
    cohort = next(c for c in doc["cohorts"] if c["id"] == "2023_2024")
    del cohort["basic"]["hssWriting"]["mustIncludeAnyOf"]
    del cohort["basic"]["engSelect"]["chooseAnyOf"]
    loaded = RequirementSpec.from_dict(doc)
    courses = [make_course(f"HSS2{n:02d}") for n in range(4)] + [make_course("BE203")]
    report = evaluate(courses, loaded.cohort("2023_2024"), loaded.track("EE"))
    assert report.hss.credits_ok is True
    assert (report.hss.any_of, report.hss.any_ok, report.hss.ok) == ([], False, False)
    assert (report.eng_select.any_ok, report.eng_select.ok) == (False, False)
    # areas without a choose-one clause stay vacuous on that half
    assert report.eng_core.any_ok is None


def test_catalog_search_and_find(catalog):
    assert catalog.find("bs105A").name == "일반물리학실험Ⅰ"
    assert catalog.find("ZZ999") is None
    assert catalog.search("b") == []
    assert [e.code for e in catalog.search("일반물리학")] == ["BS103a", "BS104a", "BS105a", "BS106a"]
    assert len(catalog.search("BS", limit=10)) == 10


def test_catalog_invalid(tmp_path):
    path = tmp_path / "courses.json"
    path.write_text('{"code": "x"}', encoding="utf-8")
    with pytest.raises(RequirementDataError):
        load_catalog(path)
    with pytest.raises(RequirementDataError):
        Catalog.from_list([{"name": "no code"}])

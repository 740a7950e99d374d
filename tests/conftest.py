from __future__ import annotations

import pytest

from gradsim import config
from gradsim.catalog import load_catalog
from gradsim.classify import classify
from gradsim.models import Bucket, Course
from gradsim.requirements import load_requirements


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("GRADSIM_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("GRADSIM_REQUIREMENTS", raising=False)
    monkeypatch.delenv("GRADSIM_CATALOG", raising=False)
    return tmp_path / "home"


@pytest.fixture(scope="session")
def spec():
    return load_requirements(config.DATA_DIR / "requirements.json")


@pytest.fixture(scope="session")
def catalog():
    return load_catalog(config.DATA_DIR / "courses.json")


@pytest.fixture
def make_course(spec):
    """Build a course, classified under the EE track unless a bucket is given."""

    def _make(code: str, credits: float = 3, bucket: Bucket | None = None, name: str = "") -> Course:
        return Course(
            code=code,
            name=name or code,
            credits=credits,
            bucket=bucket or classify(code, name, spec.track("EE")),
        )

    return _make


@pytest.fixture
def graduate_courses(make_course):
    """A course list meeting every 2023_2024 / EE (major) clause except the 130 credit total."""
    basic = [
        ("BS102A", 3), ("BS101", 3), ("BS201A", 3), ("BS202", 3),
        ("BS103A", 3), ("BS104A", 3), ("BS105A", 1), ("BS106A", 1),
        ("BS113", 3), ("CHEM206", 3), ("BS118", 1),
        ("BS114", 3), ("BS116", 1),
        ("BE101A", 3), ("BE201", 3), ("BE202", 3),
        ("BE203", 3),
        ("HSS109A", 3), ("HSS201", 3), ("HSS202", 3), ("HSS203", 3),
        ("ENG_AE1", 2), ("ENG_AE2", 2),
    ]
    courses = [make_course(code, cr) for code, cr in basic]
    courses += [make_course(f"EC3{n:02d}") for n in range(1, 11)]
    courses += [make_course(code, 3, Bucket.ADV_NONTRACK) for code in ("SE301", "SE302")]
    courses += [make_course("UGRP401"), make_course("UGRP402"), make_course("INT300", 1)]
    return courses

from __future__ import annotations

import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).parent
DATA_DIR = PACKAGE_DIR / "data"

# Single storage key for the persisted planner state.
STORAGE_KEY = "gradsim_state_v1"

DEFAULT_COHORT_ID = "2023_2024"
DEFAULT_TRACK_ID = "EE"
DEFAULT_TRACK_TYPE = "major"


def _env_path(var: str) -> Path | None:
    raw = os.environ.get(var, "").strip()
    return Path(raw).expanduser() if raw else None


def state_dir() -> Path:
    return _env_path("GRADSIM_HOME") or Path.home() / ".gradsim"


def state_path() -> Path:
    return state_dir() / f"{STORAGE_KEY}.json"


def requirements_path() -> Path:
    return _env_path("GRADSIM_REQUIREMENTS") or DATA_DIR / "requirements.json"


def catalog_path() -> Path:
    return _env_path("GRADSIM_CATALOG") or DATA_DIR / "courses.json"

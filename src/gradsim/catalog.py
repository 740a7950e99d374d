from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from .errors import RequirementDataError
from .models import CatalogEntry, normalize_code

logger = logging.getLogger(__name__)

MIN_QUERY_LEN = 2


class Catalog:
    """Static course catalog: exact lookup by code and substring search."""

    def __init__(self, entries: Iterable[CatalogEntry]) -> None:
        self.entries = tuple(entries)
        self._by_code = {normalize_code(e.code): e for e in self.entries}

    def __len__(self) -> int:
        return len(self.entries)

    def find(self, code: str) -> CatalogEntry | None:
        return self._by_code.get(normalize_code(code))

    def search(self, query: str, limit: int = 10) -> list[CatalogEntry]:
        q = (query or "").strip().lower()
        if len(q) < MIN_QUERY_LEN:
            return []
        found = [e for e in self.entries if q in e.code.lower() or q in e.name.lower()]
        return found[:limit]

    @classmethod
    def from_list(cls, items: Iterable[Mapping[str, Any]]) -> Catalog:
        try:
            entries = [
                CatalogEntry(str(it["code"]), str(it.get("name", "")), float(it.get("credits", 0)))
                for it in items
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise RequirementDataError(f"invalid course catalog: {exc!r}") from exc
        return cls(entries)


def load_catalog(path: Path) -> Catalog:
    try:
        with path.open(encoding="utf-8") as f:
            doc = json.load(f)
    except FileNotFoundError as exc:
        raise RequirementDataError(f"course catalog not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise RequirementDataError(f"cannot read course catalog {path}: {exc}") from exc
    if not isinstance(doc, list):
        raise RequirementDataError(f"course catalog {path} is not a JSON array")
    catalog = Catalog.from_list(doc)
    logger.debug("loaded %d catalog courses from %s", len(catalog), path)
    return catalog

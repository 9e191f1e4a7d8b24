"""
Attraction catalog loader.

The catalog is a JSON file listing attractions with coordinates. By default the
catalog bundled with the package (`tourguide/catalog/attractions.json`) is used; a
configured path overrides it. We validate it into typed Pydantic models and hand it
out as a tuple: the catalog is shared read-only by every traveler and worker.
"""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path

from pydantic import TypeAdapter

from tourguide.core.env import resolve_project_path
from tourguide.domain.models import Attraction

logger = logging.getLogger(__name__)

_ATTRACTIONS_ADAPTER = TypeAdapter(list[Attraction])

BUNDLED_CATALOG = "attractions.json"


def _read_catalog_text(path: str | Path | None) -> tuple[str, str]:
    if path is None:
        source = resources.files("tourguide.catalog").joinpath(BUNDLED_CATALOG)
        return source.read_text(encoding="utf-8"), f"package:{BUNDLED_CATALOG}"
    resolved = resolve_project_path(path)
    return resolved.read_text(encoding="utf-8"), str(resolved)


def load_attractions(path: str | Path | None = None) -> tuple[Attraction, ...]:
    """Load and validate an attraction catalog (the bundled one when `path` is None)."""
    text, origin = _read_catalog_text(path)
    attractions = _ATTRACTIONS_ADAPTER.validate_python(json.loads(text))

    seen: set[str] = set()
    for a in attractions:
        if a.id in seen:
            raise ValueError(f"Duplicate attraction id '{a.id}' in {origin}")
        seen.add(a.id)

    logger.info("Loaded %d attractions from %s", len(attractions), origin)
    return tuple(attractions)

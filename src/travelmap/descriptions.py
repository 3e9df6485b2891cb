"""Bundled country description loading."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .models import CountryDescription

_LOGGER = logging.getLogger("travelmap.descriptions")


def load_descriptions(path: Path) -> dict[str, CountryDescription]:
    """Load descriptions keyed by country id; unusable files yield no entries."""
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except (OSError, ValueError) as exc:
        _LOGGER.warning("Country descriptions unavailable at %s: %s", path, exc)
        return {}
    if not isinstance(raw, dict):
        _LOGGER.warning("Expected mapping in %s", path)
        return {}

    descriptions: dict[str, CountryDescription] = {}
    for country_id, value in raw.items():
        if not isinstance(value, dict):
            _LOGGER.warning("Skipping description for %s: expected mapping", country_id)
            continue
        try:
            descriptions[str(country_id)] = CountryDescription.from_mapping(value)
        except ValueError as exc:
            _LOGGER.warning("Skipping description for %s: %s", country_id, exc)
    return descriptions

"""Country search grouped by continent."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

from .boundaries import CountryDirectory

OTHER_CONTINENT = "Other"

CONTINENT_ORDER = (
    "Africa",
    "Antarctica",
    "Asia",
    "Europe",
    "North America",
    "Oceania",
    "South America",
    OTHER_CONTINENT,
)


@dataclass(frozen=True, slots=True)
class CountryEntry:
    country_id: str
    name: str


@dataclass(frozen=True, slots=True)
class ContinentGroup:
    continent: str
    countries: tuple[CountryEntry, ...]


def search_countries(directory: CountryDirectory, query: str = "") -> list[ContinentGroup]:
    """Match name, id or continent case-insensitively; blank query matches all."""
    needle = query.strip().casefold()
    grouped: dict[str, list[CountryEntry]] = defaultdict(list)
    for country_id in directory.country_ids():
        name = directory.display_name(country_id)
        continent = directory.continent(country_id) or OTHER_CONTINENT
        if needle and not (
            needle in name.casefold()
            or needle in country_id.casefold()
            or needle in continent.casefold()
        ):
            continue
        grouped[continent].append(CountryEntry(country_id=country_id, name=name))

    ordered_keys = [key for key in CONTINENT_ORDER if key in grouped]
    ordered_keys.extend(sorted(key for key in grouped if key not in CONTINENT_ORDER))
    return [
        ContinentGroup(
            continent=key,
            countries=tuple(sorted(grouped[key], key=lambda entry: entry.name.casefold())),
        )
        for key in ordered_keys
    ]

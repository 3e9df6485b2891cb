"""Aggregate travel statistics."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

from .boundaries import CountryDirectory
from .models import ContinentStat, CountryStatus
from .statuses import StatusBook


@dataclass(frozen=True, slots=True)
class TravelStats:
    total_countries: int
    visited_count: int
    want_to_visit_count: int
    continent_stats: tuple[ContinentStat, ...] = ()

    @property
    def visited_percentage(self) -> float:
        if self.total_countries <= 0:
            return 0.0
        return self.visited_count / self.total_countries


def compute_stats(directory: CountryDirectory, book: StatusBook) -> TravelStats:
    return TravelStats(
        total_countries=len(directory),
        visited_count=book.count(CountryStatus.VISITED),
        want_to_visit_count=book.count(CountryStatus.WANT_TO_VISIT),
        continent_stats=continent_stats(directory, book),
    )


def continent_stats(directory: CountryDirectory, book: StatusBook) -> tuple[ContinentStat, ...]:
    """Per-continent visited share.

    Countries without a continent are left out, as are continents with
    nothing visited.
    """
    totals: dict[str, int] = defaultdict(int)
    visited: dict[str, int] = defaultdict(int)
    for country_id in directory.country_ids():
        continent = directory.continent(country_id)
        if continent is None:
            continue
        totals[continent] += 1
        if book.status(country_id) is CountryStatus.VISITED:
            visited[continent] += 1

    stats = [
        ContinentStat(name=name, total=total, visited=visited[name])
        for name, total in totals.items()
        if visited[name] > 0
    ]
    stats.sort(key=lambda stat: (-stat.percentage, stat.name))
    return tuple(stats)


def format_stats_lines(stats: TravelStats) -> list[str]:
    lines = [
        f"Countries: {stats.total_countries}",
        f"Visited or lived: {stats.visited_count}",
        f"Want to visit: {stats.want_to_visit_count}",
        f"World visited or lived: {stats.visited_percentage * 100.0:.1f}%",
    ]
    lines.extend(f"{stat.name}: {stat.percentage * 100.0:.1f}%" for stat in stats.continent_stats)
    return lines

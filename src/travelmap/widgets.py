"""Widget snapshot payloads shared between the app and its widgets."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

from .goals import goal_progress
from .models import Goal
from .statuses import StatusBook
from .stats import TravelStats
from .util import write_json

_LOGGER = logging.getLogger("travelmap.widgets")

STATS_SNAPSHOT_FILE = "widget_stats.json"
GOALS_SNAPSHOT_FILE = "widget_goals.json"


@dataclass(frozen=True, slots=True)
class ContinentStatEntry:
    name: str
    percentage: float


@dataclass(frozen=True, slots=True)
class WidgetStatsSnapshot:
    total_countries: int
    visited_count: int
    want_to_visit_count: int
    visited_percentage: float
    continent_stats: tuple[ContinentStatEntry, ...] = ()

    @classmethod
    def placeholder(cls) -> WidgetStatsSnapshot:
        return cls(
            total_countries=0,
            visited_count=0,
            want_to_visit_count=0,
            visited_percentage=0.0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalCountries": self.total_countries,
            "visitedCount": self.visited_count,
            "wantToVisitCount": self.want_to_visit_count,
            "visitedPercentage": self.visited_percentage,
            "continentStats": [
                {"name": entry.name, "percentage": entry.percentage} for entry in self.continent_stats
            ],
        }

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> WidgetStatsSnapshot:
        entries_raw = raw.get("continentStats", [])
        if not isinstance(entries_raw, list):
            raise ValueError("Expected list for 'continentStats'")
        return cls(
            total_countries=int(raw["totalCountries"]),
            visited_count=int(raw["visitedCount"]),
            want_to_visit_count=int(raw["wantToVisitCount"]),
            visited_percentage=float(raw["visitedPercentage"]),
            continent_stats=tuple(
                ContinentStatEntry(name=str(item["name"]), percentage=float(item["percentage"]))
                for item in entries_raw
            ),
        )


@dataclass(frozen=True, slots=True)
class WidgetGoalEntry:
    label: str
    progress_description: str
    is_complete: bool
    target_date: float | None = None
    custom_title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "progressDescription": self.progress_description,
            "isComplete": self.is_complete,
            "targetDate": self.target_date,
            "customTitle": self.custom_title,
        }


@dataclass(frozen=True, slots=True)
class WidgetGoalsSnapshot:
    goals: tuple[WidgetGoalEntry, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"goals": [entry.to_dict() for entry in self.goals]}

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> WidgetGoalsSnapshot:
        goals_raw = raw.get("goals", [])
        if not isinstance(goals_raw, list):
            raise ValueError("Expected list for 'goals'")
        return cls(
            goals=tuple(
                WidgetGoalEntry(
                    label=str(item["label"]),
                    progress_description=str(item["progressDescription"]),
                    is_complete=bool(item["isComplete"]),
                    target_date=float(item["targetDate"]) if item.get("targetDate") is not None else None,
                    custom_title=item.get("customTitle"),
                )
                for item in goals_raw
            )
        )


def build_stats_snapshot(stats: TravelStats) -> WidgetStatsSnapshot:
    return WidgetStatsSnapshot(
        total_countries=stats.total_countries,
        visited_count=stats.visited_count,
        want_to_visit_count=stats.want_to_visit_count,
        visited_percentage=stats.visited_percentage,
        continent_stats=tuple(
            ContinentStatEntry(name=stat.name, percentage=stat.percentage)
            for stat in stats.continent_stats
        ),
    )


def build_goals_snapshot(goals: Iterable[Goal], stats: TravelStats, book: StatusBook) -> WidgetGoalsSnapshot:
    entries: list[WidgetGoalEntry] = []
    for goal in goals:
        progress = goal_progress(goal, stats, book)
        entries.append(
            WidgetGoalEntry(
                label=goal.kind.label,
                progress_description=progress.description,
                is_complete=progress.is_complete,
                target_date=goal.target_date.timestamp() if goal.target_date else None,
                custom_title=goal.title,
            )
        )
    return WidgetGoalsSnapshot(goals=tuple(entries))


def write_widget_snapshot(path: Path, snapshot: WidgetStatsSnapshot | WidgetGoalsSnapshot) -> Path:
    write_json(path, snapshot.to_dict())
    _LOGGER.debug("Widget snapshot written to %s", path)
    return path


def read_stats_snapshot(path: Path) -> WidgetStatsSnapshot:
    """Read the stats snapshot, falling back to the placeholder."""
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = json.load(fh)
        if not isinstance(raw, dict):
            raise ValueError(f"Expected mapping in {path}")
        return WidgetStatsSnapshot.from_mapping(raw)
    except (OSError, ValueError, KeyError, TypeError, OverflowError) as exc:
        _LOGGER.debug("Using placeholder stats snapshot: %s", exc)
        return WidgetStatsSnapshot.placeholder()


def read_goals_snapshot(path: Path) -> WidgetGoalsSnapshot:
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = json.load(fh)
        if not isinstance(raw, dict):
            raise ValueError(f"Expected mapping in {path}")
        return WidgetGoalsSnapshot.from_mapping(raw)
    except (OSError, ValueError, KeyError, TypeError, OverflowError) as exc:
        _LOGGER.debug("Using empty goals snapshot: %s", exc)
        return WidgetGoalsSnapshot()

"""Travel goals, their progress and JSON store."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .models import CountryStatus, Goal
from .statuses import StatusBook
from .stats import TravelStats
from .util import write_json


@dataclass(frozen=True, slots=True)
class GoalProgress:
    description: str
    is_complete: bool


class GoalBook:
    """Goals kept newest-first by creation time."""

    def __init__(self, goals: Iterable[Goal] = ()) -> None:
        self._goals: list[Goal] = sorted(goals, key=lambda g: g.created_at, reverse=True)

    def __len__(self) -> int:
        return len(self._goals)

    @property
    def goals(self) -> tuple[Goal, ...]:
        return tuple(self._goals)

    def add(self, goal: Goal) -> None:
        self._goals.append(goal)
        self._goals.sort(key=lambda g: g.created_at, reverse=True)

    def remove(self, goal_id: str) -> bool:
        before = len(self._goals)
        self._goals = [goal for goal in self._goals if goal.id != goal_id]
        return len(self._goals) != before

    def find(self, goal_id: str) -> Goal | None:
        """Goal with this id, or the only goal whose id starts with it."""
        if not goal_id:
            return None
        for goal in self._goals:
            if goal.id == goal_id:
                return goal
        matches = [goal for goal in self._goals if goal.id.startswith(goal_id)]
        return matches[0] if len(matches) == 1 else None


def goal_progress(goal: Goal, stats: TravelStats, book: StatusBook) -> GoalProgress:
    kind = goal.kind
    if kind.countries is not None:
        current = stats.visited_count
        return GoalProgress(f"{current}/{kind.countries}", current >= kind.countries)
    if kind.percentage is not None:
        current_pct = stats.visited_percentage * 100.0
        return GoalProgress(
            f"{current_pct:.1f}%/{kind.percentage:.1f}%",
            current_pct >= kind.percentage,
        )
    ids = kind.specific_countries or ()
    visited = sum(1 for country_id in ids if book.status(country_id) is CountryStatus.VISITED)
    return GoalProgress(f"{visited}/{len(ids)}", visited >= len(ids))


def load_goal_book(path: Path) -> GoalBook:
    if not path.exists():
        return GoalBook()
    with path.open("r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, list):
        raise ValueError(f"Expected list in {path}")
    goals: list[Goal] = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValueError(f"Expected mapping at index {idx} in {path}")
        goals.append(Goal.from_mapping(item))
    return GoalBook(goals)


def save_goal_book(book: GoalBook, path: Path) -> None:
    write_json(path, [goal.to_dict() for goal in book.goals])

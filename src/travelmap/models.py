"""Domain models shared across the travel map modules."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Sequence

Point = tuple[float, float]
Ring = tuple[Point, ...]


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _optional_str(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    return _require_str(value, field_name)


def _parse_datetime(value: Any, field_name: str) -> datetime:
    raw = _require_str(value, field_name)
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp for '{field_name}': '{raw}'") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def ring_bounds(ring: Sequence[Point]) -> tuple[float, float, float, float]:
    if not ring:
        return (0.0, 0.0, 0.0, 0.0)
    xs = [p[0] for p in ring]
    ys = [p[1] for p in ring]
    return (min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True, slots=True)
class PolygonRecord:
    """One renderable country polygon in map-projected space."""

    country_id: str
    display_name: str
    exterior: Ring
    interiors: tuple[Ring, ...] = ()

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        return ring_bounds(self.exterior)


class CountryStatus(str, Enum):
    NONE = "none"
    VISITED = "visited"
    WANT_TO_VISIT = "wantToVisit"

    @property
    def title(self) -> str:
        return _STATUS_TITLES[self]

    @classmethod
    def parse(cls, raw: str) -> CountryStatus:
        """Parse a persisted or user-supplied status, migrating legacy values."""
        value = raw.strip()
        if value == "lived":
            return cls.VISITED
        for status in cls:
            if value == status.value or value.casefold() == status.name.casefold():
                return status
        if value.casefold() in {"want", "want-to-visit", "want_to_visit"}:
            return cls.WANT_TO_VISIT
        raise ValueError(f"Unknown country status '{raw}'")


_STATUS_TITLES = {
    CountryStatus.NONE: "Not set",
    CountryStatus.VISITED: "Visited or lived",
    CountryStatus.WANT_TO_VISIT: "Want to visit",
}


@dataclass(frozen=True, slots=True)
class ContinentStat:
    name: str
    total: int
    visited: int

    @property
    def percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.visited / self.total


@dataclass(frozen=True, slots=True)
class GoalKind:
    """Goal target: exactly one of count, percentage or a country list."""

    countries: int | None = None
    percentage: float | None = None
    specific_countries: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        set_fields = [
            name
            for name in ("countries", "percentage", "specific_countries")
            if getattr(self, name) is not None
        ]
        if len(set_fields) != 1:
            raise ValueError("GoalKind requires exactly one of countries/percentage/specific_countries")

    @property
    def label(self) -> str:
        if self.countries is not None:
            return f"Visit {self.countries} countries"
        if self.percentage is not None:
            return f"Reach {self.percentage:.1f}% of the world"
        return f"Visit {len(self.specific_countries or ())} specific countries"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> GoalKind:
        if "countries" in data and data["countries"] is not None:
            n = data["countries"]
            if isinstance(n, bool) or not isinstance(n, int) or n < 0:
                raise ValueError("Expected non-negative integer for 'kind.countries'")
            return cls(countries=n)
        if "percentage" in data and data["percentage"] is not None:
            p = data["percentage"]
            if isinstance(p, bool) or not isinstance(p, (int, float)):
                raise ValueError("Expected number for 'kind.percentage'")
            return cls(percentage=float(p))
        if "specificCountries" in data and data["specificCountries"] is not None:
            ids = data["specificCountries"]
            if not isinstance(ids, list):
                raise ValueError("Expected list for 'kind.specificCountries'")
            return cls(
                specific_countries=tuple(
                    _require_str(item, "kind.specificCountries[]") for item in ids
                )
            )
        raise ValueError("Invalid goal kind: expected countries, percentage or specificCountries")

    def to_dict(self) -> dict[str, Any]:
        if self.countries is not None:
            return {"countries": self.countries}
        if self.percentage is not None:
            return {"percentage": self.percentage}
        return {"specificCountries": list(self.specific_countries or ())}


@dataclass(frozen=True, slots=True)
class Goal:
    kind: GoalKind
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    title: str | None = None
    target_date: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Goal:
        kind_raw = data.get("kind")
        if not isinstance(kind_raw, Mapping):
            raise ValueError("Expected mapping for 'kind'")
        target_raw = data.get("targetDate")
        return cls(
            id=_require_str(data.get("id"), "id"),
            kind=GoalKind.from_mapping(kind_raw),
            title=_optional_str(data.get("title"), "title"),
            target_date=_parse_datetime(target_raw, "targetDate") if target_raw is not None else None,
            created_at=_parse_datetime(data.get("createdAt"), "createdAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.to_dict(),
            "title": self.title,
            "targetDate": self.target_date.isoformat() if self.target_date else None,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class CountryDescription:
    overview: str
    known_for: str
    quick_history: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CountryDescription:
        return cls(
            overview=_require_str(data.get("overview"), "overview"),
            known_for=_require_str(data.get("knownFor"), "knownFor"),
            quick_history=_require_str(data.get("quickHistory"), "quickHistory"),
        )

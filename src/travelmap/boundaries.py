"""Country boundary dataset loading and the country directory."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Sequence

from .models import PolygonRecord, Ring
from .projection import MapProjection, identity_projection

_LOGGER = logging.getLogger("travelmap.boundaries")

SENTINEL_CODE = "-99"
UNKNOWN_NAME = "Unknown"

NAME_FIELDS = ("name", "NAME", "ADMIN", "NAME_LONG")
ISO_A3_FIELDS = (
    ("ISO_A3", "iso_a3"),
    ("ADM0_A3",),
    ("SOV_A3",),
    ("GU_A3",),
    ("SU_A3",),
    ("BRK_A3",),
)
ISO_A2_FIELDS = ("ISO_A2", "iso_a2", "ISO_A2_EH")
CONTINENT_FIELDS = ("CONTINENT", "REGION_UN")

# Natural Earth reports ISO_A2 = -99 for a few sovereign states. Only these
# known cases are patched; other missing codes stay missing.
KNOWN_ALPHA2_EXCEPTIONS: Mapping[str, str] = {
    "FRA": "FR",
    "NOR": "NO",
    "KOS": "XK",
}

_REGIONAL_INDICATOR_BASE = 0x1F1E6 - ord("A")


@dataclass(frozen=True, slots=True)
class CountryDirectory:
    """Immutable id -> name/code/continent lookups built from one dataset."""

    names: Mapping[str, str] = field(default_factory=dict)
    alpha2_codes: Mapping[str, str] = field(default_factory=dict)
    continents: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("names", "alpha2_codes", "continents"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, country_id: object) -> bool:
        return country_id in self.names

    def country_ids(self) -> tuple[str, ...]:
        return tuple(self.names)

    def display_name(self, country_id: str) -> str:
        return self.names.get(country_id, country_id)

    def iso_alpha2(self, country_id: str) -> str | None:
        code = self.alpha2_codes.get(country_id) or self.alpha2_codes.get(country_id.upper())
        if code is None:
            code = KNOWN_ALPHA2_EXCEPTIONS.get(country_id.upper())
        if code is None or len(code) != 2:
            return None
        return code.upper()

    def continent(self, country_id: str) -> str | None:
        value = self.continents.get(country_id)
        return value or None

    def flag_emoji(self, country_id: str) -> str:
        """Regional-indicator flag for the country, or an empty string."""
        code = self.iso_alpha2(country_id)
        if code is None:
            return ""
        if not all("A" <= ch <= "Z" for ch in code):
            return ""
        return "".join(chr(_REGIONAL_INDICATOR_BASE + ord(ch)) for ch in code)


@dataclass(frozen=True, slots=True)
class BoundaryDataset:
    """Polygons plus directory produced by one load."""

    polygons: tuple[PolygonRecord, ...] = ()
    directory: CountryDirectory = field(default_factory=CountryDirectory)

    @classmethod
    def empty(cls) -> BoundaryDataset:
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.polygons and not len(self.directory)


def load_boundaries_file(path: Path, projection: MapProjection | None = None) -> BoundaryDataset:
    """Load a GeoJSON file; a missing or unreadable file yields an empty dataset."""
    try:
        data = path.read_bytes()
    except OSError as exc:
        _LOGGER.warning("Boundary dataset unavailable at %s: %s", path, exc)
        return BoundaryDataset.empty()
    return load_boundaries(data, projection)


def load_boundaries(data: bytes, projection: MapProjection | None = None) -> BoundaryDataset:
    """Parse GeoJSON bytes into polygon records and a country directory.

    Failure never propagates: a malformed dataset degrades to an empty
    result so the map keeps working with no countries known.
    """
    proj = projection or identity_projection()
    try:
        raw = json.loads(data)
        return _build_dataset(_iter_features(raw), proj)
    except Exception as exc:
        _LOGGER.warning("Failed parsing boundary dataset: %s", exc)
        return BoundaryDataset.empty()


def _build_dataset(features: Iterable[Mapping[str, Any]], projection: MapProjection) -> BoundaryDataset:
    polygons: list[PolygonRecord] = []
    names: dict[str, str] = {}
    codes: dict[str, str] = {}
    continents: dict[str, str] = {}

    for feature in features:
        props = normalize_properties(feature.get("properties"))
        name = extract_name(props)
        country_id = extract_country_id(props, fallback_name=name)

        names.setdefault(country_id, name)
        iso2 = extract_iso_alpha2(props)
        if iso2 is not None:
            codes.setdefault(country_id, iso2)
        continent = extract_continent(props)
        if continent is not None:
            continents.setdefault(country_id, continent)

        for exterior, interiors in _iter_polygon_rings(feature.get("geometry"), projection):
            polygons.append(
                PolygonRecord(
                    country_id=country_id,
                    display_name=name,
                    exterior=exterior,
                    interiors=interiors,
                )
            )

    _LOGGER.debug("Loaded %d polygons for %d countries", len(polygons), len(names))
    return BoundaryDataset(
        polygons=tuple(polygons),
        directory=CountryDirectory(names=names, alpha2_codes=codes, continents=continents),
    )


def normalize_properties(raw: Any) -> dict[str, str]:
    """Keep string and numeric property values, stringified."""
    if not isinstance(raw, Mapping):
        return {}
    result: dict[str, str] = {}
    for key, value in raw.items():
        if isinstance(value, bool):
            continue
        if isinstance(value, str):
            result[str(key)] = value
        elif isinstance(value, int):
            result[str(key)] = str(value)
        elif isinstance(value, float):
            result[str(key)] = str(int(value)) if value.is_integer() else str(value)
    return result


def extract_name(props: Mapping[str, str]) -> str:
    for key in NAME_FIELDS:
        value = props.get(key)
        if value is not None:
            return value
    return UNKNOWN_NAME


def extract_country_id(props: Mapping[str, str], *, fallback_name: str) -> str:
    for group in ISO_A3_FIELDS:
        for key in group:
            candidate = _valid_code(props.get(key), 3)
            if candidate is not None:
                return candidate
    generic = props.get("id")
    if generic and generic != SENTINEL_CODE:
        return generic
    if not fallback_name or fallback_name == SENTINEL_CODE:
        return UNKNOWN_NAME
    return fallback_name


def extract_iso_alpha2(props: Mapping[str, str]) -> str | None:
    for key in ISO_A2_FIELDS:
        if key in props:
            return _valid_code(props[key], 2)
    return None


def extract_continent(props: Mapping[str, str]) -> str | None:
    for key in CONTINENT_FIELDS:
        if key in props:
            value = props[key].strip()
            return value or None
    return None


def _valid_code(value: str | None, expected_len: int) -> str | None:
    if value is None or value == SENTINEL_CODE or len(value) != expected_len:
        return None
    return value


def _iter_features(raw: Any) -> Iterator[Mapping[str, Any]]:
    if not isinstance(raw, Mapping):
        raise ValueError("GeoJSON root must be an object")
    kind = raw.get("type")
    if kind == "FeatureCollection":
        features = raw.get("features")
        if not isinstance(features, list):
            raise ValueError("FeatureCollection is missing a 'features' list")
        for feature in features:
            if isinstance(feature, Mapping):
                yield feature
        return
    if kind == "Feature":
        yield raw
        return
    raise ValueError(f"Unsupported GeoJSON root type: {kind!r}")


def _iter_polygon_rings(
    geometry: Any,
    projection: MapProjection,
) -> Iterator[tuple[Ring, tuple[Ring, ...]]]:
    if not isinstance(geometry, Mapping):
        return
    geom_type = geometry.get("type")
    if geom_type == "Polygon":
        yield _polygon_rings(geometry.get("coordinates"), projection)
    elif geom_type == "MultiPolygon":
        for part in geometry.get("coordinates") or ():
            yield _polygon_rings(part, projection)
    elif geom_type == "GeometryCollection":
        for child in geometry.get("geometries") or ():
            yield from _iter_polygon_rings(child, projection)


def _polygon_rings(coords: Any, projection: MapProjection) -> tuple[Ring, tuple[Ring, ...]]:
    if not isinstance(coords, Sequence) or not coords:
        return ((), ())
    rings = [projection.project_ring(ring) for ring in coords]
    return (rings[0], tuple(rings[1:]))

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

SQUARE = [[0.0, 0.0], [10.0, 0.0], [10.0, 10.0], [0.0, 10.0], [0.0, 0.0]]
HOLE = [[4.0, 4.0], [6.0, 4.0], [6.0, 6.0], [4.0, 6.0], [4.0, 4.0]]


def feature(properties: dict[str, Any], geometry: dict[str, Any] | None) -> dict[str, Any]:
    return {"type": "Feature", "properties": properties, "geometry": geometry}


def polygon(*rings: list[list[float]]) -> dict[str, Any]:
    return {"type": "Polygon", "coordinates": [list(ring) for ring in rings]}


def square(x0: float, y0: float, size: float) -> list[list[float]]:
    return [[x0, y0], [x0 + size, y0], [x0 + size, y0 + size], [x0, y0 + size], [x0, y0]]


def collection(*features: dict[str, Any]) -> bytes:
    return json.dumps({"type": "FeatureCollection", "features": list(features)}).encode("utf-8")


@pytest.fixture
def world_bytes() -> bytes:
    """Three countries: ABC with a hole, an enclave HOL filling it, archipelago XYZ."""
    return collection(
        feature(
            {"NAME": "Abcland", "ISO_A3": "ABC", "ISO_A2": "AB", "CONTINENT": "Europe"},
            polygon(SQUARE, HOLE),
        ),
        feature(
            {"NAME": "Holeland", "ISO_A3": "HOL", "ISO_A2": "HO", "CONTINENT": "Europe"},
            polygon(HOLE),
        ),
        feature(
            {"ADMIN": "Xyz Islands", "ISO_A3": "XYZ", "ISO_A2": "-99", "REGION_UN": "Oceania"},
            {
                "type": "MultiPolygon",
                "coordinates": [[square(20.0, 20.0, 5.0)], [square(40.0, 40.0, 5.0)]],
            },
        ),
    )


@pytest.fixture
def config_file(tmp_path: Path, world_bytes: bytes) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "countries.geojson").write_bytes(world_bytes)
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        "\n".join(
            [
                "paths:",
                "  boundaries: data/countries.geojson",
                "  descriptions: data/country_descriptions.json",
                "  state_dir: state",
                "projection:",
                "  crs: EPSG:4326",
                "",
            ]
        ),
        encoding="utf-8",
    )
    return cfg_path

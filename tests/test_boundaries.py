from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from conftest import HOLE, SQUARE, collection, feature, polygon, square
from travelmap.boundaries import (
    SENTINEL_CODE,
    BoundaryDataset,
    CountryDirectory,
    extract_country_id,
    extract_iso_alpha2,
    extract_name,
    load_boundaries,
    load_boundaries_file,
    normalize_properties,
)
from travelmap.hit_test import hit_test


def test_loads_polygons_and_directory(world_bytes: bytes) -> None:
    dataset = load_boundaries(world_bytes)

    assert [p.country_id for p in dataset.polygons] == ["ABC", "HOL", "XYZ", "XYZ"]
    assert len(dataset.polygons[0].interiors) == 1
    assert dataset.polygons[0].exterior[0] == (0.0, 0.0)

    directory = dataset.directory
    assert len(directory) == 3
    assert directory.display_name("ABC") == "Abcland"
    assert directory.display_name("XYZ") == "Xyz Islands"
    assert directory.iso_alpha2("ABC") == "AB"
    assert directory.iso_alpha2("XYZ") is None
    assert directory.continent("XYZ") == "Oceania"


def test_loaded_dataset_hit_tests_with_holes(world_bytes: bytes) -> None:
    polygons = load_boundaries(world_bytes).polygons
    assert hit_test((1.0, 1.0), polygons) == "ABC"
    assert hit_test((5.0, 5.0), polygons) == "HOL"
    assert hit_test((22.0, 22.0), polygons) == "XYZ"
    assert hit_test((42.0, 42.0), polygons) == "XYZ"
    assert hit_test((30.0, 30.0), polygons) is None


def test_sentinel_iso_a3_falls_back_to_adm0() -> None:
    props = {"ISO_A3": "-99", "ADM0_A3": "FRX", "NAME": "Frexland"}
    assert extract_country_id(props, fallback_name="Frexland") == "FRX"


def test_no_valid_code_falls_back_to_name() -> None:
    data = collection(
        feature({"name": "Testland", "ISO_A3": "-99", "ADM0_A3": "TOOLONG"}, polygon(SQUARE))
    )
    dataset = load_boundaries(data)
    assert [p.country_id for p in dataset.polygons] == ["Testland"]
    assert dataset.directory.display_name("Testland") == "Testland"


@pytest.mark.parametrize(
    ("props", "expected"),
    [
        ({"iso_a3": "abc"}, "abc"),
        ({"ISO_A3": "-99", "SOV_A3": "SOV", "GU_A3": "GUA"}, "SOV"),
        ({"GU_A3": "GUA", "SU_A3": "SUA", "BRK_A3": "BRK"}, "GUA"),
        ({"SU_A3": "SUA", "BRK_A3": "BRK"}, "SUA"),
        ({"BRK_A3": "BRK"}, "BRK"),
        ({"ISO_A3": "-99", "id": "custom-id"}, "custom-id"),
        ({"ISO_A3": "-99", "id": "-99"}, "Fallback"),
        ({"id": ""}, "Fallback"),
    ],
)
def test_country_id_priority(props: dict[str, str], expected: str) -> None:
    assert extract_country_id(props, fallback_name="Fallback") == expected


def test_country_id_never_empty_or_sentinel() -> None:
    for name in ("", SENTINEL_CODE):
        country_id = extract_country_id({}, fallback_name=name)
        assert country_id
        assert country_id != SENTINEL_CODE


def test_name_priority_and_default() -> None:
    assert extract_name({"NAME": "Upper", "name": "lower"}) == "lower"
    assert extract_name({"ADMIN": "Admin", "NAME_LONG": "Long"}) == "Admin"
    assert extract_name({"NAME_LONG": "Long"}) == "Long"
    assert extract_name({}) == "Unknown"


def test_alpha2_validation() -> None:
    assert extract_iso_alpha2({"ISO_A2": "FR"}) == "FR"
    assert extract_iso_alpha2({"ISO_A2": "-99"}) is None
    assert extract_iso_alpha2({"iso_a2": "FRA"}) is None
    assert extract_iso_alpha2({"ISO_A2_EH": "XK"}) == "XK"
    assert extract_iso_alpha2({}) is None


def test_known_alpha2_exceptions_apply_only_without_dataset_code() -> None:
    data = collection(
        feature({"NAME": "France", "ISO_A3": "-99", "ADM0_A3": "FRA", "ISO_A2": "-99"}, polygon(SQUARE)),
        feature({"NAME": "Kosovo", "ADM0_A3": "KOS", "ISO_A2": "-99"}, polygon(square(20, 20, 1))),
        feature({"NAME": "Nowhere", "ADM0_A3": "NWH", "ISO_A2": "-99"}, polygon(square(30, 30, 1))),
    )
    directory = load_boundaries(data).directory
    assert directory.iso_alpha2("FRA") == "FR"
    assert directory.iso_alpha2("KOS") == "XK"
    assert directory.iso_alpha2("NWH") is None
    assert directory.flag_emoji("FRA") == "\U0001F1EB\U0001F1F7"
    assert directory.flag_emoji("NWH") == ""


def test_first_seen_values_win_for_duplicate_ids() -> None:
    data = collection(
        feature({"NAME": "First", "ISO_A3": "DUP", "ISO_A2": "D1", "CONTINENT": "Asia"}, polygon(SQUARE)),
        feature({"NAME": "Second", "ISO_A3": "DUP", "ISO_A2": "D2", "CONTINENT": "Africa"}, polygon(HOLE)),
    )
    dataset = load_boundaries(data)
    assert len(dataset.polygons) == 2
    assert dataset.directory.display_name("DUP") == "First"
    assert dataset.directory.iso_alpha2("DUP") == "D1"
    assert dataset.directory.continent("DUP") == "Asia"


def test_continent_from_region_un_and_empty_is_unassigned() -> None:
    data = collection(
        feature({"NAME": "A", "ISO_A3": "AAA", "REGION_UN": "Americas"}, polygon(SQUARE)),
        feature({"NAME": "B", "ISO_A3": "BBB", "CONTINENT": ""}, polygon(HOLE)),
    )
    directory = load_boundaries(data).directory
    assert directory.continent("AAA") == "Americas"
    assert directory.continent("BBB") is None


def test_numeric_properties_are_stringified() -> None:
    props = normalize_properties({"id": 724, "scale": 1.5, "flag": True, "nested": {"a": 1}, "NAME": "X"})
    assert props == {"id": "724", "scale": "1.5", "NAME": "X"}


def test_geometry_collection_and_null_geometry() -> None:
    data = collection(
        feature(
            {"NAME": "Mixed", "ISO_A3": "MIX"},
            {
                "type": "GeometryCollection",
                "geometries": [
                    polygon(SQUARE),
                    {"type": "Point", "coordinates": [1, 1]},
                    {"type": "MultiPolygon", "coordinates": [[square(20, 20, 1)]]},
                ],
            },
        ),
        feature({"NAME": "Ghost", "ISO_A3": "GHO"}, None),
    )
    dataset = load_boundaries(data)
    assert [p.country_id for p in dataset.polygons] == ["MIX", "MIX"]
    assert "GHO" in dataset.directory


def test_single_feature_root_is_accepted() -> None:
    data = json.dumps(feature({"NAME": "Solo", "ISO_A3": "SOL"}, polygon(SQUARE))).encode()
    assert [p.country_id for p in load_boundaries(data).polygons] == ["SOL"]


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"not json",
        b"\x80\x81\x82\x83",
        b"[]",
        b'{"type": "Topology"}',
        b'{"type": "FeatureCollection"}',
        b'{"type": "FeatureCollection", "features": [{"properties": {}, '
        b'"geometry": {"type": "Polygon", "coordinates": [[["a"]]]}}]}',
        pytest.param(
            b'{"type": "Feature", "properties": {}, "geometry": {"type": "Polygon", "coordinates": [[['
            + b"9" * 400
            + b", 0], [1, 0], [1, 1]]]}}",
            id="coordinate-overflows-float",
        ),
        pytest.param(
            b'{"type": "Feature", "properties": {}, "geometry": '
            + b'{"type": "GeometryCollection", "geometries": [' * 3000
            + b"]}" * 3000
            + b"}",
            id="deeply-nested-collections",
        ),
    ],
)
def test_malformed_dataset_yields_empty_result(data: bytes, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="travelmap.boundaries"):
        dataset = load_boundaries(data)
    assert dataset == BoundaryDataset.empty()
    assert dataset.is_empty
    assert "Failed parsing boundary dataset" in caplog.text


def test_missing_file_yields_empty_result(tmp_path: Path) -> None:
    dataset = load_boundaries_file(tmp_path / "missing.geojson")
    assert dataset.is_empty
    assert len(dataset.directory) == 0


def test_every_loaded_id_is_valid(world_bytes: bytes) -> None:
    for record in load_boundaries(world_bytes).polygons:
        assert record.country_id
        assert record.country_id != SENTINEL_CODE


def test_directory_rejects_mutation(world_bytes: bytes) -> None:
    directory = load_boundaries(world_bytes).directory
    with pytest.raises(TypeError):
        directory.names["ZZZ"] = "Zland"  # type: ignore[index]
    with pytest.raises(TypeError):
        directory.continents["ABC"] = "Asia"  # type: ignore[index]
    assert "ZZZ" not in directory
    assert directory.continent("ABC") == "Europe"


def test_directory_copies_caller_mappings() -> None:
    names = {"AAA": "Aland"}
    directory = CountryDirectory(names=names)
    names["BBB"] = "Bland"
    assert "BBB" not in directory
    assert len(directory) == 1

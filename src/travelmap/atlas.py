"""Revisioned owner of the loaded boundary snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .boundaries import BoundaryDataset, CountryDirectory, load_boundaries, load_boundaries_file
from .hit_test import SpatialIndex
from .models import Point, PolygonRecord
from .projection import MapProjection, identity_projection

_LOGGER = logging.getLogger("travelmap.atlas")


@dataclass(frozen=True, slots=True)
class _Snapshot:
    dataset: BoundaryDataset
    index: SpatialIndex


class CountryAtlas:
    """Holds the current dataset snapshot and a redraw revision counter.

    Consumers compare ``revision`` with the value they last drew to decide
    whether to redraw. A reload swaps the whole snapshot in one assignment,
    so readers never see a half-built directory.
    """

    def __init__(self, projection: MapProjection | None = None) -> None:
        self.projection = projection or identity_projection()
        self._snapshot = _Snapshot(BoundaryDataset.empty(), SpatialIndex(()))
        self._revision = 0

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def dataset(self) -> BoundaryDataset:
        return self._snapshot.dataset

    @property
    def directory(self) -> CountryDirectory:
        return self._snapshot.dataset.directory

    @property
    def polygons(self) -> tuple[PolygonRecord, ...]:
        return self._snapshot.dataset.polygons

    def load(self, data: bytes) -> BoundaryDataset:
        return self.replace(load_boundaries(data, self.projection))

    def load_file(self, path: Path) -> BoundaryDataset:
        return self.replace(load_boundaries_file(path, self.projection))

    def replace(self, dataset: BoundaryDataset) -> BoundaryDataset:
        self._snapshot = _Snapshot(dataset, SpatialIndex(dataset.polygons))
        self._bump()
        _LOGGER.info(
            "Atlas loaded %d countries (%d polygons), revision=%d",
            len(dataset.directory),
            len(dataset.polygons),
            self._revision,
        )
        return dataset

    def restyle(self) -> int:
        """Mark overlays dirty after a styling change; geometry is untouched."""
        self._bump()
        return self._revision

    def hit_test(self, point: Point) -> str | None:
        return self._snapshot.index.hit_test(point)

    def hit_test_lon_lat(self, lon: float, lat: float) -> str | None:
        return self.hit_test(self.projection.project(lon, lat))

    def _bump(self) -> None:
        self._revision += 1

"""Planar map projection for boundary rings and tap coordinates."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Sequence

from .models import Point, Ring

GEOGRAPHIC_CRS = "EPSG:4326"
WEB_MERCATOR_CRS = "EPSG:3857"

# Web Mercator is undefined at the poles; clamp like slippy-map tiles do.
_MAX_MERCATOR_LAT = 85.05112878


class MapProjection:
    """Projects lon/lat pairs into the map space used for hit testing."""

    def __init__(self, crs: str = WEB_MERCATOR_CRS) -> None:
        self.crs = crs.strip().upper()
        if self.crs == GEOGRAPHIC_CRS:
            self._transformer = None
        else:
            self._transformer = _require_pyproj_transformer(self.crs)

    @property
    def is_identity(self) -> bool:
        return self._transformer is None

    def project(self, lon: float, lat: float) -> Point:
        if self._transformer is None:
            return (float(lon), float(lat))
        if self.crs == WEB_MERCATOR_CRS:
            lat = max(-_MAX_MERCATOR_LAT, min(_MAX_MERCATOR_LAT, float(lat)))
        x, y = self._transformer.transform(float(lon), float(lat))
        return (float(x), float(y))

    def project_ring(self, coords: Sequence[Sequence[float]]) -> Ring:
        lons = [float(coord[0]) for coord in coords]
        lats = [float(coord[1]) for coord in coords]
        if not lons:
            return ()
        if self._transformer is None:
            return tuple(zip(lons, lats))
        if self.crs == WEB_MERCATOR_CRS:
            lats = [max(-_MAX_MERCATOR_LAT, min(_MAX_MERCATOR_LAT, lat)) for lat in lats]
        xs, ys = self._transformer.transform(lons, lats)
        return tuple((float(x), float(y)) for x, y in zip(xs, ys))

    def __repr__(self) -> str:
        return f"MapProjection(crs={self.crs!r})"


def identity_projection() -> MapProjection:
    return MapProjection(GEOGRAPHIC_CRS)


@lru_cache(maxsize=4)
def _require_pyproj_transformer(crs: str) -> Any:
    try:
        from pyproj import Transformer
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("pyproj is required for projected map coordinates") from exc
    return Transformer.from_crs(GEOGRAPHIC_CRS, crs, always_xy=True)

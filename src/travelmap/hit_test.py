"""Point-in-country hit testing over projected polygon records."""

from __future__ import annotations

from typing import Sequence

from .models import Point, PolygonRecord

EDGE_EPSILON = 1e-10


def point_in_ring(point: Point, ring: Sequence[Point]) -> bool:
    """Even-odd ray cast; rings with fewer than three vertices contain nothing."""
    count = len(ring)
    if count < 3:
        return False

    x, y = point
    inside = False
    j = count - 1
    for i in range(count):
        xi, yi = ring[i]
        xj, yj = ring[j]
        dy = yj - yi
        if abs(dy) > EDGE_EPSILON and ((yi > y) != (yj > y)):
            if x < (xj - xi) * (y - yi) / dy + xi:
                inside = not inside
        j = i
    return inside


def polygon_contains(polygon: PolygonRecord, point: Point) -> bool:
    if not point_in_ring(point, polygon.exterior):
        return False
    for hole in polygon.interiors:
        if point_in_ring(point, hole):
            return False
    return True


def hit_test(point: Point, polygons: Sequence[PolygonRecord]) -> str | None:
    """Return the country id of the first polygon containing ``point``."""
    for polygon in polygons:
        if polygon_contains(polygon, point):
            return polygon.country_id
    return None


class SpatialIndex:
    """Bounding-box pruned hit tester.

    Candidates are still tested in storage order, so the result always
    equals ``hit_test(point, polygons)``.
    """

    def __init__(self, polygons: Sequence[PolygonRecord]) -> None:
        self._polygons = tuple(polygons)
        self._bounds = tuple(polygon.bounds for polygon in self._polygons)

    def __len__(self) -> int:
        return len(self._polygons)

    @property
    def polygons(self) -> tuple[PolygonRecord, ...]:
        return self._polygons

    def candidates(self, point: Point) -> list[PolygonRecord]:
        x, y = point
        return [
            polygon
            for polygon, (min_x, min_y, max_x, max_y) in zip(self._polygons, self._bounds)
            if min_x <= x <= max_x and min_y <= y <= max_y
        ]

    def hit_test(self, point: Point) -> str | None:
        return hit_test(point, self.candidates(point))

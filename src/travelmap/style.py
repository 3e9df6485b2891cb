"""Status-to-color styling for country overlays."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .atlas import CountryAtlas
from .models import CountryStatus, PolygonRecord
from .statuses import StatusBook

RGBA = tuple[int, int, int, float]

COLOR_SCHEMES = ("light", "dark")

_BASE_COLORS: dict[str, dict[CountryStatus, tuple[int, int, int]]] = {
    "light": {
        CountryStatus.NONE: (142, 142, 147),
        CountryStatus.VISITED: (0, 122, 255),
        CountryStatus.WANT_TO_VISIT: (255, 149, 0),
    },
    "dark": {
        CountryStatus.NONE: (142, 142, 147),
        CountryStatus.VISITED: (10, 132, 255),
        CountryStatus.WANT_TO_VISIT: (255, 159, 10),
    },
}
_FILL_ALPHA = {CountryStatus.NONE: 0.08, CountryStatus.VISITED: 0.45, CountryStatus.WANT_TO_VISIT: 0.45}
_STROKE_ALPHA = {CountryStatus.NONE: 0.35, CountryStatus.VISITED: 0.9, CountryStatus.WANT_TO_VISIT: 0.9}


@dataclass(frozen=True, slots=True)
class StatusPalette:
    scheme: str = "light"

    def __post_init__(self) -> None:
        if self.scheme not in COLOR_SCHEMES:
            raise ValueError("color scheme must be one of: " + ", ".join(COLOR_SCHEMES))

    def fill(self, status: CountryStatus) -> RGBA:
        return (*_BASE_COLORS[self.scheme][status], _FILL_ALPHA[status])

    def stroke(self, status: CountryStatus) -> RGBA:
        return (*_BASE_COLORS[self.scheme][status], _STROKE_ALPHA[status])


@dataclass(frozen=True, slots=True)
class OverlayStyle:
    polygon: PolygonRecord
    status: CountryStatus
    fill: RGBA
    stroke: RGBA


class MapStyler:
    """Tracks the active color scheme and marks the atlas dirty when it changes."""

    def __init__(self, atlas: CountryAtlas, scheme: str = "light") -> None:
        self.atlas = atlas
        self.palette = StatusPalette(scheme)

    @property
    def scheme(self) -> str:
        return self.palette.scheme

    def set_color_scheme(self, scheme: str) -> bool:
        if scheme == self.palette.scheme:
            return False
        self.palette = StatusPalette(scheme)
        self.atlas.restyle()
        return True

    def overlays(self, book: StatusBook) -> Iterator[OverlayStyle]:
        """Yield every polygon with its status colors, in storage order."""
        for polygon in self.atlas.polygons:
            status = book.status(polygon.country_id)
            yield OverlayStyle(
                polygon=polygon,
                status=status,
                fill=self.palette.fill(status),
                stroke=self.palette.stroke(status),
            )

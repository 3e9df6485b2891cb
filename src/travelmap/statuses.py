"""Per-country travel status tracking and its JSON store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Iterable, Mapping

from .boundaries import CountryDirectory
from .models import CountryStatus
from .util import write_json

_LOGGER = logging.getLogger("travelmap.statuses")


class StatusBook:
    """Country statuses keyed by country id plus the want-to-visit priority order."""

    def __init__(
        self,
        statuses: Mapping[str, CountryStatus] | None = None,
        want_to_visit_order: Iterable[str] = (),
    ) -> None:
        self._statuses: dict[str, CountryStatus] = {
            country_id: status
            for country_id, status in (statuses or {}).items()
            if status is not CountryStatus.NONE
        }
        self._order: list[str] = []
        for country_id in want_to_visit_order:
            if self._statuses.get(country_id) is CountryStatus.WANT_TO_VISIT and country_id not in self._order:
                self._order.append(country_id)
        self.revision = 0
        self.on_change: Callable[[StatusBook], None] | None = None

    @property
    def statuses(self) -> Mapping[str, CountryStatus]:
        return dict(self._statuses)

    @property
    def want_to_visit_order(self) -> tuple[str, ...]:
        return tuple(self._order)

    def status(self, country_id: str) -> CountryStatus:
        return self._statuses.get(country_id, CountryStatus.NONE)

    def count(self, status: CountryStatus) -> int:
        return sum(1 for value in self._statuses.values() if value is status)

    def ids_with(self, status: CountryStatus) -> list[str]:
        return sorted(country_id for country_id, value in self._statuses.items() if value is status)

    def update_status(self, status: CountryStatus, country_id: str) -> None:
        if status is CountryStatus.NONE:
            self._statuses.pop(country_id, None)
            self._drop_from_order(country_id)
        else:
            self._statuses[country_id] = status
            if status is CountryStatus.WANT_TO_VISIT:
                if country_id not in self._order:
                    self._order.append(country_id)
            else:
                self._drop_from_order(country_id)
        self._changed()

    def reorder_want_to_visit(self, ids: Iterable[str]) -> None:
        self._order = [
            cid for cid in dict.fromkeys(ids) if self._statuses.get(cid) is CountryStatus.WANT_TO_VISIT
        ]
        self._changed()

    def want_to_visit_ids(self, directory: CountryDirectory) -> list[str]:
        """Ordered want-to-visit ids, then unordered ones by display name."""
        wanted = {cid for cid, status in self._statuses.items() if status is CountryStatus.WANT_TO_VISIT}
        ordered = [cid for cid in self._order if cid in wanted]
        rest = sorted(wanted.difference(ordered), key=lambda cid: directory.display_name(cid).casefold())
        return ordered + rest

    def to_dict(self) -> dict[str, object]:
        return {
            "statuses": {cid: status.value for cid, status in sorted(self._statuses.items())},
            "wantToVisitOrder": list(self._order),
        }

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> StatusBook:
        statuses_raw = raw.get("statuses", {})
        if not isinstance(statuses_raw, Mapping):
            raise ValueError("Expected mapping for 'statuses'")
        statuses: dict[str, CountryStatus] = {}
        for country_id, value in statuses_raw.items():
            if not isinstance(country_id, str) or not isinstance(value, str):
                raise ValueError("Status entries must map country id strings to status strings")
            try:
                statuses[country_id] = CountryStatus.parse(value)
            except ValueError:
                _LOGGER.warning("Dropping unknown status %r for %s", value, country_id)
        order_raw = raw.get("wantToVisitOrder", [])
        if not isinstance(order_raw, list):
            raise ValueError("Expected list for 'wantToVisitOrder'")
        return cls(statuses, [str(item) for item in order_raw])

    def _drop_from_order(self, country_id: str) -> None:
        self._order = [cid for cid in self._order if cid != country_id]

    def _changed(self) -> None:
        self.revision += 1
        if self.on_change is not None:
            self.on_change(self)


def load_status_book(path: Path) -> StatusBook:
    """Load statuses; a missing file is an empty book."""
    if not path.exists():
        return StatusBook()
    with path.open("r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, dict):
        raise ValueError(f"Expected mapping in {path}")
    return StatusBook.from_mapping(raw)


def save_status_book(book: StatusBook, path: Path) -> None:
    write_json(path, book.to_dict())

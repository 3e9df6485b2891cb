"""Validation layer for config, boundary dataset and saved state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from .boundaries import BoundaryDataset, load_boundaries_file
from .config import AppConfig
from .descriptions import load_descriptions
from .goals import load_goal_book
from .models import PolygonRecord
from .projection import MapProjection
from .statuses import load_status_book
from .util import format_code_list, sha256_file


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Checks the boundary dataset and persisted state against each other."""

    def __init__(self, cfg: AppConfig, *, check_geometry: bool = True) -> None:
        self.cfg = cfg
        self.check_geometry = check_geometry

    def run(self, *, strict: bool = False) -> ValidationReport:
        report = ValidationReport()
        dataset = self._validate_boundaries(report, strict=strict)
        self._validate_state(report, dataset)
        self._validate_descriptions(report, dataset)
        return report

    def _validate_boundaries(self, report: ValidationReport, *, strict: bool) -> BoundaryDataset:
        path = self.cfg.paths.boundaries
        if not path.exists():
            self._add_quality_issue(report, f"Missing boundary dataset: {path}", strict=strict)
            return BoundaryDataset.empty()

        report.add_info(f"Boundary dataset sha256={sha256_file(path)}")
        dataset = load_boundaries_file(path, MapProjection(self.cfg.projection.crs))
        if dataset.is_empty:
            self._add_quality_issue(
                report,
                f"Boundary dataset {path} produced no countries; the map will be empty.",
                strict=strict,
            )
            return dataset

        directory = dataset.directory
        report.add_info(
            f"Loaded {len(directory)} countries and {len(dataset.polygons)} polygons from {path}"
        )

        name_ids = sorted(cid for cid in directory.country_ids() if len(cid) != 3)
        if name_ids:
            report.add_warning(
                "Countries without a usable 3-letter code (id fell back to name/id property): "
                f"{format_code_list(name_ids)}"
            )
        no_flag = sorted(cid for cid in directory.country_ids() if directory.iso_alpha2(cid) is None)
        if no_flag:
            report.add_warning(f"Countries without ISO alpha-2 code: {format_code_list(no_flag)}")
        no_continent = sorted(cid for cid in directory.country_ids() if directory.continent(cid) is None)
        if no_continent:
            report.add_info(
                f"Countries without continent (left out of continent stats, listed as Other in search): {format_code_list(no_continent)}"
            )

        degenerate = sorted({p.country_id for p in dataset.polygons if len(p.exterior) < 3})
        if degenerate:
            report.add_warning(
                "Polygons with fewer than 3 vertices (never hit): "
                f"{format_code_list(degenerate)}"
            )

        if self.check_geometry:
            invalid = sorted({p.country_id for p in dataset.polygons if not _is_valid_polygon(p)})
            if invalid:
                report.add_warning(
                    f"Polygons failing geometry validity checks: {format_code_list(invalid)}"
                )
        return dataset

    def _validate_state(self, report: ValidationReport, dataset: BoundaryDataset) -> None:
        try:
            book = load_status_book(self.cfg.paths.statuses_file)
        except Exception as exc:
            report.add_error(f"Failed parsing status store '{self.cfg.paths.statuses_file}': {exc}")
            return
        report.add_info(f"Loaded {len(book.statuses)} country status entries")
        if not dataset.is_empty:
            unknown = sorted(cid for cid in book.statuses if cid not in dataset.directory)
            if unknown:
                report.add_warning(
                    f"Status entries for countries missing from dataset: {format_code_list(unknown)}"
                )

        try:
            goals = load_goal_book(self.cfg.paths.goals_file)
        except Exception as exc:
            report.add_error(f"Failed parsing goals store '{self.cfg.paths.goals_file}': {exc}")
            return
        report.add_info(f"Loaded {len(goals)} goals")

    def _validate_descriptions(self, report: ValidationReport, dataset: BoundaryDataset) -> None:
        path = self.cfg.paths.descriptions
        if not path.exists():
            report.add_info(f"No country descriptions file at {path}")
            return
        descriptions = load_descriptions(path)
        total = len(dataset.directory)
        covered = sum(1 for cid in dataset.directory.country_ids() if cid in descriptions)
        report.add_info(f"Description coverage: {covered}/{total}")

    @staticmethod
    def _add_quality_issue(report: ValidationReport, msg: str, *, strict: bool) -> None:
        if strict:
            report.add_error(msg)
        else:
            report.add_warning(msg)


def _is_valid_polygon(polygon: PolygonRecord) -> bool:
    if len(polygon.exterior) < 3:
        return False
    shape_factory = _require_shapely_polygon_factory()
    try:
        shape = shape_factory(polygon.exterior, [hole for hole in polygon.interiors if len(hole) >= 3])
    except ValueError:
        return False
    return bool(shape.is_valid) and not bool(shape.is_empty)


def _require_shapely_polygon_factory() -> Any:
    try:
        from shapely.geometry import Polygon
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for geometry validity checks") from exc
    return Polygon


def format_report_lines(report: ValidationReport) -> Iterable[str]:
    for info in report.infos:
        yield f"[INFO] {info}"
    for warning in report.warnings:
        yield f"[WARN] {warning}"
    for error in report.errors:
        yield f"[ERROR] {error}"
    if report.ok:
        yield "[OK] Validation completed with no errors."

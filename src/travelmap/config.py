"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .projection import GEOGRAPHIC_CRS, WEB_MERCATOR_CRS
from .style import COLOR_SCHEMES


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class PathsConfig:
    boundaries: Path
    descriptions: Path
    state_dir: Path
    widget_dir: Path
    logs_dir: Path

    @property
    def statuses_file(self) -> Path:
        return self.state_dir / "statuses.json"

    @property
    def goals_file(self) -> Path:
        return self.state_dir / "goals.json"

    @property
    def state_directories(self) -> tuple[Path, ...]:
        return (self.state_dir, self.widget_dir, self.logs_dir)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        state_dir = _path_from_cfg(raw.get("state_dir", "state"), "paths.state_dir", root_dir)
        return cls(
            boundaries=_path_from_cfg(raw.get("boundaries"), "paths.boundaries", root_dir),
            descriptions=_path_from_cfg(
                raw.get("descriptions", "data/country_descriptions.json"),
                "paths.descriptions",
                root_dir,
            ),
            state_dir=state_dir,
            widget_dir=(
                _path_from_cfg(raw["widget_dir"], "paths.widget_dir", root_dir)
                if raw.get("widget_dir") is not None
                else state_dir / "widgets"
            ),
            logs_dir=(
                _path_from_cfg(raw["logs_dir"], "paths.logs_dir", root_dir)
                if raw.get("logs_dir") is not None
                else state_dir / "logs"
            ),
        )


@dataclass(frozen=True, slots=True)
class ProjectionConfig:
    crs: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ProjectionConfig:
        crs = _str(raw.get("crs", WEB_MERCATOR_CRS), "projection.crs").upper()
        allowed = {GEOGRAPHIC_CRS, WEB_MERCATOR_CRS}
        if crs not in allowed:
            raise ValueError("projection.crs must be one of: " + ", ".join(sorted(allowed)))
        return cls(crs=crs)

    @classmethod
    def default(cls) -> ProjectionConfig:
        return cls(crs=WEB_MERCATOR_CRS)


@dataclass(frozen=True, slots=True)
class StyleConfig:
    color_scheme: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> StyleConfig:
        scheme = _str(raw.get("color_scheme", "light"), "style.color_scheme").casefold()
        if scheme not in COLOR_SCHEMES:
            raise ValueError("style.color_scheme must be one of: " + ", ".join(COLOR_SCHEMES))
        return cls(color_scheme=scheme)

    @classmethod
    def default(cls) -> StyleConfig:
        return cls(color_scheme="light")


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path
    paths: PathsConfig
    projection: ProjectionConfig
    style: StyleConfig

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path) -> AppConfig:
        root_dir = source_path.parent.resolve()
        projection_raw = raw.get("projection")
        style_raw = raw.get("style")
        return cls(
            source_path=source_path.resolve(),
            paths=PathsConfig.from_mapping(_mapping(raw.get("paths"), "paths"), root_dir),
            projection=(
                ProjectionConfig.default()
                if projection_raw is None
                else ProjectionConfig.from_mapping(_mapping(projection_raw, "projection"))
            ),
            style=(
                StyleConfig.default()
                if style_raw is None
                else StyleConfig.from_mapping(_mapping(style_raw, "style"))
            ),
        )


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)

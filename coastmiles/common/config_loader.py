"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from coastmiles.common.errors import ConfigError
from coastmiles.common.fs import read_yaml
from coastmiles.common.schema import validate_pipeline_config


@dataclass(frozen=True)
class TableSettings:
    row_selector: str
    id_column: int
    name_column: int
    north_column: int
    south_column: int
    skip_name_pattern: str
    url_template: str


@dataclass(frozen=True)
class DetailSettings:
    fetch_cap: int
    primary_image_selector: str
    report_image_selector: str
    decorative_alt_markers: tuple[str, ...]
    results_meta_selector: str


@dataclass(frozen=True)
class PipelineSettings:
    table_url: str
    table: TableSettings
    detail: DetailSettings
    min_features: int
    store: dict
    http: dict
    serve: dict


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path) or {}
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path) or {}
    return _deep_merge(base, overlay)


def settings_from_dict(cfg: dict) -> PipelineSettings:
    table = cfg["table"]
    detail = cfg["detail"]
    return PipelineSettings(
        table_url=cfg["source"]["table_url"],
        table=TableSettings(
            row_selector=table["row_selector"],
            id_column=table["columns"]["id"],
            name_column=table["columns"]["name"],
            north_column=table["columns"]["north_boundary"],
            south_column=table["columns"]["south_boundary"],
            skip_name_pattern=table["skip_name_pattern"],
            url_template=table["url_template"],
        ),
        detail=DetailSettings(
            fetch_cap=detail["fetch_cap"],
            primary_image_selector=detail["primary_image_selector"],
            report_image_selector=detail["report_image_selector"],
            decorative_alt_markers=tuple(str(marker) for marker in detail["decorative_alt_markers"]),
            results_meta_selector=detail["results_meta_selector"],
        ),
        min_features=cfg["quality"]["min_features"],
        store=dict(cfg["store"]),
        http=dict(cfg["http"]),
        serve=dict(cfg["serve"]),
    )


def load_settings(
    config_path: Path,
    *,
    allow_unknown: bool = False,
    overlay_path: Path | None = None,
) -> PipelineSettings:
    cfg = _load_yaml_with_overlay(config_path, overlay_path)
    validate_pipeline_config(cfg, allow_unknown=allow_unknown)
    return settings_from_dict(cfg)

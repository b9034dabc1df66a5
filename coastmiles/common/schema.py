"""Minimal strict schema for the pipeline YAML config."""

from __future__ import annotations

import re

from coastmiles.common.errors import ConfigError

SECTIONS = {"source", "table", "detail", "quality", "store", "http", "serve"}
STORE_BACKENDS = {"file", "memory"}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_int(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{ctx} must be a positive integer")


def validate_pipeline_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    _assert_required_keys(cfg, SECTIONS, "pipeline config")
    _assert_no_unknown_keys(cfg, SECTIONS, "pipeline config", allow_unknown)

    _assert_required_keys(cfg["source"], {"table_url"}, "source")

    table_keys = {"row_selector", "columns", "skip_name_pattern", "url_template"}
    _assert_required_keys(cfg["table"], table_keys, "table")
    _assert_no_unknown_keys(cfg["table"], table_keys, "table", allow_unknown)
    _assert_required_keys(cfg["table"]["columns"], {"id", "name", "north_boundary", "south_boundary"}, "table.columns")
    for name, index in cfg["table"]["columns"].items():
        _assert_positive_int(index, f"table.columns.{name}")
    try:
        re.compile(cfg["table"]["skip_name_pattern"])
    except re.error as exc:
        raise ConfigError(f"table.skip_name_pattern is not a valid regex: {exc}") from exc
    if "{id}" not in cfg["table"]["url_template"] or "{slug}" not in cfg["table"]["url_template"]:
        raise ConfigError("table.url_template must contain {id} and {slug}")

    detail_keys = {
        "fetch_cap",
        "primary_image_selector",
        "report_image_selector",
        "decorative_alt_markers",
        "results_meta_selector",
    }
    _assert_required_keys(cfg["detail"], detail_keys, "detail")
    _assert_no_unknown_keys(cfg["detail"], detail_keys, "detail", allow_unknown)
    _assert_positive_int(cfg["detail"]["fetch_cap"], "detail.fetch_cap")
    if not isinstance(cfg["detail"]["decorative_alt_markers"], list):
        raise ConfigError("detail.decorative_alt_markers must be a list")

    _assert_required_keys(cfg["quality"], {"min_features"}, "quality")
    _assert_positive_int(cfg["quality"]["min_features"], "quality.min_features")

    _assert_required_keys(cfg["store"], {"backend", "key"}, "store")
    if cfg["store"]["backend"] not in STORE_BACKENDS:
        raise ConfigError(f"store.backend must be one of: {', '.join(sorted(STORE_BACKENDS))}")
    if cfg["store"]["backend"] == "file" and not cfg["store"].get("path"):
        raise ConfigError("store.path is required for the file backend")

    _assert_required_keys(cfg["http"], {"connect_timeout", "read_timeout", "max_attempts"}, "http")
    _assert_positive_int(cfg["http"]["max_attempts"], "http.max_attempts")

    _assert_required_keys(cfg["serve"], {"host", "port"}, "serve")

    return cfg

"""Pipeline orchestration: fetch, parse, enrich, assemble, validate, persist."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

from coastmiles.common.config_loader import PipelineSettings
from coastmiles.common.errors import DataQualityError
from coastmiles.common.fs import write_json
from coastmiles.common.http import PageFetcher
from coastmiles.common.logging import log_event
from coastmiles.common.time_utils import elapsed_ms
from coastmiles.harvest.detail_enricher import enrich_records
from coastmiles.harvest.table_parser import iter_mile_records
from coastmiles.pipeline.assemble import assemble_collection
from coastmiles.pipeline.validate import QualityReport, validate_collection
from coastmiles.store.kv import CacheStore


def write_run_report(data_dir: Path, run_id: str, updated_at: str, report: QualityReport) -> Path:
    report_path = data_dir / "reports" / f"{run_id}.json"
    write_json(
        report_path,
        {
            "run_id": run_id,
            "updated_at": updated_at,
            "passed": report.passed,
            "quality": report.to_dict(),
        },
    )
    return report_path


def run_pipeline(
    settings: PipelineSettings,
    *,
    fetcher: PageFetcher,
    store: CacheStore,
    logger: logging.Logger,
    run_id: str,
    data_dir: Path | None = None,
    fetch_source: Callable[[str], str] | None = None,
) -> QualityReport:
    """Build the collection and replace the cached copy if every gate passes.

    Any fetch or validation failure propagates before ``store.put`` is called,
    leaving the previously cached collection in place. The run report is
    written before the collection is stored, for failed gates as well.
    ``fetch_source`` overrides how the table page is fetched; detail pages
    always go through ``fetcher``.
    """
    started = time.monotonic()
    log_event(logger, "fetching source table", run_id=run_id, stage="fetch", source=settings.table_url, event="STAGE_START", status="ok")
    markup = (fetch_source or fetcher.fetch_text)(settings.table_url)

    records = list(iter_mile_records(markup, table=settings.table, logger=logger))
    log_event(logger, "parsed table rows", run_id=run_id, stage="parse", event="STAGE_END", status="ok", rows_out=len(records))

    enriched = enrich_records(records, fetcher, detail=settings.detail, logger=logger)
    log_event(
        logger,
        "enriched records",
        run_id=run_id,
        stage="enrich",
        event="STAGE_END",
        status="ok",
        rows_in=len(records),
        rows_out=min(len(records), settings.detail.fetch_cap),
        duration_ms=elapsed_ms(started),
    )

    collection = assemble_collection(enriched)
    try:
        report = validate_collection(collection, min_features=settings.min_features)
    except DataQualityError as exc:
        if data_dir is not None and exc.report is not None:
            write_run_report(data_dir, run_id, collection.updated_at, exc.report)
        raise
    for warning in report.warnings:
        log_event(logger, warning, level=logging.WARNING, run_id=run_id, stage="validate", event="QUALITY_WARNING", status="warn")

    if data_dir is not None:
        write_run_report(data_dir, run_id, collection.updated_at, report)

    store.put(settings.store["key"], collection.to_json())
    log_event(
        logger,
        "persisted feature collection",
        run_id=run_id,
        stage="persist",
        event="STAGE_END",
        status="ok",
        rows_out=report.feature_count,
        duration_ms=elapsed_ms(started),
    )
    return report

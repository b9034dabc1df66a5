"""Per-mile detail page enrichment."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable

from coastmiles.common.config_loader import DetailSettings
from coastmiles.common.constants import DETAIL_FETCH_CAP
from coastmiles.common.html import Element, parse_html
from coastmiles.common.http import PageFetcher
from coastmiles.common.logging import log_event
from coastmiles.common.models import EnrichedRecord, MileRecord

REPORT_COUNT_PATTERN = re.compile(r"Showing\s+\d+\s+of\s+(\d+)\s+reports", re.IGNORECASE)

DEFAULT_DETAIL = DetailSettings(
    fetch_cap=DETAIL_FETCH_CAP,
    primary_image_selector="img.mile-image",
    report_image_selector="img.report-image",
    decorative_alt_markers=("decorative",),
    results_meta_selector=".results-meta",
)


@dataclass(frozen=True)
class DetailFields:
    image_url: str | None = None
    num_reports: int | None = None


def _is_decorative(alt: str | None, markers: tuple[str, ...]) -> bool:
    if alt is None:
        return False
    # An explicit empty alt is the HTML marker for a presentational image.
    if not alt.strip():
        return True
    lowered = alt.lower()
    return any(marker.lower() in lowered for marker in markers)


def _primary_image(doc: Element, detail: DetailSettings) -> str | None:
    image = doc.select_one(detail.primary_image_selector)
    if image is None:
        return None
    return image.attr("src") or None


def _report_image(doc: Element, detail: DetailSettings) -> str | None:
    for image in doc.select(detail.report_image_selector):
        if _is_decorative(image.attr("alt"), detail.decorative_alt_markers):
            continue
        src = image.attr("src")
        if src:
            return src
    return None


def extract_image_url(doc: Element, detail: DetailSettings = DEFAULT_DETAIL) -> str | None:
    for strategy in (_primary_image, _report_image):
        image_url = strategy(doc, detail)
        if image_url:
            return image_url
    return None


def parse_report_count(text: str) -> int | None:
    match = REPORT_COUNT_PATTERN.search(text)
    if match is None:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        return None


def extract_report_count(doc: Element, detail: DetailSettings = DEFAULT_DETAIL) -> int | None:
    meta = doc.select_one(detail.results_meta_selector)
    if meta is None:
        return None
    return parse_report_count(meta.text())


def extract_details(markup: str, detail: DetailSettings = DEFAULT_DETAIL) -> DetailFields:
    doc = parse_html(markup)
    return DetailFields(
        image_url=extract_image_url(doc, detail),
        num_reports=extract_report_count(doc, detail),
    )


def enrich_records(
    records: Iterable[MileRecord],
    fetcher: PageFetcher,
    *,
    detail: DetailSettings = DEFAULT_DETAIL,
    logger: logging.Logger | None = None,
) -> list[EnrichedRecord]:
    """Enrich the first ``detail.fetch_cap`` records from their detail pages.

    Pages are fetched one at a time in input order. Records past the cap are
    passed through without enrichment. Fetch errors propagate to the caller.
    """
    enriched: list[EnrichedRecord] = []
    fetched = 0
    for record in records:
        if fetched >= detail.fetch_cap:
            enriched.append(EnrichedRecord.from_record(record))
            continue
        fetched += 1
        fields = extract_details(fetcher.fetch_text(record.url), detail)
        if logger is not None and fields.image_url is None and fields.num_reports is None:
            log_event(
                logger,
                f"no detail fields found for mile {record.id}",
                level=logging.DEBUG,
                stage="enrich",
                source=record.url,
                event="DETAIL_EMPTY",
                status="ok",
            )
        enriched.append(
            EnrichedRecord.from_record(record, image_url=fields.image_url, num_reports=fields.num_reports)
        )
    return enriched

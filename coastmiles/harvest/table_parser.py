"""Published spreadsheet table parsing into mile records."""

from __future__ import annotations

import logging
import math
import re
from typing import Iterator

from coastmiles.common.config_loader import TableSettings
from coastmiles.common.constants import MILE_URL_TEMPLATE, NOT_CAPTURED_PATTERN
from coastmiles.common.html import Element, parse_html
from coastmiles.common.ids import slugify
from coastmiles.common.logging import log_event
from coastmiles.common.models import Coordinates, MileRecord

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

DEFAULT_TABLE = TableSettings(
    row_selector="table tbody tr",
    id_column=2,
    name_column=3,
    north_column=4,
    south_column=5,
    skip_name_pattern=NOT_CAPTURED_PATTERN,
    url_template=MILE_URL_TEMPLATE,
)


def parse_mile_id(text: str) -> int | None:
    match = _LEADING_INT.match(text)
    if match is None:
        return None
    return int(match.group(1))


def parse_boundary(text: str) -> Coordinates | None:
    """Turn ``"<lat>,<lon>"`` into ``(lon, lat)``."""
    parts = text.split(",")
    if len(parts) != 2:
        return None
    values = []
    for part in reversed(parts):
        try:
            value = float(part)
        except ValueError:
            return None
        if not math.isfinite(value):
            return None
        values.append(value)
    return values[0], values[1]


def mile_url(mile_id: int, name: str, template: str = MILE_URL_TEMPLATE) -> str:
    return template.format(id=mile_id, slug=slugify(name.lower()))


def _row_to_record(
    row: Element,
    table: TableSettings,
    skip_name: re.Pattern,
    logger: logging.Logger | None,
) -> MileRecord | None:
    mile_id = parse_mile_id(row.cell_text(table.id_column))
    if mile_id is None or mile_id < 1:
        return None

    name = row.cell_text(table.name_column).strip()
    if skip_name.search(name):
        return None

    south = parse_boundary(row.cell_text(table.south_column))
    if south is None:
        if logger is not None:
            log_event(
                logger,
                f"skipping mile {mile_id}: unusable south boundary",
                level=logging.WARNING,
                stage="parse",
                event="ROW_SKIPPED_BAD_COORDINATES",
                status="skipped",
            )
        return None

    return MileRecord(
        id=mile_id,
        name=name,
        url=mile_url(mile_id, name, table.url_template),
        boundary_coordinates=south,
        north_boundary=parse_boundary(row.cell_text(table.north_column)),
    )


def iter_mile_records(
    markup: str,
    *,
    table: TableSettings = DEFAULT_TABLE,
    logger: logging.Logger | None = None,
) -> Iterator[MileRecord]:
    """Yield a record per data row, in row order.

    Rows with a non-integer identifier are headers or spacers, and rows named
    with the not-captured placeholder are not real miles; both are skipped
    without error.
    """
    skip_name = re.compile(table.skip_name_pattern)
    for row in parse_html(markup).select(table.row_selector):
        record = _row_to_record(row, table, skip_name, logger)
        if record is not None:
            yield record

"""GeoJSON feature assembly."""

from __future__ import annotations

from typing import Any, Callable, Iterable

from coastmiles.common.models import EnrichedRecord, FeatureCollection
from coastmiles.common.time_utils import utc_timestamp_iso


def record_to_feature(record: EnrichedRecord) -> dict[str, Any]:
    properties: dict[str, Any] = {"name": record.name, "url": record.url}
    if record.image_url is not None:
        properties["imageUrl"] = record.image_url
    if record.num_reports is not None:
        properties["numReports"] = record.num_reports
    properties["mileNumber"] = record.id

    lon, lat = record.boundary_coordinates
    return {
        "type": "Feature",
        "id": record.id,
        "properties": properties,
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
    }


def assemble_collection(
    records: Iterable[EnrichedRecord],
    *,
    now: Callable[[], str] = utc_timestamp_iso,
) -> FeatureCollection:
    features = [record_to_feature(record) for record in records]
    return FeatureCollection(updated_at=now(), features=features)

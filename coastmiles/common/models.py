"""Data models used across the pipeline."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any

Coordinates = tuple[float, float]


@dataclass(frozen=True)
class MileRecord:
    id: int
    name: str
    url: str
    # South boundary as (lon, lat); used as the point geometry.
    boundary_coordinates: Coordinates
    north_boundary: Coordinates | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EnrichedRecord(MileRecord):
    image_url: str | None = None
    num_reports: int | None = None

    @classmethod
    def from_record(
        cls,
        record: MileRecord,
        *,
        image_url: str | None = None,
        num_reports: int | None = None,
    ) -> "EnrichedRecord":
        return cls(
            id=record.id,
            name=record.name,
            url=record.url,
            boundary_coordinates=record.boundary_coordinates,
            north_boundary=record.north_boundary,
            image_url=image_url,
            num_reports=num_reports,
        )


@dataclass(frozen=True)
class FeatureCollection:
    updated_at: str
    features: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "updatedAt": self.updated_at,
            "features": self.features,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2, allow_nan=False)

from __future__ import annotations

import json

import pytest

from coastmiles.common.errors import ContractError, DataQualityError
from coastmiles.common.models import EnrichedRecord
from coastmiles.pipeline.assemble import assemble_collection, record_to_feature
from coastmiles.pipeline.validate import build_quality_report, validate_collection


def _enriched(mile_id: int, image_url: str | None = "/img.jpg", num_reports: int | None = 4) -> EnrichedRecord:
    return EnrichedRecord(
        id=mile_id,
        name=f"Mile {mile_id}",
        url=f"https://example.test/mile-{mile_id}/",
        boundary_coordinates=(-124.0, 44.1),
        image_url=image_url,
        num_reports=num_reports,
    )


def test_record_to_feature_shape():
    feature = record_to_feature(_enriched(7))

    assert feature == {
        "type": "Feature",
        "id": 7,
        "properties": {
            "name": "Mile 7",
            "url": "https://example.test/mile-7/",
            "imageUrl": "/img.jpg",
            "numReports": 4,
            "mileNumber": 7,
        },
        "geometry": {"type": "Point", "coordinates": [-124.0, 44.1]},
    }


def test_record_to_feature_omits_absent_enrichment():
    properties = record_to_feature(_enriched(7, image_url=None, num_reports=None))["properties"]

    assert "imageUrl" not in properties
    assert "numReports" not in properties


def test_record_to_feature_keeps_zero_report_count():
    assert record_to_feature(_enriched(7, num_reports=0))["properties"]["numReports"] == 0


def test_assemble_collection_stamps_once_and_keeps_order():
    stamps = iter(["2026-10-18T03:00:00.000+00:00", "later"])

    collection = assemble_collection([_enriched(2), _enriched(1)], now=lambda: next(stamps))
    payload = json.loads(collection.to_json())

    assert payload["type"] == "FeatureCollection"
    assert payload["updatedAt"] == "2026-10-18T03:00:00.000+00:00"
    assert [feature["id"] for feature in payload["features"]] == [2, 1]


def _collection(records):
    return assemble_collection(records, now=lambda: "2026-10-18T03:00:00.000+00:00")


def test_validate_accepts_collection_meeting_all_gates():
    records = [_enriched(i, image_url=None, num_reports=None) for i in range(1, 10)] + [_enriched(10)]

    report = validate_collection(_collection(records))

    assert report.passed
    assert report.feature_count == 10
    assert report.with_image == 1
    assert report.with_reports == 1


def test_validate_rejects_collection_without_images():
    records = [_enriched(i, image_url=None) for i in range(1, 11)]

    with pytest.raises(DataQualityError) as excinfo:
        validate_collection(_collection(records))

    assert excinfo.value.report.errors == ["NO_IMAGES"]


def test_validate_rejects_collection_without_report_counts():
    records = [_enriched(i, num_reports=None) for i in range(1, 11)]

    with pytest.raises(DataQualityError) as excinfo:
        validate_collection(_collection(records))

    assert excinfo.value.report.errors == ["NO_REPORT_COUNTS"]


def test_validate_rejects_small_collection():
    with pytest.raises(ContractError, match="TOO_FEW_FEATURES"):
        validate_collection(_collection([_enriched(i) for i in range(1, 10)]))


def test_validate_reports_every_failing_gate():
    with pytest.raises(DataQualityError) as excinfo:
        validate_collection(_collection([]))

    assert excinfo.value.report.errors == ["NO_IMAGES", "NO_REPORT_COUNTS", "TOO_FEW_FEATURES"]
    assert excinfo.value.error_code == "DATA_QUALITY_ERROR"


def test_validate_honours_configured_floor():
    report = validate_collection(_collection([_enriched(1)]), min_features=1)

    assert report.passed


def test_quality_report_warns_on_duplicate_ids():
    report = build_quality_report(_collection([_enriched(i) for i in (1, 2, 2, 3)]), min_features=1)

    assert report.duplicate_ids == 1
    assert report.warnings == ["DUPLICATE_MILE_IDS_PRESENT"]

"""Data quality gates run before a collection replaces the cached one."""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field

from coastmiles.common.constants import MIN_FEATURES
from coastmiles.common.errors import DataQualityError
from coastmiles.common.models import FeatureCollection


@dataclass(frozen=True)
class QualityReport:
    feature_count: int
    with_image: int
    with_reports: int
    duplicate_ids: int
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return asdict(self)


def build_quality_report(collection: FeatureCollection, *, min_features: int = MIN_FEATURES) -> QualityReport:
    features = collection.features
    with_image = sum(1 for feature in features if feature["properties"].get("imageUrl"))
    with_reports = sum(1 for feature in features if feature["properties"].get("numReports") is not None)
    duplicates = sum(count - 1 for count in Counter(feature["id"] for feature in features).values() if count > 1)

    errors: list[str] = []
    # Missing images or counts usually means the detail page markup changed.
    if with_image == 0:
        errors.append("NO_IMAGES")
    if with_reports == 0:
        errors.append("NO_REPORT_COUNTS")
    # Too few rows usually means the table markup changed or an error page came back.
    if len(features) < min_features:
        errors.append("TOO_FEW_FEATURES")

    warnings: list[str] = []
    if duplicates > 0:
        warnings.append("DUPLICATE_MILE_IDS_PRESENT")

    return QualityReport(
        feature_count=len(features),
        with_image=with_image,
        with_reports=with_reports,
        duplicate_ids=duplicates,
        warnings=warnings,
        errors=errors,
    )


def validate_collection(collection: FeatureCollection, *, min_features: int = MIN_FEATURES) -> QualityReport:
    report = build_quality_report(collection, min_features=min_features)
    if report.errors:
        raise DataQualityError(
            f"Data quality gates failed ({';'.join(report.errors)}): "
            f"{report.feature_count} features, {report.with_image} with images, "
            f"{report.with_reports} with report counts",
            report=report,
        )
    return report

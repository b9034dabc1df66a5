from __future__ import annotations

from pathlib import Path

import pytest

from coastmiles.common.config_loader import DetailSettings
from coastmiles.common.http import HttpRequestError
from coastmiles.common.models import MileRecord
from coastmiles.harvest.detail_enricher import enrich_records, extract_details, parse_report_count

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


class RecordingFetcher:
    def __init__(self, pages: dict[str, str] | None = None, default: str = "<html></html>") -> None:
        self.pages = pages or {}
        self.default = default
        self.calls: list[str] = []

    def fetch_text(self, url: str) -> str:
        self.calls.append(url)
        return self.pages.get(url, self.default)


def _record(mile_id: int) -> MileRecord:
    return MileRecord(
        id=mile_id,
        name=f"Mile {mile_id}",
        url=f"https://example.test/mile-{mile_id}/",
        boundary_coordinates=(-124.0, 44.0),
    )


def test_extract_details_from_fixture_page():
    fields = extract_details((FIXTURES / "detail_page.html").read_text(encoding="utf-8"))

    assert fields.image_url == "https://oregonshores.org/uploads/mile-3.jpg"
    assert fields.num_reports == 47


def test_primary_image_wins_over_report_image():
    markup = (
        '<img class="report-image" src="/report.jpg" alt="Report photo">'
        '<img class="mile-image" src="/mile.jpg">'
    )

    assert extract_details(markup).image_url == "/mile.jpg"


def test_report_image_fallback_skips_decorative_images():
    markup = (
        '<img class="report-image" src="/divider.png" alt="Decorative divider">'
        '<img class="report-image" src="/report-1.jpg" alt="Tide pools">'
        '<img class="report-image" src="/report-2.jpg" alt="Driftwood">'
    )

    assert extract_details(markup).image_url == "/report-1.jpg"


def test_primary_image_without_src_falls_back():
    markup = '<img class="mile-image"><img class="report-image" src="/report.jpg">'

    assert extract_details(markup).image_url == "/report.jpg"


def test_image_absent_when_only_decorative_images():
    markup = '<img class="report-image" src="/divider.png" alt="decorative">'

    assert extract_details(markup).image_url is None


def test_report_count_absent_without_summary_text():
    markup = '<div class="results-meta">No reports yet</div>'

    assert extract_details(markup).num_reports is None
    assert extract_details("<p>Showing 1 of 2 reports</p>").num_reports is None


def test_parse_report_count_takes_total():
    assert parse_report_count("Showing 3 of 47 reports") == 47
    assert parse_report_count("  Showing 10 of 1203 reports\n") == 1203
    assert parse_report_count("Showing some reports") is None


def test_enrich_records_fetches_sequentially_in_order():
    records = [_record(3), _record(1), _record(2)]
    fetcher = RecordingFetcher(
        pages={"https://example.test/mile-1/": '<img class="mile-image" src="/one.jpg">'},
    )

    enriched = enrich_records(records, fetcher)

    assert fetcher.calls == [record.url for record in records]
    assert [record.id for record in enriched] == [3, 1, 2]
    assert enriched[1].image_url == "/one.jpg"
    assert enriched[0].image_url is None
    assert enriched[0].num_reports is None


def test_enrich_records_never_exceeds_fetch_cap():
    records = [_record(i) for i in range(1, 601)]
    fetcher = RecordingFetcher(default='<img class="mile-image" src="/x.jpg">')

    enriched = enrich_records(records, fetcher)

    assert len(fetcher.calls) == 500
    assert len(enriched) == 600
    assert enriched[499].image_url == "/x.jpg"
    assert enriched[500].image_url is None
    assert enriched[-1].id == 600


def test_enrich_records_respects_configured_cap():
    detail = DetailSettings(
        fetch_cap=2,
        primary_image_selector="img.mile-image",
        report_image_selector="img.report-image",
        decorative_alt_markers=("decorative",),
        results_meta_selector=".results-meta",
    )
    fetcher = RecordingFetcher()

    enriched = enrich_records([_record(i) for i in range(1, 6)], fetcher, detail=detail)

    assert len(fetcher.calls) == 2
    assert len(enriched) == 5


def test_enrich_records_propagates_fetch_failures():
    class FailingFetcher:
        def __init__(self) -> None:
            self.calls = 0

        def fetch_text(self, url: str) -> str:
            self.calls += 1
            raise HttpRequestError(f"HTTP status 500 from {url}")

    fetcher = FailingFetcher()

    with pytest.raises(HttpRequestError):
        enrich_records([_record(1), _record(2)], fetcher)
    assert fetcher.calls == 1


def test_report_image_fallback_skips_empty_alt_images():
    markup = (
        '<img class="report-image" src="/spacer.gif" alt="">'
        '<img class="report-image" src="/report.jpg" alt="photo">'
    )

    assert extract_details(markup).image_url == "/report.jpg"


def test_report_image_without_alt_attribute_is_kept():
    markup = '<img class="report-image" src="/report.jpg">'

    assert extract_details(markup).image_url == "/report.jpg"

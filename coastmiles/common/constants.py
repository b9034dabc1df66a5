"""Application constants."""

USER_AGENT = "coastmiles/1.0 (+coastwatch mile map; contact: configured-email)"
CACHE_KEY = "miles"
DETAIL_FETCH_CAP = 500
MIN_FEATURES = 10
NOT_CAPTURED_PATTERN = r"never captured on OSCC website"
MILE_URL_TEMPLATE = "https://oregonshores.org/mile/mile-{id}-{slug}/"
EXIT_SUCCESS = 0
EXIT_NOT_FOUND = 1
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "source",
    "event",
    "status",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)

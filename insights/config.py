"""Configuration settings for the Insights server."""

import os

from common.constants import (
    BUCKET_CONCURRENCY,
    CREDENTIAL_SWEEP_INTERVAL_SECONDS,
    CREDENTIAL_TTL_SECONDS,
    DEFAULT_CAPACITY_BYTES,
    LIST_PAGE_SIZE,
    REPORT_CACHE_TTL_SECONDS,
    REPORT_OBJECT_CEILING,
    REPORT_TIMEOUT_SECONDS,
    STATS_OBJECT_CEILING,
)


DATABASE_PATH = os.environ.get("INSIGHTS_DATABASE_PATH", "/app/data/insights.db")

INSIGHTS_HOST = os.environ.get("INSIGHTS_HOST", "0.0.0.0")

INSIGHTS_PORT = int(os.environ.get("INSIGHTS_PORT", "8000"))

CAPACITY_BYTES = int(os.environ.get("INSIGHTS_CAPACITY_BYTES", str(DEFAULT_CAPACITY_BYTES)))

CREDENTIAL_TTL = float(os.environ.get("INSIGHTS_CREDENTIAL_TTL_SECONDS", str(CREDENTIAL_TTL_SECONDS)))

CREDENTIAL_SWEEP_INTERVAL = float(
    os.environ.get("INSIGHTS_CREDENTIAL_SWEEP_INTERVAL_SECONDS", str(CREDENTIAL_SWEEP_INTERVAL_SECONDS))
)

REPORT_CACHE_TTL = float(os.environ.get("INSIGHTS_REPORT_CACHE_TTL_SECONDS", str(REPORT_CACHE_TTL_SECONDS)))

REPORT_CEILING = int(os.environ.get("INSIGHTS_REPORT_OBJECT_CEILING", str(REPORT_OBJECT_CEILING)))

STATS_CEILING = int(os.environ.get("INSIGHTS_STATS_OBJECT_CEILING", str(STATS_OBJECT_CEILING)))

PAGE_SIZE = int(os.environ.get("INSIGHTS_LIST_PAGE_SIZE", str(LIST_PAGE_SIZE)))

REPORT_TIMEOUT = float(os.environ.get("INSIGHTS_REPORT_TIMEOUT_SECONDS", str(REPORT_TIMEOUT_SECONDS)))

BUCKET_CONCURRENCY_LIMIT = int(os.environ.get("INSIGHTS_BUCKET_CONCURRENCY", str(BUCKET_CONCURRENCY)))

S3_ENDPOINT_URL = os.environ.get("INSIGHTS_S3_ENDPOINT_URL") or None

API_KEY_PREFIX = "ins_"

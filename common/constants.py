"""Project-wide constants (TTLs, traversal ceilings, capacity, size buckets)."""

KB: int = 1024
MB: int = 1024 * KB
GB: int = 1024 * MB
TB: int = 1024 * GB

DEFAULT_REGION: str = "us-east-1"

CREDENTIAL_TTL_SECONDS: float = 24 * 3600
CREDENTIAL_SWEEP_INTERVAL_SECONDS: float = 3600

REPORT_CACHE_TTL_SECONDS: float = 10 * 60
REPORT_TIMEOUT_SECONDS: float = 120

# Ceilings on remote objects folded into one run. The detailed report and the
# dashboard counters are tuned independently.
REPORT_OBJECT_CEILING: int = 50_000
STATS_OBJECT_CEILING: int = 100_000

LIST_PAGE_SIZE: int = 1000
BUCKET_CONCURRENCY: int = 1

DEFAULT_CAPACITY_BYTES: int = 1 * TB

TOP_ITEMS_LIMIT: int = 10
RECENT_WINDOW_DAYS: int = 30

CACHE_SHARD_COUNT: int = 16

# (label, lower bound inclusive, upper bound exclusive or None)
SIZE_BUCKETS = (
    ("0-10 KB", 0, 10 * KB),
    ("10 KB - 1 MB", 10 * KB, 1 * MB),
    ("1-100 MB", 1 * MB, 100 * MB),
    ("100 MB - 1 GB", 100 * MB, 1 * GB),
    ("> 1 GB", 1 * GB, None),
)

"""Domain models for the Insights service."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class DistributionEntry:
    label: str
    count: int
    bytes: int


@dataclass(frozen=True)
class ReportItem:
    """
    A single file or object listed in a report (largest / most recent).
    """
    item_id: str
    name: str
    bytes: int
    category: str
    source: str
    mime_type: Optional[str] = None
    uploaded_at: Optional[datetime] = None


@dataclass(frozen=True)
class ReportCounts:
    files: int
    folders: int
    shared: int


@dataclass(frozen=True)
class UsageReport:
    """
    Usage analytics for one principal.

    refreshed_at is a Unix timestamp in seconds. partial is True when the
    remote portion was cut short by the object ceiling or a listing failure.
    """
    capacity_bytes: int
    used_bytes: int
    available_bytes: int
    usage_pct: float
    counts: ReportCounts
    files_by_type: Tuple[DistributionEntry, ...]
    size_distribution: Tuple[DistributionEntry, ...]
    bucket_usage: Tuple[DistributionEntry, ...]
    top_files: Tuple[ReportItem, ...]
    recent_uploads: Tuple[ReportItem, ...]
    partial: bool
    refreshed_at: float
    include_external: bool


@dataclass(frozen=True)
class StorageStats:
    """
    Dashboard counters for one principal.
    """
    total_files: int
    total_folders: int
    total_size: int
    shared_items: int
    total_capacity: int
    usage_percentage: float
    external_objects: int
    partial: bool

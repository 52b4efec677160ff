"""Pydantic schemas for analytics and stats endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from insights.domain import DistributionEntry, ReportItem, StorageStats, UsageReport


class DistributionEntryResponse(BaseModel):
    """One slice of a distribution (by type, size range or bucket)."""
    label: str
    count: int
    bytes: int

    @classmethod
    def from_domain(cls, entry: DistributionEntry) -> "DistributionEntryResponse":
        return cls(label=entry.label, count=entry.count, bytes=entry.bytes)


class ReportItemResponse(BaseModel):
    """A file or object in the largest / recent lists."""
    id: str
    name: str
    bytes: int
    category: str
    source: str
    mime_type: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, item: ReportItem) -> "ReportItemResponse":
        return cls(
            id=item.item_id,
            name=item.name,
            bytes=item.bytes,
            category=item.category,
            source=item.source,
            mime_type=item.mime_type,
            uploaded_at=item.uploaded_at,
        )


class CountsResponse(BaseModel):
    files: int
    folders: int
    shared: int


class UsageReportResponse(BaseModel):
    """Response model for the usage analytics report."""
    capacity_bytes: int
    used_bytes: int
    available_bytes: int
    usage_pct: float
    counts: CountsResponse
    files_by_type: List[DistributionEntryResponse]
    size_distribution: List[DistributionEntryResponse]
    bucket_usage: List[DistributionEntryResponse]
    top_files: List[ReportItemResponse]
    recent_uploads: List[ReportItemResponse]
    partial: bool
    refreshed_at: float
    include_external: bool

    @classmethod
    def from_domain(cls, report: UsageReport) -> "UsageReportResponse":
        return cls(
            capacity_bytes=report.capacity_bytes,
            used_bytes=report.used_bytes,
            available_bytes=report.available_bytes,
            usage_pct=report.usage_pct,
            counts=CountsResponse(
                files=report.counts.files,
                folders=report.counts.folders,
                shared=report.counts.shared,
            ),
            files_by_type=[DistributionEntryResponse.from_domain(e) for e in report.files_by_type],
            size_distribution=[DistributionEntryResponse.from_domain(e) for e in report.size_distribution],
            bucket_usage=[DistributionEntryResponse.from_domain(e) for e in report.bucket_usage],
            top_files=[ReportItemResponse.from_domain(i) for i in report.top_files],
            recent_uploads=[ReportItemResponse.from_domain(i) for i in report.recent_uploads],
            partial=report.partial,
            refreshed_at=report.refreshed_at,
            include_external=report.include_external,
        )


class StorageStatsResponse(BaseModel):
    """Response model for dashboard counters."""
    total_files: int
    total_folders: int
    total_size: int
    shared_items: int
    total_capacity: int
    usage_percentage: float
    external_objects: int
    partial: bool

    @classmethod
    def from_domain(cls, stats: StorageStats) -> "StorageStatsResponse":
        return cls(
            total_files=stats.total_files,
            total_folders=stats.total_folders,
            total_size=stats.total_size,
            shared_items=stats.shared_items,
            total_capacity=stats.total_capacity,
            usage_percentage=stats.usage_percentage,
            external_objects=stats.external_objects,
            partial=stats.partial,
        )

"""Pydantic schemas for API requests and responses."""

from insights.schemas.analytics import (
    DistributionEntryResponse,
    ReportItemResponse,
    CountsResponse,
    UsageReportResponse,
    StorageStatsResponse
)
from insights.schemas.connection import (
    ConnectRequest,
    BucketResponse,
    ConnectResponse,
    DisconnectResponse,
    ConnectionStatusResponse,
    ListBucketsResponse
)
from insights.schemas.common import ErrorResponse

__all__ = [
    "DistributionEntryResponse",
    "ReportItemResponse",
    "CountsResponse",
    "UsageReportResponse",
    "StorageStatsResponse",
    "ConnectRequest",
    "BucketResponse",
    "ConnectResponse",
    "DisconnectResponse",
    "ConnectionStatusResponse",
    "ListBucketsResponse",
    "ErrorResponse"
]

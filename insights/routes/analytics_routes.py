"""Analytics and stats API routes."""

from fastapi import APIRouter, Depends, Query

from insights.auth import get_current_user
from insights.dependencies import get_aggregator, get_summarizer
from insights.schemas.analytics import StorageStatsResponse, UsageReportResponse
from insights.schemas.common import ErrorResponse
from insights.services.stats_summarizer import StatsSummarizer
from insights.services.usage_aggregator import UsageAggregator

router = APIRouter(tags=["Analytics"])


@router.get(
    "/analytics",
    response_model=UsageReportResponse,
    responses={401: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
)
async def get_analytics(
    refresh: bool = Query(False, description="Ignore the cached report"),
    include_external: bool = Query(False, description="Include objects from the connected object store"),
    current_user: str = Depends(get_current_user),
    aggregator: UsageAggregator = Depends(get_aggregator),
):
    """
    Usage analytics for the current user.

    Parameters:
        - refresh: Recompute even if a cached report is still fresh
        - include_external: Fold in objects listed from the connected account
        - Authorization header: Bearer <api_key> (required)

    Returns:
        - Capacity and usage totals, counts, distributions by type, size
          range and bucket, largest and most recent items
        - partial: True if the remote listing was cut short

    Raises:
        - 401: Invalid or missing API Key
        - 500: Local records could not be read
        - 504: Report computation timed out
    """
    report = await aggregator.compute_report(
        current_user,
        force_refresh=refresh,
        include_external=include_external,
    )
    return UsageReportResponse.from_domain(report)


@router.get("/stats", response_model=StorageStatsResponse, responses={401: {"model": ErrorResponse}})
async def get_stats(
    current_user: str = Depends(get_current_user),
    summarizer: StatsSummarizer = Depends(get_summarizer),
):
    """
    Dashboard counters for the current user (never cached).
    """
    stats = await summarizer.summarize(current_user)
    return StorageStatsResponse.from_domain(stats)

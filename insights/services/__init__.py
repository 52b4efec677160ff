"""Service layer for business logic."""

from insights.services.usage_aggregator import UsageAggregator
from insights.services.stats_summarizer import StatsSummarizer
from insights.services.connection_service import ConnectionService

__all__ = [
    "UsageAggregator",
    "StatsSummarizer",
    "ConnectionService",
]

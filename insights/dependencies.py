"""Accessors for the service instances attached to the running app."""

from fastapi import Request

from insights.credential_vault import CredentialVault
from insights.services.connection_service import ConnectionService
from insights.services.stats_summarizer import StatsSummarizer
from insights.services.usage_aggregator import UsageAggregator


def get_vault(request: Request) -> CredentialVault:
    return request.app.state.vault


def get_aggregator(request: Request) -> UsageAggregator:
    return request.app.state.aggregator


def get_summarizer(request: Request) -> StatsSummarizer:
    return request.app.state.summarizer


def get_connection_service(request: Request) -> ConnectionService:
    return request.app.state.connection_service

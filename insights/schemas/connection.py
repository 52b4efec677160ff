"""Pydantic schemas for object-store connection endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ConnectRequest(BaseModel):
    """Request model for connecting an object-store account."""
    access_key_id: str = Field(..., min_length=1)
    secret_access_key: str = Field(..., min_length=1)
    region: Optional[str] = None
    session_token: Optional[str] = None


class BucketResponse(BaseModel):
    name: str
    creation_date: Optional[datetime] = None


class ConnectResponse(BaseModel):
    """Response model for a successful connect."""
    success: bool
    message: str
    buckets: List[BucketResponse]


class DisconnectResponse(BaseModel):
    success: bool
    message: str


class ConnectionStatusResponse(BaseModel):
    connected: bool
    region: Optional[str] = None


class ListBucketsResponse(BaseModel):
    buckets: List[BucketResponse]

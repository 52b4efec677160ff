"""Object-store connection API routes."""

from fastapi import APIRouter, Depends

from insights.auth import get_current_user
from insights.dependencies import get_connection_service
from insights.schemas.common import ErrorResponse
from insights.schemas.connection import (
    BucketResponse,
    ConnectRequest,
    ConnectResponse,
    ConnectionStatusResponse,
    DisconnectResponse,
    ListBucketsResponse
)
from insights.services.connection_service import ConnectionService

router = APIRouter(prefix="/s3", tags=["Object Store"])


@router.post("/connect", response_model=ConnectResponse, responses={400: {"model": ErrorResponse}})
async def connect(
    request: ConnectRequest,
    current_user: str = Depends(get_current_user),
    service: ConnectionService = Depends(get_connection_service),
):
    """
    Connect the current user's object-store account.

    Parameters:
        - access_key_id, secret_access_key: Key pair (required)
        - region: Region (default us-east-1)
        - session_token: Optional short-lived session token

    Returns:
        - buckets: Buckets visible to the credential

    Raises:
        - 400: Credential rejected by the object store
        - 401: Invalid or missing API Key
    """
    buckets = await service.connect(
        current_user,
        access_key_id=request.access_key_id,
        secret_access_key=request.secret_access_key,
        region=request.region,
        session_token=request.session_token,
    )
    return ConnectResponse(
        success=True,
        message="Successfully connected to object store",
        buckets=[BucketResponse(name=b.name, creation_date=b.creation_date) for b in buckets],
    )


@router.post("/disconnect", response_model=DisconnectResponse)
async def disconnect(
    current_user: str = Depends(get_current_user),
    service: ConnectionService = Depends(get_connection_service),
):
    service.disconnect(current_user)
    return DisconnectResponse(success=True, message="Disconnected from object store")


@router.get("/status", response_model=ConnectionStatusResponse)
async def status(
    current_user: str = Depends(get_current_user),
    service: ConnectionService = Depends(get_connection_service),
):
    credential = service.status(current_user)
    return ConnectionStatusResponse(
        connected=credential is not None,
        region=credential.region if credential is not None else None,
    )


@router.get("/buckets", response_model=ListBucketsResponse, responses={400: {"model": ErrorResponse}})
async def list_buckets(
    current_user: str = Depends(get_current_user),
    service: ConnectionService = Depends(get_connection_service),
):
    """
    List buckets visible to the stored credential.

    Raises:
        - 400: Not connected
        - 502: Object store listing failed
    """
    buckets = await service.list_buckets(current_user)
    return ListBucketsResponse(
        buckets=[BucketResponse(name=b.name, creation_date=b.creation_date) for b in buckets]
    )

"""Entry point for the Insights service."""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from insights import config
from insights.credential_vault import CredentialVault
from insights.database import init_database
from insights.dependencies import get_vault
from insights.exceptions import (
    InsightsException,
    InvalidAPIKeyError,
    InvalidCredentialError,
    LocalDataError,
    NotConnectedError,
    RemoteTransportError,
    ReportTimeoutError
)
from insights.remote_lister import RemoteLister, RemoteStoreTransport
from insights.routes import analytics_router, connection_router
from insights.s3_transport import S3Transport
from insights.services.connection_service import ConnectionService
from insights.services.stats_summarizer import StatsSummarizer
from insights.services.usage_aggregator import UsageAggregator

logger = setup_logging('insights')
setup_logging('common')


def create_app(
    vault: Optional[CredentialVault] = None,
    transport: Optional[RemoteStoreTransport] = None,
    aggregator: Optional[UsageAggregator] = None,
    summarizer: Optional[StatsSummarizer] = None,
    init_db: bool = True,
) -> FastAPI:
    """
    Build the FastAPI application and wire its services.

    Args:
        vault: Credential vault (a new one is created if omitted)
        transport: Object-store transport (boto3-backed if omitted)
        aggregator: Usage aggregator override
        summarizer: Stats summarizer override
        init_db: Create database tables on startup

    Returns:
        Configured FastAPI app
    """
    vault = vault or CredentialVault(
        default_ttl=config.CREDENTIAL_TTL,
        sweep_interval=config.CREDENTIAL_SWEEP_INTERVAL,
    )
    transport = transport or S3Transport(endpoint_url=config.S3_ENDPOINT_URL)
    lister = RemoteLister(
        transport,
        page_size=config.PAGE_SIZE,
        bucket_concurrency=config.BUCKET_CONCURRENCY_LIMIT,
    )
    aggregator = aggregator or UsageAggregator(vault, lister)
    summarizer = summarizer or StatsSummarizer(vault, lister)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Insights service starting up...")

        if init_db:
            init_database()
            logger.info("Database initialized")

        vault.start_sweeper()

        yield

        logger.info("Insights service shutting down...")
        vault.shutdown()

    app = FastAPI(
        title="Storage Insights",
        description="Per-user storage analytics across local files and connected object stores",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.vault = vault
    app.state.aggregator = aggregator
    app.state.summarizer = summarizer
    app.state.connection_service = ConnectionService(vault, transport, lister, aggregator)

    _register_middleware(app)
    _register_exception_handlers(app)

    app.include_router(analytics_router)
    app.include_router(connection_router)

    @app.get("/")
    async def root():
        """
        Root endpoint for health check.
        """
        return {"message": "Storage Insights API", "status": "running"}

    @app.get("/health")
    async def health_check(vault: CredentialVault = Depends(get_vault)):
        """
        Health check endpoint for Docker healthcheck.
        """
        return {"status": "healthy", "service": "insights", "credential_vault": vault.stats()}

    return app


def _register_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Middleware to log all HTTP requests and responses.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()

        logger.info(
            f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
        )

        response = await call_next(request)

        duration = time.time() - start_time

        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
        )

        response.headers["X-Request-ID"] = request_id

        return response


def _error_response(request: Request, exc: Exception, status_code: int, code: str) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    message = f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}"

    if status_code >= 500:
        logger.error(message, exc_info=True)
    else:
        logger.warning(message)

    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": code, "request_id": request_id},
    )


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidCredentialError)
    async def invalid_credential_handler(request: Request, exc: InvalidCredentialError):
        return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_CREDENTIAL")

    @app.exception_handler(NotConnectedError)
    async def not_connected_handler(request: Request, exc: NotConnectedError):
        return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "NOT_CONNECTED")

    @app.exception_handler(InvalidAPIKeyError)
    async def invalid_api_key_handler(request: Request, exc: InvalidAPIKeyError):
        return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED, "INVALID_API_KEY")

    @app.exception_handler(RemoteTransportError)
    async def remote_transport_handler(request: Request, exc: RemoteTransportError):
        return _error_response(request, exc, status.HTTP_502_BAD_GATEWAY, "REMOTE_TRANSPORT_ERROR")

    @app.exception_handler(LocalDataError)
    async def local_data_handler(request: Request, exc: LocalDataError):
        return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "LOCAL_DATA_ERROR")

    @app.exception_handler(ReportTimeoutError)
    async def report_timeout_handler(request: Request, exc: ReportTimeoutError):
        return _error_response(request, exc, status.HTTP_504_GATEWAY_TIMEOUT, "REPORT_TIMEOUT")

    @app.exception_handler(InsightsException)
    async def insights_exception_handler(request: Request, exc: InsightsException):
        return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR")


app = create_app()


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    app.state.vault.install_signal_handlers()

    uvicorn.run(
        app,
        host=config.INSIGHTS_HOST,
        port=config.INSIGHTS_PORT,
    )


if __name__ == "__main__":
    main()

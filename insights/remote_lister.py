"""
Budgeted traversal of remote object-store listings.

Listings are consumed page by page through an async generator so a caller
can stop at any point; a full bucket listing is never buffered. One
ObjectBudget is shared by every bucket in a traversal, and reservations
against it are atomic, so concurrent bucket walks can never fold more
objects than the ceiling allows.
"""

import asyncio
import threading
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, List, Optional, Protocol, Sequence

from common.constants import BUCKET_CONCURRENCY, LIST_PAGE_SIZE
from common.logging_config import get_logger
from common.types import BucketDescriptor, Credential, ObjectPage, RemoteObjectRecord
from insights.exceptions import RemoteTransportError

logger = get_logger(__name__)

FoldFn = Callable[[str, Sequence[RemoteObjectRecord]], None]


class RemoteStoreTransport(Protocol):
    """Operations the object-store transport must provide."""

    def list_buckets(self, credential: Credential) -> List[BucketDescriptor]:
        ...

    def list_objects_page(
        self,
        bucket: str,
        prefix: str,
        credential: Credential,
        continuation_token: Optional[str],
        page_size: int,
    ) -> ObjectPage:
        ...

    def validate_credential(self, credential: Credential) -> List[BucketDescriptor]:
        ...


class ObjectBudget:
    """
    Thread-safe ceiling on the number of remote objects examined in one run.
    """

    def __init__(self, ceiling: int):
        if ceiling < 0:
            raise ValueError("ceiling must not be negative")
        self.ceiling = ceiling
        self._used = 0
        self._lock = threading.Lock()

    def reserve(self, requested: int) -> int:
        """
        Reserve up to requested objects from the budget.

        Returns:
            Number of objects actually granted (may be less than requested)
        """
        with self._lock:
            granted = max(0, min(requested, self.ceiling - self._used))
            self._used += granted
            return granted

    @property
    def used(self) -> int:
        with self._lock:
            return self._used

    @property
    def exhausted(self) -> bool:
        with self._lock:
            return self._used >= self.ceiling


@dataclass
class TraversalResult:
    """
    Outcome of one budgeted traversal across all visible buckets.
    """
    partial: bool = False
    objects_examined: int = 0
    buckets_scanned: List[str] = field(default_factory=list)
    failed_buckets: List[str] = field(default_factory=list)
    skipped_buckets: List[str] = field(default_factory=list)
    budget_exhausted: bool = False


class RemoteLister:
    """
    Drives the object-store transport through budgeted, stoppable listings.
    """

    def __init__(
        self,
        transport: RemoteStoreTransport,
        page_size: int = LIST_PAGE_SIZE,
        bucket_concurrency: int = BUCKET_CONCURRENCY,
    ):
        self.transport = transport
        self.page_size = page_size
        self.bucket_concurrency = max(1, bucket_concurrency)

    async def list_buckets(self, credential: Credential) -> List[BucketDescriptor]:
        try:
            return await asyncio.to_thread(self.transport.list_buckets, credential)
        except RemoteTransportError:
            raise
        except Exception as e:
            raise RemoteTransportError(f"Failed to list buckets: {e}") from e

    async def iter_pages(
        self,
        bucket: str,
        credential: Credential,
        prefix: str = "",
    ) -> AsyncIterator[ObjectPage]:
        """
        Yield successive listing pages for bucket until it is exhausted.

        Each page's continuation token feeds the next request, so pages are
        fetched strictly in order. Stop iterating to stop fetching.

        Raises:
            RemoteTransportError: If any page request fails
        """
        token: Optional[str] = None

        while True:
            try:
                page = await asyncio.to_thread(
                    self.transport.list_objects_page,
                    bucket,
                    prefix,
                    credential,
                    token,
                    self.page_size,
                )
            except RemoteTransportError:
                raise
            except Exception as e:
                raise RemoteTransportError(f"Failed to list objects in {bucket}: {e}", bucket=bucket) from e

            yield page

            if not page.has_more:
                return
            token = page.next_token

    async def traverse(
        self,
        credential: Credential,
        budget: ObjectBudget,
        fold: FoldFn,
        principal: str = "",
    ) -> TraversalResult:
        """
        Walk every bucket visible to credential, folding objects under budget.

        A failing bucket marks the result partial and the walk moves on to
        the next bucket. Exhausting the budget stops all further fetching.

        Args:
            credential: Credential used for every call
            budget: Shared ceiling for this traversal
            fold: Called with (bucket_name, objects) for every granted batch
            principal: Principal on whose behalf the walk runs (for logging)

        Returns:
            TraversalResult describing what was examined
        """
        result = TraversalResult()

        try:
            buckets = await self.list_buckets(credential)
        except RemoteTransportError as e:
            logger.warning(f"Remote bucket listing failed for {principal}: {e}")
            result.partial = True
            return result

        stop = asyncio.Event()
        semaphore = asyncio.Semaphore(self.bucket_concurrency)

        async def walk(bucket: BucketDescriptor) -> None:
            async with semaphore:
                if stop.is_set():
                    result.partial = True
                    result.skipped_buckets.append(bucket.name)
                    return
                await self._walk_bucket(bucket.name, credential, budget, fold, stop, result, principal)

        await asyncio.gather(*(walk(bucket) for bucket in buckets))

        result.objects_examined = budget.used
        if result.budget_exhausted:
            logger.warning(
                f"Remote traversal for {principal} hit the ceiling of {budget.ceiling} objects; "
                f"{len(result.skipped_buckets)} bucket(s) skipped"
            )
        return result

    async def _walk_bucket(
        self,
        bucket: str,
        credential: Credential,
        budget: ObjectBudget,
        fold: FoldFn,
        stop: asyncio.Event,
        result: TraversalResult,
        principal: str,
    ) -> None:
        try:
            async with aclosing(self.iter_pages(bucket, credential)) as pages:
                async for page in pages:
                    granted = budget.reserve(len(page.objects))
                    if granted:
                        fold(bucket, page.objects[:granted])

                    if granted < len(page.objects):
                        self._mark_exhausted(result, stop)
                        break

                    if budget.exhausted:
                        result.budget_exhausted = True
                        stop.set()
                        if page.has_more:
                            result.partial = True
                        break

                    if stop.is_set() and page.has_more:
                        result.partial = True
                        break
        except RemoteTransportError as e:
            logger.warning(f"Remote listing of bucket {bucket} failed for {principal}: {e}")
            result.partial = True
            result.failed_buckets.append(bucket)
            return

        result.buckets_scanned.append(bucket)

    @staticmethod
    def _mark_exhausted(result: TraversalResult, stop: asyncio.Event) -> None:
        result.partial = True
        result.budget_exhausted = True
        stop.set()

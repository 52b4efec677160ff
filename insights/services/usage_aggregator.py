"""Usage analytics across local file records and remote object listings."""

import asyncio
import heapq
import itertools
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from common.constants import RECENT_WINDOW_DAYS, SIZE_BUCKETS, TOP_ITEMS_LIMIT
from common.logging_config import get_logger
from common.ttl_cache import TTLCache
from common.types import LocalFileRecord, LocalFolderRecord, RemoteObjectRecord
from insights import config
from insights.classification import classify_mime_type, classify_object_key, size_bucket_label
from insights.credential_vault import CredentialVault
from insights.domain import DistributionEntry, ReportCounts, ReportItem, UsageReport
from insights.exceptions import LocalDataError, ReportTimeoutError
from insights.remote_lister import ObjectBudget, RemoteLister
from insights.repositories.file_repository import FileRepository
from insights.repositories.folder_repository import FolderRepository

logger = get_logger(__name__)

UNKNOWN_BUCKET = "Unknown"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _distribution(totals: Dict[str, List[int]]) -> Tuple[DistributionEntry, ...]:
    ordered = sorted(totals.items(), key=lambda kv: (-kv[1][1], kv[0]))
    return tuple(DistributionEntry(label=label, count=c, bytes=b) for label, (c, b) in ordered)


class _UsageAccumulator:
    """
    Running totals and distributions for one report run.

    Folding is commutative: the final values do not depend on the order in
    which files and objects are added.
    """

    def __init__(self, top_limit: int, recent_since: datetime):
        self.top_limit = top_limit
        self.recent_since = recent_since

        self.total_bytes = 0
        self.item_count = 0
        self.by_type: Dict[str, List[int]] = {}
        self.by_size: Dict[str, List[int]] = {label: [0, 0] for label, _, _ in SIZE_BUCKETS}
        self.by_bucket: Dict[str, List[int]] = {}

        self._seq = itertools.count()
        self._largest: List[Tuple[int, int, ReportItem]] = []
        self._recent: List[Tuple[datetime, int, ReportItem]] = []

    def add_local(self, record: LocalFileRecord) -> None:
        category = classify_mime_type(record.mime_type)
        self._add(
            ReportItem(
                item_id=str(record.file_id),
                name=record.name,
                bytes=record.size,
                category=category.value,
                source="local",
                mime_type=record.mime_type,
                uploaded_at=_as_utc(record.uploaded_at),
            ),
            bucket=record.storage_bucket or UNKNOWN_BUCKET,
        )

    def add_remote_batch(self, bucket: str, objects: Sequence[RemoteObjectRecord]) -> None:
        for obj in objects:
            category = classify_object_key(obj.key)
            self._add(
                ReportItem(
                    item_id=f"{bucket}/{obj.key}",
                    name=obj.key,
                    bytes=obj.size,
                    category=category.value,
                    source="external",
                    uploaded_at=_as_utc(obj.last_modified),
                ),
                bucket=bucket,
            )

    def _add(self, item: ReportItem, bucket: str) -> None:
        self.total_bytes += item.bytes
        self.item_count += 1

        for totals, label in (
            (self.by_type, item.category),
            (self.by_size, size_bucket_label(item.bytes)),
            (self.by_bucket, bucket),
        ):
            slot = totals.setdefault(label, [0, 0])
            slot[0] += 1
            slot[1] += item.bytes

        seq = next(self._seq)
        self._keep_top(self._largest, (item.bytes, -seq, item))

        if item.uploaded_at is not None and item.uploaded_at > self.recent_since:
            self._keep_top(self._recent, (item.uploaded_at, -seq, item))

    def _keep_top(self, heap: list, entry: tuple) -> None:
        if self.top_limit <= 0:
            return
        if len(heap) < self.top_limit:
            heapq.heappush(heap, entry)
        elif entry[:2] > heap[0][:2]:
            heapq.heapreplace(heap, entry)

    @staticmethod
    def _ranked(heap: list) -> Tuple[ReportItem, ...]:
        return tuple(item for _, _, item in sorted(heap, key=lambda e: e[:2], reverse=True))

    def largest(self) -> Tuple[ReportItem, ...]:
        return self._ranked(self._largest)

    def recent(self) -> Tuple[ReportItem, ...]:
        return self._ranked(self._recent)


class UsageAggregator:
    """
    Builds per-principal usage reports and memoizes them for a short TTL.

    A cached report is served without touching local storage or the object
    store. Remote listing failures and the object ceiling only make a report
    partial; failing to read local records or exceeding the overall timeout
    raises and leaves the cache untouched.
    """

    def __init__(
        self,
        vault: CredentialVault,
        lister: RemoteLister,
        file_repo: Optional[FileRepository] = None,
        folder_repo: Optional[FolderRepository] = None,
        capacity_bytes: int = config.CAPACITY_BYTES,
        object_ceiling: int = config.REPORT_CEILING,
        cache_ttl: float = config.REPORT_CACHE_TTL,
        timeout: Optional[float] = config.REPORT_TIMEOUT,
        top_limit: int = TOP_ITEMS_LIMIT,
        recent_window_days: int = RECENT_WINDOW_DAYS,
        clock: Callable[[], float] = time.time,
    ):
        self.vault = vault
        self.lister = lister
        self.file_repo = file_repo or FileRepository()
        self.folder_repo = folder_repo or FolderRepository()
        self.capacity_bytes = capacity_bytes
        self.object_ceiling = object_ceiling
        self.timeout = timeout
        self.top_limit = top_limit
        self.recent_window = timedelta(days=recent_window_days)
        self._clock = clock
        self._cache: TTLCache[str, UsageReport] = TTLCache(cache_ttl, clock=clock, name="report")
        self._generations: Dict[str, int] = {}
        self._generation_lock = threading.Lock()

    async def compute_report(
        self,
        principal: str,
        force_refresh: bool = False,
        include_external: bool = False,
    ) -> UsageReport:
        """
        Return the usage report for principal.

        Args:
            principal: Account to report on
            force_refresh: Ignore any cached report
            include_external: Fold in objects from the connected object store

        Returns:
            Cached or freshly computed UsageReport

        Raises:
            LocalDataError: If local records cannot be read
            ReportTimeoutError: If the computation exceeds the timeout
        """
        if not force_refresh:
            cached = self._cache.get(principal)
            if cached is not None and cached.include_external == include_external:
                logger.debug(f"Serving cached usage report for {principal}")
                return cached

        generation = self._generation(principal)

        try:
            report = await asyncio.wait_for(
                self._build_report(principal, include_external),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Usage report for {principal} timed out after {self.timeout}s")
            raise ReportTimeoutError(f"Usage report timed out after {self.timeout}s")

        if self._generation(principal) != generation:
            logger.info(f"Usage report for {principal} was invalidated while computing; not caching it")
            return report

        self._cache.set(principal, report)
        logger.info(
            f"Computed usage report for {principal}: {report.counts.files} item(s), "
            f"{report.used_bytes} bytes, partial={report.partial}"
        )
        return report

    def invalidate(self, principal: str) -> bool:
        """
        Drop the cached report for principal.

        A report still being computed for principal when this is called is
        returned to its caller but not cached.
        """
        with self._generation_lock:
            self._generations[principal] = self._generations.get(principal, 0) + 1
        return self._cache.delete(principal)

    def clear_cache(self) -> int:
        return self._cache.clear()

    def _generation(self, principal: str) -> int:
        with self._generation_lock:
            return self._generations.get(principal, 0)

    async def _load_local(self, principal: str) -> Tuple[List[LocalFileRecord], List[LocalFolderRecord]]:
        try:
            files = await asyncio.to_thread(self.file_repo.list_files_by_owner, principal)
            folders = await asyncio.to_thread(self.folder_repo.list_folders_by_owner, principal)
        except Exception as e:
            logger.error(f"Failed to load local records for {principal}: {e}", exc_info=True)
            raise LocalDataError(f"Failed to load local records: {e}") from e
        return files, folders

    async def _build_report(self, principal: str, include_external: bool) -> UsageReport:
        files, folders = await self._load_local(principal)

        now = self._clock()
        recent_since = datetime.fromtimestamp(now, tz=timezone.utc) - self.recent_window
        acc = _UsageAccumulator(self.top_limit, recent_since)

        for record in files:
            acc.add_local(record)

        partial = False
        if include_external:
            credential = self.vault.get(principal)
            if credential is not None and credential.is_well_formed():
                budget = ObjectBudget(self.object_ceiling)
                traversal = await self.lister.traverse(credential, budget, acc.add_remote_batch, principal)
                partial = traversal.partial

        shared = sum(1 for f in files if f.is_shared) + sum(1 for f in folders if f.is_shared)
        used = acc.total_bytes
        usage_pct = (used / self.capacity_bytes * 100) if self.capacity_bytes else 0.0

        return UsageReport(
            capacity_bytes=self.capacity_bytes,
            used_bytes=used,
            available_bytes=self.capacity_bytes - used,
            usage_pct=usage_pct,
            counts=ReportCounts(files=acc.item_count, folders=len(folders), shared=shared),
            files_by_type=_distribution(acc.by_type),
            size_distribution=tuple(
                DistributionEntry(label=label, count=acc.by_size[label][0], bytes=acc.by_size[label][1])
                for label, _, _ in SIZE_BUCKETS
            ),
            bucket_usage=_distribution(acc.by_bucket),
            top_files=acc.largest(),
            recent_uploads=acc.recent(),
            partial=partial,
            refreshed_at=self._clock(),
            include_external=include_external,
        )

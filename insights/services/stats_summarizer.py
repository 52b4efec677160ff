"""Dashboard counters across local records and the connected object store."""

import asyncio
from typing import Optional, Sequence

from common.logging_config import get_logger
from common.types import RemoteObjectRecord
from insights import config
from insights.credential_vault import CredentialVault
from insights.domain import StorageStats
from insights.exceptions import LocalDataError
from insights.remote_lister import ObjectBudget, RemoteLister
from insights.repositories.file_repository import FileRepository
from insights.repositories.folder_repository import FolderRepository

logger = get_logger(__name__)


class StatsSummarizer:
    """
    Always-fresh totals for the dashboard.

    Remote objects contribute only to counts and bytes, under their own
    (higher) ceiling. Nothing is cached.
    """

    def __init__(
        self,
        vault: CredentialVault,
        lister: RemoteLister,
        file_repo: Optional[FileRepository] = None,
        folder_repo: Optional[FolderRepository] = None,
        capacity_bytes: int = config.CAPACITY_BYTES,
        object_ceiling: int = config.STATS_CEILING,
    ):
        self.vault = vault
        self.lister = lister
        self.file_repo = file_repo or FileRepository()
        self.folder_repo = folder_repo or FolderRepository()
        self.capacity_bytes = capacity_bytes
        self.object_ceiling = object_ceiling

    async def summarize(self, principal: str) -> StorageStats:
        try:
            files = await asyncio.to_thread(self.file_repo.list_files_by_owner, principal)
            folders = await asyncio.to_thread(self.folder_repo.list_folders_by_owner, principal)
        except Exception as e:
            logger.error(f"Failed to load local records for {principal}: {e}", exc_info=True)
            raise LocalDataError(f"Failed to load local records: {e}") from e

        remote_count = 0
        remote_bytes = 0
        partial = False

        def fold(bucket: str, objects: Sequence[RemoteObjectRecord]) -> None:
            nonlocal remote_count, remote_bytes
            remote_count += len(objects)
            remote_bytes += sum(obj.size for obj in objects)

        credential = self.vault.get(principal)
        if credential is not None and credential.is_well_formed():
            budget = ObjectBudget(self.object_ceiling)
            traversal = await self.lister.traverse(credential, budget, fold, principal)
            partial = traversal.partial

        total_size = sum(f.size for f in files) + remote_bytes
        shared = sum(1 for f in files if f.is_shared) + sum(1 for f in folders if f.is_shared)

        return StorageStats(
            total_files=len(files) + remote_count,
            total_folders=len(folders),
            total_size=total_size,
            shared_items=shared,
            total_capacity=self.capacity_bytes,
            usage_percentage=(total_size / self.capacity_bytes * 100) if self.capacity_bytes else 0.0,
            external_objects=remote_count,
            partial=partial,
        )

"""Folder repository for database operations."""

from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger
from common.types import LocalFolderRecord
from insights.database import get_db_connection

logger = get_logger(__name__)


class FolderRepository:
    @staticmethod
    def create_folder(
        owner_id: str,
        name: str,
        is_shared: bool = False,
        parent_id: Optional[int] = None,
    ) -> LocalFolderRecord:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO folders (owner_id, name, parent_id, is_shared, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (owner_id, name, parent_id, int(is_shared), datetime.utcnow().isoformat())
            )
            conn.commit()
            folder_id = cursor.lastrowid

        logger.debug(f"Created folder {folder_id} for owner {owner_id}")

        return LocalFolderRecord(
            folder_id=folder_id,
            owner_id=owner_id,
            name=name,
            is_shared=is_shared,
            parent_id=parent_id,
        )

    @staticmethod
    def list_folders_by_owner(owner_id: str) -> List[LocalFolderRecord]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT folder_id, owner_id, name, parent_id, is_shared
                FROM folders
                WHERE owner_id = ?
                ORDER BY folder_id
                """,
                (owner_id,)
            )
            return [
                LocalFolderRecord(
                    folder_id=row["folder_id"],
                    owner_id=row["owner_id"],
                    name=row["name"],
                    is_shared=bool(row["is_shared"]),
                    parent_id=row["parent_id"],
                )
                for row in cursor.fetchall()
            ]

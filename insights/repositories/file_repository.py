"""File repository for database operations."""

import sqlite3
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger
from common.types import LocalFileRecord
from insights.database import get_db_connection, parse_timestamp

logger = get_logger(__name__)


def _row_to_record(row: sqlite3.Row) -> LocalFileRecord:
    return LocalFileRecord(
        file_id=row["file_id"],
        owner_id=row["owner_id"],
        name=row["name"],
        mime_type=row["mime_type"],
        size=row["size"],
        storage_bucket=row["storage_bucket"],
        storage_key=row["storage_key"],
        is_shared=bool(row["is_shared"]),
        uploaded_at=parse_timestamp(row["uploaded_at"]),
        folder_id=row["folder_id"],
    )


class FileRepository:
    @staticmethod
    def create_file(
        owner_id: str,
        name: str,
        mime_type: str,
        size: int,
        storage_bucket: str,
        storage_key: str,
        is_shared: bool = False,
        uploaded_at: Optional[datetime] = None,
        folder_id: Optional[int] = None,
    ) -> LocalFileRecord:
        if uploaded_at is None:
            uploaded_at = datetime.utcnow()

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO files (owner_id, folder_id, name, mime_type, size,
                                   storage_bucket, storage_key, is_shared, uploaded_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (owner_id, folder_id, name, mime_type, size, storage_bucket,
                 storage_key, int(is_shared), uploaded_at.isoformat())
            )
            conn.commit()
            file_id = cursor.lastrowid

        logger.debug(f"Created file {file_id} for owner {owner_id}")

        return LocalFileRecord(
            file_id=file_id,
            owner_id=owner_id,
            name=name,
            mime_type=mime_type,
            size=size,
            storage_bucket=storage_bucket,
            storage_key=storage_key,
            is_shared=is_shared,
            uploaded_at=uploaded_at,
            folder_id=folder_id,
        )

    @staticmethod
    def list_files_by_owner(owner_id: str) -> List[LocalFileRecord]:
        """
        Return every file owned by owner_id, unpaginated.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT file_id, owner_id, folder_id, name, mime_type, size,
                       storage_bucket, storage_key, is_shared, uploaded_at
                FROM files
                WHERE owner_id = ?
                ORDER BY file_id
                """,
                (owner_id,)
            )
            return [_row_to_record(row) for row in cursor.fetchall()]

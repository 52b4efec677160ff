"""User repository for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from common.logging_config import get_logger
from insights.database import get_db_connection, parse_timestamp

logger = get_logger(__name__)


@dataclass
class User:
    user_id: str
    email: str
    api_key: Optional[str]
    created_at: datetime


class UserRepository:
    @staticmethod
    def create_user(user_id: str, email: str, api_key: str, created_at: Optional[datetime] = None) -> User:
        logger.debug(f"Creating user: {email} [user_id={user_id}]")

        if created_at is None:
            created_at = datetime.utcnow()

        with get_db_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    """
                    INSERT INTO users (user_id, email, api_key, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (user_id, email, api_key, created_at.isoformat())
                )
                conn.commit()
                logger.info(f"User created successfully: {email} [user_id={user_id}]")
            except Exception as e:
                logger.error(f"Failed to create user {email}: {e}", exc_info=True)
                raise

        return User(user_id=user_id, email=email, api_key=api_key, created_at=created_at)

    @staticmethod
    def get_by_api_key(api_key: str) -> Optional[User]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT user_id, email, api_key, created_at FROM users WHERE api_key = ?",
                (api_key,)
            )
            row = cursor.fetchone()

            if row is None:
                return None

            return User(
                user_id=row["user_id"],
                email=row["email"],
                api_key=row["api_key"],
                created_at=parse_timestamp(row["created_at"]),
            )

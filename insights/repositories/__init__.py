"""Repository layer for data access."""

from insights.repositories.user_repository import UserRepository
from insights.repositories.file_repository import FileRepository
from insights.repositories.folder_repository import FolderRepository

__all__ = [
    "UserRepository",
    "FileRepository",
    "FolderRepository",
]

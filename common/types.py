"""Shared data type definitions (Credential, object listings, local records)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from common.constants import DEFAULT_REGION


@dataclass(frozen=True)
class Credential:
    """
    Object-store access credential.

    The secret and session token are excluded from repr so a credential can
    never leak through a log line or traceback.
    """
    access_key_id: str
    secret_access_key: str = field(repr=False)
    region: str = DEFAULT_REGION
    session_token: Optional[str] = field(default=None, repr=False)

    def is_well_formed(self) -> bool:
        return bool(self.access_key_id and self.secret_access_key)


@dataclass(frozen=True)
class BucketDescriptor:
    name: str
    creation_date: Optional[datetime] = None


@dataclass(frozen=True)
class RemoteObjectRecord:
    """
    One object returned by a remote listing page.
    """
    key: str
    size: int
    last_modified: Optional[datetime] = None


@dataclass(frozen=True)
class ObjectPage:
    """
    Single page of a continuation-token listing.

    Attributes:
        objects: Objects on this page
        next_token: Continuation token for the following page, if any
        truncated: True if the listing has more pages
    """
    objects: Tuple[RemoteObjectRecord, ...]
    next_token: Optional[str] = None
    truncated: bool = False

    @property
    def has_more(self) -> bool:
        return self.truncated and bool(self.next_token)


@dataclass(frozen=True)
class LocalFileRecord:
    """
    File tracked by the local metadata store.
    """
    file_id: int
    owner_id: str
    name: str
    mime_type: str
    size: int
    storage_bucket: str
    storage_key: str
    is_shared: bool
    uploaded_at: Optional[datetime]
    folder_id: Optional[int] = None


@dataclass(frozen=True)
class LocalFolderRecord:
    folder_id: int
    owner_id: str
    name: str
    is_shared: bool
    parent_id: Optional[int] = None

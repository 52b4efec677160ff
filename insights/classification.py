"""Classification of stored content by type and by size."""

from enum import Enum
from typing import Optional

from common.constants import SIZE_BUCKETS


class FileCategory(str, Enum):
    IMAGES = "Images"
    VIDEOS = "Videos"
    AUDIO = "Audio"
    PDFS = "PDFs"
    DOCUMENTS = "Documents"
    ARCHIVES = "Archives"
    OTHER = "Other"


# Checked in order; first match wins.
MIME_PREFIX_CATEGORIES = (
    ("image/", FileCategory.IMAGES),
    ("video/", FileCategory.VIDEOS),
    ("audio/", FileCategory.AUDIO),
)

MIME_SUBSTRING_CATEGORIES = (
    ("pdf", FileCategory.PDFS),
    ("text/", FileCategory.DOCUMENTS),
    ("doc", FileCategory.DOCUMENTS),
    ("zip", FileCategory.ARCHIVES),
    ("rar", FileCategory.ARCHIVES),
    ("7z", FileCategory.ARCHIVES),
)

EXTENSION_CATEGORIES = {
    "jpg": FileCategory.IMAGES,
    "jpeg": FileCategory.IMAGES,
    "png": FileCategory.IMAGES,
    "gif": FileCategory.IMAGES,
    "bmp": FileCategory.IMAGES,
    "webp": FileCategory.IMAGES,
    "mp4": FileCategory.VIDEOS,
    "avi": FileCategory.VIDEOS,
    "mov": FileCategory.VIDEOS,
    "wmv": FileCategory.VIDEOS,
    "flv": FileCategory.VIDEOS,
    "mp3": FileCategory.AUDIO,
    "wav": FileCategory.AUDIO,
    "flac": FileCategory.AUDIO,
    "aac": FileCategory.AUDIO,
    "pdf": FileCategory.PDFS,
    "doc": FileCategory.DOCUMENTS,
    "docx": FileCategory.DOCUMENTS,
    "txt": FileCategory.DOCUMENTS,
    "rtf": FileCategory.DOCUMENTS,
    "zip": FileCategory.ARCHIVES,
    "rar": FileCategory.ARCHIVES,
    "7z": FileCategory.ARCHIVES,
    "tar": FileCategory.ARCHIVES,
    "gz": FileCategory.ARCHIVES,
}


def classify_mime_type(mime_type: Optional[str]) -> FileCategory:
    """
    Map a stored MIME type to a category.

    Args:
        mime_type: MIME type as recorded at upload (may be empty)

    Returns:
        Matching category, or FileCategory.OTHER
    """
    if not mime_type:
        return FileCategory.OTHER

    mime_type = mime_type.lower()

    for prefix, category in MIME_PREFIX_CATEGORIES:
        if mime_type.startswith(prefix):
            return category

    for token, category in MIME_SUBSTRING_CATEGORIES:
        if token in mime_type:
            return category

    return FileCategory.OTHER


def extension_of(key: str) -> Optional[str]:
    """
    Return the lower-cased extension of the last path segment of key.
    """
    name = key.rsplit("/", 1)[-1]
    if "." not in name:
        return None
    ext = name.rsplit(".", 1)[-1].lower()
    return ext or None


def classify_object_key(key: Optional[str]) -> FileCategory:
    """
    Map an object-store key to a category using its file extension.
    """
    if not key:
        return FileCategory.OTHER

    ext = extension_of(key)
    if ext is None:
        return FileCategory.OTHER

    return EXTENSION_CATEGORIES.get(ext, FileCategory.OTHER)


def size_bucket_label(size: int) -> str:
    """
    Return the label of the size bucket containing size.

    Buckets are half-open [lower, upper) and cover every non-negative size.
    Negative sizes are treated as zero.
    """
    size = max(size, 0)
    for label, lower, upper in SIZE_BUCKETS:
        if size >= lower and (upper is None or size < upper):
            return label
    raise ValueError(f"No size bucket for {size}")

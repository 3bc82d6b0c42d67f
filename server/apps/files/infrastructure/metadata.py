"""Metadata extraction utilities for files."""

import hashlib
import mimetypes
import secrets
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO, Final

from django.core.exceptions import SuspiciousFileOperation
from django.utils.text import get_valid_filename

from server.apps.files.models import TAG_SEPARATOR

_CHUNK_SIZE: Final = 8192  # 8KB chunks for checksum calculation
_TOKEN_BYTES: Final = 4  # 8 hex chars
_STEM_MAX_LENGTH: Final = 100
_FALLBACK_FILENAME: Final = 'upload'


def detect_mime_type(filename: str, declared: str | None = None) -> str:
    """Detect MIME type of an upload.

    The content type declared by the client wins. Otherwise the type is
    guessed from the filename extension.

    Args:
        filename: Filename with extension.
        declared: Content type sent by the client, if any.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    if declared:
        return declared
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return 'application/octet-stream'
    return mime_type


def calculate_checksum(file_obj: BinaryIO) -> str:
    """Calculate SHA256 checksum of file.

    Reads file in chunks to handle large files efficiently.
    Resets file pointer to beginning after calculation.

    Args:
        file_obj: File-like object to checksum.

    Returns:
        Hex-encoded SHA256 hash string.
    """
    sha256_hash = hashlib.sha256()

    file_obj.seek(0)

    for chunk in iter(lambda: file_obj.read(_CHUNK_SIZE), b''):
        sha256_hash.update(chunk)

    # Reset file pointer to beginning for subsequent operations
    file_obj.seek(0)

    return sha256_hash.hexdigest()


def get_file_size(file_obj: BinaryIO) -> int:
    """Get file size from file object.

    Args:
        file_obj: File-like object.

    Returns:
        File size in bytes.
    """
    size = getattr(file_obj, 'size', None)
    if size is not None:
        return size
    file_size = len(file_obj.read())
    file_obj.seek(0)
    return file_size


def sanitize_filename(filename: str | None) -> str:
    """Reduce a client-supplied filename to a safe storage name.

    Directory components are dropped and unsafe characters replaced.

    Args:
        filename: Original filename, possibly with a path.

    Returns:
        Safe filename, 'upload' if nothing usable is left.
    """
    name = Path(filename or '').name
    try:
        cleaned = get_valid_filename(name)
    except SuspiciousFileOperation:
        return _FALLBACK_FILENAME
    path = Path(cleaned)
    stem = path.stem[:_STEM_MAX_LENGTH] or _FALLBACK_FILENAME
    return f'{stem}{path.suffix.lower()}'


def generate_storage_key(visibility: str, filename: str | None) -> str:
    """Generate a unique storage key for an upload.

    The key is ``{visibility}/{stem}__{timestamp}_{token}{suffix}``. The
    microsecond UTC timestamp orders keys by upload time and the random
    token keeps two uploads in the same microsecond apart.

    Args:
        visibility: 'public' or 'private', used as the key prefix.
        filename: Original filename.

    Returns:
        Storage key (e.g., 'public/report__20261018T143052123456_9f1c2a7b.pdf').
    """
    path = Path(sanitize_filename(filename))
    timestamp = datetime.now(tz=UTC).strftime('%Y%m%dT%H%M%S%f')
    token = secrets.token_hex(_TOKEN_BYTES)
    return f'{visibility}/{path.stem}__{timestamp}_{token}{path.suffix}'


def parse_tags(raw_tags: str | Iterable[str] | None) -> list[str]:
    """Normalize tags into an ordered, de-duplicated list.

    Accepts either a comma-separated string ('a, b') or an iterable of
    strings. Whitespace is trimmed, empty entries dropped and the first
    occurrence of a tag (compared case-insensitively) is kept.

    Args:
        raw_tags: Tags as sent by the client.

    Returns:
        List of tags in input order.
    """
    if raw_tags is None:
        return []
    if isinstance(raw_tags, str):
        candidates = raw_tags.split(TAG_SEPARATOR)
    else:
        candidates = [
            part
            for tag in raw_tags
            for part in str(tag).split(TAG_SEPARATOR)
        ]

    seen: set[str] = set()
    tags: list[str] = []
    for candidate in candidates:
        tag = ' '.join(candidate.split())
        if not tag or tag.casefold() in seen:
            continue
        seen.add(tag.casefold())
        tags.append(tag)
    return tags


def join_tags(tags: Iterable[str]) -> str:
    """Serialize parsed tags for storage in the tags column.

    Args:
        tags: Tags from parse_tags.

    Returns:
        Separator-joined string.
    """
    return TAG_SEPARATOR.join(tags)

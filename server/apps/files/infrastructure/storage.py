"""Blob store for registry documents on S3-compatible storage."""

import logging
from typing import Any, final, override

from django.core.files.base import File
from storages.backends.s3 import S3Storage

logger = logging.getLogger(__name__)


@final
class FileStorage(S3Storage):
    """S3 bucket holding the bytes of every registered document.

    Keys carry the visibility prefix (``public/`` or ``private/``).
    Objects are written once and never overwritten; with
    ``file_overwrite=False`` a colliding key gets a fresh suffix.
    """

    def put(self, key: str, content: Any, content_type: str) -> str:
        """Upload bytes under a key with the given content type.

        Args:
            key: Storage key, including the visibility prefix.
            content: File-like object with the bytes.
            content_type: MIME type stored as the object's ContentType.

        Returns:
            Key the object was stored under.

        Raises:
            Exception: Whatever the S3 client raised.
        """
        blob = File(content, name=key)
        blob.content_type = content_type  # type: ignore[attr-defined]
        logger.info('Storing %s as %s', key, content_type)
        try:
            stored_key = self.save(key, blob)
        except Exception:
            logger.exception('Could not store object: %s', key)
            raise
        if stored_key != key:
            logger.warning('Key %s taken, stored as %s', key, stored_key)
        return stored_key

    @override
    def delete(self, name: str) -> None:
        """Remove an object.

        S3 deletes are idempotent: a missing key is not an error, which
        makes a failed registry delete safe to repeat.

        Args:
            name: Storage key.

        Raises:
            Exception: Whatever the S3 client raised.
        """
        logger.info('Removing object: %s', name)
        try:
            super().delete(name)
        except Exception:
            logger.exception('Could not remove object: %s', name)
            raise

    def rollback_upload(self, name: str) -> bool:
        """Undo ``put`` after the metadata insert failed.

        Args:
            name: Key returned by ``put``.

        Returns:
            True if the object is gone, False if it is left orphaned.
        """
        logger.warning('Rolling back upload: %s', name)
        try:
            self.delete(name)
        except Exception:
            logger.error('Rollback failed, orphaned object: %s', name)
            return False
        return True

"""Handling of upload content staged by the HTTP layer."""

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from typing import Any

logger = logging.getLogger(__name__)


@contextmanager
def staged_upload(content: Any) -> Iterator[Any]:
    """Release a staged upload once the registry is done with it.

    Django writes large uploads to a temporary file on disk
    (``TemporaryUploadedFile``). The file is closed and removed when the
    block exits, whether the upload succeeded or not.

    Args:
        content: Uploaded file object, possibly None.

    Yields:
        The same content object.
    """
    try:
        yield content
    finally:
        if content is not None:
            _discard(content)


def _discard(content: Any) -> None:
    temp_path = None
    if hasattr(content, 'temporary_file_path'):
        temp_path = content.temporary_file_path()

    with suppress(OSError, ValueError):
        content.close()

    if temp_path and os.path.exists(temp_path):
        with suppress(FileNotFoundError):
            os.remove(temp_path)
        logger.debug('Removed staged upload: %s', temp_path)

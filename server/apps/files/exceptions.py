"""Exceptions for files app.

Every registry use case either returns its result or raises exactly one
``RegistryError`` subclass. ``kind`` is the stable, machine-readable
name the HTTP layer puts into error responses.
"""

from typing import ClassVar


class RegistryError(Exception):
    """Base class for all file registry failures."""

    kind: ClassVar[str] = 'registry_error'

    def __init__(self, message: str) -> None:
        """Initialize RegistryError.

        Args:
            message: Human-readable description of the failure.
        """
        self.message = message
        super().__init__(message)


class UnauthorizedError(RegistryError):
    """Raised when the upload credential is missing or wrong."""

    kind = 'unauthorized'


class InvalidInputError(RegistryError):
    """Raised when a request is malformed."""

    kind = 'invalid_input'


class FileRecordNotFoundError(RegistryError):
    """Raised when no suitable file record exists for an id."""

    kind = 'not_found'

    def __init__(self, file_id: object, message: str | None = None) -> None:
        """Initialize FileRecordNotFoundError.

        Args:
            file_id: The id that was looked up.
            message: Optional override for the default message.
        """
        self.file_id = file_id
        super().__init__(message or f'File {file_id} not found')


class AccessDeniedError(RegistryError):
    """Raised when private bytes are requested without approval."""

    kind = 'access_denied'


class StorageError(RegistryError):
    """Raised when a blob store call fails."""

    kind = 'storage_failure'


class PartialFailureError(RegistryError):
    """Raised when blob and metadata state diverged mid-operation.

    The operator has to reconcile the two, see the
    ``repair_dangling_records`` management command.
    """

    kind = 'partial_failure'


class NotificationError(RegistryError):
    """Raised when the notifier could not deliver a message."""

    kind = 'notification_failure'

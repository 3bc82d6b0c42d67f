"""Database models for files app."""

from pathlib import Path
from typing import ClassVar, Final, final, override

from django.db import models

# Constants for field max lengths
_TITLE_MAX_LENGTH: Final = 255
_FILENAME_MAX_LENGTH: Final = 255
_STORAGE_KEY_MAX_LENGTH: Final = 512
_MIME_TYPE_MAX_LENGTH: Final = 255
_CHECKSUM_MAX_LENGTH: Final = 64  # SHA256 hex length
_REQUESTER_MAX_LENGTH: Final = 255

TAG_SEPARATOR: Final = ','


class Visibility(models.TextChoices):
    """Who may list and download a file."""

    PUBLIC = 'public', 'Public'
    PRIVATE = 'private', 'Private'


@final
class FileRecord(models.Model):
    """Uploaded document stored in S3-compatible storage.

    The storage key (``file.name``) is the record's locator and always
    starts with the visibility prefix: ``public/...`` or ``private/...``.
    Records are never updated after creation, only deleted.
    """

    title = models.CharField(max_length=_TITLE_MAX_LENGTH)

    description = models.TextField(blank=True, default='')

    # Locator of the bytes in the blob store.
    # upload_to='' means we control the full key
    file = models.FileField(
        upload_to='',
        max_length=_STORAGE_KEY_MAX_LENGTH,
        help_text='Storage key: {visibility}/{name}__{timestamp}_{token}.ext',
    )

    original_filename = models.CharField(
        max_length=_FILENAME_MAX_LENGTH,
        blank=True,
        default='',
    )

    # Ordered, de-duplicated keywords joined with TAG_SEPARATOR
    tags = models.TextField(blank=True, default='')

    visibility = models.CharField(
        max_length=7,
        choices=Visibility.choices,
    )

    mime_type = models.CharField(
        max_length=_MIME_TYPE_MAX_LENGTH,
        help_text='Declared content type or guessed from the filename',
    )

    size_bytes = models.BigIntegerField(
        help_text='File size in bytes',
    )

    checksum_sha256 = models.CharField(
        max_length=_CHECKSUM_MAX_LENGTH,
        help_text='SHA256 hash for integrity verification',
        db_index=True,
    )

    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-uploaded_at', '-id']

        indexes: ClassVar[list[models.Index]] = [
            # Optimize public listing queries
            models.Index(
                fields=['visibility', '-uploaded_at'],
                name='files_visibility_recent_idx',
            ),
        ]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.CheckConstraint(
                condition=models.Q(visibility__in=Visibility.values),
                name='files_visibility_valid',
            ),
            # Storage layout must agree with the visibility column
            models.CheckConstraint(
                condition=(
                    models.Q(
                        visibility=Visibility.PUBLIC,
                        file__startswith='public/',
                    ) | models.Q(
                        visibility=Visibility.PRIVATE,
                        file__startswith='private/',
                    )
                ),
                name='files_key_matches_visibility',
            ),
            models.CheckConstraint(
                condition=~models.Q(title=''),
                name='files_title_not_empty',
            ),
            models.UniqueConstraint(
                fields=['file'],
                name='files_storage_key_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.title} ({self.visibility})'

    @property
    def is_public(self) -> bool:
        """Whether the file may be listed and downloaded directly."""
        return self.visibility == Visibility.PUBLIC

    def get_tags(self) -> list[str]:
        """Return tags in their stored order.

        Returns:
            List of tags, empty if the record has none.
        """
        if not self.tags:
            return []
        return self.tags.split(TAG_SEPARATOR)

    def get_extension(self) -> str:
        """Extract file extension.

        Example: 'report.pdf' -> 'pdf'

        Returns:
            Extension without dot (lowercase).
        """
        extension = Path(self.file.name).suffix
        return extension.lstrip('.').lower()

    def matches(self, query: str) -> bool:
        """Check whether a search query hits the title or any single tag.

        Args:
            query: Search text. Blank text matches everything.

        Returns:
            True if the title or one of the tags contains the query,
            ignoring case.
        """
        needle = query.strip().casefold()
        if not needle:
            return True
        if needle in self.title.casefold():
            return True
        return any(needle in tag.casefold() for tag in self.get_tags())


@final
class AccessRequest(models.Model):
    """Audit record of someone asking for a private file.

    Approval happens out of band (the administrator answers the
    notification mail), so requests are never updated. The title is
    copied so the audit trail survives deletion of the file.
    """

    file = models.ForeignKey(
        FileRecord,
        on_delete=models.SET_NULL,
        null=True,
        related_name='access_requests',
    )

    file_title = models.CharField(max_length=_TITLE_MAX_LENGTH)

    requester = models.CharField(max_length=_REQUESTER_MAX_LENGTH)

    reason = models.TextField(blank=True, default='')

    requested_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Access Request'  # type: ignore[mutable-override]
        verbose_name_plural = 'Access Requests'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-requested_at']

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.requester} -> {self.file_title}'

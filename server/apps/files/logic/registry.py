"""Business logic for the file registry.

``FileRegistry`` coordinates the blob store (S3), the metadata store
(Django ORM) and the notifier (mail). Visibility is checked on the
``visibility`` column for every read path; the ``public/`` and
``private/`` key prefixes only mirror it.
"""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Final, final

from django.core.files.storage import default_storage
from django.db import DatabaseError, transaction
from django.utils.crypto import constant_time_compare

from server.apps.files.conf import RegistryConfig
from server.apps.files.exceptions import (
    AccessDeniedError,
    FileRecordNotFoundError,
    InvalidInputError,
    NotificationError,
    PartialFailureError,
    StorageError,
    UnauthorizedError,
)
from server.apps.files.infrastructure.metadata import (
    calculate_checksum,
    detect_mime_type,
    generate_storage_key,
    get_file_size,
    join_tags,
    parse_tags,
    sanitize_filename,
)
from server.apps.files.infrastructure.notifier import MailNotifier
from server.apps.files.infrastructure.uploads import staged_upload
from server.apps.files.logic.summaries import FileSummary
from server.apps.files.models import AccessRequest, FileRecord, Visibility

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import FileStorage

logger = logging.getLogger(__name__)

_TITLE_MAX_LENGTH: Final = 255
_REQUESTER_MAX_LENGTH: Final = 255


@final
class FileRegistry:
    """Use cases of the file registry.

    Nothing is cached between calls: every operation re-reads the
    metadata store.
    """

    def __init__(
        self,
        config: RegistryConfig,
        storage: 'FileStorage',
        notifier: MailNotifier,
    ) -> None:
        """Initialize the registry.

        Args:
            config: Upload secret and notification settings.
            storage: Blob store backend.
            notifier: Sends access request notifications.
        """
        self._config = config
        self._storage = storage
        self._notifier = notifier

    def authorize(self, credential: str | None) -> None:
        """Check the shared upload credential.

        Args:
            credential: Secret presented by the caller.

        Raises:
            UnauthorizedError: If the credential does not match, or no
                secret is configured at all.
        """
        secret = self._config.upload_secret
        if not secret or not credential:
            logger.warning('Rejected request without a valid upload credential')
            raise UnauthorizedError('Invalid upload credential')
        if not constant_time_compare(credential, secret):
            logger.warning('Rejected request with a wrong upload credential')
            raise UnauthorizedError('Invalid upload credential')

    def upload(  # noqa: WPS211
        self,
        *,
        title: str,
        content: Any,
        visibility: str,
        credential: str | None,
        description: str | None = '',
        tags: str | Iterable[str] | None = None,
        content_type: str | None = None,
    ) -> FileRecord:
        """Store a document and create its record.

        Transaction safety: upload to storage first, then create the DB
        record. If the DB insert fails, the uploaded blob is deleted
        again. The staged upload is released in every case.

        Args:
            title: Display name, required.
            content: Uploaded file object.
            visibility: 'public' or 'private'.
            credential: Shared upload secret.
            description: Optional free text.
            tags: Comma-separated string or iterable of keywords.
            content_type: MIME type declared by the client.

        Returns:
            Created FileRecord instance.

        Raises:
            UnauthorizedError: If the credential is wrong.
            InvalidInputError: If title, visibility, tags or content are
                invalid.
            StorageError: If the blob store rejects the upload.
            PartialFailureError: If the DB insert failed and the blob
                could not be rolled back.
        """
        with staged_upload(content):
            self.authorize(credential)
            clean_title = _validate_title(title)
            clean_visibility = _validate_visibility(visibility)
            tag_list = parse_tags(tags)
            if len(tag_list) > self._config.max_tags:
                raise InvalidInputError(
                    f'At most {self._config.max_tags} tags are allowed',
                )
            if content is None:
                raise InvalidInputError('A file is required')

            original_filename = sanitize_filename(getattr(content, 'name', None))
            storage_key = generate_storage_key(clean_visibility, original_filename)
            mime_type = detect_mime_type(
                original_filename,
                content_type or getattr(content, 'content_type', None),
            )

            logger.info('Calculating metadata for file: %s', storage_key)
            checksum = calculate_checksum(content)
            size_bytes = get_file_size(content)

            # Step 1: Upload to storage first
            try:
                saved_name = self._storage.put(storage_key, content, mime_type)
            except Exception as exc:
                raise StorageError(
                    f'Could not store {original_filename}',
                ) from exc

            # Step 2: Create database record (in transaction)
            try:
                with transaction.atomic():
                    file_record = FileRecord.objects.create(
                        title=clean_title,
                        description=(description or '').strip(),
                        file=saved_name,  # Use actual saved name from storage
                        original_filename=original_filename,
                        tags=join_tags(tag_list),
                        visibility=clean_visibility,
                        mime_type=mime_type,
                        size_bytes=size_bytes,
                        checksum_sha256=checksum,
                    )
            except DatabaseError as exc:
                logger.exception(
                    'Database insert failed, rolling back storage upload: %s',
                    saved_name,
                )
                if not self._storage.rollback_upload(saved_name):
                    raise PartialFailureError(
                        f'Upload of {original_filename} was not recorded '
                        f'and its stored bytes could not be removed',
                    ) from exc
                raise

        logger.info(
            'File record created in database: %s (ID: %d)',
            saved_name,
            file_record.id,
        )
        return file_record

    def list_public(self) -> list[FileSummary]:
        """List public files, newest first.

        There is no pagination: the whole public table is returned.

        Returns:
            Summaries of all public files.
        """
        records = FileRecord.objects.filter(
            visibility=Visibility.PUBLIC,
        ).order_by('-uploaded_at', '-id')
        return [self.summarize(file_record) for file_record in records]

    def search(self, query: str | None) -> list[FileSummary]:
        """Find files whose title or one of whose tags contains the query.

        Matching ignores case. A blank query returns every record,
        private ones included. Private files appear with their metadata
        but without a download URL.

        Args:
            query: Search text.

        Returns:
            Summaries of matching files, newest first.
        """
        needle = (query or '').strip()
        # Matched in Python: SQLite LIKE only folds ASCII case
        records = FileRecord.objects.order_by('-uploaded_at', '-id')
        logger.debug('Searching files: %r', needle)
        return [
            self.summarize(file_record)
            for file_record in records
            if file_record.matches(needle)
        ]

    def summarize(self, file_record: FileRecord) -> FileSummary:
        """Build the caller-facing projection of a record.

        Args:
            file_record: Record to describe.

        Returns:
            FileSummary, with a download URL only for public files.
        """
        download_url = None
        if file_record.is_public:
            download_url = self._storage.url(file_record.file.name)
        return FileSummary(
            id=file_record.id,
            title=file_record.title,
            description=file_record.description,
            tags=tuple(file_record.get_tags()),
            visibility=file_record.visibility,
            mime_type=file_record.mime_type,
            size_bytes=file_record.size_bytes,
            uploaded_at=file_record.uploaded_at,
            download_url=download_url,
        )

    def request_access(
        self,
        file_id: Any,
        requester: str | None,
        reason: str | None = '',
    ) -> AccessRequest:
        """Record a request for a private file and notify the administrator.

        The request is committed before the notification is sent. A
        failed notification is logged and does not undo the request.

        Args:
            file_id: Id of a private file.
            requester: Free text identity of the person asking.
            reason: Optional justification.

        Returns:
            Created AccessRequest instance.

        Raises:
            InvalidInputError: If requester or id are malformed.
            FileRecordNotFoundError: If no private file has that id.
        """
        requester_text = _optional_text(requester, 'Requester')
        requester_name = ' '.join(requester_text.split())
        if not requester_name:
            raise InvalidInputError('Requester is required')
        if len(requester_name) > _REQUESTER_MAX_LENGTH:
            raise InvalidInputError(
                f'Requester must be at most {_REQUESTER_MAX_LENGTH} characters',
            )
        reason_text = _optional_text(reason, 'Reason').strip()

        pk = _coerce_id(file_id)
        file_record = FileRecord.objects.filter(
            id=pk,
            visibility=Visibility.PRIVATE,
        ).first()
        if file_record is None:
            logger.warning('Access requested for unknown private file: %d', pk)
            raise FileRecordNotFoundError(pk, f'No private file with id {pk}')

        with transaction.atomic():
            access_request = AccessRequest.objects.create(
                file=file_record,
                file_title=file_record.title,
                requester=requester_name,
                reason=reason_text,
            )
        logger.info(
            'Access request recorded: %s -> file ID %d (request ID: %d)',
            requester_name,
            file_record.id,
            access_request.id,
        )

        try:
            self._notifier.send(
                self._config.notification_subject,
                _format_request_message(file_record, access_request),
            )
        except NotificationError:
            logger.exception(
                'Administrator not notified about access request %d',
                access_request.id,
            )

        return access_request

    def download(self, file_id: Any) -> str:
        """Resolve a public file to a URL its bytes can be fetched from.

        Args:
            file_id: Id of the file.

        Returns:
            URL of the stored object.

        Raises:
            FileRecordNotFoundError: If the file does not exist.
            AccessDeniedError: If the file is private.
        """
        file_record = self._get_record(file_id)
        if not file_record.is_public:
            logger.warning(
                'Refused direct download of private file: ID=%d',
                file_record.id,
            )
            raise AccessDeniedError(
                'Private files are only available through an access request',
            )
        return self._storage.url(file_record.file.name)

    def delete(self, file_id: Any) -> None:
        """Delete a file's bytes, then its record.

        The blob goes first. If that fails the record stays, so nothing
        in storage is left without a record and the call can be retried.

        Args:
            file_id: Id of the file.

        Raises:
            FileRecordNotFoundError: If the file does not exist.
            StorageError: If the blob could not be deleted.
            PartialFailureError: If the blob is gone but the record
                could not be removed.
        """
        file_record = self._get_record(file_id)
        storage_name = file_record.file.name
        logger.info(
            'Deleting file: ID=%d, path=%s',
            file_record.id,
            storage_name,
        )

        # Step 1: Delete from storage; keep the record on failure
        try:
            self._storage.delete(storage_name)
        except Exception as exc:
            raise StorageError(
                f'Could not delete stored bytes of file {file_record.id}; '
                f'record kept',
            ) from exc

        # Django clears the pk on delete
        record_id = file_record.id

        # Step 2: Delete the record
        try:
            with transaction.atomic():
                file_record.delete()
        except DatabaseError as exc:
            logger.exception(
                'Blob deleted but record remains (dangling): ID=%d',
                record_id,
            )
            raise PartialFailureError(
                f'Stored bytes of file {record_id} were deleted '
                f'but its record could not be removed',
            ) from exc

        logger.info('File record deleted from database: ID=%d', record_id)

    def issue_private_link(self, file_id: Any, expires: int) -> str:
        """Create a time-limited URL for an approved private file.

        This is the operator's side of the out-of-band approval.

        Args:
            file_id: Id of a private file.
            expires: Lifetime of the URL in seconds.

        Returns:
            Signed URL.

        Raises:
            InvalidInputError: If the file is public or expiry is not
                positive.
            FileRecordNotFoundError: If the file does not exist.
        """
        if expires <= 0:
            raise InvalidInputError('Expiry must be a positive number of seconds')
        file_record = self._get_record(file_id)
        if file_record.is_public:
            raise InvalidInputError(
                f'File {file_record.id} is public, download it directly',
            )
        url = self._storage.url(file_record.file.name, expire=expires)
        logger.info(
            'Issued private link: ID=%d, expires in %d seconds',
            file_record.id,
            expires,
        )
        return url

    def find_dangling_records(self, limit: int) -> list[FileRecord]:
        """Find records whose stored bytes no longer exist.

        Args:
            limit: Maximum number of records to return.

        Returns:
            Dangling records, oldest id first.
        """
        dangling: list[FileRecord] = []
        for file_record in FileRecord.objects.order_by('id').iterator():
            if len(dangling) >= limit:
                break
            if not self._blob_exists(file_record.file.name):
                dangling.append(file_record)
        return dangling

    def remove_dangling_record(self, file_id: Any) -> bool:
        """Remove a record whose bytes are gone.

        Args:
            file_id: Id of the record.

        Returns:
            True if removed, False if its bytes still exist.

        Raises:
            FileRecordNotFoundError: If the record does not exist.
        """
        file_record = self._get_record(file_id)
        if self._blob_exists(file_record.file.name):
            logger.warning(
                'Stored bytes still present, keeping record: ID=%d',
                file_record.id,
            )
            return False

        record_id = file_record.id
        with transaction.atomic():
            file_record.delete()
        logger.info('Dangling record removed: ID=%d', record_id)
        return True

    def _get_record(self, file_id: Any) -> FileRecord:
        pk = _coerce_id(file_id)
        file_record = FileRecord.objects.filter(id=pk).first()
        if file_record is None:
            logger.info('File not found: ID=%d', pk)
            raise FileRecordNotFoundError(pk)
        return file_record

    def _blob_exists(self, storage_name: str) -> bool:
        try:
            return self._storage.exists(storage_name)
        except Exception as exc:
            raise StorageError(
                f'Could not check stored bytes at {storage_name}',
            ) from exc


def get_registry() -> FileRegistry:
    """Build a registry from the current Django settings.

    Returns:
        FileRegistry using the default storage and mail notifier.
    """
    config = RegistryConfig.from_settings()
    notifier = MailNotifier(
        config.notification_recipients,
        sender=config.notification_sender,
    )
    return FileRegistry(
        config=config,
        storage=default_storage,  # type: ignore[arg-type]
        notifier=notifier,
    )


def _validate_title(title: str | None) -> str:
    clean_title = (title or '').strip()
    if not clean_title:
        raise InvalidInputError('Title is required')
    if len(clean_title) > _TITLE_MAX_LENGTH:
        raise InvalidInputError(
            f'Title must be at most {_TITLE_MAX_LENGTH} characters',
        )
    return clean_title


def _validate_visibility(visibility: str | None) -> str:
    if visibility not in Visibility.values:
        raise InvalidInputError(
            "Visibility must be 'public' or 'private'",
        )
    return str(visibility)


def _optional_text(value: Any, field_name: str) -> str:
    if value is None:
        return ''
    if not isinstance(value, str):
        raise InvalidInputError(f'{field_name} must be a string')
    return value


def _coerce_id(file_id: Any) -> int:
    if isinstance(file_id, bool):
        raise InvalidInputError(f'Invalid file id: {file_id!r}')
    try:
        pk = int(file_id)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f'Invalid file id: {file_id!r}') from exc
    if pk < 1:
        raise InvalidInputError(f'Invalid file id: {file_id!r}')
    return pk


def _format_request_message(
    file_record: FileRecord,
    access_request: AccessRequest,
) -> str:
    return (
        f'User {access_request.requester} requested access to private file '
        f'"{file_record.title}" (ID: {file_record.id}).\n'
        f'Reason: {access_request.reason or "-"}\n'
        f'Request ID: {access_request.id}\n'
    )

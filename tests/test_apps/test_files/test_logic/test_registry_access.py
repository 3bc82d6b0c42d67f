"""Tests for access requests, downloads and private links."""

from unittest.mock import MagicMock

import pytest

from server.apps.files.exceptions import (
    AccessDeniedError,
    FileRecordNotFoundError,
    InvalidInputError,
    NotificationError,
)
from server.apps.files.logic.registry import FileRegistry
from server.apps.files.models import AccessRequest


@pytest.mark.django_db
class TestRequestAccess:
    """Tests for FileRegistry.request_access."""

    def test_records_request_and_notifies(
        self,
        registry,
        private_record,
        mailoutbox,
    ):
        """Test a request is stored and one mail goes to the admin."""
        access_request = registry.request_access(
            private_record.id,
            'alice@example.com',
            'Audit',
        )

        assert AccessRequest.objects.count() == 1
        assert access_request.file == private_record
        assert access_request.file_title == 'Board Minutes'
        assert access_request.requester == 'alice@example.com'
        assert access_request.reason == 'Audit'

        assert len(mailoutbox) == 1
        message = mailoutbox[0]
        assert message.to == ['admin@example.com']
        assert message.subject == 'Private File Request'
        assert 'alice@example.com' in message.body
        assert '"Board Minutes"' in message.body
        assert f'(ID: {private_record.id})' in message.body
        assert 'Reason: Audit' in message.body

    def test_accepts_string_id(self, registry, private_record):
        """Test ids from JSON strings are accepted."""
        access_request = registry.request_access(
            str(private_record.id),
            'bob',
        )

        assert access_request.file_id == private_record.id
        assert access_request.reason == ''

    def test_public_file_rejected(self, registry, public_record, mailoutbox):
        """Test public files cannot be requested."""
        with pytest.raises(FileRecordNotFoundError) as exc_info:
            registry.request_access(public_record.id, 'alice')

        assert exc_info.value.kind == 'not_found'
        assert AccessRequest.objects.count() == 0
        assert mailoutbox == []

    def test_missing_file_rejected(self, registry, mailoutbox):
        """Test unknown ids are rejected without side effects."""
        with pytest.raises(FileRecordNotFoundError):
            registry.request_access(999, 'alice')

        assert AccessRequest.objects.count() == 0
        assert mailoutbox == []

    @pytest.mark.parametrize('file_id', [None, 'abc', 0, -3, True, 1.5j])
    def test_invalid_id(self, registry, file_id):
        """Test malformed ids are invalid input, not lookups."""
        with pytest.raises(InvalidInputError):
            registry.request_access(file_id, 'alice')

    @pytest.mark.parametrize('requester', [None, '', '   ', 'x' * 256])
    def test_invalid_requester(self, registry, private_record, requester):
        """Test the requester is required and bounded."""
        with pytest.raises(InvalidInputError):
            registry.request_access(private_record.id, requester)

        assert AccessRequest.objects.count() == 0

    @pytest.mark.parametrize(('requester', 'reason'), [
        (123, 'Audit'),
        (['alice'], 'Audit'),
        ('alice', 5),
        ('alice', {'why': 'audit'}),
    ])
    def test_non_string_fields(
        self,
        registry,
        private_record,
        mailoutbox,
        requester,
        reason,
    ):
        """Test requester and reason must be strings."""
        with pytest.raises(InvalidInputError):
            registry.request_access(private_record.id, requester, reason)

        assert AccessRequest.objects.count() == 0
        assert mailoutbox == []

    def test_missing_reason(self, registry, private_record):
        """Test a null reason is stored as empty."""
        access_request = registry.request_access(private_record.id, 'bob', None)

        assert access_request.reason == ''

    def test_notification_failure_keeps_request(
        self,
        registry_config,
        storage,
        private_record,
    ):
        """Test a failed notification does not undo the request."""
        failing_notifier = MagicMock()
        failing_notifier.send.side_effect = NotificationError('smtp down')
        registry = FileRegistry(
            config=registry_config,
            storage=storage,
            notifier=failing_notifier,
        )

        access_request = registry.request_access(private_record.id, 'alice')

        failing_notifier.send.assert_called_once()
        assert AccessRequest.objects.get() == access_request


@pytest.mark.django_db
class TestDownload:
    """Tests for FileRegistry.download."""

    def test_public_file_url(self, registry, public_record):
        """Test public files resolve to their stored object."""
        url = registry.download(public_record.id)

        assert public_record.file.name in url

    def test_private_file_denied(self, registry, private_record):
        """Test private files have no direct download."""
        with pytest.raises(AccessDeniedError) as exc_info:
            registry.download(private_record.id)

        assert exc_info.value.kind == 'access_denied'

    def test_missing_file(self, registry):
        """Test unknown ids."""
        with pytest.raises(FileRecordNotFoundError) as exc_info:
            registry.download(12345)

        assert exc_info.value.message == 'File 12345 not found'


@pytest.mark.django_db
class TestIssuePrivateLink:
    """Tests for FileRegistry.issue_private_link."""

    def test_signed_url(self, registry, private_record):
        """Test a signed, expiring URL is issued for a private file."""
        url = registry.issue_private_link(private_record.id, expires=600)

        assert private_record.file.name in url
        assert 'Expires=' in url or 'X-Amz-Expires=600' in url

    def test_public_file_rejected(self, registry, public_record):
        """Test public files do not need a private link."""
        with pytest.raises(InvalidInputError):
            registry.issue_private_link(public_record.id, expires=600)

    @pytest.mark.parametrize('expires', [0, -1])
    def test_non_positive_expiry(self, registry, private_record, expires):
        """Test expiry must be positive."""
        with pytest.raises(InvalidInputError):
            registry.issue_private_link(private_record.id, expires=expires)

    def test_missing_file(self, registry):
        """Test unknown ids."""
        with pytest.raises(FileRecordNotFoundError):
            registry.issue_private_link(999, expires=60)

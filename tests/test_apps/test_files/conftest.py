"""Shared fixtures for files app tests."""

from typing import Final

import boto3
import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from moto import mock_aws

from server.apps.files.conf import RegistryConfig
from server.apps.files.infrastructure.notifier import MailNotifier
from server.apps.files.infrastructure.storage import FileStorage
from server.apps.files.logic.registry import FileRegistry

BUCKET: Final = 'file-registry'
UPLOAD_SECRET: Final = 'test-upload-secret'
ADMIN_EMAIL: Final = 'admin@example.com'


@pytest.fixture
def mock_s3():
    """Mock S3 service with file-registry bucket.

    Yields:
        boto3 S3 resource with file-registry bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=BUCKET)
        yield conn


@pytest.fixture
def storage(mock_s3):
    """Create storage backend bound to the mocked bucket.

    Returns:
        FileStorage instance.
    """
    return FileStorage(
        bucket_name=BUCKET,
        access_key='testing',
        secret_key='testing',
        region_name='us-east-1',
        file_overwrite=False,
    )


@pytest.fixture
def default_storage_s3(mock_s3, settings):
    """Point Django's default storage and registry settings at the mocks.

    Returns:
        boto3 S3 resource of the mocked bucket.
    """
    settings.STORAGES = {
        **settings.STORAGES,
        'default': {
            'BACKEND': 'server.apps.files.infrastructure.storage.FileStorage',
            'OPTIONS': {
                'bucket_name': BUCKET,
                'access_key': 'testing',
                'secret_key': 'testing',
                'region_name': 'us-east-1',
                'endpoint_url': None,
                'file_overwrite': False,
            },
        },
    }
    settings.FILE_REGISTRY_UPLOAD_SECRET = UPLOAD_SECRET
    settings.FILE_REGISTRY_ADMIN_EMAIL = [ADMIN_EMAIL]
    return mock_s3


@pytest.fixture
def registry_config():
    """Create registry config with a known secret and recipient.

    Returns:
        RegistryConfig instance.
    """
    return RegistryConfig(
        upload_secret=UPLOAD_SECRET,
        notification_recipients=(ADMIN_EMAIL,),
        notification_sender='registry@example.com',
        notification_subject='Private File Request',
        max_tags=5,
    )


@pytest.fixture
def notifier(registry_config):
    """Create mail notifier for the test recipient.

    Returns:
        MailNotifier instance.
    """
    return MailNotifier(
        registry_config.notification_recipients,
        sender=registry_config.notification_sender,
    )


@pytest.fixture
def registry(registry_config, storage, notifier):
    """Create registry wired to mocked S3 and the locmem mail backend.

    Returns:
        FileRegistry instance.
    """
    return FileRegistry(
        config=registry_config,
        storage=storage,
        notifier=notifier,
    )


@pytest.fixture
def make_upload():
    """Factory for uploaded file objects.

    Returns:
        Callable building SimpleUploadedFile instances.
    """
    def factory(
        name='report.pdf',
        content=b'test file content',
        content_type='application/pdf',
    ):
        return SimpleUploadedFile(name, content, content_type=content_type)
    return factory


@pytest.fixture
def public_record(db, registry, make_upload):
    """Upload a public file.

    Returns:
        FileRecord instance.
    """
    return registry.upload(
        title='Annual Report',
        description='Yearly numbers',
        tags='finance, annual',
        visibility='public',
        content=make_upload('annual.pdf', b'public bytes'),
        credential=UPLOAD_SECRET,
    )


@pytest.fixture
def private_record(db, registry, make_upload):
    """Upload a private file.

    Returns:
        FileRecord instance.
    """
    return registry.upload(
        title='Board Minutes',
        description='Closed session',
        tags='board, confidential',
        visibility='private',
        content=make_upload('minutes.pdf', b'private bytes'),
        credential=UPLOAD_SECRET,
    )


@pytest.fixture
def read_blob(mock_s3):
    """Read objects straight from the mocked bucket.

    Returns:
        Callable mapping a key to the object's bytes.
    """
    def reader(key):
        return mock_s3.Object(BUCKET, key).get()['Body'].read()
    return reader


@pytest.fixture
def bucket_keys(mock_s3):
    """List keys in the mocked bucket.

    Returns:
        Callable returning the sorted list of keys.
    """
    def lister():
        return sorted(obj.key for obj in mock_s3.Bucket(BUCKET).objects.all())
    return lister

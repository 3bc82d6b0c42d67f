"""Integration tests for the registry storage against MinIO.

Run with ``pytest -m integration`` while MinIO is reachable, e.g. from
Docker Compose. Credentials and endpoint come from the environment.
"""
import os
from typing import Final

import boto3
import pytest
from botocore.exceptions import ClientError
from django.core.files.base import ContentFile

from server.apps.files.infrastructure.storage import FileStorage

_TEST_BUCKET: Final = 'file-registry-integration'
_TEST_KEY: Final = 'private/minio-check__20260101T000000000000_00000000.txt'
_TEST_CONTENT: Final = b'Hello from MinIO integration test!'


@pytest.fixture
def minio_options() -> dict[str, str]:
    """Connection options for the MinIO service.

    Returns:
        Keyword arguments shared by boto3 and FileStorage.
    """
    return {
        'endpoint_url': os.getenv('MINIO_ENDPOINT', 'http://minio:9000'),
        'access_key': os.getenv('MINIO_ROOT_USER', 'minioadmin'),
        'secret_key': os.getenv('MINIO_ROOT_PASSWORD', 'minioadmin'),
    }


@pytest.fixture
def minio_storage(minio_options: dict[str, str]) -> FileStorage:
    """Create storage bound to an existing test bucket.

    Args:
        minio_options: Connection options.

    Returns:
        FileStorage instance.
    """
    client = boto3.client(
        's3',
        endpoint_url=minio_options['endpoint_url'],
        aws_access_key_id=minio_options['access_key'],
        aws_secret_access_key=minio_options['secret_key'],
        region_name='us-east-1',
    )
    try:
        client.head_bucket(Bucket=_TEST_BUCKET)
    except ClientError:
        client.create_bucket(Bucket=_TEST_BUCKET)

    return FileStorage(
        bucket_name=_TEST_BUCKET,
        region_name='us-east-1',
        file_overwrite=False,
        **minio_options,
    )


@pytest.mark.integration
def test_put_and_read_back(minio_storage: FileStorage) -> None:
    """Test bytes and content type survive a round trip."""
    saved_name = minio_storage.put(
        _TEST_KEY,
        ContentFile(_TEST_CONTENT),
        'text/plain',
    )

    try:
        assert minio_storage.exists(saved_name)
        with minio_storage.open(saved_name) as stored:
            assert stored.read() == _TEST_CONTENT
        assert minio_storage.size(saved_name) == len(_TEST_CONTENT)
    finally:
        minio_storage.delete(saved_name)


@pytest.mark.integration
def test_signed_url(minio_storage: FileStorage) -> None:
    """Test an expiring URL is issued for a stored object."""
    saved_name = minio_storage.put(
        _TEST_KEY,
        ContentFile(_TEST_CONTENT),
        'text/plain',
    )

    try:
        url = minio_storage.url(saved_name, expire=60)
        assert saved_name in url
        assert 'X-Amz-Expires=60' in url
    finally:
        minio_storage.delete(saved_name)


@pytest.mark.integration
def test_rollback_upload(minio_storage: FileStorage) -> None:
    """Test rollback removes the object."""
    saved_name = minio_storage.put(
        _TEST_KEY,
        ContentFile(_TEST_CONTENT),
        'text/plain',
    )

    assert minio_storage.rollback_upload(saved_name) is True
    assert not minio_storage.exists(saved_name)

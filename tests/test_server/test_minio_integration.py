"""Integration tests for the document storage against MinIO.

These tests need the MinIO service from Docker Compose and are
deselected by default (``-m integration`` runs them).
"""

import os
from typing import Final

import boto3
import pytest
from botocore.client import BaseClient
from botocore.exceptions import ClientError
from django.core.files.base import ContentFile

from server.apps.files.infrastructure.storage import FileStorage

_TEST_BUCKET: Final = 'recruitment-files'
_TEST_KEY: Final = 'Candidate/1/resume/integration_test.pdf'
_TEST_CONTENT: Final = b'%PDF-1.4 MinIO integration test'


def _credentials() -> dict[str, str]:
    return {
        'endpoint_url': os.getenv('MINIO_ENDPOINT', 'http://minio:9000'),
        'access_key': os.getenv('MINIO_ROOT_USER', 'minioadmin'),
        'secret_key': os.getenv('MINIO_ROOT_PASSWORD', 'minioadmin'),
    }


@pytest.fixture
def s3_client() -> BaseClient:
    """Create S3 client for MinIO.

    Returns:
        Configured boto3 S3 client for MinIO.
    """
    credentials = _credentials()
    return boto3.client(
        's3',
        endpoint_url=credentials['endpoint_url'],
        aws_access_key_id=credentials['access_key'],
        aws_secret_access_key=credentials['secret_key'],
        region_name='us-east-1',
    )


@pytest.fixture
def storage(s3_client: BaseClient) -> FileStorage:
    """Document storage pointed at a MinIO bucket.

    Args:
        s3_client: boto3 S3 client used to create the bucket.

    Returns:
        FileStorage instance.
    """
    try:
        s3_client.head_bucket(Bucket=_TEST_BUCKET)
    except ClientError:
        s3_client.create_bucket(Bucket=_TEST_BUCKET)
    return FileStorage(
        bucket_name=_TEST_BUCKET,
        region_name='us-east-1',
        file_overwrite=False,
        querystring_auth=True,
        **_credentials(),
    )


@pytest.mark.integration
def test_s3_client_connection(s3_client: BaseClient) -> None:
    """Test that S3 client can connect to MinIO."""
    response = s3_client.list_buckets()
    assert 'Buckets' in response


@pytest.mark.integration
def test_save_and_purge(storage: FileStorage) -> None:
    """Test a blob round trip through the storage backend."""
    saved = storage.save(_TEST_KEY, ContentFile(_TEST_CONTENT))

    with storage.open(saved, 'rb') as blob:
        assert blob.read() == _TEST_CONTENT
    assert storage.purge(saved) is True
    assert storage.purge(saved) is False


@pytest.mark.integration
def test_signed_url(storage: FileStorage) -> None:
    """Test access URLs are presigned for the bucket."""
    url = storage.access_url(_TEST_KEY, expire=60)

    assert _TEST_BUCKET in url
    assert 'X-Amz-Signature' in url

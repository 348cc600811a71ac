"""Tests for storage backends."""

import pytest
from django.core.files.base import ContentFile

from server.apps.files.infrastructure.storage import (
    FileStorage,
    LocalFileStorage,
    get_storage,
)

_KEY = 'Candidate/1/resume/1700000000000_abc_cv.pdf'


class TestS3FileStorage:
    """Tests for the S3 backend against mocked S3."""

    def test_default_storage_is_s3(self, mock_s3):
        """Test S3 is the configured default backend."""
        assert isinstance(get_storage(), FileStorage)

    def test_save_writes_object(self, mock_s3):
        """Test saved blobs land in the bucket under the given key."""
        saved = get_storage().save(_KEY, ContentFile(b'%PDF-1.4'))

        assert saved == _KEY
        body = mock_s3.Object('recruitment-files', _KEY).get()['Body'].read()
        assert body == b'%PDF-1.4'

    def test_purge_is_idempotent(self, mock_s3):
        """Test purging an absent blob reports False instead of failing."""
        storage = get_storage()
        storage.save(_KEY, ContentFile(b'data'))

        assert storage.purge(_KEY) is True
        assert storage.purge(_KEY) is False
        assert not storage.exists(_KEY)

    def test_access_url_is_signed(self, mock_s3):
        """Test access URL points at the object with a query signature."""
        storage = get_storage()
        storage.save(_KEY, ContentFile(b'data'))

        url = storage.access_url(_KEY, expire=60)

        assert _KEY in url
        assert '?' in url

    def test_rollback_upload_swallows_errors(self, mock_s3, monkeypatch):
        """Test a failing rollback is logged, not raised."""
        storage = get_storage()

        def broken_delete(name):
            raise OSError('storage down')

        monkeypatch.setattr(storage, 'delete', broken_delete)

        storage.rollback_upload(_KEY)  # does not raise

    def test_rollback_upload_deletes(self, mock_s3):
        """Test rollback removes the written blob."""
        storage = get_storage()
        storage.save(_KEY, ContentFile(b'data'))

        storage.rollback_upload(_KEY)

        assert not storage.exists(_KEY)


class TestLocalFileStorage:
    """Tests for the filesystem backend."""

    def test_default_storage_is_local(self, local_storage):
        """Test the storage mode switch selects the local backend."""
        assert isinstance(get_storage(), LocalFileStorage)

    def test_save_and_purge(self, local_storage):
        """Test blobs are written under the root and purged once."""
        storage = get_storage()
        storage.save(_KEY, ContentFile(b'data'))

        assert local_storage.joinpath(_KEY).read_bytes() == b'data'
        assert storage.purge(_KEY) is True
        assert storage.purge(_KEY) is False

    def test_access_url_is_serve_endpoint(self, local_storage):
        """Test local access URLs go through the serve endpoint."""
        url = get_storage().access_url(_KEY, expire=60)
        assert url == f'/uploads/{_KEY}'

    @pytest.mark.parametrize('content', [b'', b'x' * 10])
    def test_open_reads_back(self, local_storage, content):
        """Test stored bytes are returned unchanged."""
        storage = get_storage()
        storage.save(_KEY, ContentFile(content))

        with storage.open(_KEY, 'rb') as handle:
            assert handle.read() == content

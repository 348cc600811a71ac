"""Tests for cleanup_deleted_files management command."""

from datetime import timedelta
from io import StringIO

import pytest
from django.core.files.base import ContentFile
from django.core.management import call_command
from django.utils import timezone

from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.models import FileRecord


def _deleted_record(make_record, user, days_ago):
    record = make_record(user)
    record.mark_deleted(user.id)
    FileRecord.all_objects.filter(pk=record.pk).update(
        deleted_at=timezone.now() - timedelta(days=days_ago),
    )
    return record


@pytest.mark.django_db
class TestCleanupDeletedFilesCommand:
    """Tests for cleanup_deleted_files management command."""

    def test_purges_old_files(self, user, make_record, mock_s3):
        """Test files deleted more than 30 days ago are purged."""
        record = _deleted_record(make_record, user, 31)
        get_storage().save(record.storage_key, ContentFile(b'%PDF-1.4'))

        out = StringIO()
        call_command('cleanup_deleted_files', stdout=out)

        assert not FileRecord.all_objects.filter(pk=record.pk).exists()
        assert not get_storage().exists(record.storage_key)
        assert 'Purged 1 files, 0 failed' in out.getvalue()

    def test_preserves_recent_files(self, user, make_record, mock_s3):
        """Test files deleted less than 30 days ago survive."""
        record = _deleted_record(make_record, user, 10)

        out = StringIO()
        call_command('cleanup_deleted_files', stdout=out)

        assert FileRecord.all_objects.filter(pk=record.pk).exists()
        assert 'Purged 0 files, 0 failed' in out.getvalue()

    def test_dry_run(self, user, make_record, mock_s3):
        """Test dry run reports without purging."""
        record = _deleted_record(make_record, user, 31)

        out = StringIO()
        call_command('cleanup_deleted_files', '--dry-run', stdout=out)

        assert FileRecord.all_objects.filter(pk=record.pk).exists()
        assert 'Would purge 1 files' in out.getvalue()

    def test_grace_days_override(self, user, make_record, mock_s3):
        """Test --grace-days shortens the retention period."""
        record = _deleted_record(make_record, user, 10)

        out = StringIO()
        call_command('cleanup_deleted_files', '--grace-days=7', stdout=out)

        assert not FileRecord.all_objects.filter(pk=record.pk).exists()
        assert 'older than 7 days' in out.getvalue()

    def test_batch_size(self, user, make_record, mock_s3):
        """Test --batch-size limits one sweep."""
        for _ in range(3):
            _deleted_record(make_record, user, 31)

        out = StringIO()
        call_command('cleanup_deleted_files', '--batch-size=2', stdout=out)

        assert FileRecord.all_objects.count() == 1
        assert 'Purged 2 files' in out.getvalue()

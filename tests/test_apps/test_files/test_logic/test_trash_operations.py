"""Tests for soft delete, purge and cleanup."""

from datetime import timedelta

import pytest
from django.core.files.base import ContentFile
from django.utils import timezone

from server.apps.accounts.principal import Principal
from server.apps.files.exceptions import (
    FileAccessDeniedError,
    FileRecordNotFoundError,
    StorageFailureError,
)
from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.logic.trash_operations import (
    cleanup_deleted_files,
    delete_file,
    purge_file,
)
from server.apps.files.models import FileRecord
from server.apps.tasks.models import ScheduledTask

def _stored_record(make_record, user, **overrides):
    record = make_record(user, **overrides)
    get_storage().save(record.storage_key, ContentFile(b'%PDF-1.4'))
    return record


def _age_deletion(record, days):
    FileRecord.all_objects.filter(pk=record.pk).update(
        deleted_at=timezone.now() - timedelta(days=days),
    )


@pytest.mark.django_db
class TestDeleteFile:
    """Tests for delete_file."""

    def test_soft_delete_sets_flags(self, user, make_record, mock_s3):
        """Test soft delete stamps deleter and time."""
        record = make_record(user)

        result = delete_file(record.id, Principal.from_user(user))

        assert result.is_deleted is True
        assert result.deleted_by_id == user.id
        assert result.deleted_at is not None
        assert not FileRecord.objects.filter(pk=record.pk).exists()
        assert FileRecord.all_objects.filter(pk=record.pk).exists()

    def test_soft_delete_preserves_blob(self, user, make_record, mock_s3):
        """Test the blob stays until the purge."""
        record = _stored_record(make_record, user)

        delete_file(record.id, Principal.from_user(user))

        assert get_storage().exists(record.storage_key)

    def test_schedules_purge_after_grace(self, user, make_record, mock_s3):
        """Test a purge task is queued for the end of the grace period."""
        record = make_record(user)

        result = delete_file(record.id, Principal.from_user(user))

        task = ScheduledTask.objects.get(task_type='files.purge')
        assert task.payload == {'file_id': str(record.id)}
        assert task.run_after == result.deleted_at + timedelta(days=30)

    def test_only_uploader_deletes(self, user, admin_user, make_record):
        """Test other users, administrators included, cannot delete."""
        record = make_record(user)

        with pytest.raises(FileAccessDeniedError):
            delete_file(record.id, Principal.from_user(admin_user))
        record.refresh_from_db()
        assert record.is_deleted is False
        assert not ScheduledTask.objects.exists()

    def test_delete_twice_is_not_found(self, user, make_record):
        """Test an already deleted file cannot be deleted again."""
        record = make_record(user)
        delete_file(record.id, Principal.from_user(user))

        with pytest.raises(FileRecordNotFoundError):
            delete_file(record.id, Principal.from_user(user))


@pytest.mark.django_db
class TestPurgeFile:
    """Tests for purge_file."""

    def test_removes_blob_and_row(self, user, make_record, mock_s3):
        """Test purge deletes both the blob and the metadata."""
        record = _stored_record(make_record, user)
        storage_key = record.storage_key

        assert purge_file(record) is True
        assert not get_storage().exists(storage_key)
        assert not FileRecord.all_objects.filter(
            storage_key=storage_key,
        ).exists()

    def test_tolerates_missing_blob(self, user, make_record, mock_s3):
        """Test purge succeeds when the blob is already gone."""
        record = make_record(user)

        assert purge_file(record) is False
        assert not FileRecord.all_objects.exists()

    def test_storage_failure_keeps_row(
        self,
        user,
        make_record,
        mock_s3,
        monkeypatch,
    ):
        """Test the row survives when the blob cannot be removed."""
        record = make_record(user)

        def broken_purge(name):
            raise OSError('storage down')

        monkeypatch.setattr(get_storage(), 'purge', broken_purge)

        with pytest.raises(StorageFailureError):
            purge_file(record)
        assert FileRecord.all_objects.filter(pk=record.pk).exists()


@pytest.mark.django_db
class TestCleanupDeletedFiles:
    """Tests for cleanup_deleted_files."""

    def test_purges_expired_files(self, user, make_record, mock_s3):
        """Test files deleted before the grace period are purged."""
        record = _stored_record(make_record, user)
        record.mark_deleted(user.id)
        _age_deletion(record, 31)

        result = cleanup_deleted_files()

        assert result.purged == 1
        assert result.failed == 0
        assert not FileRecord.all_objects.exists()
        assert not get_storage().exists(record.storage_key)

    def test_keeps_recent_and_live_files(self, user, make_record, mock_s3):
        """Test recent deletions and live files are left alone."""
        recent = make_record(user)
        recent.mark_deleted(user.id)
        _age_deletion(recent, 5)
        make_record(user)

        result = cleanup_deleted_files()

        assert result.candidates == 0
        assert FileRecord.all_objects.count() == 2

    def test_second_sweep_is_harmless(self, user, make_record, mock_s3):
        """Test sweeping twice over the same record does not error."""
        record = _stored_record(make_record, user)
        record.mark_deleted(user.id)
        _age_deletion(record, 31)

        first = cleanup_deleted_files()
        second = cleanup_deleted_files()

        assert first.purged == 1
        assert second.purged == 0
        assert second.failed == 0

    def test_continues_after_failure(
        self,
        user,
        make_record,
        mock_s3,
        monkeypatch,
    ):
        """Test one failing purge does not stop the sweep."""
        broken = make_record(user)
        healthy = make_record(user)
        for record in (broken, healthy):
            record.mark_deleted(user.id)
            _age_deletion(record, 31)

        storage = get_storage()
        original_purge = storage.purge

        def flaky_purge(name):
            if name == broken.storage_key:
                raise OSError('storage down')
            return original_purge(name)

        monkeypatch.setattr(storage, 'purge', flaky_purge)

        result = cleanup_deleted_files()

        assert result.purged == 1
        assert result.failed == 1
        assert list(FileRecord.all_objects.all()) == [broken]

    def test_dry_run_counts_only(self, user, make_record, mock_s3):
        """Test dry run purges nothing."""
        record = make_record(user)
        record.mark_deleted(user.id)
        _age_deletion(record, 31)

        result = cleanup_deleted_files(dry_run=True)

        assert result.candidates == 1
        assert result.purged == 0
        assert FileRecord.all_objects.exists()

    def test_batch_size_and_grace_period(self, user, make_record, mock_s3):
        """Test overrides limit the sweep."""
        for _ in range(3):
            record = make_record(user)
            record.mark_deleted(user.id)
            _age_deletion(record, 2)

        result = cleanup_deleted_files(
            grace_period=timedelta(days=1),
            batch_size=2,
        )

        assert result.purged == 2
        assert FileRecord.all_objects.count() == 1

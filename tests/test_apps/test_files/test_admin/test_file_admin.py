"""Tests for FileRecord admin."""

import pytest
from django.contrib import admin
from django.core.files.base import ContentFile
from django.test import RequestFactory

from server.apps.files.admin import FileRecordAdmin
from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.models import FileRecord


@pytest.fixture
def model_admin():
    """FileRecordAdmin bound to the default admin site."""
    return FileRecordAdmin(FileRecord, admin.site)


@pytest.fixture
def admin_request(admin_user):
    """GET request made by an administrator."""
    request = RequestFactory().get('/admin/files/filerecord/')
    request.user = admin_user
    return request


@pytest.mark.django_db
class TestFileRecordAdmin:
    """Tests for FileRecordAdmin."""

    def test_owner_and_uploader_are_read_only(
        self,
        model_admin,
        admin_request,
        user,
        make_record,
    ):
        """Test the owner reference and uploader cannot be edited."""
        record = make_record(user)

        readonly = model_admin.get_readonly_fields(admin_request, record)

        assert {'entity_type', 'entity_id', 'uploaded_by'} <= set(readonly)

    def test_records_cannot_be_added(self, model_admin, admin_request):
        """Test files only enter through uploads."""
        assert model_admin.has_add_permission(admin_request) is False

    def test_delete_model_purges_blob(
        self,
        model_admin,
        admin_request,
        user,
        make_record,
        mock_s3,
    ):
        """Test deleting a record also removes its blob."""
        record = make_record(user)
        get_storage().save(record.storage_key, ContentFile(b'%PDF-1.4'))

        model_admin.delete_model(admin_request, record)

        assert not FileRecord.all_objects.exists()
        assert not get_storage().exists(record.storage_key)

    def test_delete_queryset_purges_blobs(
        self,
        model_admin,
        admin_request,
        user,
        make_record,
        mock_s3,
    ):
        """Test the bulk delete action removes every selected blob."""
        records = [make_record(user) for _ in range(2)]
        for record in records:
            get_storage().save(record.storage_key, ContentFile(b'%PDF-1.4'))
        kept = make_record(user)

        model_admin.delete_queryset(
            admin_request,
            FileRecord.all_objects.filter(
                pk__in=[record.pk for record in records],
            ),
        )

        assert list(FileRecord.all_objects.all()) == [kept]
        for record in records:
            assert not get_storage().exists(record.storage_key)

"""Shared fixtures for files app tests."""

import boto3
import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from moto import mock_aws

from server.apps.files.choices import AccessLevel, EntityType, FileCategory
from server.apps.files.models import FileRecord
from server.apps.recruitment.models import Candidate

TEST_BUCKET = 'recruitment-files'
PDF_CONTENT = b'%PDF-1.4\n%test document\n'


@pytest.fixture
def mock_s3():
    """Mock S3 service with the documents bucket.

    Yields:
        boto3 S3 resource with recruitment-files bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=TEST_BUCKET)
        yield conn


@pytest.fixture
def local_storage(settings, tmp_path):
    """Switch the default storage to the local filesystem backend.

    Returns:
        Root directory of the storage.
    """
    settings.STORAGES = {
        **settings.STORAGES,
        'default': {
            'BACKEND': (
                'server.apps.files.infrastructure.storage.LocalFileStorage'
            ),
            'OPTIONS': {'location': str(tmp_path), 'base_url': '/uploads/'},
        },
    }
    return tmp_path


@pytest.fixture
def assignee(make_user):
    """Recruiter a candidate is assigned to."""
    return make_user('assignee')


@pytest.fixture
def candidate(admin_user, assignee):
    """Candidate created by an admin and assigned to a recruiter.

    Returns:
        Candidate instance.
    """
    return Candidate.objects.create(
        first_name='Asha',
        last_name='Rao',
        email='asha@example.com',
        created_by=admin_user,
        assigned_to=assignee,
    )


@pytest.fixture
def make_record(db):
    """Factory creating file records without touching storage.

    Returns:
        Callable taking the uploader and field overrides.
    """
    counter = iter(range(1, 10_000))

    def factory(uploaded_by, **overrides):
        number = next(counter)
        fields = {
            'original_name': f'document_{number}.pdf',
            'stored_name': f'1700000000000_{number:032x}_document.pdf',
            'extension': 'pdf',
            'mime_type': 'application/pdf',
            'size_bytes': 1024,
            'checksum_sha256': 'a' * 64,
            'storage_key': (
                f'Candidate/1/other/1700000000000_{number:032x}_document.pdf'
            ),
            'category': FileCategory.OTHER,
            'entity_type': EntityType.CANDIDATE,
            'entity_id': 1,
            'access_level': AccessLevel.INTERNAL,
            'uploaded_by': uploaded_by,
        }
        fields.update(overrides)
        return FileRecord.objects.create(**fields)

    return factory


@pytest.fixture
def pdf_upload():
    """Small PDF upload.

    Returns:
        SimpleUploadedFile with a PDF header.
    """
    return SimpleUploadedFile(
        'resume.pdf',
        PDF_CONTENT,
        content_type='application/pdf',
    )

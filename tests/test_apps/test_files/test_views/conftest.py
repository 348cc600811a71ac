"""Fixtures for files view tests."""

import pytest
from django.core.cache import caches
from django.core.files.base import ContentFile

from server.apps.files.infrastructure.storage import get_storage


@pytest.fixture(autouse=True)
def _clear_rate_limits():
    caches['tokens'].clear()
    yield
    caches['tokens'].clear()


@pytest.fixture
def stored_record(make_record):
    """Factory creating a record together with its blob.

    Returns:
        Callable taking the uploader and field overrides.
    """

    def factory(uploaded_by, content=b'%PDF-1.4 stored', **overrides):
        record = make_record(uploaded_by, **overrides)
        get_storage().save(record.storage_key, ContentFile(content))
        return record

    return factory

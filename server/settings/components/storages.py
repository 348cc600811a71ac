"""Django storage configuration for uploaded documents.

This module configures the blob store behind ``default_storage``:
- ``s3``: django-storages S3Storage (MinIO locally, S3/R2 in production)
- ``local``: filesystem storage under ``FILES_LOCAL_ROOT``

Both backends expose the same interface to the files app.
"""

from typing import Any, Final

from server.settings.components import BASE_DIR, config

FILES_STORAGE_MODE: Final = config('FILES_STORAGE_MODE', default='s3')

_S3_STORAGE: Final[dict[str, Any]] = {
    'BACKEND': 'server.apps.files.infrastructure.storage.FileStorage',
    'OPTIONS': {
        'bucket_name': config(
            'AWS_STORAGE_BUCKET_NAME',
            default='recruitment-files',
        ),
        'access_key': config('AWS_ACCESS_KEY_ID', default='minioadmin'),
        'secret_key': config('AWS_SECRET_ACCESS_KEY', default='minioadmin'),
        'endpoint_url': config(
            'AWS_S3_ENDPOINT_URL',
            default=None,
        ),
        'region_name': config(
            'AWS_S3_REGION_NAME',
            default='us-east-1',
        ),
        'file_overwrite': False,  # Prevent accidental overwrites
        'default_acl': None,  # Inherit bucket ACL
        'querystring_auth': True,  # Signed, time-limited URLs
        'querystring_expire': config(
            'FILES_SIGNED_URL_EXPIRY',
            cast=int,
            default=3600,
        ),
    },
}

_LOCAL_STORAGE: Final[dict[str, Any]] = {
    'BACKEND': 'server.apps.files.infrastructure.storage.LocalFileStorage',
    'OPTIONS': {
        'location': config(
            'FILES_LOCAL_ROOT',
            default=str(BASE_DIR.joinpath('uploads')),
        ),
        'base_url': '/uploads/',
    },
}

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': _LOCAL_STORAGE if FILES_STORAGE_MODE == 'local' else _S3_STORAGE,
    'staticfiles': {
        # Keep static files separate from uploaded documents
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

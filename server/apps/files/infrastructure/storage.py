"""Blob storage backends for uploaded documents."""

import logging
from typing import Any, final, override

from django.core.files.storage import FileSystemStorage, Storage, storages
from django.urls import reverse
from storages.backends.s3 import S3Storage

logger = logging.getLogger(__name__)


class _LoggedStorageMixin:
    """Logging and best-effort cleanup shared by the storage backends."""

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save blob with error handling and logging.

        Args:
            name: Storage key for the blob.
            content: File content (file-like object).
            max_length: Optional maximum length for the key.

        Returns:
            Actual storage key used.

        Raises:
            Exception: If the backend write fails.
        """
        try:
            logger.info('Uploading file to storage: %s', name)
            saved_name = super().save(name, content, max_length)
            logger.info('Successfully uploaded file: %s', saved_name)
        except Exception:
            logger.exception('Failed to upload file to storage: %s', name)
            raise
        else:
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete blob with error handling and logging.

        Args:
            name: Storage key of the blob to delete.

        Raises:
            Exception: If the backend delete fails.
        """
        try:
            logger.info('Deleting file from storage: %s', name)
            super().delete(name)
            logger.info('Successfully deleted file: %s', name)
        except Exception:
            logger.exception('Failed to delete file from storage: %s', name)
            raise

    def rollback_upload(self, name: str) -> None:
        """Delete a blob whose metadata could not be saved.

        Best effort: a failure is logged and the blob is left orphaned.

        Args:
            name: Storage key of the blob to delete.
        """
        try:
            logger.warning('Rolling back upload, deleting file: %s', name)
            self.delete(name)
            logger.info('Successfully rolled back file upload: %s', name)
        except Exception:
            logger.exception(
                'Failed to rollback upload, orphaned file: %s',
                name,
            )

    def purge(self, name: str) -> bool:
        """Remove a blob permanently, tolerating its absence.

        Args:
            name: Storage key of the blob to remove.

        Returns:
            True if a blob was removed, False if it was already gone.

        Raises:
            Exception: If the backend fails for any other reason.
        """
        if not self.exists(name):  # type: ignore[attr-defined]
            logger.info('Blob already absent, nothing to purge: %s', name)
            return False
        self.delete(name)
        return True


@final
class FileStorage(_LoggedStorageMixin, S3Storage):
    """S3-compatible storage (AWS S3, MinIO, R2) for documents.

    Access URLs are presigned and expire.
    """

    def access_url(self, name: str, expire: int) -> str:
        """Time-limited signed URL for a stored blob.

        Args:
            name: Storage key.
            expire: Lifetime of the URL in seconds.

        Returns:
            Presigned URL.
        """
        return self.url(name, expire=expire)


@final
class LocalFileStorage(_LoggedStorageMixin, FileSystemStorage):
    """Filesystem storage for documents.

    Files are never exposed by the web server directly; access URLs
    point at the authenticated serve endpoint.
    """

    def access_url(self, name: str, expire: int) -> str:
        """Path of the serve endpoint for a stored blob.

        Args:
            name: Storage key.
            expire: Ignored, the serve endpoint checks access per request.

        Returns:
            Relative URL of the serve endpoint.
        """
        return reverse('files:serve', kwargs={'storage_key': name})


def get_storage() -> Storage:
    """Return the configured document storage backend."""
    return storages['default']

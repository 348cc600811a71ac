"""Database models for files app."""

import uuid
from datetime import datetime
from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models
from django.db.models import F
from django.utils import timezone

from server.apps.files.choices import (
    AccessLevel,
    EntityType,
    FileCategory,
    ScanStatus,
)

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_STORAGE_KEY_MAX_LENGTH: Final = 512
_EXTENSION_MAX_LENGTH: Final = 16
_MIME_TYPE_MAX_LENGTH: Final = 255
_CHECKSUM_MAX_LENGTH: Final = 64  # SHA256 hex length
_CHOICE_MAX_LENGTH: Final = 32


class FileRecordQuerySet(models.QuerySet['FileRecord']):
    """Queries over file metadata."""

    def live(self) -> 'FileRecordQuerySet':
        """Exclude soft-deleted records."""
        return self.filter(is_deleted=False)

    def for_entity(
        self,
        entity_type: str,
        entity_id: int,
        category: str | None = None,
    ) -> 'FileRecordQuerySet':
        """Files owned by one entity, optionally of one category.

        Args:
            entity_type: Owner kind (EntityType value).
            entity_id: Owner primary key.
            category: Optional FileCategory value to filter on.

        Returns:
            Filtered queryset, newest first.
        """
        queryset = self.filter(entity_type=entity_type, entity_id=entity_id)
        if category:
            queryset = queryset.filter(category=category)
        return queryset.order_by('-created_at')

    def purge_candidates(self, cutoff: datetime) -> 'FileRecordQuerySet':
        """Soft-deleted records deleted before cutoff, oldest first."""
        return self.filter(
            is_deleted=True,
            deleted_at__lt=cutoff,
        ).order_by('deleted_at')


class LiveFileRecordManager(models.Manager['FileRecord']):
    """Default manager hiding soft-deleted records."""

    @override
    def get_queryset(self) -> FileRecordQuerySet:
        """Return only records that are not soft-deleted."""
        return FileRecordQuerySet(self.model, using=self._db).live()

    def for_entity(
        self,
        entity_type: str,
        entity_id: int,
        category: str | None = None,
    ) -> FileRecordQuerySet:
        """Shortcut for ``get_queryset().for_entity(...)``."""
        return self.get_queryset().for_entity(entity_type, entity_id, category)


@final
class FileRecord(models.Model):
    """Metadata for one uploaded document.

    The blob lives in the configured storage under ``storage_key``,
    which follows the pattern:
    {entity_type}/{entity_id}/{category}/{timestamp}_{random}_{name}.{ext}

    Every record belongs to exactly one owner entity
    (``entity_type`` + ``entity_id``) set at upload time.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    # Names
    original_name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        help_text='File name supplied by the uploader',
    )
    stored_name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        unique=True,
        help_text='Generated collision-free name (last key segment)',
    )
    extension = models.CharField(
        max_length=_EXTENSION_MAX_LENGTH,
        blank=True,
        default='',
    )

    # Content metadata captured at upload time
    mime_type = models.CharField(max_length=_MIME_TYPE_MAX_LENGTH)
    size_bytes = models.BigIntegerField(help_text='File size in bytes')
    checksum_sha256 = models.CharField(
        max_length=_CHECKSUM_MAX_LENGTH,
        db_index=True,
        help_text='SHA256 hash for integrity verification',
    )

    storage_key = models.CharField(
        max_length=_STORAGE_KEY_MAX_LENGTH,
        unique=True,
        help_text='Location in the blob store, never reused',
    )

    category = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=FileCategory.choices,
        default=FileCategory.OTHER,
        db_index=True,
    )

    # Owner reference
    entity_type = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=EntityType.choices,
    )
    entity_id = models.PositiveBigIntegerField()

    # Access control
    access_level = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=AccessLevel.choices,
        default=AccessLevel.INTERNAL,
    )
    allowed_users = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name='shared_file_records',
        blank=True,
    )

    # Review
    is_verified = models.BooleanField(default=False)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    verified_at = models.DateTimeField(null=True, blank=True)
    verification_notes = models.TextField(blank=True, default='')

    virus_scan_status = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=ScanStatus.choices,
        default=ScanStatus.PENDING,
    )
    virus_scan_result = models.JSONField(null=True, blank=True)

    # Tracking
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='uploaded_file_records',
    )
    last_accessed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    last_accessed_at = models.DateTimeField(null=True, blank=True)
    access_count = models.PositiveIntegerField(default=0)

    # Soft delete
    is_deleted = models.BooleanField(default=False, db_index=True)
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    deleted_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)

    objects: ClassVar[LiveFileRecordManager] = LiveFileRecordManager()
    all_objects: ClassVar[models.Manager['FileRecord']] = (
        FileRecordQuerySet.as_manager()
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'File record'  # type: ignore[mutable-override]
        verbose_name_plural = 'File records'  # type: ignore[mutable-override]
        ordering = ['-created_at']
        base_manager_name = 'all_objects'

        indexes = [
            # Optimize entity document listing
            models.Index(
                fields=['entity_type', 'entity_id'],
                name='files_entity_idx',
            ),
            models.Index(
                fields=['uploaded_by'],
                name='files_uploader_idx',
            ),
            # Optimize purge sweeps
            models.Index(
                fields=['is_deleted', 'deleted_at'],
                name='files_deleted_idx',
            ),
        ]

        constraints = [
            models.CheckConstraint(
                condition=models.Q(size_bytes__gte=0),
                name='files_size_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.entity_type}:{self.entity_id}:{self.original_name}'

    def mark_deleted(self, user_id: int) -> None:
        """Soft delete the record.

        The blob stays in storage until the purge grace period ends.

        Args:
            user_id: User performing the deletion.
        """
        self.is_deleted = True
        self.deleted_by_id = user_id
        self.deleted_at = timezone.now()
        self.save(update_fields=[
            'is_deleted',
            'deleted_by',
            'deleted_at',
            'modified_at',
        ])

    def record_access(self, user_id: int) -> None:
        """Count a successful read by user.

        The counter is incremented in the database, so concurrent
        reads are not lost to each other.

        Args:
            user_id: User who read the file.
        """
        FileRecord.all_objects.filter(pk=self.pk).update(
            access_count=F('access_count') + 1,
            last_accessed_by_id=user_id,
            last_accessed_at=timezone.now(),
        )
        self.refresh_from_db(fields=[
            'access_count',
            'last_accessed_by',
            'last_accessed_at',
        ])

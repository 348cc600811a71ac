"""Django admin configuration for files app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils.html import format_html

from server.apps.files.choices import ScanStatus
from server.apps.files.logic.trash_operations import purge_file
from server.apps.files.models import FileRecord

_SCAN_COLORS = {
    ScanStatus.PENDING: '#6c757d',
    ScanStatus.CLEAN: '#28a745',
    ScanStatus.INFECTED: '#dc3545',
    ScanStatus.ERROR: '#ffc107',
}


def _format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    if size_bytes < 1024 * 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / (1024 * 1024):.1f} MB'
    return f'{size_bytes / (1024 * 1024 * 1024):.1f} GB'


@admin.register(FileRecord)
class FileRecordAdmin(admin.ModelAdmin[FileRecord]):
    """Admin interface for FileRecord model.

    Lists soft-deleted records too, so they can be inspected before
    the purge removes them.
    """

    list_display = [
        'original_name',
        'owner_display',
        'category',
        'access_level',
        'size_display',
        'scan_display',
        'is_verified',
        'is_deleted',
        'created_at',
    ]

    list_filter = [
        'category',
        'access_level',
        'entity_type',
        'virus_scan_status',
        'is_verified',
        'is_deleted',
    ]

    search_fields = [
        'original_name',
        'storage_key',
        'checksum_sha256',
    ]

    readonly_fields = [
        'id',
        'entity_type',
        'entity_id',
        'uploaded_by',
        'stored_name',
        'storage_key',
        'extension',
        'size_bytes',
        'mime_type',
        'checksum_sha256',
        'virus_scan_status',
        'virus_scan_result',
        'access_count',
        'last_accessed_by',
        'last_accessed_at',
        'deleted_by',
        'deleted_at',
        'created_at',
        'modified_at',
    ]

    filter_horizontal = ['allowed_users']

    fieldsets = (
        ('File Information', {
            'fields': (
                'id',
                'original_name',
                'stored_name',
                'storage_key',
                'category',
            ),
        }),
        ('Owner', {
            'fields': ('entity_type', 'entity_id', 'uploaded_by'),
        }),
        ('Metadata', {
            'fields': (
                'extension',
                'size_bytes',
                'mime_type',
                'checksum_sha256',
            ),
        }),
        ('Access', {
            'fields': (
                'access_level',
                'allowed_users',
                'access_count',
                'last_accessed_by',
                'last_accessed_at',
            ),
        }),
        ('Review', {
            'fields': (
                'is_verified',
                'verification_notes',
                'virus_scan_status',
                'virus_scan_result',
            ),
        }),
        ('Deletion', {
            'fields': ('is_deleted', 'deleted_by', 'deleted_at'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'modified_at'),
        }),
    )

    def owner_display(self, obj: FileRecord) -> str:
        """Display owner reference.

        Args:
            obj: FileRecord instance.

        Returns:
            Owner kind and id (e.g., 'Candidate #7').
        """
        return f'{obj.entity_type} #{obj.entity_id}'
    owner_display.short_description = 'Owner'  # type: ignore[attr-defined]

    def size_display(self, obj: FileRecord) -> str:
        """Display file size in human-readable format."""
        return _format_bytes(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def scan_display(self, obj: FileRecord) -> str:
        """Display virus scan status as a colored label.

        Args:
            obj: FileRecord instance.

        Returns:
            HTML formatted status.
        """
        return format_html(
            '<span style="color: {color}; font-weight: bold;">'
            '{status}</span>',
            color=_SCAN_COLORS.get(obj.virus_scan_status, '#6c757d'),
            status=obj.get_virus_scan_status_display(),
        )
    scan_display.short_description = 'Scan'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[FileRecord]:
        """Include soft-deleted records and join the uploader.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return FileRecord.all_objects.select_related('uploaded_by')

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Records are only created by uploads."""
        return False

    def delete_model(self, request: HttpRequest, obj: FileRecord) -> None:
        """Purge the blob together with the record."""
        purge_file(obj)

    def delete_queryset(
        self,
        request: HttpRequest,
        queryset: QuerySet[FileRecord],
    ) -> None:
        """Purge the blob of every selected record."""
        for record in queryset:
            purge_file(record)

"""JSON representations of file records."""

from typing import Any

from server.apps.files.models import FileRecord


def _isoformat(value: Any) -> str | None:
    return value.isoformat() if value else None


def serialize_file_record(record: FileRecord) -> dict[str, Any]:
    """Convert a record to a JSON-safe dict.

    Storage location and checksum are not exposed.

    Args:
        record: FileRecord instance.

    Returns:
        Public metadata of the file.
    """
    return {
        'id': str(record.id),
        'original_name': record.original_name,
        'mime_type': record.mime_type,
        'size_bytes': record.size_bytes,
        'extension': record.extension,
        'category': record.category,
        'entity_type': record.entity_type,
        'entity_id': record.entity_id,
        'access_level': record.access_level,
        'is_verified': record.is_verified,
        'verified_by': record.verified_by_id,
        'verified_at': _isoformat(record.verified_at),
        'verification_notes': record.verification_notes,
        'virus_scan_status': record.virus_scan_status,
        'uploaded_by': record.uploaded_by_id,
        'access_count': record.access_count,
        'last_accessed_at': _isoformat(record.last_accessed_at),
        'created_at': _isoformat(record.created_at),
        'modified_at': _isoformat(record.modified_at),
    }

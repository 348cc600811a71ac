"""Business logic for uploading and reading documents."""

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import timedelta
from typing import IO, TYPE_CHECKING, Any, Final, final

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import UploadedFile
from django.db import IntegrityError, transaction

from server.apps.accounts.principal import Principal
from server.apps.files.choices import AccessLevel, FileCategory
from server.apps.files.exceptions import (
    FileAccessDeniedError,
    FileRecordNotFoundError,
    InvalidUploadError,
    StorageConflictError,
    StorageFailureError,
)
from server.apps.files.infrastructure.metadata import (
    calculate_checksum,
    detect_mime_type,
    extract_filename,
    generate_storage_key,
    get_file_extension,
    validate_file_header,
)
from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.logic.access_policy import can_read
from server.apps.files.logic.classification import determine_category
from server.apps.files.models import FileRecord, FileRecordQuerySet
from server.apps.tasks.logic.queue import enqueue_task

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import FileStorage

logger = logging.getLogger(__name__)

VIRUS_SCAN_TASK: Final = 'files.virus_scan'
_KEY_ATTEMPTS: Final = 3


@final
@dataclass(frozen=True, slots=True)
class FileAccess:
    """A readable file and the URL to fetch it from."""

    record: FileRecord
    url: str
    expires_in: int


@final
@dataclass(slots=True)
class _PreparedUpload:
    """Upload with its key and metadata computed, not yet written."""

    field_name: str
    uploaded_file: UploadedFile
    storage_key: str
    category: str
    mime_type: str
    checksum: str
    saved_name: str = ''


def get_max_upload_size() -> int:
    """Get upload size cap in bytes.

    Returns:
        Limit from settings or default of 10MB.
    """
    return getattr(settings, 'FILES_MAX_UPLOAD_SIZE', 10 * 1024 * 1024)


def get_allowed_mime_types() -> list[str]:
    """Get MIME types accepted for upload."""
    return list(getattr(settings, 'FILES_ALLOWED_MIME_TYPES', []))


def get_virus_scan_delay() -> timedelta:
    """Get delay between upload and virus scan.

    Returns:
        Delay from settings or default of 1 second.
    """
    return timedelta(seconds=getattr(settings, 'FILES_VIRUS_SCAN_DELAY', 1))


def get_signed_url_expiry() -> int:
    """Get lifetime of access URLs in seconds.

    Returns:
        Expiry from settings or default of 3600.
    """
    return getattr(settings, 'FILES_SIGNED_URL_EXPIRY', 3600)


def get_upload_workers() -> int:
    """Get number of concurrent blob writes for multi-file uploads."""
    return getattr(settings, 'FILES_UPLOAD_WORKERS', 4)


def _get_storage() -> 'FileStorage':
    return get_storage()  # type: ignore[return-value]


def _max_length(field_name: str) -> int:
    field = FileRecord._meta.get_field(field_name)
    return field.max_length  # type: ignore[union-attr,return-value]


def _resolve_mime_type(uploaded_file: UploadedFile) -> str:
    declared = getattr(uploaded_file, 'content_type', None)
    return declared or detect_mime_type(uploaded_file.name or '')


def _validate_name(filename: str) -> None:
    """Reject names whose parts do not fit the metadata columns.

    Raises:
        InvalidUploadError: If the name or its extension is too long.
    """
    if len(filename) > _max_length('original_name'):
        raise InvalidUploadError('File name is too long')
    if len(get_file_extension(filename)) > _max_length('extension'):
        raise InvalidUploadError('File extension is too long')


def validate_upload(uploaded_file: UploadedFile) -> None:
    """Check an upload against the type allow-list, size cap and header.

    Args:
        uploaded_file: File received in a request.

    Raises:
        InvalidUploadError: If the file is not acceptable.
    """
    _validate_name(uploaded_file.name or '')

    mime_type = _resolve_mime_type(uploaded_file)
    if mime_type not in get_allowed_mime_types():
        raise InvalidUploadError(f'File type {mime_type} is not allowed')

    max_size = get_max_upload_size()
    if uploaded_file.size is not None and uploaded_file.size > max_size:
        raise InvalidUploadError(
            f'File too large, maximum size is {max_size} bytes',
        )

    if not validate_file_header(uploaded_file, mime_type):
        raise InvalidUploadError(
            'File content does not match its declared type',
        )


def _reserve_storage_key(
    original_name: str,
    entity_type: str,
    entity_id: int,
    category: str,
    taken: set[str] | None = None,
) -> str:
    """Generate a storage key not used by any record or blob.

    Raises:
        StorageConflictError: If every attempt collided.
    """
    storage = _get_storage()
    taken = taken or set()
    for _ in range(_KEY_ATTEMPTS):
        storage_key = generate_storage_key(
            original_name,
            entity_type,
            entity_id,
            category,
        )
        in_use = (
            storage_key in taken
            or FileRecord.all_objects.filter(storage_key=storage_key).exists()
            or storage.exists(storage_key)
        )
        if not in_use:
            return storage_key
        logger.warning('Storage key collision, regenerating: %s', storage_key)
    raise StorageConflictError()


def _prepare_upload(
    field_name: str,
    uploaded_file: UploadedFile,
    entity_type: str,
    entity_id: int,
    category: str,
    taken: set[str] | None = None,
) -> _PreparedUpload:
    original_name = uploaded_file.name or field_name
    return _PreparedUpload(
        field_name=field_name,
        uploaded_file=uploaded_file,
        storage_key=_reserve_storage_key(
            original_name,
            entity_type,
            entity_id,
            category,
            taken,
        ),
        category=category,
        mime_type=_resolve_mime_type(uploaded_file),
        checksum=calculate_checksum(uploaded_file),
    )


def _write_blob(prepared: _PreparedUpload) -> str:
    """Write one upload to storage.

    Raises:
        StorageFailureError: If the backend write fails.
    """
    try:
        prepared.uploaded_file.seek(0)
        return _get_storage().save(prepared.storage_key, prepared.uploaded_file)
    except Exception as exc:
        raise StorageFailureError() from exc


def _create_record(
    prepared: _PreparedUpload,
    entity_type: str,
    entity_id: int,
    uploaded_by: Any,
    access_level: str,
) -> FileRecord:
    """Insert metadata for a written blob and schedule its scan."""
    original_name = prepared.uploaded_file.name or prepared.field_name
    record = FileRecord.objects.create(
        original_name=original_name,
        stored_name=extract_filename(prepared.saved_name),
        extension=get_file_extension(original_name),
        mime_type=prepared.mime_type,
        size_bytes=prepared.uploaded_file.size or 0,
        checksum_sha256=prepared.checksum,
        storage_key=prepared.saved_name,
        category=prepared.category,
        entity_type=entity_type,
        entity_id=entity_id,
        access_level=access_level,
        uploaded_by=uploaded_by,
    )
    enqueue_task(
        VIRUS_SCAN_TASK,
        {'file_id': str(record.id)},
        delay=get_virus_scan_delay(),
    )
    logger.info(
        'File record created: %s (ID: %s, %s %s)',
        record.storage_key,
        record.id,
        entity_type,
        entity_id,
    )
    return record


def _rollback_blobs(prepared_uploads: list[_PreparedUpload]) -> None:
    storage = _get_storage()
    for prepared in prepared_uploads:
        if prepared.saved_name:
            storage.rollback_upload(prepared.saved_name)


def upload_single(  # noqa: WPS211
    uploaded_file: UploadedFile,
    entity_type: str,
    entity_id: int,
    uploaded_by: Any,
    category: str = FileCategory.OTHER,
    access_level: str = AccessLevel.INTERNAL,
) -> FileRecord:
    """Store a document for an entity and record its metadata.

    The blob is written first, so a storage failure leaves no
    metadata. If the metadata insert fails the blob is deleted again.
    The record starts with a pending virus scan; the scan runs later
    as a scheduled task.

    Args:
        uploaded_file: File received in a request.
        entity_type: Owner kind (EntityType value).
        entity_id: Owner primary key.
        uploaded_by: User performing the upload.
        category: Document category.
        access_level: Initial access level.

    Returns:
        Created FileRecord instance.

    Raises:
        StorageFailureError: If the blob cannot be written.
        StorageConflictError: If no free storage key could be reserved.
    """
    prepared = _prepare_upload(
        uploaded_file.name or '',
        uploaded_file,
        entity_type,
        entity_id,
        category,
    )
    prepared.saved_name = _write_blob(prepared)

    try:
        with transaction.atomic():
            return _create_record(
                prepared,
                entity_type,
                entity_id,
                uploaded_by,
                access_level,
            )
    except IntegrityError as exc:
        logger.exception(
            'Metadata insert conflicted, rolling back upload: %s',
            prepared.saved_name,
        )
        _rollback_blobs([prepared])
        raise StorageConflictError() from exc
    except Exception:
        logger.exception(
            'Database transaction failed, rolling back storage upload: %s',
            prepared.saved_name,
        )
        _rollback_blobs([prepared])
        raise


def upload_multiple(  # noqa: WPS211
    files_by_field: Mapping[str, UploadedFile],
    entity_type: str,
    entity_id: int,
    uploaded_by: Any,
    access_level: str = AccessLevel.INTERNAL,
) -> dict[str, FileRecord]:
    """Store several documents, each categorized by its form field.

    Blobs are written concurrently. Metadata for all of them is then
    inserted in one transaction. The call is all-or-nothing: if any
    write or insert fails, blobs already written are deleted and no
    record is kept.

    Args:
        files_by_field: Uploaded files keyed by form field name.
        entity_type: Owner kind (EntityType value).
        entity_id: Owner primary key.
        uploaded_by: User performing the upload.
        access_level: Initial access level for every file.

    Returns:
        Created records keyed by form field name.

    Raises:
        InvalidUploadError: If no files were given.
        StorageFailureError: If any blob cannot be written.
        StorageConflictError: If a storage key could not be reserved.
    """
    if not files_by_field:
        raise InvalidUploadError('No files were uploaded')

    taken: set[str] = set()
    prepared_uploads = []
    for field_name, uploaded_file in files_by_field.items():
        prepared = _prepare_upload(
            field_name,
            uploaded_file,
            entity_type,
            entity_id,
            determine_category(field_name),
            taken,
        )
        taken.add(prepared.storage_key)
        prepared_uploads.append(prepared)

    with ThreadPoolExecutor(max_workers=get_upload_workers()) as executor:
        futures = [
            (prepared, executor.submit(_write_blob, prepared))
            for prepared in prepared_uploads
        ]
    errors = []
    for prepared, future in futures:
        try:
            prepared.saved_name = future.result()
        except StorageFailureError as exc:
            logger.exception(
                'Failed to store upload for field %s',
                prepared.field_name,
            )
            errors.append(exc)
    if errors:
        _rollback_blobs(prepared_uploads)
        raise errors[0]

    try:
        with transaction.atomic():
            records = {
                prepared.field_name: _create_record(
                    prepared,
                    entity_type,
                    entity_id,
                    uploaded_by,
                    access_level,
                )
                for prepared in prepared_uploads
            }
    except IntegrityError as exc:
        logger.exception('Metadata insert conflicted, rolling back uploads')
        _rollback_blobs(prepared_uploads)
        raise StorageConflictError() from exc
    except Exception:
        logger.exception('Database transaction failed, rolling back uploads')
        _rollback_blobs(prepared_uploads)
        raise

    logger.info(
        'Uploaded %d files for %s %s',
        len(records),
        entity_type,
        entity_id,
    )
    return records


def get_live_record(file_id: Any) -> FileRecord:
    """Load a file record that is not soft-deleted.

    Raises:
        FileRecordNotFoundError: If the file is absent or soft-deleted.
    """
    try:
        return FileRecord.objects.get(pk=file_id)
    except (FileRecord.DoesNotExist, ValidationError, ValueError) as exc:
        raise FileRecordNotFoundError() from exc


def authorize_read(record: FileRecord, principal: Principal) -> None:
    """Apply the read policy and count the access.

    Raises:
        FileAccessDeniedError: If the policy denies principal.
    """
    if not can_read(record, principal):
        logger.info(
            'Read denied: file %s, user %s',
            record.id,
            principal.user_id,
        )
        raise FileAccessDeniedError()
    if principal.user_id is not None:
        record.record_access(principal.user_id)


def get_file(file_id: Any, principal: Principal) -> FileAccess:
    """Fetch a file's metadata and a URL to read it.

    Args:
        file_id: FileRecord primary key.
        principal: Caller, possibly anonymous.

    Returns:
        FileAccess with the record and an access URL.

    Raises:
        FileRecordNotFoundError: If the file is absent or soft-deleted.
        FileAccessDeniedError: If the policy denies principal.
    """
    record = get_live_record(file_id)
    authorize_read(record, principal)

    expires_in = get_signed_url_expiry()
    try:
        url = _get_storage().access_url(record.storage_key, expire=expires_in)
    except Exception as exc:
        logger.exception('Failed to build access URL: %s', record.storage_key)
        raise StorageFailureError() from exc
    return FileAccess(record=record, url=url, expires_in=expires_in)


def open_file(record: FileRecord) -> IO[bytes]:
    """Open the blob behind a record for reading.

    Args:
        record: File to read.

    Returns:
        Binary file handle, to be closed by the caller.

    Raises:
        FileRecordNotFoundError: If the blob is missing.
        StorageFailureError: If the blob store cannot be read.
    """
    storage = _get_storage()
    try:
        if not storage.exists(record.storage_key):
            logger.warning('Blob missing for file %s', record.id)
            raise FileRecordNotFoundError()
        return storage.open(record.storage_key, 'rb')
    except FileRecordNotFoundError:
        raise
    except Exception as exc:
        logger.exception('Failed to open blob: %s', record.storage_key)
        raise StorageFailureError() from exc


def get_entity_documents(
    entity_type: str,
    entity_id: int,
    category: str | None = None,
) -> FileRecordQuerySet:
    """List live documents of an entity, newest first.

    Args:
        entity_type: Owner kind (EntityType value).
        entity_id: Owner primary key.
        category: Optional category filter.

    Returns:
        QuerySet of FileRecord objects.
    """
    return FileRecord.objects.for_entity(
        entity_type,
        entity_id,
        category,
    ).select_related('uploaded_by')

"""Business logic for soft delete and purge of documents."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Final, final

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from server.apps.accounts.principal import Principal
from server.apps.files.exceptions import (
    FileAccessDeniedError,
    StorageFailureError,
)
from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.logic.access_policy import can_delete
from server.apps.files.logic.file_operations import get_live_record
from server.apps.files.models import FileRecord
from server.apps.tasks.logic.queue import enqueue_task

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import FileStorage

logger = logging.getLogger(__name__)

PURGE_TASK: Final = 'files.purge'
_DEFAULT_BATCH_SIZE: Final = 1000


@final
@dataclass(frozen=True, slots=True)
class CleanupResult:
    """Outcome of one cleanup sweep."""

    purged: int = 0
    failed: int = 0
    candidates: int = 0


def get_purge_grace_period() -> timedelta:
    """Get how long soft-deleted files are kept.

    Returns:
        Grace period from settings or default of 30 days.
    """
    return timedelta(days=getattr(settings, 'FILES_PURGE_GRACE_DAYS', 30))


def delete_file(file_id: Any, principal: Principal) -> FileRecord:
    """Soft delete a file and schedule its purge.

    The record disappears from reads at once. The blob and the row
    are removed by a purge task after the grace period.

    Args:
        file_id: FileRecord primary key.
        principal: Caller; must be the uploader.

    Returns:
        Soft-deleted FileRecord instance.

    Raises:
        FileRecordNotFoundError: If the file is absent or already deleted.
        FileAccessDeniedError: If principal is not the uploader.
    """
    record = get_live_record(file_id)
    if not can_delete(record, principal):
        logger.info(
            'Delete denied: file %s, user %s',
            record.id,
            principal.user_id,
        )
        raise FileAccessDeniedError(
            'Only the uploader can delete this file',
        )

    with transaction.atomic():
        record.mark_deleted(principal.user_id)
        enqueue_task(
            PURGE_TASK,
            {'file_id': str(record.id)},
            run_after=record.deleted_at + get_purge_grace_period(),
        )

    logger.info(
        'File soft deleted: %s (ID: %s, by user %s)',
        record.storage_key,
        record.id,
        principal.user_id,
    )
    return record


def purge_file(record: FileRecord) -> bool:
    """Remove a file's blob, then its metadata row.

    A blob that is already gone is not an error.

    Args:
        record: File to purge.

    Returns:
        True if a blob was removed, False if it was already absent.

    Raises:
        StorageFailureError: If the blob store fails; the row is kept.
    """
    storage: FileStorage = get_storage()  # type: ignore[assignment]
    try:
        removed = storage.purge(record.storage_key)
    except Exception as exc:
        raise StorageFailureError() from exc

    file_id = record.id
    record.delete()
    logger.info(
        'File purged: %s (ID: %s, blob removed: %s)',
        record.storage_key,
        file_id,
        removed,
    )
    return removed


def cleanup_deleted_files(
    *,
    grace_period: timedelta | None = None,
    batch_size: int | None = None,
    now: datetime | None = None,
    dry_run: bool = False,
) -> CleanupResult:
    """Purge files soft-deleted longer ago than the grace period.

    A failure on one file is logged and counted, and the sweep moves
    on to the next one. Running the sweep again is harmless.

    Args:
        grace_period: Retention after soft delete (default from settings).
        batch_size: Maximum files to process in one sweep.
        now: Reference time (defaults to the current time).
        dry_run: Only count the candidates.

    Returns:
        CleanupResult with purge and failure counts.
    """
    now = now or timezone.now()
    if grace_period is None:
        grace_period = get_purge_grace_period()
    if batch_size is None:
        batch_size = _DEFAULT_BATCH_SIZE
    cutoff = now - grace_period
    candidates = list(
        FileRecord.all_objects.purge_candidates(cutoff)[:batch_size],
    )
    if dry_run:
        return CleanupResult(candidates=len(candidates))

    purged = 0
    failed = 0
    for record in candidates:
        try:
            purge_file(record)
        except Exception:
            logger.exception('Failed to purge file: %s', record.id)
            failed += 1
        else:
            purged += 1

    if candidates:
        logger.info(
            'Cleanup sweep finished: %d purged, %d failed',
            purged,
            failed,
        )
    return CleanupResult(
        purged=purged,
        failed=failed,
        candidates=len(candidates),
    )

"""Scheduled task handlers for files app.

Imported from ``FilesConfig.ready`` so the handlers are registered
before any worker runs.
"""

import logging
from typing import Any

from server.apps.files.logic.file_operations import VIRUS_SCAN_TASK
from server.apps.files.logic.scan_operations import run_virus_scan
from server.apps.files.logic.trash_operations import (
    PURGE_TASK,
    purge_file,
)
from server.apps.files.models import FileRecord
from server.apps.tasks.logic.queue import register_task_handler

logger = logging.getLogger(__name__)


@register_task_handler(VIRUS_SCAN_TASK)
def handle_virus_scan(payload: dict[str, Any]) -> None:
    """Scan the uploaded file named in the payload."""
    run_virus_scan(payload['file_id'])


@register_task_handler(PURGE_TASK)
def handle_purge(payload: dict[str, Any]) -> None:
    """Purge a soft-deleted file.

    The task is enqueued to run when the grace period ends. Files
    already purged, for example by the cleanup sweep, are skipped.
    """
    record = FileRecord.all_objects.filter(
        pk=payload['file_id'],
        is_deleted=True,
    ).first()
    if record is None:
        logger.info('Purge skipped, file %s is gone', payload['file_id'])
        return
    purge_file(record)

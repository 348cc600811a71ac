"""Business logic for document verification by reviewers.

Callers are responsible for restricting these operations to
reviewer roles.
"""

import logging
import uuid
from collections.abc import Iterable
from typing import Any

from django.utils import timezone

from server.apps.accounts.principal import Principal
from server.apps.files.choices import VerificationDecision
from server.apps.files.exceptions import InvalidInputError
from server.apps.files.logic.file_operations import get_live_record
from server.apps.files.models import FileRecord

logger = logging.getLogger(__name__)


def _is_approved(decision: str) -> bool:
    if decision not in VerificationDecision.values:
        raise InvalidInputError(f'Unknown verification status: {decision}')
    return decision == VerificationDecision.APPROVED


def verify_document(
    file_id: Any,
    principal: Principal,
    decision: str,
    notes: str = '',
) -> FileRecord:
    """Record a reviewer's decision on one document.

    Args:
        file_id: FileRecord primary key.
        principal: Reviewer.
        decision: VerificationDecision value.
        notes: Optional reviewer notes.

    Returns:
        Updated FileRecord instance.

    Raises:
        InvalidInputError: If decision is not a known value.
        FileRecordNotFoundError: If the file is absent or soft-deleted.
    """
    approved = _is_approved(decision)
    record = get_live_record(file_id)
    record.is_verified = approved
    record.verified_by_id = principal.user_id
    record.verified_at = timezone.now()
    record.verification_notes = notes
    record.save(update_fields=[
        'is_verified',
        'verified_by',
        'verified_at',
        'verification_notes',
        'modified_at',
    ])
    logger.info(
        'File %s %s by user %s',
        record.id,
        decision,
        principal.user_id,
    )
    return record


def _parse_ids(file_ids: Iterable[Any]) -> list[uuid.UUID]:
    parsed = []
    for file_id in file_ids:
        try:
            parsed.append(uuid.UUID(str(file_id)))
        except ValueError:
            logger.debug('Skipping malformed file id: %s', file_id)
    return parsed


def bulk_verify(
    file_ids: Iterable[Any],
    principal: Principal,
    decision: str,
) -> int:
    """Record the same decision on many documents.

    Unknown, malformed and soft-deleted ids are skipped silently.

    Args:
        file_ids: FileRecord primary keys.
        principal: Reviewer.
        decision: VerificationDecision value.

    Returns:
        Number of records modified.

    Raises:
        InvalidInputError: If decision is not a known value.
    """
    approved = _is_approved(decision)
    now = timezone.now()
    modified = FileRecord.objects.filter(pk__in=_parse_ids(file_ids)).update(
        is_verified=approved,
        verified_by_id=principal.user_id,
        verified_at=now,
        modified_at=now,
    )
    logger.info(
        'Bulk verification by user %s: %d files %s',
        principal.user_id,
        modified,
        decision,
    )
    return modified

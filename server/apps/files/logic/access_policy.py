"""Read and delete permissions on file records.

Read access is a list of rules evaluated in order; any rule that
matches grants access. Extend ``READ_RULES`` to add a rule.
"""

from collections.abc import Callable
from typing import Final

from server.apps.accounts.models import Role
from server.apps.accounts.principal import Principal
from server.apps.files.choices import AccessLevel
from server.apps.files.logic.owners import related_user_ids
from server.apps.files.models import FileRecord

ReadRule = Callable[[FileRecord, Principal], bool]


def _is_administrator(record: FileRecord, principal: Principal) -> bool:
    return principal.is_administrator


def _is_uploader(record: FileRecord, principal: Principal) -> bool:
    return (
        principal.is_authenticated
        and record.uploaded_by_id == principal.user_id
    )


def _is_allowed_user(record: FileRecord, principal: Principal) -> bool:
    if not principal.is_authenticated:
        return False
    return record.allowed_users.filter(pk=principal.user_id).exists()


def _is_public(record: FileRecord, principal: Principal) -> bool:
    return record.access_level == AccessLevel.PUBLIC


def _is_internal_staff(record: FileRecord, principal: Principal) -> bool:
    return (
        principal.is_authenticated
        and record.access_level == AccessLevel.INTERNAL
        and principal.role != Role.CLIENT
    )


def _is_owner_related(record: FileRecord, principal: Principal) -> bool:
    """Users with standing on the owner entity (e.g. candidate assignee)."""
    if not principal.is_authenticated:
        return False
    related = related_user_ids(record.entity_type, record.entity_id)
    return principal.user_id in related


# Cheap checks first, the owner lookup last.
READ_RULES: Final[tuple[ReadRule, ...]] = (
    _is_administrator,
    _is_uploader,
    _is_allowed_user,
    _is_public,
    _is_internal_staff,
    _is_owner_related,
)


def can_read(record: FileRecord, principal: Principal) -> bool:
    """Whether principal may read the file.

    Args:
        record: File being accessed.
        principal: Caller, possibly anonymous.

    Returns:
        True if any read rule matches.
    """
    return any(rule(record, principal) for rule in READ_RULES)


def can_delete(record: FileRecord, principal: Principal) -> bool:
    """Whether principal may delete the file.

    Only the uploader may delete, administrators included.
    """
    return _is_uploader(record, principal)

"""Resolution of the entity a file belongs to.

A file's owner is one of a closed set of kinds (``EntityType``).
Each kind maps to a model and to the users who have standing on an
instance of it, so access rules never branch on the kind themselves.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Final, final

from django.apps import apps
from django.conf import settings
from django.db import models

from server.apps.files.choices import EntityType

logger = logging.getLogger(__name__)

RelatedUsers = Callable[[Any], frozenset[int]]


def _no_related_users(owner: Any) -> frozenset[int]:
    return frozenset()


def _candidate_related_users(candidate: Any) -> frozenset[int]:
    """Creator and current assignee of a candidate."""
    user_ids = {candidate.created_by_id, candidate.assigned_to_id}
    return frozenset(user_id for user_id in user_ids if user_id is not None)


@final
@dataclass(frozen=True, slots=True)
class OwnerKind:
    """One variant of the owner union.

    Attributes:
        model_label: ``app_label.ModelName`` of the owner model.
        related_users: Users with standing on an owner of this kind.
    """

    model_label: str
    related_users: RelatedUsers = _no_related_users

    def get_model(self) -> type[models.Model]:
        """Model class of this owner kind."""
        return apps.get_model(self.model_label)


OWNER_KINDS: Final[dict[str, OwnerKind]] = {
    EntityType.CANDIDATE: OwnerKind(
        'recruitment.Candidate',
        related_users=_candidate_related_users,
    ),
    EntityType.CLIENT: OwnerKind('recruitment.Client'),
    EntityType.REQUIREMENT: OwnerKind('recruitment.Requirement'),
    EntityType.BGV_VENDOR: OwnerKind('recruitment.BGVVendor'),
    EntityType.AGENCY: OwnerKind('recruitment.Agency'),
    EntityType.USER: OwnerKind(settings.AUTH_USER_MODEL),
}


def resolve_owner(entity_type: str, entity_id: int) -> models.Model | None:
    """Load the owner instance of a file.

    Args:
        entity_type: Owner kind (EntityType value).
        entity_id: Owner primary key.

    Returns:
        Owner instance, or None when the kind is unknown or the
        instance does not exist.
    """
    kind = OWNER_KINDS.get(entity_type)
    if kind is None:
        return None
    return kind.get_model()._default_manager.filter(pk=entity_id).first()


def owner_exists(entity_type: str, entity_id: int) -> bool:
    """Whether the referenced owner instance exists."""
    return resolve_owner(entity_type, entity_id) is not None


def related_user_ids(entity_type: str, entity_id: int) -> frozenset[int]:
    """Users related to a file's owner.

    A missing owner has no related users. This is not an error.

    Args:
        entity_type: Owner kind (EntityType value).
        entity_id: Owner primary key.

    Returns:
        Set of user ids.
    """
    owner = resolve_owner(entity_type, entity_id)
    if owner is None:
        logger.debug('Owner not found: %s %s', entity_type, entity_id)
        return frozenset()
    return OWNER_KINDS[entity_type].related_users(owner)

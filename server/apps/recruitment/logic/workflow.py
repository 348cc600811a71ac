"""Multi-step onboarding workflows.

Each entity type with a workflow walks a fixed list of stages stored
in its ``workflow_stage`` field. Transitions are plain lookups.
"""

import logging
from typing import Final

from django.db import models

from server.apps.recruitment.exceptions import WorkflowError

logger = logging.getLogger(__name__)

_COMPLETE_STAGE: Final = 'Complete'

STAGE_SEQUENCES: Final[dict[str, tuple[str, ...]]] = {
    'Candidate': (
        'Personal Details',
        'Education',
        'Employment',
        'KYC',
        'Financial',
        'Review',
        _COMPLETE_STAGE,
    ),
    'Client': (
        'Business Details',
        'Address & Billing',
        'Documents',
        'Leave Policy',
        'Verification Policy',
        'SPOC Details',
        'Review & Approval',
        _COMPLETE_STAGE,
    ),
}

# Flat current -> next lookup tables built from the sequences
NEXT_STAGE: Final[dict[str, dict[str, str]]] = {
    entity_type: dict(zip(stages, stages[1:], strict=False))
    for entity_type, stages in STAGE_SEQUENCES.items()
}


def get_next_stage(entity_type: str, stage: str) -> str | None:
    """Get the stage that follows the given one.

    Args:
        entity_type: Entity type name (e.g. 'Candidate').
        stage: Current stage.

    Returns:
        Next stage, or None at the end of the workflow or for
        entity types without a workflow.
    """
    return NEXT_STAGE.get(entity_type, {}).get(stage)


def workflow_progress(entity_type: str, stage: str) -> int:
    """Percentage of stages completed before the given stage.

    Example: the first stage of a 7 step flow reports 0,
    'Complete' reports 100.

    Args:
        entity_type: Entity type name.
        stage: Current stage.

    Returns:
        Progress between 0 and 100 (0 for unknown stages).
    """
    stages = STAGE_SEQUENCES.get(entity_type, ())
    if stage not in stages:
        return 0
    steps = len(stages) - 1
    return round(stages.index(stage) * 100 / steps)


def advance_workflow_stage(entity: models.Model) -> str:
    """Move an entity to its next workflow stage and save it.

    Args:
        entity: Candidate or Client instance.

    Returns:
        The new stage.

    Raises:
        WorkflowError: If the entity has no next stage.
    """
    entity_type = type(entity).__name__
    current = entity.workflow_stage  # type: ignore[attr-defined]
    next_stage = get_next_stage(entity_type, current)
    if next_stage is None:
        raise WorkflowError(entity_type, current)

    entity.workflow_stage = next_stage  # type: ignore[attr-defined]
    entity.save(update_fields=['workflow_stage', 'updated_at'])

    logger.info(
        '%s %s advanced: %s -> %s',
        entity_type,
        entity.pk,
        current,
        next_stage,
    )
    return next_stage

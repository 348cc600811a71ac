"""Exceptions for recruitment app."""


class WorkflowError(Exception):
    """Raised when a workflow stage cannot be advanced."""

    def __init__(self, entity_type: str, stage: str) -> None:
        """Initialize WorkflowError.

        Args:
            entity_type: Kind of entity whose workflow was advanced.
            stage: Stage the entity is currently in.
        """
        self.entity_type = entity_type
        self.stage = stage
        super().__init__(
            f'{entity_type} workflow cannot advance from stage {stage!r}',
        )

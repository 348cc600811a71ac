"""Exceptions for tasks app."""


class UnknownTaskTypeError(Exception):
    """Raised when no handler is registered for a task type."""

    def __init__(self, task_type: str) -> None:
        """Initialize UnknownTaskTypeError.

        Args:
            task_type: The unregistered task type.
        """
        self.task_type = task_type
        super().__init__(f'No handler registered for task type {task_type!r}')

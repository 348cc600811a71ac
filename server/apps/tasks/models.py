"""Database models for tasks app."""

from typing import Final, final, override

from django.db import models
from django.utils import timezone

_TASK_TYPE_MAX_LENGTH: Final = 100
_STATUS_MAX_LENGTH: Final = 16
_DEFAULT_MAX_ATTEMPTS: Final = 5


@final
class ScheduledTask(models.Model):
    """Unit of deferred work persisted in the database.

    A task becomes eligible once ``run_after`` has passed. Handlers must
    be idempotent: a task may run again after a crash mid-execution.
    """

    class Status(models.TextChoices):
        """Task lifecycle."""

        QUEUED = 'queued', 'Queued'
        RUNNING = 'running', 'Running'
        SUCCEEDED = 'succeeded', 'Succeeded'
        FAILED = 'failed', 'Failed'

    task_type = models.CharField(
        max_length=_TASK_TYPE_MAX_LENGTH,
        db_index=True,
        help_text='Registered handler name, e.g. files.purge',
    )

    payload = models.JSONField(default=dict, blank=True)

    status = models.CharField(
        max_length=_STATUS_MAX_LENGTH,
        choices=Status.choices,
        default=Status.QUEUED,
    )

    run_after = models.DateTimeField(
        default=timezone.now,
        help_text='Task is not executed before this time',
    )

    attempts = models.PositiveSmallIntegerField(default=0)
    max_attempts = models.PositiveSmallIntegerField(
        default=_DEFAULT_MAX_ATTEMPTS,
    )
    last_error = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Scheduled task'  # type: ignore[mutable-override]
        verbose_name_plural = 'Scheduled tasks'  # type: ignore[mutable-override]
        ordering = ['run_after']

        indexes = [
            # Optimize due-task polling
            models.Index(
                fields=['status', 'run_after'],
                name='tasks_status_run_after_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.task_type}#{self.pk} ({self.status})'

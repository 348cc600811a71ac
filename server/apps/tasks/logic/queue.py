"""Durable scheduled task queue.

Deferred work (virus scans, delayed purges) is stored as
``ScheduledTask`` rows with a not-before timestamp, so a process
restart does not lose it. A worker (``process_scheduled_tasks``
command) polls for due tasks and dispatches them to handlers
registered with ``register_task_handler``.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Final, final

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from server.apps.tasks.exceptions import UnknownTaskTypeError
from server.apps.tasks.models import ScheduledTask

logger = logging.getLogger(__name__)

TaskHandler = Callable[[dict[str, Any]], None]

_DEFAULT_BATCH_SIZE: Final = 100

# Handler registry - apps register their task types on import
_HANDLERS: dict[str, TaskHandler] = {}


@final
@dataclass(frozen=True, slots=True)
class TaskRunSummary:
    """Counts from one polling pass."""

    succeeded: int = 0
    retried: int = 0
    failed: int = 0

    @property
    def processed(self) -> int:
        """Total tasks picked up in the pass."""
        return self.succeeded + self.retried + self.failed


def register_task_handler(
    task_type: str,
) -> Callable[[TaskHandler], TaskHandler]:
    """Register a function as the handler for a task type.

    Args:
        task_type: Name tasks are enqueued under.

    Returns:
        Decorator that registers and returns the handler unchanged.
    """

    def decorator(handler: TaskHandler) -> TaskHandler:
        _HANDLERS[task_type] = handler
        return handler

    return decorator


def get_task_handler(task_type: str) -> TaskHandler:
    """Look up the handler for a task type.

    Raises:
        UnknownTaskTypeError: If nothing is registered for task_type.
    """
    try:
        return _HANDLERS[task_type]
    except KeyError as error:
        raise UnknownTaskTypeError(task_type) from error


def get_max_attempts() -> int:
    """Get how many times a failing task is tried.

    Returns:
        Attempt limit from settings or default of 5.
    """
    return getattr(settings, 'TASKS_MAX_ATTEMPTS', 5)


def get_retry_delay() -> timedelta:
    """Get the base back-off between attempts.

    Returns:
        Delay from settings or default of 60 seconds.
    """
    return timedelta(seconds=getattr(settings, 'TASKS_RETRY_DELAY', 60))


def get_stale_after() -> timedelta:
    """Get how long a task may stay running before it is recovered.

    Returns:
        Timeout from settings or default of 900 seconds.
    """
    return timedelta(seconds=getattr(settings, 'TASKS_STALE_AFTER', 900))


def enqueue_task(
    task_type: str,
    payload: dict[str, Any],
    *,
    delay: timedelta | None = None,
    run_after: datetime | None = None,
) -> ScheduledTask:
    """Persist a task for later execution.

    Args:
        task_type: Registered handler name.
        payload: JSON-serializable handler arguments.
        delay: Run no earlier than now + delay.
        run_after: Run no earlier than this time (wins over delay).

    Returns:
        Created ScheduledTask instance.
    """
    if run_after is None:
        run_after = timezone.now() + (delay or timedelta())

    task = ScheduledTask.objects.create(
        task_type=task_type,
        payload=payload,
        run_after=run_after,
        max_attempts=get_max_attempts(),
    )
    logger.info(
        'Task enqueued: %s (ID: %d, run after %s)',
        task_type,
        task.id,
        run_after.isoformat(),
    )
    return task


def run_due_tasks(
    *,
    now: datetime | None = None,
    limit: int = _DEFAULT_BATCH_SIZE,
) -> TaskRunSummary:
    """Execute queued tasks whose run_after has passed.

    Args:
        now: Reference time (defaults to the current time).
        limit: Maximum number of tasks to run in this pass.

    Returns:
        Summary of task outcomes.
    """
    now = now or timezone.now()
    tasks = _claim_due_tasks(now, limit)

    succeeded = 0
    retried = 0
    failed = 0
    for task in tasks:
        outcome = _execute_task(task, now)
        if outcome == ScheduledTask.Status.SUCCEEDED:
            succeeded += 1
        elif outcome == ScheduledTask.Status.QUEUED:
            retried += 1
        else:
            failed += 1

    if tasks:
        logger.info(
            'Task pass finished: %d succeeded, %d retried, %d failed',
            succeeded,
            retried,
            failed,
        )
    return TaskRunSummary(succeeded=succeeded, retried=retried, failed=failed)


def recover_stale_tasks(stale_after: timedelta | None = None) -> int:
    """Requeue tasks left running by a crashed worker.

    Args:
        stale_after: Age after which a running task is abandoned.

    Returns:
        Number of tasks requeued.
    """
    cutoff = timezone.now() - (stale_after or get_stale_after())
    recovered = ScheduledTask.objects.filter(
        status=ScheduledTask.Status.RUNNING,
        started_at__lt=cutoff,
    ).update(
        status=ScheduledTask.Status.QUEUED,
        started_at=None,
    )
    if recovered:
        logger.warning('Recovered %d stale task(s)', recovered)
    return recovered


def _claim_due_tasks(now: datetime, limit: int) -> list[ScheduledTask]:
    """Mark due tasks as running so other workers skip them.

    Args:
        now: Reference time.
        limit: Maximum number of tasks to claim.

    Returns:
        Claimed tasks, oldest run_after first.
    """
    with transaction.atomic():
        task_ids = list(
            ScheduledTask.objects.select_for_update(skip_locked=True)
            .filter(
                status=ScheduledTask.Status.QUEUED,
                run_after__lte=now,
            )
            .order_by('run_after')
            .values_list('id', flat=True)[:limit],
        )
        ScheduledTask.objects.filter(id__in=task_ids).update(
            status=ScheduledTask.Status.RUNNING,
            started_at=timezone.now(),
        )
    return list(
        ScheduledTask.objects.filter(id__in=task_ids).order_by('run_after'),
    )


def _execute_task(task: ScheduledTask, now: datetime) -> str:
    """Run one claimed task and record its outcome.

    Args:
        task: Task in running state.
        now: Reference time used for retry scheduling.

    Returns:
        The task's new status.
    """
    task.attempts += 1
    try:
        handler = get_task_handler(task.task_type)
        with transaction.atomic():
            handler(task.payload)
    except UnknownTaskTypeError as exc:
        logger.error('Task %d failed: %s', task.id, exc)
        task.status = ScheduledTask.Status.FAILED
        task.last_error = str(exc)
        task.completed_at = timezone.now()
    except Exception as exc:
        logger.exception(
            'Task %d (%s) raised on attempt %d',
            task.id,
            task.task_type,
            task.attempts,
        )
        task.last_error = f'{type(exc).__name__}: {exc}'
        if task.attempts >= task.max_attempts:
            task.status = ScheduledTask.Status.FAILED
            task.completed_at = timezone.now()
        else:
            task.status = ScheduledTask.Status.QUEUED
            task.run_after = now + get_retry_delay() * task.attempts
            task.started_at = None
    else:
        task.status = ScheduledTask.Status.SUCCEEDED
        task.last_error = ''
        task.completed_at = timezone.now()

    task.save(update_fields=[
        'status',
        'attempts',
        'last_error',
        'run_after',
        'started_at',
        'completed_at',
    ])
    return task.status

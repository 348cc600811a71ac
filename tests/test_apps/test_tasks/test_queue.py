"""Tests for the scheduled task queue."""

from datetime import timedelta

import pytest
from django.utils import timezone

from server.apps.tasks.exceptions import UnknownTaskTypeError
from server.apps.tasks.logic import queue
from server.apps.tasks.logic.queue import (
    enqueue_task,
    get_task_handler,
    recover_stale_tasks,
    register_task_handler,
    run_due_tasks,
)
from server.apps.tasks.models import ScheduledTask


@pytest.fixture
def handled(monkeypatch):
    """Register a recording handler under 'test.record'.

    Returns:
        List collecting the payloads the handler receives.
    """
    monkeypatch.setattr(queue, '_HANDLERS', dict(queue._HANDLERS))
    calls = []

    @register_task_handler('test.record')
    def record(payload):
        calls.append(payload)

    return calls


@pytest.fixture
def failing(monkeypatch):
    """Register a handler under 'test.fail' that always raises."""
    monkeypatch.setattr(queue, '_HANDLERS', dict(queue._HANDLERS))

    @register_task_handler('test.fail')
    def fail(payload):
        raise RuntimeError('boom')


class TestRegistry:
    """Tests for handler registration."""

    def test_registered_handler_is_returned(self, handled):
        """Test lookup returns the decorated function."""
        handler = get_task_handler('test.record')

        handler({'x': 1})

        assert handled == [{'x': 1}]

    def test_unknown_type(self):
        """Test lookup of an unregistered type fails."""
        with pytest.raises(UnknownTaskTypeError, match='nope'):
            get_task_handler('nope')

    def test_file_handlers_registered(self):
        """Test the files app registers its handlers on startup."""
        assert get_task_handler('files.virus_scan')
        assert get_task_handler('files.purge')


@pytest.mark.django_db
class TestEnqueue:
    """Tests for enqueue_task."""

    def test_defaults_to_now(self):
        """Test a task without delay is due immediately."""
        before = timezone.now()

        task = enqueue_task('test.record', {'a': 1})

        assert task.status == ScheduledTask.Status.QUEUED
        assert task.payload == {'a': 1}
        assert task.run_after >= before
        assert task.max_attempts == 5

    def test_delay(self):
        """Test delay pushes run_after into the future."""
        task = enqueue_task('test.record', {}, delay=timedelta(hours=1))

        assert task.run_after > timezone.now() + timedelta(minutes=59)

    def test_run_after_wins(self):
        """Test an explicit run_after overrides delay."""
        when = timezone.now() + timedelta(days=3)

        task = enqueue_task(
            'test.record',
            {},
            delay=timedelta(hours=1),
            run_after=when,
        )

        assert task.run_after == when


@pytest.mark.django_db
class TestRunDueTasks:
    """Tests for run_due_tasks."""

    def test_runs_only_due_tasks(self, handled):
        """Test future tasks wait for their time."""
        enqueue_task('test.record', {'n': 1})
        later = enqueue_task('test.record', {'n': 2}, delay=timedelta(hours=1))

        summary = run_due_tasks()

        assert summary.succeeded == 1
        assert handled == [{'n': 1}]
        later.refresh_from_db()
        assert later.status == ScheduledTask.Status.QUEUED

    def test_reference_time(self, handled):
        """Test a later reference time makes delayed tasks due."""
        enqueue_task('test.record', {'n': 1}, delay=timedelta(hours=1))

        summary = run_due_tasks(now=timezone.now() + timedelta(hours=2))

        assert summary.processed == 1
        assert handled == [{'n': 1}]

    def test_success_is_recorded(self, handled):
        """Test a finished task is not run again."""
        task = enqueue_task('test.record', {})

        run_due_tasks()
        second = run_due_tasks()

        task.refresh_from_db()
        assert task.status == ScheduledTask.Status.SUCCEEDED
        assert task.attempts == 1
        assert task.completed_at is not None
        assert second.processed == 0

    def test_failure_is_retried_with_backoff(self, failing):
        """Test a raising handler is requeued later."""
        task = enqueue_task('test.fail', {})
        now = timezone.now()

        summary = run_due_tasks(now=now)

        assert summary.retried == 1
        task.refresh_from_db()
        assert task.status == ScheduledTask.Status.QUEUED
        assert task.attempts == 1
        assert task.run_after == now + timedelta(seconds=60)
        assert 'RuntimeError: boom' in task.last_error

    def test_gives_up_after_max_attempts(self, failing, settings):
        """Test a task fails for good once attempts run out."""
        settings.TASKS_MAX_ATTEMPTS = 1
        task = enqueue_task('test.fail', {})

        summary = run_due_tasks()

        assert summary.failed == 1
        task.refresh_from_db()
        assert task.status == ScheduledTask.Status.FAILED

    def test_unknown_type_fails_immediately(self):
        """Test tasks without a handler are not retried."""
        task = enqueue_task('test.missing', {})

        summary = run_due_tasks()

        assert summary.failed == 1
        task.refresh_from_db()
        assert task.status == ScheduledTask.Status.FAILED
        assert task.attempts == 1

    def test_limit(self, handled):
        """Test a pass runs at most limit tasks."""
        for number in range(3):
            enqueue_task('test.record', {'n': number})

        summary = run_due_tasks(limit=2)

        assert summary.processed == 2
        assert handled == [{'n': 0}, {'n': 1}]


@pytest.mark.django_db
class TestRecoverStaleTasks:
    """Tests for recover_stale_tasks."""

    def test_requeues_old_running_tasks(self):
        """Test tasks stuck in running are put back in the queue."""
        stale = enqueue_task('test.record', {})
        fresh = enqueue_task('test.record', {})
        ScheduledTask.objects.filter(pk=stale.pk).update(
            status=ScheduledTask.Status.RUNNING,
            started_at=timezone.now() - timedelta(hours=1),
        )
        ScheduledTask.objects.filter(pk=fresh.pk).update(
            status=ScheduledTask.Status.RUNNING,
            started_at=timezone.now(),
        )

        assert recover_stale_tasks() == 1
        stale.refresh_from_db()
        fresh.refresh_from_db()
        assert stale.status == ScheduledTask.Status.QUEUED
        assert stale.started_at is None
        assert fresh.status == ScheduledTask.Status.RUNNING

"""Management command to run due scheduled tasks."""

import logging
import time
from typing import Any, final, override

from django.conf import settings
from django.core.management.base import BaseCommand

from server.apps.tasks.logic.queue import recover_stale_tasks, run_due_tasks

_DEFAULT_LIMIT = 100

logger = logging.getLogger(__name__)


@final
class Command(BaseCommand):
    """Poll the task table and execute due tasks."""

    help = 'Run due scheduled tasks (virus scans, delayed purges)'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--once',
            action='store_true',
            help='Run a single pass and exit',
        )
        parser.add_argument(
            '--limit',
            type=int,
            default=_DEFAULT_LIMIT,
            help=f'Max tasks per pass (default: {_DEFAULT_LIMIT})',
        )
        parser.add_argument(
            '--interval',
            type=int,
            default=None,
            help='Seconds between passes (default: from settings)',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        limit = options['limit']
        interval = options['interval'] or getattr(
            settings,
            'TASKS_POLL_INTERVAL',
            5,
        )

        recovered = recover_stale_tasks()
        if recovered:
            self.stdout.write(f'Requeued {recovered} stale tasks')

        if options['once']:
            self._run_pass(limit)
            return

        logger.info('Task worker started (interval: %ds)', interval)
        try:
            while True:
                self._run_pass(limit)
                time.sleep(interval)
        except KeyboardInterrupt:
            logger.info('Task worker stopped')

    def _run_pass(self, limit: int) -> None:
        summary = run_due_tasks(limit=limit)
        self.stdout.write(
            self.style.SUCCESS(
                f'Processed {summary.processed} tasks: '
                f'{summary.succeeded} succeeded, {summary.retried} retried, '
                f'{summary.failed} failed',
            ),
        )

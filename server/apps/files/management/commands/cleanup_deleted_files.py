"""Management command to purge soft-deleted documents."""

import logging
from datetime import timedelta
from typing import Any, Final

from django.core.management.base import BaseCommand
from django.utils import timezone

from server.apps.files.logic.trash_operations import (
    cleanup_deleted_files,
    get_purge_grace_period,
)

_DEFAULT_BATCH_SIZE: Final = 1000

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Purge files soft-deleted longer ago than the grace period."""

    help = 'Purge soft-deleted files past their grace period'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show how many files would be purged without purging',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max files to process (default: {_DEFAULT_BATCH_SIZE})',
        )
        parser.add_argument(
            '--grace-days',
            type=int,
            default=None,
            help='Override the retention period in days',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the cleanup command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        grace_days = options['grace_days']
        if grace_days is None:
            grace_period = get_purge_grace_period()
        else:
            grace_period = timedelta(days=grace_days)

        cutoff = timezone.now() - grace_period
        self.stdout.write(
            f'Looking for files deleted before {cutoff} '
            f'(older than {grace_period.days} days)',
        )

        result = cleanup_deleted_files(
            grace_period=grace_period,
            batch_size=options['batch_size'],
            dry_run=options['dry_run'],
        )

        if options['dry_run']:
            self.stdout.write(
                self.style.SUCCESS(f'Would purge {result.candidates} files'),
            )
            return

        if result.failed:
            logger.warning('Cleanup left %d files unpurged', result.failed)
        self.stdout.write(
            self.style.SUCCESS(
                f'Purged {result.purged} files, {result.failed} failed',
            ),
        )

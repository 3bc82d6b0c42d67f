"""Management command to remove records whose stored bytes are gone."""

import logging
from typing import Any, Final

from django.core.management.base import BaseCommand

from server.apps.files.exceptions import RegistryError
from server.apps.files.logic.registry import get_registry

_DEFAULT_BATCH_SIZE: Final = 1000

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Clean up after deletions that removed the bytes but not the record."""

    help = 'Remove file records whose stored bytes no longer exist'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be removed without removing',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max records to process (default: {_DEFAULT_BATCH_SIZE})',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the repair command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        batch_size = options['batch_size']

        registry = get_registry()
        dangling = registry.find_dangling_records(limit=batch_size)

        self.stdout.write(f'Found {len(dangling)} dangling records')

        count = 0
        failed = 0

        for file_record in dangling:
            if dry_run:
                self.stdout.write(
                    f'Would remove: {file_record.id} '
                    f'({file_record.title}, {file_record.file.name})',
                )
                count += 1
                continue

            try:
                removed = registry.remove_dangling_record(file_record.id)
            except RegistryError as exc:
                self.stderr.write(
                    f'Failed to remove {file_record.id}: {exc.message}',
                )
                logger.exception(
                    'Failed to remove dangling record: %d',
                    file_record.id,
                )
                failed += 1
                continue

            if removed:
                count += 1

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Would remove {count} records'),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Removed {count} records, {failed} failed',
                ),
            )

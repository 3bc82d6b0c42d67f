"""Management command to share a private file after approving a request."""

from typing import Any, Final

from django.core.management.base import BaseCommand, CommandError

from server.apps.files.exceptions import RegistryError
from server.apps.files.logic.registry import get_registry

_DEFAULT_EXPIRES: Final = 24 * 60 * 60  # one day


class Command(BaseCommand):
    """Print a time-limited download URL for a private file."""

    help = 'Issue a signed download link for an approved private file'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument('file_id', type=int)
        parser.add_argument(
            '--expires',
            type=int,
            default=_DEFAULT_EXPIRES,
            help=f'Link lifetime in seconds (default: {_DEFAULT_EXPIRES})',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments (unused).
            options: Command options.

        Raises:
            CommandError: If the link cannot be issued.
        """
        try:
            url = get_registry().issue_private_link(
                options['file_id'],
                expires=options['expires'],
            )
        except RegistryError as exc:
            raise CommandError(exc.message) from exc

        self.stdout.write(url)

"""Outbound notifications to the registry administrator."""

import logging
import smtplib
from collections.abc import Sequence
from typing import final

from django.core.mail import send_mail

from server.apps.files.exceptions import NotificationError

logger = logging.getLogger(__name__)


@final
class MailNotifier:
    """Sends plain text mail through the configured Django email backend."""

    def __init__(
        self,
        recipients: Sequence[str],
        sender: str | None = None,
    ) -> None:
        """Initialize the notifier.

        Args:
            recipients: Addresses that receive every notification.
            sender: From address, defaults to DEFAULT_FROM_EMAIL.
        """
        self._recipients = list(recipients)
        self._sender = sender

    def send(self, subject: str, body: str) -> None:
        """Deliver one message to all recipients.

        Args:
            subject: Mail subject.
            body: Plain text body.

        Raises:
            NotificationError: If no recipient is configured or the mail
                backend fails.
        """
        if not self._recipients:
            logger.error('No notification recipients configured: %s', subject)
            raise NotificationError('No notification recipients configured')

        try:
            send_mail(
                subject,
                body,
                self._sender,
                self._recipients,
                fail_silently=False,
            )
        except (smtplib.SMTPException, OSError) as exc:
            logger.exception('Failed to send notification: %s', subject)
            raise NotificationError(
                f'Could not deliver notification: {exc}',
            ) from exc

        logger.info(
            'Notification sent to %d recipient(s): %s',
            len(self._recipients),
            subject,
        )

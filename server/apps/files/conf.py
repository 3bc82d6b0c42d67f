"""Registry configuration built once from Django settings."""

from dataclasses import dataclass
from typing import Any, Final, final

_DEFAULT_SUBJECT: Final = 'Private File Request'
_DEFAULT_MAX_TAGS: Final = 32


@final
@dataclass(frozen=True, slots=True)
class RegistryConfig:
    """Values the file registry depends on.

    The registry receives this object explicitly instead of reading
    ``django.conf.settings`` on every call.
    """

    upload_secret: str
    notification_recipients: tuple[str, ...] = ()
    notification_sender: str | None = None
    notification_subject: str = _DEFAULT_SUBJECT
    max_tags: int = _DEFAULT_MAX_TAGS

    @classmethod
    def from_settings(cls, settings: Any = None) -> 'RegistryConfig':
        """Build config from Django settings.

        Args:
            settings: Settings object, defaults to ``django.conf.settings``.

        Returns:
            Frozen RegistryConfig instance.
        """
        if settings is None:
            from django.conf import settings  # noqa: WPS433, WPS442

        recipients = getattr(settings, 'FILE_REGISTRY_ADMIN_EMAIL', ())
        if isinstance(recipients, str):
            recipients = [recipients] if recipients else []

        return cls(
            upload_secret=getattr(settings, 'FILE_REGISTRY_UPLOAD_SECRET', ''),
            notification_recipients=tuple(recipients),
            notification_sender=getattr(settings, 'DEFAULT_FROM_EMAIL', None),
            notification_subject=getattr(
                settings,
                'FILE_REGISTRY_NOTIFICATION_SUBJECT',
                _DEFAULT_SUBJECT,
            ),
            max_tags=getattr(
                settings,
                'FILE_REGISTRY_MAX_TAGS',
                _DEFAULT_MAX_TAGS,
            ),
        )

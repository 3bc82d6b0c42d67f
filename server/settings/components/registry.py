"""File registry settings: upload credential and request notifications."""

from decouple import Csv

from server.settings.components import config

# Shared secret required for uploads and deletions.
# Empty means every upload is rejected.
FILE_REGISTRY_UPLOAD_SECRET = config(
    'FILE_REGISTRY_UPLOAD_SECRET',
    default='',
)

# Who receives private file access requests
FILE_REGISTRY_ADMIN_EMAIL = config(
    'FILE_REGISTRY_ADMIN_EMAIL',
    cast=Csv(),
    default=config('ADMIN_EMAIL', default=''),
)

FILE_REGISTRY_NOTIFICATION_SUBJECT = config(
    'FILE_REGISTRY_NOTIFICATION_SUBJECT',
    default='Private File Request',
)

FILE_REGISTRY_MAX_TAGS = config('FILE_REGISTRY_MAX_TAGS', cast=int, default=32)

# Outgoing mail used by the notifier
EMAIL_BACKEND = config(
    'EMAIL_BACKEND',
    default='django.core.mail.backends.smtp.EmailBackend',
)
EMAIL_HOST = config('EMAIL_HOST', default='smtp.gmail.com')
EMAIL_PORT = config('EMAIL_PORT', cast=int, default=587)
EMAIL_USE_TLS = config('EMAIL_USE_TLS', cast=bool, default=True)
EMAIL_HOST_USER = config('ADMIN_EMAIL', default='')
EMAIL_HOST_PASSWORD = config('ADMIN_PASS', default='')
EMAIL_TIMEOUT = config('EMAIL_TIMEOUT', cast=int, default=10)
DEFAULT_FROM_EMAIL = config(
    'DEFAULT_FROM_EMAIL',
    default=EMAIL_HOST_USER or 'file-registry@localhost',
)

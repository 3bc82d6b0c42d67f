"""Django storage configuration for the S3-compatible blob store.

Uploaded documents live in one bucket under two prefixes, ``public/``
and ``private/``. MinIO is used for local development, any
S3-compatible service works in production.
"""

from typing import Any, Final

from server.settings.components import config

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'server.apps.files.infrastructure.storage.FileStorage',
        'OPTIONS': {
            'bucket_name': config(
                'AWS_STORAGE_BUCKET_NAME',
                default='file-registry',
            ),
            'access_key': config('AWS_ACCESS_KEY_ID', default='minioadmin'),
            'secret_key': config(
                'AWS_SECRET_ACCESS_KEY',
                default='minioadmin',
            ),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='us-east-1',
            ),
            'file_overwrite': False,  # Never replace an existing blob
            'default_acl': None,  # Inherit bucket ACL
            'querystring_expire': config(
                'AWS_QUERYSTRING_EXPIRE',
                cast=int,
                default=3600,
            ),
        },
    },
    'staticfiles': {
        # Keep static files separate from uploaded documents
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

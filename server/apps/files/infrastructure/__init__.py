"""Infrastructure layer for files app.

This package contains integrations with external systems:
- S3-compatible storage backend (blob store)
- Mail notifier for access requests
- Metadata extraction (MIME type, checksum, storage keys, tags)
- Cleanup of uploads staged on local disk

Keep infrastructure concerns separate from business logic.
"""

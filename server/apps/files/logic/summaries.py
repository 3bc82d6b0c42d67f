"""Read-only projections of file records served to callers."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, final


@final
@dataclass(frozen=True, slots=True)
class FileSummary:
    """What anyone may see about a file.

    The storage key is never part of a summary. ``download_url`` is only
    set for public files.
    """

    id: int
    title: str
    description: str
    tags: tuple[str, ...]
    visibility: str
    mime_type: str
    size_bytes: int
    uploaded_at: datetime
    download_url: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Render JSON-serializable values.

        Returns:
            Dictionary suitable for JsonResponse.
        """
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'tags': list(self.tags),
            'visibility': self.visibility,
            'mime_type': self.mime_type,
            'size_bytes': self.size_bytes,
            'uploaded_at': self.uploaded_at.isoformat(),
            'download_url': self.download_url,
        }

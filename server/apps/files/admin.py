"""Django admin configuration for files app."""

from typing import Any, override

from django.contrib import admin, messages
from django.db.models import QuerySet
from django.http import HttpRequest, HttpResponse, HttpResponseRedirect
from django.urls import reverse

from server.apps.files.exceptions import RegistryError
from server.apps.files.logic.registry import get_registry
from server.apps.files.models import AccessRequest, FileRecord


def _format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    if size_bytes < 1024 * 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / (1024 * 1024):.1f} MB'
    return f'{size_bytes / (1024 * 1024 * 1024):.1f} GB'


@admin.register(FileRecord)
class FileRecordAdmin(admin.ModelAdmin[FileRecord]):
    """Admin interface for FileRecord model.

    Records are created through the upload API only. Deletion goes
    through the registry so the stored bytes are removed first.
    """

    list_display = [
        'title',
        'visibility',
        'original_filename',
        'size_display',
        'mime_type',
        'uploaded_at',
    ]

    list_filter = [
        'visibility',
        'mime_type',
        'uploaded_at',
    ]

    search_fields = [
        'title',
        'tags',
        'checksum_sha256',
    ]

    readonly_fields = [
        'title',
        'description',
        'file',
        'original_filename',
        'tags',
        'visibility',
        'size_bytes',
        'mime_type',
        'checksum_sha256',
        'uploaded_at',
    ]

    actions = ['delete_files']

    fieldsets = (
        ('File Information', {
            'fields': ('title', 'description', 'tags', 'visibility'),
        }),
        ('Storage', {
            'fields': (
                'file',
                'original_filename',
                'size_bytes',
                'mime_type',
                'checksum_sha256',
            ),
        }),
        ('Timestamps', {
            'fields': ('uploaded_at',),
        }),
    )

    def size_display(self, obj: FileRecord) -> str:
        """Display file size in human-readable format.

        Args:
            obj: FileRecord instance.

        Returns:
            Formatted size string.
        """
        return _format_bytes(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    @override
    def has_add_permission(self, request: HttpRequest) -> bool:
        """Disable adding records via admin.

        Args:
            request: HTTP request.

        Returns:
            False - files are added through the upload API.
        """
        return False

    @override
    def delete_model(self, request: HttpRequest, obj: FileRecord) -> None:
        """Delete one file through the registry.

        Args:
            request: HTTP request.
            obj: FileRecord instance.
        """
        try:
            get_registry().delete(obj.id)
        except RegistryError as error:
            self.message_user(request, error.message, level=messages.ERROR)

    @override
    def response_delete(
        self,
        request: HttpRequest,
        obj_display: str,
        obj_id: Any,
    ) -> HttpResponse:
        """Report success only if the record is really gone.

        Args:
            request: HTTP request.
            obj_display: String form of the deleted record.
            obj_id: Primary key of the deleted record.

        Returns:
            Redirect to the changelist, or back to the record if the
            registry refused to delete it.
        """
        if FileRecord.objects.filter(id=obj_id).exists():
            return HttpResponseRedirect(
                reverse('admin:files_filerecord_change', args=[obj_id]),
            )
        return super().response_delete(request, obj_display, obj_id)

    @override
    def get_actions(self, request: HttpRequest) -> dict[str, Any]:
        """Replace the bulk delete that bypasses the registry.

        Args:
            request: HTTP request.

        Returns:
            Available actions without ``delete_selected``.
        """
        actions = super().get_actions(request)
        actions.pop('delete_selected', None)
        return actions

    @admin.action(description='Delete selected files', permissions=['delete'])
    def delete_files(
        self,
        request: HttpRequest,
        queryset: QuerySet[FileRecord],
    ) -> None:
        """Delete selected files one by one through the registry.

        Args:
            request: HTTP request.
            queryset: Selected records.
        """
        registry = get_registry()
        deleted = 0
        for file_id in queryset.values_list('id', flat=True):
            try:
                registry.delete(file_id)
            except RegistryError as error:
                self.message_user(request, error.message, level=messages.ERROR)
            else:
                deleted += 1
        if deleted:
            self.message_user(
                request,
                f'Deleted {deleted} files',
                level=messages.SUCCESS,
            )


@admin.register(AccessRequest)
class AccessRequestAdmin(admin.ModelAdmin[AccessRequest]):
    """Read-only admin interface for the access request audit log."""

    list_display = [
        'requester',
        'file_title',
        'file',
        'reason_short',
        'requested_at',
    ]

    list_filter = [
        'requested_at',
    ]

    search_fields = [
        'requester',
        'file_title',
        'reason',
    ]

    readonly_fields = [
        'file',
        'file_title',
        'requester',
        'reason',
        'requested_at',
    ]

    def reason_short(self, obj: AccessRequest) -> str:
        """Display truncated reason.

        Args:
            obj: AccessRequest instance.

        Returns:
            First 50 characters of the reason or dash if empty.
        """
        if obj.reason:
            if len(obj.reason) > 50:
                return f'{obj.reason[:50]}...'
            return obj.reason
        return '-'
    reason_short.short_description = 'Reason'  # type: ignore[attr-defined]

    @override
    def get_queryset(self, request: HttpRequest) -> QuerySet[AccessRequest]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('file')

    @override
    def has_add_permission(self, request: HttpRequest) -> bool:
        """Disable adding requests via admin.

        Args:
            request: HTTP request.

        Returns:
            False - requests come from the request API.
        """
        return False

    @override
    def has_change_permission(
        self,
        request: HttpRequest,
        obj: AccessRequest | None = None,
    ) -> bool:
        """Disable editing requests via admin.

        Args:
            request: HTTP request.
            obj: Optional AccessRequest instance.

        Returns:
            False - the audit log is immutable.
        """
        return False

    @override
    def has_delete_permission(
        self,
        request: HttpRequest,
        obj: AccessRequest | None = None,
    ) -> bool:
        """Disable deleting requests via admin.

        Args:
            request: HTTP request.
            obj: Optional AccessRequest instance.

        Returns:
            False - the audit log is immutable.
        """
        return False

"""Django admin configuration for files app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.files.models import File, Folder


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


@admin.register(Folder)
class FolderAdmin(admin.ModelAdmin[Folder]):
    """Admin interface for Folder model.

    Shows soft-deleted folders too; paths are read-only since they are
    maintained by the logic layer.
    """

    list_display = [
        'path',
        'user',
        'is_favorite',
        'is_deleted',
        'created_at',
    ]

    list_filter = [
        'is_deleted',
        'is_favorite',
        'user',
    ]

    search_fields = [
        'name',
        'path',
    ]

    readonly_fields = [
        'path',
        'parent_folder',
        'created_at',
        'modified_at',
        'deleted_at',
    ]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Folder]:
        """Include soft-deleted folders.

        Args:
            request: HTTP request.

        Returns:
            QuerySet over all folders.
        """
        return Folder.all_objects.select_related('user')


@admin.register(File)
class FileAdmin(admin.ModelAdmin[File]):
    """Admin interface for File model."""

    list_display = [
        'name',
        'user',
        'folder_path_display',
        'size_display',
        'content_type',
        'status',
        'is_deleted',
    ]

    list_filter = [
        'status',
        'content_type',
        'is_deleted',
        'user',
    ]

    search_fields = [
        'name',
        'storage_ref',
    ]

    readonly_fields = [
        'storage_ref',
        'size_bytes',
        'content_type',
        'created_at',
        'modified_at',
        'deleted_at',
    ]

    def folder_path_display(self, obj: File) -> str:
        """Display path of the containing folder.

        Args:
            obj: File instance.

        Returns:
            Folder path, or '-' for unfiled files.
        """
        if obj.folder is None:
            return '-'
        return obj.folder.path
    folder_path_display.short_description = 'Folder'  # type: ignore[attr-defined]

    def size_display(self, obj: File) -> str:
        """Display file size in human-readable format."""
        return _format_bytes(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[File]:
        """Include soft-deleted files, with owner and folder joined.

        Args:
            request: HTTP request.

        Returns:
            QuerySet over all files.
        """
        return File.all_objects.select_related('user', 'folder')

"""Database models for files app."""

from pathlib import Path
from typing import Any, ClassVar, Final, Self, final, override

from django.conf import settings
from django.db import models

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_PATH_MAX_LENGTH: Final = 1024
_CONTENT_TYPE_MAX_LENGTH: Final = 255
_STORAGE_REF_MAX_LENGTH: Final = 1024
_STATUS_MAX_LENGTH: Final = 16


class OwnedQuerySet(models.QuerySet[Any]):
    """QuerySet scoped by owning user."""

    def owned_by(self, user: Any) -> Self:
        """Restrict to records owned by the given user."""
        return self.filter(user=user)


class ActiveManager(models.Manager.from_queryset(OwnedQuerySet)):  # type: ignore[misc]
    """Default manager: hides soft-deleted records."""

    @override
    def get_queryset(self) -> OwnedQuerySet:
        return super().get_queryset().filter(is_deleted=False)


class AllObjectsManager(models.Manager.from_queryset(OwnedQuerySet)):  # type: ignore[misc]
    """Manager that includes soft-deleted records (trash, restore)."""


@final
class Folder(models.Model):
    """Folder in a user's hierarchy.

    ``parent_folder`` is the source of truth for nesting. ``path`` is a
    cached materialized path ('/documents/reports') rewritten by the logic
    layer whenever a folder or one of its ancestors is renamed or moved.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='folders',
        db_index=True,
    )

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    path = models.CharField(
        max_length=_PATH_MAX_LENGTH,
        help_text='Materialized path: /parent/child',
    )

    parent_folder = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        related_name='child_folders',
        null=True,
        blank=True,
    )

    tags = models.JSONField(
        default=list,
        blank=True,
        help_text='Normalized tags (trimmed, lower-case, unique)',
    )

    is_favorite = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(null=True, blank=True)

    # Soft delete
    is_deleted = models.BooleanField(default=False, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = ActiveManager()
    all_objects = AllObjectsManager()

    class Meta:
        """Model metadata."""

        verbose_name = 'Folder'  # type: ignore[mutable-override]
        verbose_name_plural = 'Folders'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['path']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['user', 'parent_folder'],
                name='folders_user_parent_idx',
            ),
            models.Index(
                fields=['user', 'path'],
                name='folders_user_path_idx',
            ),
        ]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            # Live folders of one user never share a path
            models.UniqueConstraint(
                fields=['user', 'path'],
                condition=models.Q(is_deleted=False),
                name='folders_user_path_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}:{self.path}'

    def is_root(self) -> bool:
        """Check whether the folder has no parent."""
        return self.parent_folder_id is None


class FileStatus(models.TextChoices):
    """Lifecycle status of a file's contents."""

    PROCESSING = 'processing', 'Processing'
    ACTIVE = 'active', 'Active'
    ARCHIVED = 'archived', 'Archived'
    FAILED = 'failed', 'Failed'


@final
class File(models.Model):
    """Metadata for a file whose bytes live in the byte store.

    Location in the hierarchy is the ``folder`` reference only; files
    carry no path string, so folder renames never touch file rows.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    folder = models.ForeignKey(
        Folder,
        on_delete=models.CASCADE,
        related_name='files',
        null=True,
        blank=True,
        help_text='Containing folder, empty for unfiled files',
    )

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    content_type = models.CharField(max_length=_CONTENT_TYPE_MAX_LENGTH)

    size_bytes = models.BigIntegerField(help_text='File size in bytes')

    storage_ref = models.CharField(
        max_length=_STORAGE_REF_MAX_LENGTH,
        help_text='Key in the byte store: {user_id}/{uuid}_{filename}',
    )

    status = models.CharField(
        max_length=_STATUS_MAX_LENGTH,
        choices=FileStatus.choices,
        default=FileStatus.PROCESSING,
    )

    tags = models.JSONField(
        default=list,
        blank=True,
        help_text='Normalized tags (trimmed, lower-case, unique)',
    )

    is_favorite = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(null=True, blank=True)

    # Soft delete
    is_deleted = models.BooleanField(default=False, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = ActiveManager()
    all_objects = AllObjectsManager()

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['name']

        indexes: ClassVar[list[models.Index]] = [
            # Optimize folder listing queries
            models.Index(
                fields=['user', 'folder'],
                name='files_user_folder_idx',
            ),
            models.Index(
                fields=['user', 'is_favorite'],
                name='files_user_favorite_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}:{self.name}'

    def get_extension(self) -> str:
        """Extract file extension.

        Example: 'file.PDF' -> 'pdf'

        Returns:
            Extension without dot (lowercase).
        """
        extension = Path(self.name).suffix
        return extension.lstrip('.').lower()

"""Business logic for trash (soft delete) listing and restore."""

import logging
from typing import Any, NamedTuple

from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from server.apps.files.exceptions import PathConflictError
from server.apps.files.logic.paths import cascade_rename, compute_path
from server.apps.files.models import File, Folder

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


class TrashContents(NamedTuple):
    """Soft-deleted folders and files of one user."""

    folders: QuerySet[Folder]
    files: QuerySet[File]


def list_trash(user: _User) -> TrashContents:
    """List everything in user's trash.

    Args:
        user: User whose trash to list.

    Returns:
        Deleted folders and files, newest deletion first.
    """
    return TrashContents(
        folders=Folder.all_objects.owned_by(user).filter(
            is_deleted=True,
        ).order_by('-deleted_at', '-id'),
        files=File.all_objects.owned_by(user).filter(
            is_deleted=True,
        ).order_by('-deleted_at', '-id'),
    )


def restore_folder(user: _User, folder_id: int) -> Folder:
    """Restore a folder from trash.

    The path is recomputed from the current parent, since the parent may
    have been renamed or moved while the folder was in trash.

    Args:
        user: Owner of the folder.
        folder_id: ID of folder to restore.

    Returns:
        Restored Folder instance.

    Raises:
        Folder.DoesNotExist: If folder not found or not in trash.
        PathConflictError: If a live folder now has the same path.
    """
    folder = Folder.all_objects.owned_by(user).get(
        id=folder_id,
        is_deleted=True,
    )

    parent_path = ''
    if folder.parent_folder_id is not None:
        parent_path = folder.parent_folder.path

    old_path = folder.path
    target_path = compute_path(folder.name, parent_path)

    if Folder.objects.owned_by(user).filter(path=target_path).exists():
        logger.warning('Restore conflict for folder %d: %s', folder.id, target_path)
        raise PathConflictError(target_path)

    folder.path = target_path
    folder.is_deleted = False
    folder.deleted_at = None
    try:
        with transaction.atomic():
            folder.save(update_fields=['path', 'is_deleted', 'deleted_at'])
            cascade_rename(user, folder.id, old_path, target_path)
    except IntegrityError as error:
        folder.refresh_from_db()
        raise PathConflictError(target_path) from error

    logger.info('Folder restored: %s (ID: %d)', target_path, folder.id)
    return folder


def restore_file(user: _User, file_id: int) -> File:
    """Restore a file from trash into its original folder.

    Args:
        user: Owner of the file.
        file_id: ID of file to restore.

    Returns:
        Restored File instance.

    Raises:
        File.DoesNotExist: If file not found or not in trash.
    """
    file_instance = File.all_objects.owned_by(user).get(
        id=file_id,
        is_deleted=True,
    )

    file_instance.is_deleted = False
    file_instance.deleted_at = None
    file_instance.save(update_fields=['is_deleted', 'deleted_at'])

    logger.info(
        'File restored: %s (ID: %d)',
        file_instance.name,
        file_id,
    )
    return file_instance

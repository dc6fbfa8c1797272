"""Business logic for folder operations."""

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import final

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from server.apps.files.exceptions import CircularMoveError, PathConflictError
from server.apps.files.infrastructure.metadata import (
    validate_folder_path,
    validate_name,
)
from server.apps.files.logic.paths import (
    cascade_rename,
    compute_path,
    would_create_cycle,
)
from server.apps.files.logic.tags import (
    normalize_tag,
    tags_for_storage,
    tags_match,
)
from server.apps.files.models import Folder

User = get_user_model()
logger = logging.getLogger(__name__)


@final
@dataclass
class FolderNode:
    """Folder with its nested child nodes, as returned by the tree query."""

    folder: Folder
    children: list['FolderNode'] = field(default_factory=list)

    @property
    def id(self) -> int:
        """ID of the wrapped folder."""
        return self.folder.id

    @property
    def name(self) -> str:
        """Name of the wrapped folder."""
        return self.folder.name


def get_folder(user: User, folder_id: int) -> Folder:
    """Get a live folder owned by the user.

    Args:
        user: Owner of the folder.
        folder_id: ID of the folder.

    Returns:
        Folder instance.

    Raises:
        Folder.DoesNotExist: If folder is missing, foreign or deleted.
    """
    return Folder.objects.owned_by(user).get(id=folder_id)


def get_folder_by_path(user: User, path: str) -> Folder:
    """Get a live folder by its materialized path.

    Raises:
        ValidationError: If path is empty.
        Folder.DoesNotExist: If no live folder has this path.
    """
    if not path or not path.strip():
        raise ValidationError('Path cannot be empty')
    return Folder.objects.owned_by(user).get(path=path)


def _ensure_path_available(
    user: User,
    path: str,
    exclude_id: int | None = None,
) -> None:
    taken = Folder.objects.owned_by(user).filter(path=path)
    if exclude_id is not None:
        taken = taken.exclude(pk=exclude_id)
    if taken.exists():
        logger.warning('Folder path already taken: %s', path)
        raise PathConflictError(path)


def _parent_path(folder: Folder) -> str:
    if folder.parent_folder_id is None:
        return ''
    # Base manager: resolves soft-deleted parents as well
    return folder.parent_folder.path


def _save_structure_change(
    user: User,
    folder: Folder,
    old_path: str,
    update_fields: list[str],
) -> None:
    """Save a renamed or moved folder and cascade its new path.

    Args:
        user: Owner of the folder.
        folder: Folder with new name/parent/path already assigned.
        old_path: Path before the change.
        update_fields: Fields to save on the folder.

    Raises:
        PathConflictError: If the database rejects a path as duplicate.
    """
    try:
        with transaction.atomic():
            folder.save(update_fields=update_fields)
            cascade_rename(user, folder.id, old_path, folder.path)
    except IntegrityError as error:
        logger.warning(
            'Path change %s -> %s rolled back: duplicate path',
            old_path,
            folder.path,
        )
        conflicting_path = folder.path
        folder.refresh_from_db()
        raise PathConflictError(conflicting_path) from error
    except Exception:
        folder.refresh_from_db()
        raise


def create_folder(
    user: User,
    name: str,
    parent_folder_id: int | None = None,
    tags: Iterable[str] | None = None,
) -> Folder:
    """Create a folder, at the root or below a parent.

    Args:
        user: Owner of the new folder.
        name: Folder name.
        parent_folder_id: Optional parent folder ID.
        tags: Optional free-text tags.

    Returns:
        Created Folder instance.

    Raises:
        ValidationError: If name, path or tags are invalid.
        Folder.DoesNotExist: If parent is missing, foreign or deleted.
        PathConflictError: If a live folder already has the path.
    """
    validate_name(name)
    stored_tags = tags_for_storage(tags)

    parent_path = ''
    if parent_folder_id is not None:
        parent_path = get_folder(user, parent_folder_id).path

    path = compute_path(name, parent_path)
    validate_folder_path(path)
    _ensure_path_available(user, path)

    try:
        with transaction.atomic():
            folder = Folder.objects.create(
                user=user,
                name=name,
                path=path,
                parent_folder_id=parent_folder_id,
                tags=stored_tags,
            )
    except IntegrityError as error:
        raise PathConflictError(path) from error

    logger.info('Folder created: %s (ID: %d)', path, folder.id)
    return folder


def rename_folder(user: User, folder_id: int, new_name: str) -> Folder:
    """Rename a folder and rewrite the paths of its descendants.

    Args:
        user: Owner of the folder.
        folder_id: ID of folder to rename.
        new_name: New folder name.

    Returns:
        Updated Folder instance.

    Raises:
        ValidationError: If new name or resulting paths are invalid.
        Folder.DoesNotExist: If folder not found.
        PathConflictError: If the new path is taken.
    """
    validate_name(new_name)
    folder = get_folder(user, folder_id)

    old_path = folder.path
    new_path = compute_path(new_name, _parent_path(folder))
    validate_folder_path(new_path)
    _ensure_path_available(user, new_path, exclude_id=folder.pk)

    folder.name = new_name
    folder.path = new_path
    folder.modified_at = timezone.now()
    _save_structure_change(
        user,
        folder,
        old_path,
        ['name', 'path', 'modified_at'],
    )

    logger.info(
        'Folder renamed: %s -> %s (ID: %d)',
        old_path,
        new_path,
        folder.id,
    )
    return folder


def move_folder(
    user: User,
    folder_id: int,
    new_parent_folder_id: int | None = None,
) -> Folder:
    """Move a folder under a new parent, or to the root.

    Args:
        user: Owner of the folders.
        folder_id: ID of folder to move.
        new_parent_folder_id: New parent ID, None makes the folder a root.

    Returns:
        Updated Folder instance.

    Raises:
        Folder.DoesNotExist: If folder or target parent not found.
        CircularMoveError: If target is the folder or its descendant.
        PathConflictError: If the new path is taken.
        ValidationError: If a resulting path exceeds the limit.
    """
    folder = get_folder(user, folder_id)

    parent_path = ''
    if new_parent_folder_id is not None:
        new_parent = get_folder(user, new_parent_folder_id)
        if would_create_cycle(user, folder.id, new_parent.id):
            logger.warning(
                'Rejected circular move of folder %d under %d',
                folder.id,
                new_parent.id,
            )
            raise CircularMoveError(folder.id, new_parent.id)
        parent_path = new_parent.path

    old_path = folder.path
    new_path = compute_path(folder.name, parent_path)
    validate_folder_path(new_path)
    _ensure_path_available(user, new_path, exclude_id=folder.pk)

    folder.parent_folder_id = new_parent_folder_id
    folder.path = new_path
    folder.modified_at = timezone.now()
    _save_structure_change(
        user,
        folder,
        old_path,
        ['parent_folder', 'path', 'modified_at'],
    )

    logger.info(
        'Folder moved: %s -> %s (ID: %d)',
        old_path,
        new_path,
        folder.id,
    )
    return folder


def delete_folder(user: User, folder_id: int) -> bool:
    """Soft-delete a single folder.

    Only the named folder is marked; child folders and contained files
    keep their state.

    Args:
        user: Owner of the folder.
        folder_id: ID of folder to delete.

    Returns:
        True if the folder was deleted, False if it was not found.
    """
    try:
        folder = get_folder(user, folder_id)
    except Folder.DoesNotExist:
        logger.info('Folder not found for delete: ID=%d', folder_id)
        return False

    folder.is_deleted = True
    folder.deleted_at = timezone.now()
    folder.save(update_fields=['is_deleted', 'deleted_at'])

    logger.info('Folder moved to trash: %s (ID: %d)', folder.path, folder.id)
    return True


def batch_delete_folders(user: User, folder_ids: Iterable[int]) -> int:
    """Soft-delete several folders, skipping unknown IDs.

    Args:
        user: Owner of the folders.
        folder_ids: IDs of folders to delete.

    Returns:
        Number of folders deleted.

    Raises:
        ValidationError: If no IDs were given.
    """
    ids = list(folder_ids)
    if not ids:
        raise ValidationError('No folder IDs provided for deletion')

    with transaction.atomic():
        deleted = Folder.objects.owned_by(user).filter(id__in=ids).update(
            is_deleted=True,
            deleted_at=timezone.now(),
        )

    logger.info(
        'Batch folder delete: %d of %d requested folders',
        deleted,
        len(ids),
    )
    return deleted


def update_folder_tags(
    user: User,
    folder_id: int,
    tags: Iterable[str] | None,
) -> Folder:
    """Replace a folder's tags with the normalized given tags."""
    folder = get_folder(user, folder_id)
    folder.tags = tags_for_storage(tags)
    folder.modified_at = timezone.now()
    folder.save(update_fields=['tags', 'modified_at'])
    return folder


def toggle_folder_favorite(user: User, folder_id: int) -> Folder:
    """Flip a folder's favorite flag."""
    folder = get_folder(user, folder_id)
    folder.is_favorite = not folder.is_favorite
    folder.modified_at = timezone.now()
    folder.save(update_fields=['is_favorite', 'modified_at'])
    return folder


def list_child_folders(user: User, parent_folder_id: int) -> QuerySet[Folder]:
    """List live direct children of a folder, ordered by name.

    Raises:
        Folder.DoesNotExist: If the parent folder is not found.
    """
    parent = get_folder(user, parent_folder_id)
    return Folder.objects.owned_by(user).filter(
        parent_folder=parent,
    ).order_by('name')


def list_folders(user: User) -> QuerySet[Folder]:
    """List all live folders of the user, ordered by path."""
    return Folder.objects.owned_by(user).order_by('path')


def list_favorite_folders(user: User) -> QuerySet[Folder]:
    """List live favorite folders, ordered by path."""
    return list_folders(user).filter(is_favorite=True)


def list_folders_by_tag(user: User, tag: str) -> list[Folder]:
    """List live folders carrying exactly the given tag.

    Returns:
        Folders ordered by path; empty for a blank tag.
    """
    normalized = normalize_tag(tag)
    if not normalized:
        return []
    return [
        folder for folder in list_folders(user)
        if normalized in folder.tags
    ]


def search_folders(user: User, term: str) -> list[Folder]:
    """Search live folders by name, path or tag.

    Matching is a case-insensitive substring test.

    Args:
        user: Owner of the folders.
        term: Search term.

    Returns:
        Matching folders ordered by path; empty for a blank term.
    """
    if not term or not term.strip():
        return []

    needle = term.strip().lower()
    return [
        folder for folder in list_folders(user)
        if needle in folder.name.lower()
        or needle in folder.path.lower()
        or tags_match(folder.tags, needle)
    ]


def build_folder_tree(user: User) -> list[FolderNode]:
    """Build the user's live folder hierarchy.

    Loads every live folder in one query, indexes children by parent ID
    and assembles the nested nodes in memory. Folders below a
    soft-deleted parent are not reachable from a root and are left out.

    Args:
        user: Owner of the folders.

    Returns:
        Root nodes ordered by name, children ordered by name.
    """
    folders = Folder.objects.owned_by(user).order_by('name', 'id')

    roots: list[Folder] = []
    children: dict[int, list[Folder]] = defaultdict(list)
    for folder in folders:
        if folder.parent_folder_id is None:
            roots.append(folder)
        else:
            children[folder.parent_folder_id].append(folder)

    logger.debug('Building folder tree: %d roots', len(roots))
    return [_build_node(root, children) for root in roots]


def _build_node(
    folder: Folder,
    children: dict[int, list[Folder]],
) -> FolderNode:
    return FolderNode(
        folder=folder,
        children=[
            _build_node(child, children)
            for child in children.get(folder.id, [])
        ],
    )

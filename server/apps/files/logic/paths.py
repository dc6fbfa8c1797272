"""Materialized path computation and cascade."""

import logging
from collections import defaultdict
from typing import Any, Final

from django.db import transaction

from server.apps.files.infrastructure.metadata import validate_folder_path
from server.apps.files.models import Folder

# User type for Django's dynamic user model
_User = Any

_PATH_SEPARATOR: Final = '/'

logger = logging.getLogger(__name__)


def compute_path(name: str, parent_path: str = '') -> str:
    """Compute a folder's materialized path.

    Args:
        name: Folder name.
        parent_path: Parent folder's path, empty for root folders.

    Returns:
        '/name' for roots, 'parent_path/name' otherwise.
    """
    if not parent_path:
        return _PATH_SEPARATOR + name
    return parent_path + _PATH_SEPARATOR + name


def _descendant_rows(
    user: _User,
    folder_id: int,
) -> list[tuple[int, str, str]]:
    """Collect ``(id, name, path)`` of every folder below ``folder_id``.

    Descendants are found by following parent links, never by path
    prefix: a soft-deleted folder and a live one may share a path, and
    only the folder's own subtree belongs to it.
    """
    children: dict[int | None, list[tuple[int, str, str]]] = defaultdict(list)
    rows = Folder.all_objects.owned_by(user).values_list(
        'id',
        'parent_folder_id',
        'name',
        'path',
    )
    for pk, parent_id, name, path in rows:
        children[parent_id].append((pk, name, path))

    descendants: list[tuple[int, str, str]] = []
    pending = [folder_id]
    while pending:
        current = pending.pop()
        for row in children.get(current, ()):
            descendants.append(row)
            pending.append(row[0])
    return descendants


def cascade_rename(
    user: _User,
    folder_id: int,
    old_path: str,
    new_path: str,
) -> int:
    """Rewrite paths of all descendants after a folder's path change.

    Replaces the ``old_path`` prefix with ``new_path`` on every folder in
    the subtree of ``folder_id``, soft-deleted ones included so a later
    restore finds a consistent path. Files are not touched, they reference
    folders by id.

    Must run inside the caller's transaction together with the change of
    the folder itself; either every path is rewritten or none is.

    Args:
        user: Owner of the folders.
        folder_id: Folder whose path changed.
        old_path: Folder path before the change.
        new_path: Folder path after the change.

    Returns:
        Number of descendant folders rewritten.

    Raises:
        ValidationError: If a rewritten path exceeds the path limit.
        IntegrityError: If a rewritten path collides with a live folder.
    """
    if old_path == new_path:
        return 0

    descendants = _descendant_rows(user, folder_id)

    # Paths are unique row by row, so when paths get shorter rewrite the
    # shallow ones first, when they get longer the deep ones first.
    shrinking = len(new_path) < len(old_path)
    descendants.sort(key=lambda row: len(row[2]), reverse=not shrinking)

    with transaction.atomic():
        for pk, _name, path in descendants:
            rewritten = new_path + path[len(old_path):]
            validate_folder_path(rewritten)
            Folder.all_objects.filter(pk=pk).update(path=rewritten)

    logger.info(
        'Cascaded path change %s -> %s to %d folders',
        old_path,
        new_path,
        len(descendants),
    )
    return len(descendants)


def would_create_cycle(
    user: _User,
    folder_id: int,
    new_parent_id: int | None,
) -> bool:
    """Check whether re-parenting a folder would create a cycle.

    Loads the user's id -> parent id map in a single query and walks the
    ancestor chain of ``new_parent_id`` iteratively.

    Args:
        user: Owner of the folders.
        folder_id: Folder being moved.
        new_parent_id: Requested parent, None for root.

    Returns:
        True if ``new_parent_id`` is the folder itself or a descendant.
    """
    if new_parent_id is None:
        return False

    parents: dict[int, int | None] = dict(
        Folder.all_objects.owned_by(user).values_list(
            'id',
            'parent_folder_id',
        ),
    )

    visited: set[int] = set()
    current: int | None = new_parent_id
    while current is not None and current not in visited:
        if current == folder_id:
            return True
        visited.add(current)
        current = parents.get(current)
    return False

"""Business logic for file operations."""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, BinaryIO, Final

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.files.base import File as DjangoFile
from django.core.files.storage import default_storage
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from server.apps.files.exceptions import InvalidStatusTransitionError
from server.apps.files.infrastructure.metadata import (
    build_storage_key,
    detect_mime_type,
    get_file_extension,
    validate_name,
    validate_storage_path,
    validate_upload,
)
from server.apps.files.logic.folder_operations import get_folder
from server.apps.files.logic.tags import (
    normalize_tag,
    tags_for_storage,
    tags_match,
)
from server.apps.files.models import File, FileStatus

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import FileStorage

User = get_user_model()
logger = logging.getLogger(__name__)

_COPY_PREFIX: Final = 'Copy of '

# Allowed status changes; there is no way back to PROCESSING
_STATUS_TRANSITIONS: Final[dict[str, frozenset[str]]] = {
    FileStatus.PROCESSING: frozenset((FileStatus.ACTIVE, FileStatus.FAILED)),
    FileStatus.ACTIVE: frozenset((FileStatus.ARCHIVED,)),
    FileStatus.ARCHIVED: frozenset(),
    FileStatus.FAILED: frozenset(),
}


def _get_storage() -> 'FileStorage':
    """Get the configured default storage backend.

    Returns:
        FileStorage instance with proper S3 configuration.
    """
    return default_storage  # type: ignore[return-value]


def _ensure_folder(user: User, folder_id: int | None) -> None:
    """Check that a target folder exists and belongs to the user.

    Raises:
        Folder.DoesNotExist: If folder is missing, foreign or deleted.
    """
    if folder_id is not None:
        get_folder(user, folder_id)


def get_file(user: User, file_id: int) -> File:
    """Get a live file owned by the user.

    Raises:
        File.DoesNotExist: If file is missing, foreign or deleted.
    """
    return File.objects.owned_by(user).get(id=file_id)


def create_file(  # noqa: WPS211
    user: User,
    name: str,
    content_type: str,
    size_bytes: int,
    storage_ref: str,
    folder_id: int | None = None,
    tags: Iterable[str] | None = None,
) -> File:
    """Create the metadata record for bytes already in the byte store.

    The record starts in PROCESSING status.

    Args:
        user: Owner of the file.
        name: Display name.
        content_type: MIME type.
        size_bytes: Size of the stored bytes.
        storage_ref: Byte store key.
        folder_id: Optional containing folder.
        tags: Optional free-text tags.

    Returns:
        Created File instance.

    Raises:
        ValidationError: If any metadata is invalid.
        Folder.DoesNotExist: If the folder is not found.
    """
    validate_name(name)
    if not content_type:
        raise ValidationError('Content type cannot be empty')
    if size_bytes < 0:
        raise ValidationError('File size cannot be negative')
    if not storage_ref:
        raise ValidationError('Storage reference cannot be empty')
    stored_tags = tags_for_storage(tags)
    _ensure_folder(user, folder_id)

    with transaction.atomic():
        file_instance = File.objects.create(
            user=user,
            folder_id=folder_id,
            name=name,
            content_type=content_type,
            size_bytes=size_bytes,
            storage_ref=storage_ref,
            tags=stored_tags,
        )

    logger.info(
        'File record created: %s (ID: %d)',
        name,
        file_instance.id,
    )
    return file_instance


def upload_file(
    user: User,
    name: str,
    file_obj: BinaryIO | DjangoFile,
    folder_id: int | None = None,
    tags: Iterable[str] | None = None,
) -> File:
    """Upload file bytes to storage and create an active record.

    Transaction safety: Upload to storage first, then create DB record.
    If DB transaction fails, the uploaded bytes are deleted from storage
    (rollback).

    Args:
        user: Owner of the file.
        name: Display name, also used to detect the content type.
        file_obj: File-like object to upload.
        folder_id: Optional containing folder.
        tags: Optional free-text tags.

    Returns:
        Created File instance in ACTIVE status.

    Raises:
        ValidationError: If name or upload is invalid.
        Folder.DoesNotExist: If the folder is not found.
        Exception: If upload or DB operation fails.
    """
    validate_name(name)
    content_type = detect_mime_type(name)
    file_size = _get_file_size(file_obj)
    validate_upload(content_type, file_size)
    _ensure_folder(user, folder_id)

    storage_key = build_storage_key(user.id, name)
    validate_storage_path(user.id, storage_key)

    storage = _get_storage()

    # Step 1: Upload to storage first
    saved_name = storage.save(storage_key, file_obj)

    # Step 2: Create database record (in transaction)
    try:
        with transaction.atomic():
            file_instance = create_file(
                user,
                name,
                content_type,
                file_size,
                saved_name,
                folder_id=folder_id,
                tags=tags,
            )
            _transition(file_instance, FileStatus.ACTIVE)
    except Exception:
        logger.exception(
            'Database transaction failed, rolling back storage upload: %s',
            saved_name,
        )
        storage.rollback_upload(saved_name)
        raise

    return file_instance


def open_file(user: User, file_id: int) -> DjangoFile:
    """Open a file's bytes for reading.

    Args:
        user: Owner of the file.
        file_id: ID of the file.

    Returns:
        Readable file object from the byte store.

    Raises:
        File.DoesNotExist: If file not found.
    """
    file_instance = get_file(user, file_id)
    logger.debug('Opening file from storage: %s', file_instance.storage_ref)
    return _get_storage().open(file_instance.storage_ref, 'rb')


def rename_file(user: User, file_id: int, new_name: str) -> File:
    """Rename a file.

    When the new name has no extension the current one is kept:
    renaming 'report.pdf' to 'summary' gives 'summary.pdf'.

    Raises:
        ValidationError: If the new name is invalid.
        File.DoesNotExist: If file not found.
    """
    validate_name(new_name)
    file_instance = get_file(user, file_id)

    final_name = new_name
    if not get_file_extension(new_name):
        final_name = new_name + get_file_extension(file_instance.name)
        validate_name(final_name)

    old_name = file_instance.name
    file_instance.name = final_name
    file_instance.modified_at = timezone.now()
    file_instance.save(update_fields=['name', 'modified_at'])

    logger.info(
        'File renamed: %s -> %s (ID: %d)',
        old_name,
        final_name,
        file_instance.id,
    )
    return file_instance


def move_file(user: User, file_id: int, new_folder_id: int | None = None) -> File:
    """Move a file to another folder, or out of any folder.

    Only the folder reference changes; the stored bytes stay put.

    Raises:
        File.DoesNotExist: If file not found.
        Folder.DoesNotExist: If target folder not found.
    """
    file_instance = get_file(user, file_id)
    _ensure_folder(user, new_folder_id)

    file_instance.folder_id = new_folder_id
    file_instance.modified_at = timezone.now()
    file_instance.save(update_fields=['folder', 'modified_at'])

    logger.info(
        'File moved to folder %s (ID: %d)',
        new_folder_id,
        file_instance.id,
    )
    return file_instance


def update_file_tags(
    user: User,
    file_id: int,
    tags: Iterable[str] | None,
) -> File:
    """Replace a file's tags with the normalized given tags."""
    file_instance = get_file(user, file_id)
    file_instance.tags = tags_for_storage(tags)
    file_instance.modified_at = timezone.now()
    file_instance.save(update_fields=['tags', 'modified_at'])
    return file_instance


def toggle_file_favorite(user: User, file_id: int) -> File:
    """Flip a file's favorite flag."""
    file_instance = get_file(user, file_id)
    file_instance.is_favorite = not file_instance.is_favorite
    file_instance.modified_at = timezone.now()
    file_instance.save(update_fields=['is_favorite', 'modified_at'])
    return file_instance


def delete_file(user: User, file_id: int) -> bool:
    """Soft-delete a file. Stored bytes are kept.

    Returns:
        True if the file was deleted, False if it was not found.
    """
    try:
        file_instance = get_file(user, file_id)
    except File.DoesNotExist:
        logger.info('File not found for delete: ID=%d', file_id)
        return False

    file_instance.is_deleted = True
    file_instance.deleted_at = timezone.now()
    file_instance.save(update_fields=['is_deleted', 'deleted_at'])

    logger.info(
        'File moved to trash: %s (ID: %d)',
        file_instance.name,
        file_instance.id,
    )
    return True


def batch_delete_files(user: User, file_ids: Iterable[int]) -> int:
    """Soft-delete several files, skipping unknown IDs.

    Returns:
        Number of files deleted.

    Raises:
        ValidationError: If no IDs were given.
    """
    ids = list(file_ids)
    if not ids:
        raise ValidationError('No file IDs provided for deletion')

    with transaction.atomic():
        deleted = File.objects.owned_by(user).filter(id__in=ids).update(
            is_deleted=True,
            deleted_at=timezone.now(),
        )

    logger.info(
        'Batch file delete: %d of %d requested files',
        deleted,
        len(ids),
    )
    return deleted


def list_files(user: User, folder_id: int | None = None) -> QuerySet[File]:
    """List live files, all of them or those in one folder.

    Raises:
        Folder.DoesNotExist: If folder_id is given and not found.
    """
    if folder_id is not None:
        return list_files_by_folder(user, folder_id)
    return File.objects.owned_by(user).order_by('name')


def list_files_by_folder(user: User, folder_id: int) -> QuerySet[File]:
    """List live files directly inside a folder, ordered by name.

    Raises:
        Folder.DoesNotExist: If folder not found.
    """
    folder = get_folder(user, folder_id)
    return File.objects.owned_by(user).filter(folder=folder).order_by('name')


def list_favorite_files(user: User) -> QuerySet[File]:
    """List live favorite files, ordered by name."""
    return File.objects.owned_by(user).filter(is_favorite=True).order_by('name')


def list_files_by_tag(user: User, tag: str) -> list[File]:
    """List live files carrying exactly the given tag."""
    normalized = normalize_tag(tag)
    if not normalized:
        return []
    return [
        file_instance for file_instance in list_files(user)
        if normalized in file_instance.tags
    ]


def search_files(user: User, term: str) -> list[File]:
    """Search live files by name or tag (case-insensitive substring).

    Returns:
        Matching files ordered by name; empty for a blank term.
    """
    if not term or not term.strip():
        return []

    needle = term.strip().lower()
    return [
        file_instance for file_instance in list_files(user)
        if needle in file_instance.name.lower()
        or tags_match(file_instance.tags, needle)
    ]


def copy_file_metadata(
    user: User,
    source_id: int,
    target_folder_id: int | None,
    storage_ref: str,
) -> File:
    """Create a copy of a file's metadata in a target folder.

    The copy is named 'Copy of <name>' and gets new identity, timestamps
    and the given storage reference; every other field is cloned.
    Duplicating the bytes is the caller's job (see copy_file).

    Args:
        user: Owner of source and target.
        source_id: ID of file to copy.
        target_folder_id: Folder for the copy, None for unfiled.
        storage_ref: Byte store key of the duplicated bytes.

    Returns:
        New File instance.

    Raises:
        File.DoesNotExist: If source not found.
        Folder.DoesNotExist: If target folder not found.
        ValidationError: If the resulting name or reference is invalid.
    """
    source = get_file(user, source_id)
    _ensure_folder(user, target_folder_id)

    copy_name = _COPY_PREFIX + source.name
    validate_name(copy_name)
    if not storage_ref:
        raise ValidationError('Storage reference cannot be empty')

    with transaction.atomic():
        new_file = File.objects.create(
            user=user,
            folder_id=target_folder_id,
            name=copy_name,
            content_type=source.content_type,
            size_bytes=source.size_bytes,
            storage_ref=storage_ref,
            status=source.status,
            tags=list(source.tags),
            is_favorite=source.is_favorite,
        )

    logger.info(
        'File metadata copied: %d -> %d (%s)',
        source.id,
        new_file.id,
        copy_name,
    )
    return new_file


def copy_file(
    user: User,
    source_id: int,
    target_folder_id: int | None = None,
) -> File:
    """Copy a file's bytes and metadata into a target folder.

    Transaction safety: copy bytes in storage first, then create the DB
    record; the copied bytes are deleted if the DB step fails.

    Raises:
        File.DoesNotExist: If source not found.
        Folder.DoesNotExist: If target folder not found.
    """
    source = get_file(user, source_id)
    _ensure_folder(user, target_folder_id)

    storage = _get_storage()
    dest_key = build_storage_key(user.id, _COPY_PREFIX + source.name)
    validate_storage_path(user.id, dest_key)

    # Step 1: Copy bytes in storage
    copied_key = storage.copy_object(source.storage_ref, dest_key)

    # Step 2: Create new database record
    try:
        return copy_file_metadata(user, source.id, target_folder_id, copied_key)
    except Exception:
        logger.exception('Database creation failed, rolling back storage copy')
        storage.rollback_upload(copied_key)
        raise


def activate_file(user: User, file_id: int) -> File:
    """Mark a processed file as active."""
    return _change_status(user, file_id, FileStatus.ACTIVE)


def archive_file(user: User, file_id: int) -> File:
    """Move an active file to long-term archived status."""
    return _change_status(user, file_id, FileStatus.ARCHIVED)


def mark_file_failed(user: User, file_id: int) -> File:
    """Mark a file whose processing went wrong as failed."""
    return _change_status(user, file_id, FileStatus.FAILED)


def _change_status(user: User, file_id: int, new_status: str) -> File:
    file_instance = get_file(user, file_id)
    _transition(file_instance, new_status)
    return file_instance


def _transition(file_instance: File, new_status: str) -> None:
    """Apply a status change if the lifecycle allows it.

    Raises:
        InvalidStatusTransitionError: If the change is not allowed.
    """
    current = file_instance.status
    if new_status not in _STATUS_TRANSITIONS[current]:
        logger.warning(
            'Rejected status change %s -> %s (ID: %d)',
            current,
            new_status,
            file_instance.id,
        )
        raise InvalidStatusTransitionError(current, new_status)

    file_instance.status = new_status
    file_instance.modified_at = timezone.now()
    file_instance.save(update_fields=['status', 'modified_at'])
    logger.info(
        'File status changed %s -> %s (ID: %d)',
        current,
        new_status,
        file_instance.id,
    )


def _get_file_size(file_obj: BinaryIO | DjangoFile) -> int:
    """Get file size from file object.

    Args:
        file_obj: File-like object.

    Returns:
        File size in bytes.
    """
    if hasattr(file_obj, 'size'):
        return file_obj.size
    file_size = len(file_obj.read())
    file_obj.seek(0)
    return file_size

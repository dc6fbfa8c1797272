"""Validation and metadata utilities for folders and files."""

import mimetypes
import uuid
from pathlib import Path
from typing import Final

from django.conf import settings
from django.core.exceptions import ValidationError

# Characters rejected in folder and file names
_FORBIDDEN_NAME_CHARS: Final = frozenset('\\/:*?"<>|')
_RESERVED_NAMES: Final = frozenset(('.', '..'))
_PATH_SEPARATOR: Final = '/'
_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'


def validate_name(name: str) -> None:
    """Validate a folder or file name.

    Args:
        name: Proposed name.

    Raises:
        ValidationError: If the name is empty, too long, padded with
            whitespace, reserved or contains forbidden characters.
    """
    if not isinstance(name, str) or not name:
        raise ValidationError('Name cannot be empty')

    max_length = settings.FILEMANAGER_MAX_NAME_LENGTH
    if len(name) > max_length:
        raise ValidationError(
            f'Name cannot be longer than {max_length} characters',
        )

    if name != name.strip():
        raise ValidationError('Name cannot start or end with whitespace')

    if name in _RESERVED_NAMES:
        raise ValidationError(f'Name {name!r} is reserved')

    for char in name:
        if char in _FORBIDDEN_NAME_CHARS or ord(char) < 32:
            raise ValidationError(
                f'Name cannot contain {char!r}',
            )


def validate_folder_path(path: str) -> None:
    """Validate a materialized folder path.

    Args:
        path: Path such as '/documents/reports'.

    Raises:
        ValidationError: If the path is empty, too long or has empty
            segments.
    """
    if not path:
        raise ValidationError('Path cannot be empty')

    max_length = settings.FILEMANAGER_MAX_PATH_LENGTH
    if len(path) > max_length:
        raise ValidationError(
            f'Path cannot be longer than {max_length} characters',
        )

    if _PATH_SEPARATOR * 2 in path:
        raise ValidationError('Path cannot contain multiple slashes')


def validate_upload(content_type: str, size_bytes: int) -> None:
    """Validate upload metadata against configured limits.

    Args:
        content_type: MIME type of the upload.
        size_bytes: Size of the upload in bytes.

    Raises:
        ValidationError: If the upload is empty, too large or of a
            content type that is not allowed.
    """
    if size_bytes <= 0:
        raise ValidationError('No file was provided or file is empty')

    max_bytes = settings.FILEMANAGER_MAX_UPLOAD_BYTES
    if size_bytes > max_bytes:
        raise ValidationError(
            f'File size exceeds the limit of {max_bytes // (1024 * 1024)}MB',
        )

    if content_type not in settings.FILEMANAGER_ALLOWED_CONTENT_TYPES:
        raise ValidationError(f'File type {content_type} is not allowed')


def detect_mime_type(filename: str) -> str:
    """Detect MIME type from a filename.

    Uses Python's built-in mimetypes module to guess the type from the
    extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    Args:
        filename: Filename (e.g., 'document.pdf').

    Returns:
        Extension including the dot (e.g., '.pdf').
        Returns empty string if no extension.
    """
    return Path(filename).suffix


def build_storage_key(user_id: int, filename: str) -> str:
    """Build a unique byte store key for a user's file.

    Args:
        user_id: Owner's user ID.
        filename: Display name of the file.

    Returns:
        Key of the form '{user_id}/{uuid}_{filename}'.
    """
    return f'{user_id}/{uuid.uuid4().hex}_{filename}'


def validate_storage_path(user_id: int, storage_path: str) -> None:
    """Validate storage key follows user isolation rules.

    Ensures the key starts with the user's ID so one user's objects
    never share a prefix with another's.

    Args:
        user_id: Owner's user ID.
        storage_path: Proposed storage key.

    Raises:
        ValidationError: If key doesn't start with user_id or is invalid.
    """
    if not storage_path:
        raise ValidationError('Storage path cannot be empty')

    first_component = storage_path.split(_PATH_SEPARATOR, 1)[0]

    try:
        path_user_id = int(first_component)
    except ValueError as error:
        raise ValidationError(
            'Storage path must start with user ID',
        ) from error

    if path_user_id != user_id:
        raise ValidationError(
            f'Storage path user ID ({path_user_id}) does not match '
            f'owner ({user_id})',
        )

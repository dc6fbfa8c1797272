"""File manager engine settings."""

from decouple import Csv

from server.settings.components import config

# Upload limits (bytes)
FILEMANAGER_MAX_UPLOAD_BYTES = config(
    'FILEMANAGER_MAX_UPLOAD_BYTES',
    cast=int,
    default=100 * 1024 * 1024,
)

# Content types accepted by upload_file
FILEMANAGER_ALLOWED_CONTENT_TYPES = config(
    'FILEMANAGER_ALLOWED_CONTENT_TYPES',
    cast=Csv(post_process=tuple),
    default='image/jpeg,image/png,application/pdf,text/plain',
)

# Naming limits
FILEMANAGER_MAX_NAME_LENGTH = config(
    'FILEMANAGER_MAX_NAME_LENGTH',
    cast=int,
    default=255,
)
FILEMANAGER_MAX_PATH_LENGTH = config(
    'FILEMANAGER_MAX_PATH_LENGTH',
    cast=int,
    default=1024,
)

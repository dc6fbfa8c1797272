"""Byte store backend for file contents (S3-compatible storage)."""

import logging
from typing import Any, final, override

from storages.backends.s3 import S3Storage

logger = logging.getLogger(__name__)


@final
class FileStorage(S3Storage):
    """Object store holding the bytes behind File records.

    Records only keep the key returned by ``save`` or ``copy_object``;
    the bytes are never inspected here.
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Store bytes under ``name``.

        Returns:
            Key the object was stored under.
        """
        logger.debug('Storing object: %s', name)
        try:
            stored_key = super().save(name, content, max_length)
        except Exception:
            logger.exception('Storing object failed: %s', name)
            raise
        logger.info('Stored object: %s', stored_key)
        return stored_key

    @override
    def delete(self, name: str) -> None:
        """Remove the object stored under ``name``."""
        try:
            super().delete(name)
        except Exception:
            logger.exception('Removing object failed: %s', name)
            raise
        logger.info('Removed object: %s', name)

    def rollback_upload(self, name: str) -> None:
        """Remove bytes whose database record was never committed.

        Failures are logged, not raised: the caller is already handling
        the original database error.

        Args:
            name: Key of the object to remove.
        """
        logger.warning('Discarding object without a record: %s', name)
        try:
            self.delete(name)
        except Exception:
            # Object stays in the bucket with no record pointing at it
            logger.exception('Object left behind: %s', name)

    def copy_object(self, source: str, destination: str) -> str:
        """Duplicate an object inside the bucket (server-side copy).

        Args:
            source: Key of the existing object.
            destination: Key for the duplicate.

        Returns:
            Key of the duplicate.
        """
        copy_source = {'Bucket': self.bucket_name, 'Key': source}
        try:
            self.bucket.copy(copy_source, destination)
        except Exception:
            logger.exception('Copying object failed: %s -> %s', source, destination)
            raise
        logger.info('Copied object: %s -> %s', source, destination)
        return destination

"""Exceptions for files app.

Validation failures use Django's ``ValidationError`` and missing records
use the model's ``DoesNotExist``; the errors below cover the rest.
"""


class CircularMoveError(Exception):
    """Raised when a folder move would make a folder its own ancestor."""

    def __init__(self, folder_id: int, target_parent_id: int) -> None:
        """Initialize CircularMoveError.

        Args:
            folder_id: Folder being moved.
            target_parent_id: Requested new parent.
        """
        self.folder_id = folder_id
        self.target_parent_id = target_parent_id
        super().__init__(
            f'Circular move: folder {target_parent_id} is folder '
            f'{folder_id} or one of its descendants',
        )


class PathConflictError(Exception):
    """Raised when a folder path is already taken by a live folder."""

    def __init__(self, path: str) -> None:
        """Initialize PathConflictError.

        Args:
            path: Conflicting folder path.
        """
        self.path = path
        super().__init__(f'A folder already exists at {path}')


class InvalidStatusTransitionError(Exception):
    """Raised when a file status change is not allowed."""

    def __init__(self, current_status: str, new_status: str) -> None:
        """Initialize InvalidStatusTransitionError.

        Args:
            current_status: Status the file has now.
            new_status: Requested status.
        """
        self.current_status = current_status
        self.new_status = new_status
        super().__init__(
            f'Cannot change file status from {current_status} '
            f'to {new_status}',
        )

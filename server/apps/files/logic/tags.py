"""Tag normalization shared by folders and files."""

from collections.abc import Iterable

from django.core.exceptions import ValidationError


def normalize_tag(tag: str) -> str:
    """Normalize a single tag: trimmed and lower-cased.

    Args:
        tag: Free-text tag.

    Returns:
        Normalized tag, possibly empty.

    Raises:
        ValidationError: If tag is not a string.
    """
    if not isinstance(tag, str):
        raise ValidationError(f'Tag must be a string, got {type(tag).__name__}')
    return tag.strip().lower()


def normalize_tags(tags: Iterable[str] | None) -> set[str]:
    """Canonicalize a collection of free-text tags.

    Trims whitespace, lower-cases, drops blanks and removes duplicates.
    Idempotent: normalizing an already normalized set returns it unchanged.

    Args:
        tags: Tags as entered by the user, or None.

    Returns:
        Set of normalized tags.

    Raises:
        ValidationError: If any tag is not a string.
    """
    if tags is None:
        return set()

    normalized = (normalize_tag(tag) for tag in tags)
    return {tag for tag in normalized if tag}


def tags_for_storage(tags: Iterable[str] | None) -> list[str]:
    """Normalize tags into the sorted list kept on a record."""
    return sorted(normalize_tags(tags))


def tags_match(tags: Iterable[str], term: str) -> bool:
    """Check whether any stored tag contains the lower-cased term."""
    return any(term in tag for tag in tags)

"""Tests for tag normalization."""

import pytest
from django.core.exceptions import ValidationError

from server.apps.files.logic.tags import (
    normalize_tag,
    normalize_tags,
    tags_for_storage,
    tags_match,
)


def test_normalize_tags_collapses_variants():
    """Test case and whitespace variants collapse to one tag."""
    assert normalize_tags(['  Report ', 'report', 'REPORT', '']) == {'report'}


def test_normalize_tags_drops_blank():
    """Test whitespace-only tags are dropped."""
    assert normalize_tags(['   ', '\t', 'Work']) == {'work'}


def test_normalize_tags_none_is_empty():
    """Test None yields an empty set."""
    assert normalize_tags(None) == set()


def test_normalize_tags_idempotent():
    """Test normalizing twice gives the same result."""
    once = normalize_tags([' Tax ', 'Receipts', 'tax', ' 2024'])
    assert normalize_tags(once) == once


def test_normalize_tags_rejects_non_string():
    """Test non-string tags raise ValidationError."""
    with pytest.raises(ValidationError):
        normalize_tags(['ok', 42])


def test_normalize_tag_single():
    """Test single tag normalization."""
    assert normalize_tag('  MiXeD ') == 'mixed'


def test_tags_for_storage_sorted():
    """Test stored tags are a sorted list."""
    assert tags_for_storage(['b', 'A', ' c ', 'a']) == ['a', 'b', 'c']


def test_tags_match_substring():
    """Test substring matching over stored tags."""
    assert tags_match(['invoices', 'work'], 'voice')
    assert not tags_match(['invoices', 'work'], 'home')

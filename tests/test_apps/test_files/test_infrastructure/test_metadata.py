"""Tests for metadata utilities."""

import pytest
from django.core.exceptions import ValidationError

from server.apps.files.infrastructure.metadata import (
    build_storage_key,
    detect_mime_type,
    get_file_extension,
    validate_folder_path,
    validate_name,
    validate_storage_path,
    validate_upload,
)


@pytest.mark.parametrize('name', [
    'Documents',
    'report.final.pdf',
    'photo 2024',
    '.hidden',
    'zażółć',
])
def test_validate_name_valid(name):
    """Test ordinary names are accepted."""
    validate_name(name)


@pytest.mark.parametrize('name', [
    '',
    ' ',
    ' padded',
    'padded ',
    '.',
    '..',
    'a/b',
    'a\\b',
    'what?',
    'star*',
    'quote"',
    'pipe|',
    'tab\tname',
])
def test_validate_name_invalid(name):
    """Test bad names raise ValidationError."""
    with pytest.raises(ValidationError):
        validate_name(name)


def test_validate_name_length(settings):
    """Test name length limit comes from settings."""
    settings.FILEMANAGER_MAX_NAME_LENGTH = 5

    validate_name('abcde')
    with pytest.raises(ValidationError):
        validate_name('abcdef')


def test_validate_folder_path():
    """Test folder path validation."""
    validate_folder_path('/Docs/Work')

    with pytest.raises(ValidationError):
        validate_folder_path('')

    with pytest.raises(ValidationError):
        validate_folder_path('/Docs//Work')


def test_validate_folder_path_length(settings):
    """Test path length limit comes from settings."""
    settings.FILEMANAGER_MAX_PATH_LENGTH = 6

    validate_folder_path('/Docs')
    with pytest.raises(ValidationError, match='longer than 6'):
        validate_folder_path('/Docs/Work')


def test_validate_upload(settings):
    """Test upload size and content type checks."""
    settings.FILEMANAGER_MAX_UPLOAD_BYTES = 10
    settings.FILEMANAGER_ALLOWED_CONTENT_TYPES = ('text/plain',)

    validate_upload('text/plain', 10)

    with pytest.raises(ValidationError, match='empty'):
        validate_upload('text/plain', 0)

    with pytest.raises(ValidationError, match='exceeds'):
        validate_upload('text/plain', 11)

    with pytest.raises(ValidationError, match='not allowed'):
        validate_upload('image/png', 5)


def test_detect_mime_type():
    """Test MIME type detection from filename."""
    assert detect_mime_type('test.pdf') == 'application/pdf'
    assert detect_mime_type('test.txt') == 'text/plain'
    assert detect_mime_type('test.jpg') == 'image/jpeg'
    assert detect_mime_type('test.png') == 'image/png'


def test_detect_mime_type_unknown():
    """Test MIME type detection for unknown extension."""
    assert detect_mime_type('test.unknown') == 'application/octet-stream'
    assert detect_mime_type('README') == 'application/octet-stream'


def test_get_file_extension():
    """Test extracting file extension."""
    assert get_file_extension('test.pdf') == '.pdf'
    assert get_file_extension('archive.tar.gz') == '.gz'
    assert get_file_extension('no_extension') == ''


def test_build_storage_key():
    """Test storage keys are unique and user-prefixed."""
    first = build_storage_key(7, 'report.pdf')
    second = build_storage_key(7, 'report.pdf')

    assert first != second
    assert first.startswith('7/')
    assert first.endswith('_report.pdf')
    validate_storage_path(7, first)


def test_validate_storage_path_valid():
    """Test valid storage path."""
    validate_storage_path(1, '1/abc_test.txt')


def test_validate_storage_path_wrong_user():
    """Test storage path with wrong user ID."""
    with pytest.raises(ValidationError, match='does not match'):
        validate_storage_path(1, '2/abc_test.txt')


def test_validate_storage_path_invalid():
    """Test invalid storage paths."""
    with pytest.raises(ValidationError, match='cannot be empty'):
        validate_storage_path(1, '')

    with pytest.raises(ValidationError, match='must start with user ID'):
        validate_storage_path(1, 'invalid/path.txt')

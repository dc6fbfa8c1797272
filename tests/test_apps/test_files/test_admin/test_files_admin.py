"""Tests for files admin configuration."""

import pytest
from django.contrib.admin.sites import site
from django.urls import reverse

from server.apps.files.admin import FileAdmin, _format_bytes
from server.apps.files.models import File


@pytest.mark.parametrize(('size_bytes', 'expected'), [
    (512, '512 B'),
    (1536, '1.5 KB'),
    (5 * 1024 * 1024, '5.0 MB'),
    (3 * 1024 * 1024 * 1024, '3.0 GB'),
])
def test_format_bytes(size_bytes, expected):
    """Test human-readable sizes."""
    assert _format_bytes(size_bytes) == expected


@pytest.mark.django_db
def test_folder_path_display(user, make_folder, make_file):
    """Test folder column for filed and unfiled files."""
    model_admin = FileAdmin(File, site)
    docs = make_folder(user, 'Docs')

    assert model_admin.folder_path_display(make_file(user, folder=docs)) == '/Docs'
    assert model_admin.folder_path_display(make_file(user, 'loose.pdf')) == '-'


@pytest.mark.django_db
def test_folder_changelist_shows_deleted(admin_client, user, make_folder):
    """Test folder changelist includes soft-deleted folders."""
    make_folder(user, 'LiveFolder')
    make_folder(user, 'TrashedFolder', is_deleted=True)

    response = admin_client.get(reverse('admin:files_folder_changelist'))

    assert response.status_code == 200
    assert b'/LiveFolder' in response.content
    assert b'/TrashedFolder' in response.content


@pytest.mark.django_db
def test_file_changelist_shows_deleted(admin_client, user, make_file):
    """Test file changelist includes soft-deleted files."""
    make_file(user, 'live-report.pdf', size_bytes=2048)
    make_file(user, 'trashed-report.pdf', is_deleted=True)

    response = admin_client.get(reverse('admin:files_file_changelist'))

    assert response.status_code == 200
    assert b'live-report.pdf' in response.content
    assert b'trashed-report.pdf' in response.content
    assert b'2.0 KB' in response.content

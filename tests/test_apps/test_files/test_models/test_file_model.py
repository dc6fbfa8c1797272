"""Tests for File model."""

import pytest

from server.apps.files.models import File, FileStatus


@pytest.mark.django_db
def test_file_model_str(user, make_file):
    """Test File __str__ method."""
    file_instance = make_file(user, 'report.pdf')

    assert str(file_instance) == f'{user.username}:report.pdf'


@pytest.mark.django_db
def test_file_default_status(user):
    """Test new files start in processing status."""
    file_instance = File.objects.create(
        user=user,
        name='scan.png',
        content_type='image/png',
        size_bytes=10,
        storage_ref=f'{user.id}/abc_scan.png',
    )

    assert file_instance.status == FileStatus.PROCESSING
    assert file_instance.tags == []
    assert file_instance.folder is None


@pytest.mark.django_db
@pytest.mark.parametrize(('name', 'extension'), [
    ('test.PDF', 'pdf'),
    ('archive.tar.gz', 'gz'),
    ('README', ''),
])
def test_file_get_extension(user, make_file, name, extension):
    """Test get_extension method extracts extension correctly."""
    file_instance = make_file(user, name)

    assert file_instance.get_extension() == extension


@pytest.mark.django_db
def test_file_managers(user, make_file):
    """Test default manager hides soft-deleted files."""
    live = make_file(user, 'live.pdf')
    make_file(user, 'gone.pdf', is_deleted=True)

    assert list(File.objects.owned_by(user)) == [live]
    assert File.all_objects.owned_by(user).count() == 2


@pytest.mark.django_db
def test_file_folder_reverse_relation(user, make_folder, make_file):
    """Test files are reachable from their folder."""
    docs = make_folder(user, 'Docs')
    report = make_file(user, folder=docs)

    assert list(docs.files.all()) == [report]

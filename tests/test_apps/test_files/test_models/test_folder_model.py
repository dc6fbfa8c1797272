"""Tests for Folder model."""

import pytest
from django.db import IntegrityError, transaction

from server.apps.files.models import Folder


@pytest.mark.django_db
def test_folder_model_str(user, make_folder):
    """Test Folder __str__ method."""
    docs = make_folder(user, 'Docs')

    assert str(docs) == f'{user.username}:/Docs'


@pytest.mark.django_db
def test_folder_defaults(user, make_folder):
    """Test new folders start untagged, not favorite and live."""
    docs = make_folder(user, 'Docs')

    assert docs.tags == []
    assert docs.is_favorite is False
    assert docs.is_deleted is False
    assert docs.deleted_at is None
    assert docs.modified_at is None
    assert docs.created_at is not None


@pytest.mark.django_db
def test_folder_is_root(user, make_folder):
    """Test is_root reflects the parent link."""
    docs = make_folder(user, 'Docs')
    work = make_folder(user, 'Work', parent=docs)

    assert docs.is_root() is True
    assert work.is_root() is False


@pytest.mark.django_db
def test_folder_managers(user, make_folder):
    """Test default manager hides soft-deleted folders."""
    live = make_folder(user, 'Live')
    make_folder(user, 'Gone', is_deleted=True)

    assert list(Folder.objects.all()) == [live]
    assert Folder.all_objects.count() == 2


@pytest.mark.django_db
def test_folder_owned_by(user, other_user, make_folder):
    """Test owned_by scopes to one user on both managers."""
    mine = make_folder(user, 'Docs')
    make_folder(other_user, 'Docs')

    assert list(Folder.objects.owned_by(user)) == [mine]
    assert Folder.all_objects.owned_by(other_user).count() == 1


@pytest.mark.django_db
def test_folder_path_unique_per_user(user, make_folder):
    """Test two live folders of one user cannot share a path."""
    make_folder(user, 'Docs')

    with pytest.raises(IntegrityError), transaction.atomic():
        make_folder(user, 'Docs')


@pytest.mark.django_db
def test_folder_path_unique_ignores_deleted(user, other_user, make_folder):
    """Test deleted folders and other users do not block a path."""
    make_folder(user, 'Docs', is_deleted=True)
    make_folder(user, 'Docs')
    make_folder(other_user, 'Docs')

    assert Folder.all_objects.filter(path='/Docs').count() == 3

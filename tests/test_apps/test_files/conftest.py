"""Shared fixtures for files app tests."""

import boto3
import pytest
from django.contrib.auth import get_user_model
from django.core.files.base import ContentFile
from moto import mock_aws

from server.apps.files.models import File, FileStatus, Folder

User = get_user_model()


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def mock_s3():
    """Mock S3 service with file-manager bucket.

    Yields:
        boto3 S3 resource with file-manager bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket='file-manager')

        yield conn


@pytest.fixture
def sample_file_content():
    """Sample file content for testing.

    Returns:
        ContentFile with test data.
    """
    return ContentFile(b'test file content', name='test.txt')


@pytest.fixture
def make_folder(db):
    """Factory for folder rows with a correct materialized path.

    Returns:
        Callable creating a Folder for a user, optionally under a parent.
    """
    def factory(user, name, parent=None, **fields):
        path = f'{parent.path}/{name}' if parent else f'/{name}'
        return Folder.objects.create(
            user=user,
            name=name,
            path=path,
            parent_folder=parent,
            **fields,
        )
    return factory


@pytest.fixture
def make_file(db):
    """Factory for file metadata rows.

    Returns:
        Callable creating a File for a user, optionally in a folder.
    """
    def factory(user, name='report.pdf', folder=None, **fields):
        fields.setdefault('content_type', 'application/pdf')
        fields.setdefault('size_bytes', 100)
        fields.setdefault('storage_ref', f'{user.id}/abc_{name}')
        fields.setdefault('status', FileStatus.ACTIVE)
        return File.objects.create(
            user=user,
            name=name,
            folder=folder,
            **fields,
        )
    return factory

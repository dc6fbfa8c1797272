"""Tests for the S3 byte store backend."""

from django.core.files.base import ContentFile

from server.apps.files.infrastructure.storage import FileStorage

_BUCKET = 'file-manager'


def _make_storage():
    return FileStorage(bucket_name=_BUCKET, region_name='us-east-1')


def _keys(mock_s3):
    return sorted(obj.key for obj in mock_s3.Bucket(_BUCKET).objects.all())


def test_save_and_delete(mock_s3):
    """Test objects are stored and removed."""
    storage = _make_storage()

    saved = storage.save('1/abc_notes.txt', ContentFile(b'hello'))

    assert saved == '1/abc_notes.txt'
    assert _keys(mock_s3) == ['1/abc_notes.txt']

    storage.delete(saved)
    assert _keys(mock_s3) == []


def test_copy_object(mock_s3):
    """Test server-side copy leaves both objects in place."""
    mock_s3.Bucket(_BUCKET).put_object(Key='1/src.txt', Body=b'payload')
    storage = _make_storage()

    result = storage.copy_object('1/src.txt', '1/dst.txt')

    assert result == '1/dst.txt'
    assert _keys(mock_s3) == ['1/dst.txt', '1/src.txt']
    body = mock_s3.Object(_BUCKET, '1/dst.txt').get()['Body'].read()
    assert body == b'payload'


def test_rollback_upload(mock_s3):
    """Test rollback removes the uploaded object."""
    storage = _make_storage()
    saved = storage.save('1/abc_notes.txt', ContentFile(b'hello'))

    storage.rollback_upload(saved)

    assert _keys(mock_s3) == []


def test_rollback_upload_swallows_errors(mock_s3, monkeypatch):
    """Test rollback logs delete failures instead of raising."""
    storage = _make_storage()

    def failing_delete(name):
        raise OSError('storage unavailable')

    monkeypatch.setattr(storage, 'delete', failing_delete)

    storage.rollback_upload('1/missing.txt')

import asyncio

import pytest

from coursemarket.core.exceptions import InvalidUpload
from coursemarket.services.file_service import LocalObjectStorage, ObjectStorage, build_object_key, validate_upload
from coursemarket.utils.path_helpers import get_file_url, sanitize_filename


def test_validate_upload_accepts_allowed_type_within_limit() -> None:
    validate_upload('application/pdf', 1024)


@pytest.mark.parametrize('content_type', ['text/plain', 'application/zip', None, 'image/gif'])
def test_validate_upload_rejects_other_types(content_type) -> None:
    with pytest.raises(InvalidUpload, match='Invalid file type'):
        validate_upload(content_type, 10)


def test_validate_upload_rejects_more_than_100mb() -> None:
    validate_upload('video/mp4', 100 * 1024 * 1024)

    with pytest.raises(InvalidUpload, match='File too large'):
        validate_upload('video/mp4', 100 * 1024 * 1024 + 1)


def test_object_key_is_scoped_to_course_and_sanitized() -> None:
    key = build_object_key(12, '../../etc/My Lecture (final).pdf')

    prefix, name = key.rsplit('/', 1)
    assert prefix == 'courses/12'
    assert name.split('-', 1)[1] == 'My_Lecture_final_.pdf'


@pytest.mark.parametrize('filename,expected', [
    ('lecture.pdf', 'lecture.pdf'),
    ('', 'file'),
    (None, 'file'),
    ('..', 'file'),
    ('a/b/c.png', 'c.png'),
])
def test_sanitize_filename(filename, expected) -> None:
    assert sanitize_filename(filename) == expected


def test_get_file_url() -> None:
    assert get_file_url('courses/1/a.pdf', '/uploads') == '/uploads/courses/1/a.pdf'
    assert get_file_url('courses/1/a.pdf', 'https://cdn.example.com/') == 'https://cdn.example.com/courses/1/a.pdf'
    assert get_file_url('https://elsewhere.example.com/a.pdf') == 'https://elsewhere.example.com/a.pdf'


def test_local_object_storage_writes_file(tmp_path) -> None:
    store = LocalObjectStorage(base_dir=str(tmp_path), base_url='/uploads')

    url = asyncio.run(store.put('courses/3/1-a.pdf', b'data', 'application/pdf'))

    assert url == '/uploads/courses/3/1-a.pdf'
    assert (tmp_path / 'courses' / '3' / '1-a.pdf').read_bytes() == b'data'


def test_local_object_storage_refuses_escaping_keys(tmp_path) -> None:
    store = LocalObjectStorage(base_dir=str(tmp_path / 'root'), base_url='/uploads')

    with pytest.raises(InvalidUpload):
        asyncio.run(store.put('../outside.pdf', b'data', 'application/pdf'))

    assert not (tmp_path / 'outside.pdf').exists()


def test_object_storage_requires_put() -> None:
    class Incomplete(ObjectStorage):
        pass

    with pytest.raises(TypeError):
        Incomplete()

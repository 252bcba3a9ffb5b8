import threading
from pathlib import Path

import pytest

from conftest import bearer, make_course
from coursemarket.config import settings
from coursemarket.core.exceptions import UpstreamFailure
from coursemarket.main import app
from coursemarket.api.dependencies import get_storage
from coursemarket.services.file_service import ObjectStorage, get_object_storage
from coursemarket.storage import MemoryStorage


class RecordingObjectStorage(ObjectStorage):
    def __init__(self):
        self.puts = []

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        self.puts.append((key, data, content_type))
        return f'https://bucket.example.com/{key}'


class ThreadTrackingObjectStorage(ObjectStorage):
    def __init__(self):
        self.threads = []

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        self.threads.append(threading.get_ident())
        return f'/uploads/{key}'


class ThreadTrackingStorage(MemoryStorage):
    def __init__(self):
        super().__init__()
        self.threads = []

    def get_course(self, course_id):
        self.threads.append(threading.get_ident())
        return super().get_course(course_id)

    def add_content(self, course_id, type, url):
        self.threads.append(threading.get_ident())
        return super().add_content(course_id, type, url)


class BrokenObjectStorage(ObjectStorage):
    async def put(self, key: str, data: bytes, content_type: str) -> str:
        raise UpstreamFailure('Failed to upload file')


@pytest.fixture
def recording_storage(client):
    recorder = RecordingObjectStorage()
    app.dependency_overrides[get_object_storage] = lambda: recorder
    return recorder


def test_upload_pdf_creates_content_record(client, memory_storage, object_storage, instructor) -> None:
    course = make_course(memory_storage)

    response = client.post(
        f'/api/upload/{course.id}',
        files={'file': ('syllabus.pdf', b'%PDF-1.4 course syllabus', 'application/pdf')},
        headers=bearer(instructor),
    )

    assert response.status_code == 201
    body = response.json()
    assert body['courseId'] == course.id
    assert body['type'] == 'application/pdf'
    assert body['url'].startswith(f'/uploads/courses/{course.id}/')
    assert body['url'].endswith('-syllabus.pdf')

    key = body['url'][len('/uploads/'):]
    assert (Path(object_storage.base_dir) / key).read_bytes() == b'%PDF-1.4 course syllabus'
    assert [c.url for c in memory_storage.list_course_content(course.id)] == [body['url']]


@pytest.mark.parametrize('filename,mime', [
    ('clip.mp4', 'video/mp4'),
    ('clip.webm', 'video/webm'),
    ('photo.jpg', 'image/jpeg'),
    ('diagram.png', 'image/png'),
])
def test_allowed_types_are_accepted(client, memory_storage, recording_storage, instructor, filename, mime) -> None:
    course = make_course(memory_storage)

    response = client.post(
        f'/api/upload/{course.id}', files={'file': (filename, b'bytes', mime)}, headers=bearer(instructor)
    )

    assert response.status_code == 201
    assert recording_storage.puts[0][2] == mime


def test_plain_text_is_rejected_before_storage_write(client, memory_storage, recording_storage, instructor) -> None:
    course = make_course(memory_storage)

    response = client.post(
        f'/api/upload/{course.id}',
        files={'file': ('notes.txt', b'just some notes', 'text/plain')},
        headers=bearer(instructor),
    )

    assert response.status_code == 400
    assert response.json() == {'message': 'Invalid file type'}
    assert recording_storage.puts == []
    assert memory_storage.list_course_content(course.id) == []


def test_oversized_file_is_rejected(client, memory_storage, recording_storage, instructor, monkeypatch) -> None:
    monkeypatch.setattr(settings, 'MAX_UPLOAD_SIZE', 8)
    course = make_course(memory_storage)

    response = client.post(
        f'/api/upload/{course.id}',
        files={'file': ('big.pdf', b'123456789', 'application/pdf')},
        headers=bearer(instructor),
    )

    assert response.status_code == 400
    assert response.json() == {'message': 'File too large'}
    assert recording_storage.puts == []


def test_upload_to_missing_course_is_not_found(client, recording_storage, instructor) -> None:
    response = client.post(
        '/api/upload/404', files={'file': ('a.pdf', b'%PDF', 'application/pdf')}, headers=bearer(instructor)
    )

    assert response.status_code == 404
    assert recording_storage.puts == []


def test_upload_without_file_is_rejected(client, memory_storage, instructor) -> None:
    course = make_course(memory_storage)

    response = client.post(f'/api/upload/{course.id}', headers=bearer(instructor))

    assert response.status_code == 400
    assert response.json() == {'message': 'No file uploaded'}


def test_students_cannot_upload(client, memory_storage, recording_storage, student) -> None:
    course = make_course(memory_storage)

    response = client.post(
        f'/api/upload/{course.id}', files={'file': ('a.pdf', b'%PDF', 'application/pdf')}, headers=bearer(student)
    )

    assert response.status_code == 403
    assert recording_storage.puts == []


def test_storage_failure_returns_generic_error(client, memory_storage, instructor) -> None:
    app.dependency_overrides[get_object_storage] = lambda: BrokenObjectStorage()
    course = make_course(memory_storage)

    response = client.post(
        f'/api/upload/{course.id}', files={'file': ('a.pdf', b'%PDF', 'application/pdf')}, headers=bearer(instructor)
    )

    assert response.status_code == 500
    assert response.json() == {'message': 'Failed to upload file'}
    assert memory_storage.list_course_content(course.id) == []


def test_storage_calls_run_off_the_event_loop(client, instructor) -> None:
    storage = ThreadTrackingStorage()
    objects = ThreadTrackingObjectStorage()
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_object_storage] = lambda: objects
    course = make_course(storage)
    storage.threads.clear()

    response = client.post(
        f'/api/upload/{course.id}', files={'file': ('a.pdf', b'%PDF', 'application/pdf')}, headers=bearer(instructor)
    )

    assert response.status_code == 201
    loop_thread = objects.threads[0]
    assert len(storage.threads) == 2
    assert loop_thread not in storage.threads

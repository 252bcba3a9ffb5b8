import os
import tempfile

# Settings are read at import time, so point them at throwaway resources first
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['UPLOAD_DIR'] = tempfile.mkdtemp(prefix='coursemarket-test-uploads-')
os.environ['SECRET_KEY'] = 'test-secret-key'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['APP_ENV'] = 'test'
os.environ.pop('FIRST_ADMIN_PASSWORD', None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from coursemarket.api.dependencies import get_storage  # noqa: E402
from coursemarket.core.security import get_password_hash, issue_token  # noqa: E402
from coursemarket.database import Base  # noqa: E402
from coursemarket.main import app  # noqa: E402
from coursemarket.models.user import UserRole  # noqa: E402
from coursemarket.services.file_service import LocalObjectStorage, get_object_storage  # noqa: E402
from coursemarket.storage import DatabaseStorage, MemoryStorage  # noqa: E402

DEFAULT_PASSWORD = 'Password123'


def make_user(storage, email: str = 'student@example.com', role: UserRole = UserRole.STUDENT,
              password: str = DEFAULT_PASSWORD):
    return storage.create_user(email=email, hashed_password=get_password_hash(password), role=role)


def make_course(storage, **overrides):
    data = {
        'title': 'Introduction to Space Flight',
        'description': 'Learn the basics of orbital mechanics and space travel',
        'image_url': 'https://images.example.com/space.jpg',
        'duration': 120,
        'difficulty': 'Beginner',
        'instructor_id': None,
        'price': None,
    }
    data.update(overrides)
    return storage.create_course(data)


def bearer(user) -> dict:
    return {'Authorization': f'Bearer {issue_token(user)}'}


@pytest.fixture
def db_session():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(params=['memory', 'database'])
def storage(request):
    if request.param == 'memory':
        yield MemoryStorage()
    else:
        yield DatabaseStorage(request.getfixturevalue('db_session'))


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def object_storage(tmp_path) -> LocalObjectStorage:
    return LocalObjectStorage(base_dir=str(tmp_path / 'objects'), base_url='/uploads')


@pytest.fixture
def client(memory_storage, object_storage):
    app.dependency_overrides[get_storage] = lambda: memory_storage
    app.dependency_overrides[get_object_storage] = lambda: object_storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def student(memory_storage):
    return make_user(memory_storage, 'student@example.com', UserRole.STUDENT)


@pytest.fixture
def instructor(memory_storage):
    return make_user(memory_storage, 'instructor@example.com', UserRole.INSTRUCTOR)


@pytest.fixture
def admin(memory_storage):
    return make_user(memory_storage, 'admin@example.com', UserRole.ADMIN)

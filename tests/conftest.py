import os
import sys

import pytest

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Settings are read at import time, so the environment must be ready first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("REDIS_URL", None)
os.environ.pop("GEMINI_API_KEY", None)

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from progress_tracker.domain.entities import Role
from progress_tracker.infrastructure.db import get_db
from progress_tracker.infrastructure.models import Base
from progress_tracker.infrastructure.repositories import CourseRepository, StudentRepository, UserRepository
from progress_tracker.infrastructure.security import PasswordHasher, create_access_token
from progress_tracker.main import app

# One shared in-memory database for every thread the TestClient uses
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db):
    yield TestClient(app)


@pytest.fixture
def make_admin(db):
    def _make(username="admin", password="admin-pw"):
        return UserRepository(db).create(username, PasswordHasher().hash(password), Role.ADMIN)
    return _make


@pytest.fixture
def make_student(db):
    def _make(username="evelyn", display_name="Evelyn", password="evelyn123", course_ids=()):
        student = StudentRepository(db).create_with_user(username, PasswordHasher().hash(password), display_name)
        if course_ids:
            CourseRepository(db).set_for_student(student.id, list(course_ids))
        return student
    return _make


@pytest.fixture
def make_course(db):
    def _make(name="Math", color="#4CAF50"):
        return CourseRepository(db).create(name, color)
    return _make


def bearer(user_id: int, role: Role, days: int | None = None) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, role, days=days)}"}


@pytest.fixture
def admin_headers(make_admin):
    admin = make_admin()
    return bearer(admin.id, Role.ADMIN)

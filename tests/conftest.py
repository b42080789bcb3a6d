"""
Global test configuration for VidPOD.

Every test runs against a fresh SQLite file database built with
``Base.metadata.create_all``; the unit-of-work session factory is pointed at it
so the web and CLI layers use the same database as the test.
"""

import os
import sys
import tempfile
from collections.abc import Generator
from pathlib import Path

# Ensure the project src directory is importable without relying on external environment.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from vidpod.adapters.yaml_directory import YamlDirectory  # noqa: E402
from vidpod.core.access import AccessEvaluator  # noqa: E402
from vidpod.domain import entities  # noqa: E402,F401
from vidpod.infra import db as db_module  # noqa: E402
from vidpod.infra.db import Base  # noqa: E402
from vidpod.shared.types import Actor, Role  # noqa: E402

DIRECTORY_DATA = {
    "users": [
        {"id": "admin-1", "role": "admin", "token": "admin-token"},
        {"id": "t-1", "role": "teacher", "token": "teacher-token"},
        {"id": "t-2", "role": "teacher", "token": "other-teacher-token"},
        {"id": "s-1", "role": "student", "token": "student-token"},
        {"id": "s-2", "role": "student", "token": "outsider-token"},
    ],
    "classes": [
        {"id": "class-a", "teacher_id": "t-1", "students": ["s-1"]},
        {"id": "class-b", "teacher_id": "t-2", "students": []},
    ],
    "stories": [
        {
            "id": 1,
            "title": "Campus recycling",
            "description": "Where does the cafeteria waste go?",
            "questions": ["Who collects it?", "How much is recycled?"],
            "interviewees": ["Facilities manager"],
            "tags": ["environment"],
            "approved": True,
            "owner_id": "s-1",
            "created_at": "2024-09-01",
        },
        {
            "id": 2,
            "title": "School lunch",
            "description": "A week of menus",
            "questions": ["What is most popular?"],
            "interviewees": [],
            "tags": ["food"],
            "approved": True,
            "owner_id": "t-2",
            "created_at": "2024-09-05",
        },
        {
            "id": 3,
            "title": "Draft idea",
            "description": None,
            "questions": [],
            "interviewees": [],
            "tags": ["environment"],
            "approved": False,
            "owner_id": "s-1",
            "created_at": "2024-09-10",
        },
        {
            "id": 4,
            "title": "Someone else's draft",
            "description": None,
            "questions": [],
            "interviewees": [],
            "tags": [],
            "approved": False,
            "owner_id": "s-2",
            "created_at": "2024-09-12",
        },
    ],
}


@pytest.fixture
def temp_db_path() -> Generator[str, None, None]:
    """Create a temporary database file."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        temp_path = f.name
    yield temp_path
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
def temp_db_engine(temp_db_path: str):
    """Create a temporary database engine with all tables."""
    engine = create_engine(f"sqlite:///{temp_db_path}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(temp_db_engine) -> sessionmaker:
    return sessionmaker(bind=temp_db_engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture(autouse=True)
def _force_test_db(monkeypatch, session_factory, temp_db_engine):
    """Point the unit of work (and `vidpod db init`) at the temporary database."""
    monkeypatch.setattr(db_module, "SessionLocal", session_factory)
    monkeypatch.setattr(db_module, "engine", temp_db_engine)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    """Create a temporary database session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def directory() -> YamlDirectory:
    return YamlDirectory.from_data(DIRECTORY_DATA)


@pytest.fixture
def access(directory) -> AccessEvaluator:
    return AccessEvaluator(directory)


@pytest.fixture
def admin() -> Actor:
    return Actor(actor_id="admin-1", role=Role.ADMIN)


@pytest.fixture
def teacher() -> Actor:
    """Teacher owning class-a."""
    return Actor(actor_id="t-1", role=Role.TEACHER)


@pytest.fixture
def other_teacher() -> Actor:
    """Teacher owning class-b."""
    return Actor(actor_id="t-2", role=Role.TEACHER)


@pytest.fixture
def student() -> Actor:
    """Student enrolled in class-a."""
    return Actor(actor_id="s-1", role=Role.STUDENT)


@pytest.fixture
def outsider() -> Actor:
    """Student enrolled in no class."""
    return Actor(actor_id="s-2", role=Role.STUDENT)

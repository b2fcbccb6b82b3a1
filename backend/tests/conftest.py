import os
import tempfile
import uuid
from pathlib import Path

import pytest

# Point the app at a throwaway SQLite file before `study_tracker` is imported.
_DB_DIR = Path(tempfile.mkdtemp(prefix="study-tracker-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'app.db'}"

from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, create_engine  # noqa: E402

from study_tracker.database import create_db_and_tables  # noqa: E402


@pytest.fixture
def session():
    """A session on a fresh in-memory database."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_db_and_tables(engine)
    with Session(engine) as s:
        yield s
    engine.dispose()


@pytest.fixture
def user_id():
    return f"user-{uuid.uuid4().hex[:12]}"


@pytest.fixture
def other_user_id():
    return f"other-{uuid.uuid4().hex[:12]}"

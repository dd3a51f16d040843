import os

# Must be set before core.config is imported anywhere.
os.environ["DATABASE_URL"] = "sqlite+pysqlite://"
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("WRITE_GUARD", "keyed_lock")

from datetime import time  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from conflicts.entries import EntryLabels, ScheduleEntry  # noqa: E402
from conflicts.intervals import DayPattern, TimeWindow  # noqa: E402
from core.database import get_db  # noqa: E402
from main import app  # noqa: E402
from models.base import Base  # noqa: E402


def _t(value: str) -> time:
    hh, mm = value.split(":")
    return time(int(hh), int(mm))


@pytest.fixture()
def make_entry():
    """Build an engine entry from short strings: make_entry("MWF", "09:00", "10:00", teacher="t1")."""

    counter = {"n": 0}

    def _make(
        days: str,
        start: str,
        end: str,
        *,
        teacher="t1",
        subject="math",
        section="7-A",
        id=None,
        new=False,
    ) -> ScheduleEntry:
        if id is None and not new:
            counter["n"] += 1
            id = f"e{counter['n']}"
        return ScheduleEntry(
            id=id,
            teacher_id=teacher,
            subject_id=subject,
            section_id=section,
            window=TimeWindow(days=DayPattern.parse(days), start=_t(start), end=_t(end)),
            labels=EntryLabels(
                teacher_name=f"Teacher {teacher}",
                subject_name=f"Subject {subject}",
                section_name=f"Section {section}",
            ),
        )

    return _make


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()

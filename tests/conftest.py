"""Shared fixtures: an in-memory SQLite database and a grave factory."""

import uuid
from datetime import datetime

import pytest

from grave_map.db.connection import Database
from grave_map.db.models import Base, Grave, GraveCategory, GraveStatus

EULOGY = (
    "Here lies a faithful companion who served without complaint through "
    "every spilled coffee and every late night deadline."
)


@pytest.fixture
def database():
    """Initialized in-memory database, dropped after the test."""
    database = Database("sqlite:///:memory:")
    database.initialize()
    yield database
    Base.metadata.drop_all(bind=database.engine)
    database.engine.dispose()


@pytest.fixture
def session(database):
    with database.get_session() as session:
        yield session


@pytest.fixture
def grave_factory():
    """Add a grave to a session with sensible defaults."""

    def make_grave(session, **overrides):
        values = dict(
            slug=f"grave-{uuid.uuid4().hex[:8]}",
            title="Old Phone",
            category=GraveCategory.TECH_GADGETS,
            eulogy_text=EULOGY,
            status=GraveStatus.APPROVED,
            creator_device_hash=None,
            map_x=None,
            map_y=None,
            created_at=datetime(2024, 5, 1, 12, 0, 0),
        )
        values.update(overrides)
        grave = Grave(**values)
        session.add(grave)
        session.flush()
        return grave

    return make_grave

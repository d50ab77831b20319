"""Tests for database connection management."""

import pytest

from grave_map.db import init_db
from grave_map.db.connection import Database, db, redact_url
from grave_map.db.models import Grave


class TestDatabase:
    def test_session_requires_initialize(self):
        with pytest.raises(RuntimeError):
            with Database("sqlite:///:memory:").get_session():
                pass

    def test_rolls_back_on_error(self, database, grave_factory):
        with pytest.raises(ValueError):
            with database.get_session() as session:
                grave_factory(session, slug="doomed-abc234")
                raise ValueError("boom")

        with database.get_session() as session:
            assert session.query(Grave).count() == 0

    def test_ping(self, database):
        assert database.ping() is True

    def test_redact_url(self):
        assert redact_url("postgresql://app:secret@db:5432/graves") == "postgresql://app:***@db:5432/graves"
        assert redact_url("sqlite:///:memory:") == "sqlite:///:memory:"


class TestInitDb:
    def test_main_initializes_global_database(self, monkeypatch):
        monkeypatch.setattr(db, "url", "sqlite:///:memory:")
        monkeypatch.setattr(db, "engine", None)
        monkeypatch.setattr(db, "SessionLocal", None)

        assert init_db.main() == 0
        assert db.ping() is True

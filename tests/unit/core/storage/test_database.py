"""Tests for AssessmentDatabase: schema creation, versioning, lifecycle."""

from __future__ import annotations

import pytest

from vitalguard.core.storage.database import SCHEMA_VERSION, AssessmentDatabase, DatabaseError


class TestInitialization:
    def test_double_initialize_is_idempotent(self):
        db = AssessmentDatabase(":memory:")
        db.initialize()
        conn = db.connection
        db.initialize()
        assert db.connection is conn
        db.close()

    def test_connection_before_init_raises(self):
        db = AssessmentDatabase(":memory:")
        with pytest.raises(DatabaseError, match="not initialized"):
            _ = db.connection

    def test_context_manager_closes(self):
        with AssessmentDatabase(":memory:") as db:
            assert db.connection is not None
        with pytest.raises(DatabaseError):
            _ = db.connection

    def test_file_database_creates_parent_dirs(self, tmp_path):
        path = tmp_path / "nested" / "vitals.db"
        with AssessmentDatabase(str(path)) as db:
            assert db.get_schema_version() == SCHEMA_VERSION
        assert path.exists()


class TestSchema:
    def test_schema_version_recorded(self):
        with AssessmentDatabase(":memory:") as db:
            assert db.get_schema_version() == SCHEMA_VERSION

    def test_tables_created(self):
        with AssessmentDatabase(":memory:") as db:
            rows = db.connection.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
            tables = {row[0] for row in rows}
        assert {"assessments", "schema_version", "audit_log"} <= tables

    def test_reopening_file_does_not_duplicate_version(self, tmp_path):
        path = str(tmp_path / "vitals.db")
        with AssessmentDatabase(path):
            pass
        with AssessmentDatabase(path) as db:
            count = db.connection.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
        assert count == 1

"""
Tests for database.py - SQLite models and saved graph snapshots.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from careergraph.database import Blob, SavedGraph, init_database, get_session, save_graph, load_graph


class TestDatabaseInit:
    """Test database initialization."""

    def test_init_creates_database_file(self, tmp_path):
        """Test that init_database creates the database file."""
        db_path = tmp_path / "test.db"
        assert not db_path.exists()

        init_database(db_path)

        assert db_path.exists()

    def test_init_creates_tables(self, tmp_path):
        """Test that init_database creates both tables."""
        db_path = tmp_path / "test.db"
        init_database(db_path)

        session = get_session(db_path)
        assert session.query(Blob).count() == 0
        assert session.query(SavedGraph).count() == 0
        session.close()

    def test_init_creates_parent_directories(self, tmp_path):
        """Test that init_database creates parent directories if missing."""
        db_path = tmp_path / "nested" / "dir" / "test.db"
        assert not db_path.parent.exists()

        init_database(db_path)

        assert db_path.exists()

    def test_init_is_idempotent(self, tmp_path):
        db_path = tmp_path / "test.db"
        init_database(db_path)
        init_database(db_path)


class TestBlobModel:
    @pytest.fixture
    def db_session(self, tmp_path):
        """Create a temporary database and return a session."""
        db_path = tmp_path / "test.db"
        init_database(db_path)
        session = get_session(db_path)
        yield session
        session.close()

    def test_blob_timestamps(self, db_session):
        db_session.add(Blob(name="persons", data="{}"))
        db_session.commit()

        row = db_session.get(Blob, "persons")
        assert row.updated_at is not None

    def test_duplicate_name_fails(self, db_session):
        db_session.add(Blob(name="persons", data="{}"))
        db_session.commit()

        db_session.add(Blob(name="persons", data="{}"))
        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_data_required(self, db_session):
        db_session.add(Blob(name="persons"))
        with pytest.raises(IntegrityError):
            db_session.commit()


class TestSavedGraphs:
    def test_save_and_load(self, tmp_path):
        db_path = tmp_path / "graphs.db"
        persons = {"jane doe": {"name": "Jane Doe", "companies": []}}
        companies = {"acme": {"name": "Acme", "notable_people": []}}

        graph_id = save_graph(db_path, persons, companies, name="Team map")
        loaded = load_graph(db_path, graph_id)

        assert loaded == {"persons": persons, "companies": companies, "name": "Team map"}

    def test_default_name(self, tmp_path):
        db_path = tmp_path / "graphs.db"
        graph_id = save_graph(db_path, {}, {})
        assert load_graph(db_path, graph_id)["name"] == f"Graph {graph_id}"

    def test_ids_are_positive_and_distinct(self, tmp_path):
        db_path = tmp_path / "graphs.db"
        ids = {save_graph(db_path, {}, {}) for _ in range(5)}
        assert len(ids) == 5
        assert all(0 < i < 2**31 for i in ids)

    def test_unknown_id(self, tmp_path):
        assert load_graph(tmp_path / "graphs.db", 12345) is None

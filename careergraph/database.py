"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for blob storage and saved graph snapshots.
"""

import json
import secrets
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy import create_engine, Column, Integer, String, Text, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class Blob(Base):
    """One named serialized map (persons, companies or settings)."""

    __tablename__ = "blobs"

    name = Column(String, primary_key=True)
    data = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


class SavedGraph(Base):
    """Shared snapshot of the persons and companies blobs."""

    __tablename__ = "saved_graphs"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
    persons = Column(Text, nullable=False)
    companies = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


def _engine(db_path: Path):
    return create_engine(f"sqlite:///{db_path}")


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(_engine(db_path))


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    Session = sessionmaker(bind=_engine(db_path))
    return Session()


def _new_graph_id(session) -> int:
    # Positive 31-bit id, hard to guess when shared as a link
    while True:
        graph_id = secrets.randbelow(2**31 - 2) + 1
        if session.get(SavedGraph, graph_id) is None:
            return graph_id


def save_graph(db_path: Path, persons: Any, companies: Any, name: Optional[str] = None) -> int:
    """
    Store an exported graph so it can be restored or shared later.

    Args:
        db_path: Path to SQLite database file
        persons: Raw persons map as returned by EntityStore.export_blobs()
        companies: Raw companies map as returned by EntityStore.export_blobs()
        name: Optional label (default: "Graph <id>")

    Returns:
        The new snapshot id
    """
    init_database(db_path)
    session = get_session(db_path)
    try:
        graph_id = _new_graph_id(session)
        session.add(SavedGraph(
            id=graph_id,
            name=name or f"Graph {graph_id}",
            persons=json.dumps(persons, ensure_ascii=False),
            companies=json.dumps(companies, ensure_ascii=False),
        ))
        session.commit()
        return graph_id
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def load_graph(db_path: Path, graph_id: int) -> Optional[Dict[str, Any]]:
    """
    Fetch a saved snapshot.

    Returns:
        {"persons", "companies", "name"} or None if the id is unknown
    """
    init_database(db_path)
    session = get_session(db_path)
    try:
        row = session.get(SavedGraph, graph_id)
        if row is None:
            return None
        return {
            "persons": json.loads(row.persons),
            "companies": json.loads(row.companies),
            "name": row.name,
        }
    finally:
        session.close()

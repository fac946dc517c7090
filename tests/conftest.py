"""Shared pytest fixtures for Conflux tests.

Provides temporary file-backed and in-memory databases, a seeded
workspace roster, and helpers for building extracted entities.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from conflux.database import Database
from conflux.extraction.schemas import ExtractedEntity


@pytest.fixture
def tmp_db(tmp_path: Path) -> Database:
    """Create a temporary SQLite database (file-based for WAL support)."""
    db_path = tmp_path / "test.db"
    db = Database(db_path)
    yield db
    db.close()


@pytest.fixture
def db() -> Database:
    """Fresh in-memory database with the full schema."""
    database = Database(":memory:")
    yield database
    database.close()


@pytest.fixture
def workspace_id(db: Database) -> str:
    return db.create_workspace("Test Workspace")


@pytest.fixture
def seeded(db: Database, workspace_id: str) -> dict[str, str]:
    """Workspace with two people and one organization.

    Returns a name -> id map for the seeded records.
    """
    return {
        "John Smith": db.create_person(workspace_id, "John Smith", title="CTO"),
        "Mary Jones": db.create_person(workspace_id, "Mary Jones"),
        "Acme Corp": db.create_organization(workspace_id, "Acme Corp"),
    }


def make_entity(
    name: str,
    type: str = "person",
    confidence: float = 0.9,
    context: str = "mentioned in notes",
    **extra: object,
) -> ExtractedEntity:
    """Helper to build an ExtractedEntity with defaults."""
    return ExtractedEntity(type=type, name=name, context=context, confidence=confidence, **extra)

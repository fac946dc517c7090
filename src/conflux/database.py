"""SQLite database layer for Conflux.

Manages schema initialization, WAL mode pragmas, and workspace-scoped
CRUD for people, organizations, affiliations, interactions, and
interaction participants.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path

from conflux.models import (
    Affiliation,
    Interaction,
    InteractionSource,
    InteractionType,
    Organization,
    Person,
)

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS workspaces (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    created_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
);

CREATE TABLE IF NOT EXISTS people (
    id TEXT PRIMARY KEY,
    workspace_id TEXT NOT NULL,
    full_name TEXT NOT NULL,
    primary_email TEXT,
    phone TEXT,
    title TEXT,
    headline TEXT,
    notes TEXT,
    created_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    updated_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    FOREIGN KEY (workspace_id) REFERENCES workspaces(id)
);

CREATE INDEX IF NOT EXISTS idx_people_workspace ON people(workspace_id);

CREATE TABLE IF NOT EXISTS organizations (
    id TEXT PRIMARY KEY,
    workspace_id TEXT NOT NULL,
    name TEXT NOT NULL,
    domain TEXT,
    industry TEXT,
    notes TEXT,
    created_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    updated_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    FOREIGN KEY (workspace_id) REFERENCES workspaces(id)
);

CREATE INDEX IF NOT EXISTS idx_orgs_workspace ON organizations(workspace_id);

-- No UNIQUE(person_id, organization_id): the commit step checks before insert
CREATE TABLE IF NOT EXISTS affiliations (
    id TEXT PRIMARY KEY,
    workspace_id TEXT NOT NULL,
    person_id TEXT NOT NULL,
    organization_id TEXT NOT NULL,
    role_title TEXT,
    start_date TEXT,
    end_date TEXT,
    is_primary INTEGER NOT NULL DEFAULT 0,
    created_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    FOREIGN KEY (workspace_id) REFERENCES workspaces(id),
    FOREIGN KEY (person_id) REFERENCES people(id),
    FOREIGN KEY (organization_id) REFERENCES organizations(id)
);

CREATE INDEX IF NOT EXISTS idx_affiliations_pair ON affiliations(person_id, organization_id);

CREATE TABLE IF NOT EXISTS interactions (
    id TEXT PRIMARY KEY,
    workspace_id TEXT NOT NULL,
    occurred_at TEXT NOT NULL,
    interaction_type TEXT NOT NULL DEFAULT 'note'
        CHECK(interaction_type IN ('meeting', 'call', 'email', 'conference', 'note')),
    title TEXT,
    summary TEXT,
    raw_text TEXT,
    created_by TEXT NOT NULL,
    source TEXT NOT NULL DEFAULT 'manual'
        CHECK(source IN ('manual', 'import', 'integration')),
    created_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    updated_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    FOREIGN KEY (workspace_id) REFERENCES workspaces(id)
);

CREATE TABLE IF NOT EXISTS interaction_participants (
    interaction_id TEXT NOT NULL,
    person_id TEXT NOT NULL,
    PRIMARY KEY (interaction_id, person_id),
    FOREIGN KEY (interaction_id) REFERENCES interactions(id),
    FOREIGN KEY (person_id) REFERENCES people(id)
);

CREATE TRIGGER IF NOT EXISTS update_people_timestamp
    AFTER UPDATE ON people
    FOR EACH ROW
    BEGIN
        UPDATE people SET updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now')
        WHERE id = NEW.id;
    END;

CREATE TRIGGER IF NOT EXISTS update_organizations_timestamp
    AFTER UPDATE ON organizations
    FOR EACH ROW
    BEGIN
        UPDATE organizations SET updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now')
        WHERE id = NEW.id;
    END;
"""


def _new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> str:
    """Current UTC time as ISO 8601 with milliseconds."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


class Database:
    """SQLite database wrapper for Conflux.

    Every write runs in its own transaction; there is no multi-record
    atomicity across calls.

    Usage:
        with Database("data/conflux.db") as db:
            ws = db.create_workspace("Personal")
            pid = db.create_person(ws, "Jane Doe", title="CTO")
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = str(db_path)
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self.conn = sqlite3.connect(
            self.db_path,
            autocommit=sqlite3.LEGACY_TRANSACTION_CONTROL,
        )
        self.conn.row_factory = sqlite3.Row
        self._setup_pragmas()
        self._setup_schema()

    def _setup_pragmas(self) -> None:
        """Configure SQLite pragmas for performance and reliability."""
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA synchronous=NORMAL")
        self.conn.execute("PRAGMA foreign_keys=ON")
        self.conn.execute("PRAGMA temp_store=MEMORY")

        result = self.conn.execute("PRAGMA journal_mode").fetchone()[0]
        if result != "wal" and self.db_path != ":memory:":
            logger.warning("WAL mode not enabled, got: %s", result)

    def _setup_schema(self) -> None:
        """Create tables, indexes, and triggers if they don't exist."""
        self.conn.executescript(SCHEMA_SQL)
        self.conn.execute("PRAGMA user_version = 1")

    # ---- workspaces ----

    def create_workspace(self, name: str) -> str:
        """Insert a workspace and return its id."""
        workspace_id = _new_id()
        with self.conn:
            self.conn.execute(
                "INSERT INTO workspaces(id, name) VALUES (?, ?)",
                (workspace_id, name),
            )
        return workspace_id

    def get_workspace(self, workspace_id: str) -> sqlite3.Row | None:
        return self.conn.execute(
            "SELECT id, name, created_at FROM workspaces WHERE id = ?",
            (workspace_id,),
        ).fetchone()

    def list_workspaces(self) -> list[sqlite3.Row]:
        return self.conn.execute(
            "SELECT id, name, created_at FROM workspaces ORDER BY name"
        ).fetchall()

    # ---- people ----

    def create_person(
        self,
        workspace_id: str,
        full_name: str,
        title: str | None = None,
        notes: str | None = None,
        primary_email: str | None = None,
        phone: str | None = None,
    ) -> str:
        """Insert a person and return the new id."""
        person_id = _new_id()
        with self.conn:
            self.conn.execute(
                """INSERT INTO people(id, workspace_id, full_name, title, notes,
                                      primary_email, phone)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (person_id, workspace_id, full_name, title, notes, primary_email, phone),
            )
        return person_id

    def get_person(self, person_id: str) -> Person | None:
        row = self.conn.execute("SELECT * FROM people WHERE id = ?", (person_id,)).fetchone()
        return Person(**dict(row)) if row else None

    def list_people(self, workspace_id: str) -> list[Person]:
        """All people in a workspace, ordered by full name."""
        rows = self.conn.execute(
            "SELECT * FROM people WHERE workspace_id = ? ORDER BY full_name",
            (workspace_id,),
        ).fetchall()
        return [Person(**dict(row)) for row in rows]

    def update_person_title(self, person_id: str, title: str | None) -> None:
        with self.conn:
            self.conn.execute(
                "UPDATE people SET title = ? WHERE id = ?",
                (title, person_id),
            )

    # ---- organizations ----

    def create_organization(
        self,
        workspace_id: str,
        name: str,
        notes: str | None = None,
        domain: str | None = None,
        industry: str | None = None,
    ) -> str:
        """Insert an organization and return the new id."""
        org_id = _new_id()
        with self.conn:
            self.conn.execute(
                """INSERT INTO organizations(id, workspace_id, name, notes, domain, industry)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (org_id, workspace_id, name, notes, domain, industry),
            )
        return org_id

    def get_organization(self, org_id: str) -> Organization | None:
        row = self.conn.execute(
            "SELECT * FROM organizations WHERE id = ?", (org_id,)
        ).fetchone()
        return Organization(**dict(row)) if row else None

    def list_organizations(self, workspace_id: str) -> list[Organization]:
        """All organizations in a workspace, ordered by name."""
        rows = self.conn.execute(
            "SELECT * FROM organizations WHERE workspace_id = ? ORDER BY name",
            (workspace_id,),
        ).fetchall()
        return [Organization(**dict(row)) for row in rows]

    # ---- affiliations ----

    def find_affiliation(self, person_id: str, organization_id: str) -> str | None:
        """Return the id of an existing affiliation for the pair, if any."""
        row = self.conn.execute(
            """SELECT id FROM affiliations
               WHERE person_id = ? AND organization_id = ?
               LIMIT 1""",
            (person_id, organization_id),
        ).fetchone()
        return row["id"] if row else None

    def create_affiliation(
        self,
        workspace_id: str,
        person_id: str,
        organization_id: str,
        role_title: str | None = None,
        is_primary: bool = False,
    ) -> str:
        """Insert an affiliation unconditionally and return its id.

        Callers that must not duplicate a pair check find_affiliation first.
        """
        affiliation_id = _new_id()
        with self.conn:
            self.conn.execute(
                """INSERT INTO affiliations(id, workspace_id, person_id, organization_id,
                                            role_title, is_primary)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (affiliation_id, workspace_id, person_id, organization_id, role_title, int(is_primary)),
            )
        return affiliation_id

    def list_affiliations(self, person_id: str) -> list[Affiliation]:
        rows = self.conn.execute(
            "SELECT * FROM affiliations WHERE person_id = ? ORDER BY created_at",
            (person_id,),
        ).fetchall()
        result: list[Affiliation] = []
        for row in rows:
            data = dict(row)
            data["is_primary"] = bool(data["is_primary"])
            result.append(Affiliation(**data))
        return result

    # ---- interactions ----

    def create_interaction(
        self,
        workspace_id: str,
        created_by: str,
        title: str | None = None,
        summary: str | None = None,
        raw_text: str | None = None,
        occurred_at: str | None = None,
        interaction_type: InteractionType = InteractionType.NOTE,
        source: InteractionSource = InteractionSource.MANUAL,
    ) -> str:
        """Insert an interaction and return its id."""
        interaction_id = _new_id()
        with self.conn:
            self.conn.execute(
                """INSERT INTO interactions(id, workspace_id, occurred_at, interaction_type,
                                            title, summary, raw_text, created_by, source)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    interaction_id,
                    workspace_id,
                    occurred_at or utc_now(),
                    interaction_type.value,
                    title,
                    summary,
                    raw_text,
                    created_by,
                    source.value,
                ),
            )
        return interaction_id

    def get_interaction(self, interaction_id: str) -> Interaction | None:
        row = self.conn.execute(
            "SELECT * FROM interactions WHERE id = ?", (interaction_id,)
        ).fetchone()
        if row is None:
            return None
        data = dict(row)
        data["interaction_type"] = InteractionType(data["interaction_type"])
        data["source"] = InteractionSource(data["source"])
        return Interaction(**data)

    def add_participant(self, interaction_id: str, person_id: str) -> None:
        with self.conn:
            self.conn.execute(
                """INSERT OR IGNORE INTO interaction_participants(interaction_id, person_id)
                   VALUES (?, ?)""",
                (interaction_id, person_id),
            )

    def list_participants(self, interaction_id: str) -> list[Person]:
        rows = self.conn.execute(
            """SELECT p.* FROM people p
               JOIN interaction_participants ip ON ip.person_id = p.id
               WHERE ip.interaction_id = ?
               ORDER BY p.full_name""",
            (interaction_id,),
        ).fetchall()
        return [Person(**dict(row)) for row in rows]

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> None:
        self.close()

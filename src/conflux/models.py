"""Data models and enums for the Conflux relationship manager."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from conflux.config import CaptureConfig


class InteractionType(str, Enum):
    """Kind of logged interaction."""

    MEETING = "meeting"
    CALL = "call"
    EMAIL = "email"
    CONFERENCE = "conference"
    NOTE = "note"


class InteractionSource(str, Enum):
    """Where an interaction record came from."""

    MANUAL = "manual"
    IMPORT = "import"
    INTEGRATION = "integration"


@dataclass(slots=True)
class Person:
    """A person in a workspace roster."""

    id: str
    workspace_id: str
    full_name: str
    primary_email: str | None = None
    phone: str | None = None
    title: str | None = None
    headline: str | None = None
    notes: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(slots=True)
class Organization:
    """An organization in a workspace roster."""

    id: str
    workspace_id: str
    name: str
    domain: str | None = None
    industry: str | None = None
    notes: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(slots=True)
class Affiliation:
    """A person-to-organization relationship with an optional role title."""

    id: str
    workspace_id: str
    person_id: str
    organization_id: str
    role_title: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    is_primary: bool = False
    created_at: str | None = None


@dataclass(slots=True)
class Interaction:
    """A logged meeting, call, note, etc."""

    id: str
    workspace_id: str
    occurred_at: str
    interaction_type: InteractionType = InteractionType.NOTE
    title: str | None = None
    summary: str | None = None
    raw_text: str | None = None
    created_by: str = "local"
    source: InteractionSource = InteractionSource.MANUAL
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class Roster:
    """Read-only snapshot of a workspace's people and organizations.

    Fetched fresh for each capture session and passed explicitly into
    reconciliation.
    """

    workspace_id: str
    people: list[Person] = field(default_factory=list)
    organizations: list[Organization] = field(default_factory=list)


@dataclass
class AppState:
    """Shared state across CLI commands. Initialized in app callback."""

    db_path: str
    verbose: bool = False
    config: CaptureConfig = field(default_factory=CaptureConfig)

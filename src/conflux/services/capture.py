"""Smart capture workflow: extract -> reconcile -> review -> commit.

Async facade over the Mistral extractor and the SQLite database. All
SQLite work runs in asyncio.to_thread() with a Database opened and
closed inside the worker function. Nothing is written before commit(),
so a session can be abandoned at any point during review.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from conflux.commit.applier import CommitApplier, CommitResult
from conflux.database import Database
from conflux.matching.reconciler import reconcile
from conflux.models import Roster
from conflux.review.decisions import DecisionEditor, build_decisions

if TYPE_CHECKING:
    from conflux.extraction.client import MistralClient
    from conflux.extraction.schemas import ExtractionResult
    from conflux.matching.models import MatchResult

logger = logging.getLogger(__name__)


@dataclass
class CaptureSession:
    """State of one capture between extraction and commit."""

    workspace_id: str
    transcript: str
    summary: str
    matches: list[MatchResult]
    editor: DecisionEditor


class CaptureService:
    """Async facade for the smart capture flow.

    Usage::

        svc = CaptureService("data/conflux.db", MistralClient(api_key))
        session = await svc.capture(text, workspace_id)
        session.editor.update(0, action="create")
        result = await svc.commit(session)
    """

    def __init__(self, db_path: str, extractor: MistralClient, created_by: str = "local") -> None:
        self._db_path = db_path
        self._extractor = extractor
        self._created_by = created_by

    async def load_roster(self, workspace_id: str) -> Roster:
        """Fetch a fresh snapshot of the workspace's people and organizations."""

        def _query() -> Roster:
            with Database(self._db_path) as db:
                return Roster(
                    workspace_id=workspace_id,
                    people=db.list_people(workspace_id),
                    organizations=db.list_organizations(workspace_id),
                )

        roster = await asyncio.to_thread(_query)
        logger.debug(
            "Roster for %s: %d people, %d organizations",
            workspace_id,
            len(roster.people),
            len(roster.organizations),
        )
        return roster

    async def extract(self, text: str, roster: Roster) -> ExtractionResult:
        """Run the extraction collaborator with roster hints."""
        return await self._extractor.extract_entities(
            text,
            known_people=[(p.full_name, p.title) for p in roster.people],
            known_orgs=[o.name for o in roster.organizations],
        )

    @staticmethod
    def review(text: str, extraction: ExtractionResult, roster: Roster) -> CaptureSession:
        """Reconcile extracted entities and build default decisions."""
        matches = reconcile(extraction.entities, roster.people, roster.organizations)
        return CaptureSession(
            workspace_id=roster.workspace_id,
            transcript=text,
            summary=extraction.summary,
            matches=matches,
            editor=DecisionEditor(build_decisions(matches)),
        )

    async def capture(self, text: str, workspace_id: str) -> CaptureSession:
        """Load the roster, extract, and reconcile in one step."""
        roster = await self.load_roster(workspace_id)
        extraction = await self.extract(text, roster)
        return self.review(text, extraction, roster)

    async def commit(self, session: CaptureSession, occurred_at: str | None = None) -> CommitResult:
        """Apply the session's current decisions."""
        decisions = session.editor.decisions

        def _apply() -> CommitResult:
            with Database(self._db_path) as db:
                applier = CommitApplier(db, created_by=self._created_by)
                return applier.apply(
                    decisions,
                    session.workspace_id,
                    transcript=session.transcript,
                    summary=session.summary,
                    occurred_at=occurred_at,
                )

        return await asyncio.to_thread(_apply)

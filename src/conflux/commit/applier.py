"""Apply reviewed entity decisions as database writes.

Two sequential passes, never reordered:

  Pass 1: create organizations marked "create", remembering
          lower-cased extracted name -> org id.
  Pass 2: link or create people, optionally update titles, and add
          affiliations after checking the (person, organization) pair
          does not already have one.

Then one interaction is recorded and every participant linked to it.

Each record write commits on its own. A failed write is logged and
collected in CommitResult.failures; the remaining decisions still run.
Re-running a commit may duplicate people and organizations but never
affiliations.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from conflux.models import InteractionSource, InteractionType
from conflux.review.decisions import DecisionAction, EntityDecision

if TYPE_CHECKING:
    from conflux.database import Database

logger = logging.getLogger(__name__)

DEFAULT_INTERACTION_TITLE = "Voice note"
TITLE_MAX_CHARS = 100


def auto_created_note(context: str) -> str:
    return f"Auto-created from interaction. Context: {context}"


@dataclass
class CommitFailure:
    """One failed write, tied back to the decision that caused it."""

    index: int
    entity_name: str
    # create_organization | link_person | create_person | update_title
    # | create_affiliation | add_participant
    step: str
    error: str


@dataclass
class CommitResult:
    """Outcome of applying a decision set."""

    interaction_id: str
    participant_ids: list[str] = field(default_factory=list)
    created_organization_ids: list[str] = field(default_factory=list)
    created_person_ids: list[str] = field(default_factory=list)
    created_affiliation_ids: list[str] = field(default_factory=list)
    failures: list[CommitFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class CommitApplier:
    """Writes accepted decisions through a Database.

    Usage:
        applier = CommitApplier(db)
        result = applier.apply(editor.decisions, workspace_id,
                               transcript=text, summary=summary)
        for failure in result.failures:
            print(failure.entity_name, failure.step, failure.error)
    """

    def __init__(self, db: Database, created_by: str = "local") -> None:
        self._db = db
        self._created_by = created_by

    def apply(
        self,
        decisions: tuple[EntityDecision, ...] | list[EntityDecision],
        workspace_id: str,
        transcript: str = "",
        summary: str = "",
        occurred_at: str | None = None,
    ) -> CommitResult:
        """Apply decisions in dependency order and record the interaction.

        Args:
            decisions: Reviewed decisions, consumed once.
            workspace_id: Tenant scope for every write.
            transcript: Raw text stored on the interaction.
            summary: Extraction summary; its first 100 chars become the title.
            occurred_at: ISO timestamp; defaults to now (UTC).

        Returns:
            CommitResult with the interaction id, participants, created ids,
            and per-decision failures.

        Raises:
            sqlite3.Error: If the interaction itself cannot be recorded.
        """
        failures: list[CommitFailure] = []
        created_orgs: list[str] = []
        created_people: list[str] = []
        created_affiliations: list[str] = []

        org_ids = self._apply_organizations(decisions, workspace_id, created_orgs, failures)

        # person id -> (decision index, entity name), in first-seen order
        participants: dict[str, tuple[int, str]] = {}
        for index, decision in enumerate(decisions):
            if decision.action is DecisionAction.SKIP:
                continue
            if decision.match_result.type != "person":
                continue

            person_id = self._resolve_person(
                index, decision, workspace_id, created_people, failures
            )
            if person_id is None:
                continue
            participants.setdefault(person_id, (index, decision.display_name))

            if decision.create_affiliation and decision.match_result.organization_name:
                self._ensure_affiliation(
                    index, decision, person_id, workspace_id, org_ids, created_affiliations, failures
                )

        interaction_id = self._db.create_interaction(
            workspace_id=workspace_id,
            created_by=self._created_by,
            title=summary[:TITLE_MAX_CHARS] or DEFAULT_INTERACTION_TITLE,
            summary=summary,
            raw_text=transcript,
            occurred_at=occurred_at,
            interaction_type=InteractionType.NOTE,
            source=InteractionSource.MANUAL,
        )
        participant_ids: list[str] = []
        for person_id, (index, name) in participants.items():
            try:
                self._db.add_participant(interaction_id, person_id)
            except sqlite3.Error as e:
                logger.warning("Failed to link %s to interaction %s: %s", person_id, interaction_id, e)
                failures.append(CommitFailure(index, name, "add_participant", str(e)))
                continue
            participant_ids.append(person_id)

        logger.info(
            "Committed interaction %s: %d participants, %d new people, "
            "%d new organizations, %d new affiliations, %d failures",
            interaction_id,
            len(participant_ids),
            len(created_people),
            len(created_orgs),
            len(created_affiliations),
            len(failures),
        )

        return CommitResult(
            interaction_id=interaction_id,
            participant_ids=participant_ids,
            created_organization_ids=created_orgs,
            created_person_ids=created_people,
            created_affiliation_ids=created_affiliations,
            failures=failures,
        )

    def _apply_organizations(
        self,
        decisions: tuple[EntityDecision, ...] | list[EntityDecision],
        workspace_id: str,
        created: list[str],
        failures: list[CommitFailure],
    ) -> dict[str, str]:
        """Pass 1. Returns lower-cased extracted org name -> org id.

        Linked organizations are mapped too, so a person naming an org the
        reviewer linked by hand still gets an affiliation.
        """
        org_ids: dict[str, str] = {}

        for index, decision in enumerate(decisions):
            if decision.action is DecisionAction.SKIP:
                continue
            if decision.match_result.type != "organization":
                continue

            key = decision.match_result.extracted_name.lower()

            if decision.action is DecisionAction.LINK:
                if decision.linked_id:
                    org_ids.setdefault(key, decision.linked_id)
                continue

            try:
                org_id = self._db.create_organization(
                    workspace_id,
                    decision.display_name,
                    notes=auto_created_note(decision.match_result.context),
                )
            except sqlite3.Error as e:
                logger.warning("Failed to create organization %r: %s", decision.display_name, e)
                failures.append(
                    CommitFailure(index, decision.display_name, "create_organization", str(e))
                )
                continue

            created.append(org_id)
            org_ids[key] = org_id

        return org_ids

    def _resolve_person(
        self,
        index: int,
        decision: EntityDecision,
        workspace_id: str,
        created: list[str],
        failures: list[CommitFailure],
    ) -> str | None:
        """Link or create the person for a decision; None when nothing usable."""
        result = decision.match_result

        if decision.action is DecisionAction.LINK:
            if not decision.linked_id:
                logger.debug("Decision %d links %r without a target; skipped", index, result.extracted_name)
                return None

            person_id = decision.linked_id
            try:
                person = self._db.get_person(person_id)
            except sqlite3.Error as e:
                logger.warning("Failed to look up linked person %s: %s", person_id, e)
                failures.append(CommitFailure(index, result.extracted_name, "link_person", str(e)))
                return None
            if person is None or person.workspace_id != workspace_id:
                logger.warning("Decision %d links to unknown person %s", index, person_id)
                failures.append(
                    CommitFailure(
                        index,
                        result.extracted_name,
                        "link_person",
                        f"person {person_id} not found in workspace {workspace_id}",
                    )
                )
                return None

            if decision.update_title and result.title:
                try:
                    self._db.update_person_title(person_id, result.title)
                except sqlite3.Error as e:
                    logger.warning("Failed to update title for %s: %s", person_id, e)
                    failures.append(
                        CommitFailure(index, result.extracted_name, "update_title", str(e))
                    )
            return person_id

        try:
            person_id = self._db.create_person(
                workspace_id,
                decision.display_name,
                title=result.title or None,
                notes=auto_created_note(result.context),
            )
        except sqlite3.Error as e:
            logger.warning("Failed to create person %r: %s", decision.display_name, e)
            failures.append(CommitFailure(index, decision.display_name, "create_person", str(e)))
            return None

        created.append(person_id)
        return person_id

    def _ensure_affiliation(
        self,
        index: int,
        decision: EntityDecision,
        person_id: str,
        workspace_id: str,
        org_ids: dict[str, str],
        created: list[str],
        failures: list[CommitFailure],
    ) -> None:
        """Insert a (person, organization) affiliation unless one exists."""
        result = decision.match_result
        org_id = result.organization_id or org_ids.get(result.organization_name.lower())
        if not org_id:
            logger.debug(
                "No organization id for %r; affiliation for %s skipped",
                result.organization_name,
                person_id,
            )
            return

        try:
            if self._db.find_affiliation(person_id, org_id) is not None:
                return
            affiliation_id = self._db.create_affiliation(
                workspace_id,
                person_id,
                org_id,
                role_title=result.title or None,
                is_primary=True,
            )
        except sqlite3.Error as e:
            logger.warning("Failed to create affiliation %s -> %s: %s", person_id, org_id, e)
            failures.append(
                CommitFailure(index, result.extracted_name, "create_affiliation", str(e))
            )
            return

        created.append(affiliation_id)

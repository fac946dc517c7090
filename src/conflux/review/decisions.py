"""Decision store and editor for the review step.

Each MatchResult becomes one EntityDecision. Decisions are frozen; the
editor swaps in updated copies per index so earlier snapshots stay
intact for undo.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum

from conflux.matching.models import MatchResult, SuggestedAction, VerdictType

logger = logging.getLogger(__name__)


class DecisionAction(str, Enum):
    """What the commit step does with one mention."""

    LINK = "link"
    CREATE = "create"
    SKIP = "skip"


@dataclass(frozen=True, slots=True)
class EntityDecision:
    """Reviewer-controlled action for one reconciled mention."""

    match_result: MatchResult
    action: DecisionAction
    linked_id: str | None = None
    new_name: str | None = None
    update_title: bool = False
    create_affiliation: bool = False

    @classmethod
    def from_match(cls, result: MatchResult) -> EntityDecision:
        """Build the default decision for a match result.

        A "review" suggestion defaults to skip until a human acts.
        """
        if result.suggested_action is SuggestedAction.LINK:
            action = DecisionAction.LINK
        elif result.suggested_action is SuggestedAction.CREATE:
            action = DecisionAction.CREATE
        else:
            action = DecisionAction.SKIP

        return cls(
            match_result=result,
            action=action,
            linked_id=result.match.existing_id,
            new_name=result.extracted_name,
            update_title=result.match.type is not VerdictType.NEW and bool(result.title),
            create_affiliation=bool(result.organization_name),
        )

    @property
    def display_name(self) -> str:
        """Name to use when creating a record: override, else extracted."""
        return self.new_name or self.match_result.extracted_name


_EDITABLE_FIELDS = {"action", "linked_id", "new_name", "update_title", "create_affiliation"}


def build_decisions(results: list[MatchResult]) -> tuple[EntityDecision, ...]:
    """One default decision per match result, in the same order."""
    return tuple(EntityDecision.from_match(r) for r in results)


class DecisionEditor:
    """Holds the current decision list and applies per-index edits.

    Usage:
        editor = DecisionEditor(build_decisions(results))
        editor.update(0, action="create", new_name="Jane Doe")
        editor.undo()
        commit(editor.decisions)
    """

    def __init__(self, decisions: tuple[EntityDecision, ...] | list[EntityDecision]) -> None:
        self._decisions: tuple[EntityDecision, ...] = tuple(decisions)
        self._history: list[tuple[EntityDecision, ...]] = []

    @property
    def decisions(self) -> tuple[EntityDecision, ...]:
        return self._decisions

    def __len__(self) -> int:
        return len(self._decisions)

    def __getitem__(self, index: int) -> EntityDecision:
        return self._decisions[index]

    def update(self, index: int, **changes: object) -> EntityDecision:
        """Apply a partial update to the decision at *index*.

        All other decisions are carried over as the same objects.

        Raises:
            IndexError: If index is out of range.
            ValueError: If a field is not editable or the action is unknown.
        """
        if not 0 <= index < len(self._decisions):
            raise IndexError(f"No decision at index {index}")

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")

        if "action" in changes:
            changes["action"] = DecisionAction(changes["action"])

        updated = dataclasses.replace(self._decisions[index], **changes)
        self._history.append(self._decisions)
        self._decisions = self._decisions[:index] + (updated,) + self._decisions[index + 1 :]

        logger.debug("Decision %d updated: %s", index, changes)
        return updated

    def undo(self) -> bool:
        """Restore the list as it was before the last update."""
        if not self._history:
            return False
        self._decisions = self._history.pop()
        return True

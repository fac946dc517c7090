"""Reconcile extracted mentions against a workspace roster.

For every person/organization mention (topics are dropped), find the
best roster candidate and classify it:

    score >= 0.9         -> exact,   link
    0.6 <= score < 0.9   -> partial, review
    no match / < 0.6     -> new,     create if confidence >= 0.7 else review

MATCH_FLOOR in the matcher is 0.5, so scores in [0.5, 0.6) never arrive
here as matches worth keeping and land in the "new" branch.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from conflux.matching.matcher import CandidateRecord, ScoredCandidate, find_best_match
from conflux.matching.models import MatchResult, MatchVerdict, SuggestedAction, VerdictType

if TYPE_CHECKING:
    from conflux.extraction.schemas import ExtractedEntity
    from conflux.models import Organization, Person

logger = logging.getLogger(__name__)

EXACT_THRESHOLD = 0.9
PARTIAL_THRESHOLD = 0.6
CREATE_CONFIDENCE = 0.7


def classify_match(
    best: ScoredCandidate | None, confidence: float
) -> tuple[MatchVerdict, SuggestedAction]:
    """Turn a best candidate (or None) into a verdict and suggested action."""
    if best is not None and best.score >= EXACT_THRESHOLD:
        verdict = MatchVerdict(
            type=VerdictType.EXACT,
            existing_id=best.id,
            existing_name=best.name,
            score=best.score,
        )
        return verdict, SuggestedAction.LINK

    if best is not None and best.score >= PARTIAL_THRESHOLD:
        verdict = MatchVerdict(
            type=VerdictType.PARTIAL,
            existing_id=best.id,
            existing_name=best.name,
            score=best.score,
        )
        return verdict, SuggestedAction.REVIEW

    action = SuggestedAction.CREATE if confidence >= CREATE_CONFIDENCE else SuggestedAction.REVIEW
    return MatchVerdict(type=VerdictType.NEW, score=0.0), action


def reconcile(
    entities: list[ExtractedEntity],
    people: list[Person],
    orgs: list[Organization],
) -> list[MatchResult]:
    """Match each non-topic mention against the roster.

    Output order mirrors input order minus topics; review screens index
    decisions by this position.

    Args:
        entities: Mentions from the extraction collaborator.
        people: Existing people in the workspace.
        orgs: Existing organizations in the workspace.

    Returns:
        One MatchResult per person/organization mention.
    """
    person_candidates = [CandidateRecord(id=p.id, name=p.full_name) for p in people]
    org_candidates = [CandidateRecord(id=o.id, name=o.name) for o in orgs]

    logger.debug(
        "Reconciling %d entities against %d people, %d organizations",
        len(entities),
        len(person_candidates),
        len(org_candidates),
    )

    results: list[MatchResult] = []
    for entity in entities:
        if entity.type == "topic":
            continue

        candidates = person_candidates if entity.type == "person" else org_candidates
        best = find_best_match(entity.name, candidates)
        verdict, action = classify_match(best, entity.confidence)

        organization_id = None
        if entity.type == "person" and entity.organization:
            org_best = find_best_match(entity.organization, org_candidates)
            if org_best is not None and org_best.score >= EXACT_THRESHOLD:
                organization_id = org_best.id

        results.append(
            MatchResult(
                type=entity.type,
                extracted_name=entity.name,
                context=entity.context,
                confidence=entity.confidence,
                match=verdict,
                suggested_action=action,
                title=entity.title if entity.type == "person" else None,
                organization_name=entity.organization if entity.type == "person" else None,
                organization_id=organization_id,
            )
        )
        logger.debug(
            "%s %r -> %s (score=%.3f, action=%s)",
            entity.type,
            entity.name,
            verdict.type.value,
            verdict.score,
            action.value,
        )

    return results

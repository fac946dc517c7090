"""Tests for reconciling extracted mentions against a roster.

Covers topic filtering, verdict thresholds, suggested actions,
ordering, and organization resolution for people.
"""

from __future__ import annotations

import pytest

from conflux.matching.matcher import ScoredCandidate
from conflux.matching.models import MatchVerdict, SuggestedAction, VerdictType
from conflux.matching.reconciler import classify_match, reconcile
from conflux.models import Organization, Person

from conftest import make_entity


@pytest.fixture
def people() -> list[Person]:
    return [
        Person(id="p1", workspace_id="w1", full_name="John Smith", title="CTO"),
        Person(id="p2", workspace_id="w1", full_name="Mary Jones"),
    ]


@pytest.fixture
def orgs() -> list[Organization]:
    return [Organization(id="o1", workspace_id="w1", name="Acme Corp")]


def _candidate(score: float) -> ScoredCandidate:
    return ScoredCandidate(id="x1", name="Existing", score=score)


class TestClassification:
    def test_exact_at_threshold(self):
        verdict, action = classify_match(_candidate(0.9), confidence=0.1)
        assert verdict.type is VerdictType.EXACT
        assert verdict.existing_id == "x1"
        assert action is SuggestedAction.LINK

    def test_just_below_exact_is_partial(self):
        verdict, action = classify_match(_candidate(0.89999), confidence=1.0)
        assert verdict.type is VerdictType.PARTIAL
        assert action is SuggestedAction.REVIEW

    def test_partial_at_threshold(self):
        verdict, action = classify_match(_candidate(0.6), confidence=1.0)
        assert verdict.type is VerdictType.PARTIAL
        assert verdict.existing_name == "Existing"
        assert action is SuggestedAction.REVIEW

    def test_below_partial_is_new(self):
        verdict, action = classify_match(_candidate(0.59999), confidence=0.95)
        assert verdict.type is VerdictType.NEW
        assert verdict.existing_id is None
        assert verdict.score == 0
        assert action is SuggestedAction.CREATE

    def test_no_match_confident_creates(self):
        _, action = classify_match(None, confidence=0.7)
        assert action is SuggestedAction.CREATE

    def test_no_match_unsure_reviews(self):
        _, action = classify_match(None, confidence=0.69)
        assert action is SuggestedAction.REVIEW


class TestVerdictInvariant:
    def test_new_with_existing_id_rejected(self):
        with pytest.raises(ValueError):
            MatchVerdict(type=VerdictType.NEW, existing_id="p1", score=0)

    def test_new_with_score_rejected(self):
        with pytest.raises(ValueError):
            MatchVerdict(type=VerdictType.NEW, score=0.4)

    def test_exact_without_existing_id_rejected(self):
        with pytest.raises(ValueError):
            MatchVerdict(type=VerdictType.EXACT, score=1.0)


class TestReconcile:
    def test_topics_excluded(self):
        assert reconcile([make_entity("Q4 roadmap", type="topic")], [], []) == []

    def test_empty_input(self, people, orgs):
        assert reconcile([], people, orgs) == []

    def test_first_name_only_needs_review(self):
        results = reconcile(
            [make_entity("John", confidence=0.6)],
            [Person(id="p1", workspace_id="w1", full_name="John Smith")],
            [],
        )
        assert len(results) == 1
        assert results[0].match.type is VerdictType.NEW
        assert results[0].suggested_action is SuggestedAction.REVIEW

    def test_exact_organization_links(self, orgs):
        results = reconcile(
            [make_entity("Acme Corp", type="organization", confidence=0.95)], [], orgs
        )
        match = results[0].match
        assert match.type is VerdictType.EXACT
        assert match.existing_id == "o1"
        assert match.score == 1.0
        assert results[0].suggested_action is SuggestedAction.LINK

    def test_typo_links_at_exact_boundary(self, people):
        results = reconcile([make_entity("Jon Smith")], people, [])
        assert results[0].match.type is VerdictType.EXACT
        assert results[0].match.existing_id == "p1"

    def test_partial_match_reviews(self, people):
        results = reconcile([make_entity("Jonathan Smith", confidence=1.0)], people, [])
        assert results[0].match.type is VerdictType.PARTIAL
        assert results[0].match.existing_name == "John Smith"
        assert results[0].suggested_action is SuggestedAction.REVIEW

    def test_people_only_match_people(self, people, orgs):
        results = reconcile(
            [make_entity("Acme Corp", type="person", confidence=0.9)], people, orgs
        )
        assert results[0].match.type is VerdictType.NEW

    def test_order_preserved_without_topics(self, people, orgs):
        entities = [
            make_entity("Mary Jones"),
            make_entity("budget", type="topic"),
            make_entity("Acme Corp", type="organization"),
            make_entity("Priya Patel", confidence=0.85),
        ]
        results = reconcile(entities, people, orgs)
        assert [r.extracted_name for r in results] == ["Mary Jones", "Acme Corp", "Priya Patel"]
        assert [r.type for r in results] == ["person", "organization", "person"]

    def test_carries_context_and_confidence(self, people):
        results = reconcile(
            [make_entity("Mary Jones", confidence=0.8, context="led the demo")], people, []
        )
        assert results[0].context == "led the demo"
        assert results[0].confidence == 0.8


class TestOrganizationResolution:
    def test_person_org_resolved_when_exact(self, people, orgs):
        entity = make_entity("Priya Patel", title="VP Sales", organization="ACME corp")
        result = reconcile([entity], people, orgs)[0]
        assert result.title == "VP Sales"
        assert result.organization_name == "ACME corp"
        assert result.organization_id == "o1"

    def test_person_org_unresolved_when_not_exact(self, people, orgs):
        entity = make_entity("Priya Patel", organization="Acme")
        result = reconcile([entity], people, orgs)[0]
        assert result.organization_name == "Acme"
        assert result.organization_id is None

    def test_organization_mentions_never_carry_person_fields(self, orgs):
        entity = make_entity("Acme Corp", type="organization", title="ignored", organization="x")
        result = reconcile([entity], [], orgs)[0]
        assert result.title is None
        assert result.organization_name is None

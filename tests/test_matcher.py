"""Tests for best-candidate selection."""

from __future__ import annotations

from conflux.matching.matcher import CandidateRecord, find_best_match


def test_no_candidates_returns_none():
    assert find_best_match("Alice", []) is None


def test_nothing_above_floor_returns_none():
    assert find_best_match("Zzyzx", [CandidateRecord(id="1", name="Alice")]) is None


def test_floor_is_exclusive():
    # "ab" vs "ac": one substitution over length 2 -> exactly 0.5
    assert find_best_match("ab", [CandidateRecord(id="1", name="ac")]) is None


def test_picks_highest_score():
    candidates = [
        CandidateRecord(id="p1", name="Jonathan Smith"),
        CandidateRecord(id="p2", name="John Smith"),
    ]
    best = find_best_match("Jon Smith", candidates)
    assert best is not None
    assert best.id == "p2"
    assert best.name == "John Smith"


def test_ties_keep_first_encountered():
    candidates = [
        CandidateRecord(id="o1", name="Acme Corp"),
        CandidateRecord(id="o2", name="ACME CORP"),
    ]
    best = find_best_match("acme corp", candidates)
    assert best.id == "o1"
    assert best.score == 1.0


def test_partial_first_name_is_below_floor():
    # containment score 0.36 never clears 0.5
    assert find_best_match("John", [CandidateRecord(id="p1", name="John Smith")]) is None

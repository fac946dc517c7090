"""Reviewer-adjustable decisions built from reconciliation results."""

from conflux.review.decisions import DecisionAction, DecisionEditor, EntityDecision, build_decisions

__all__ = ["DecisionAction", "DecisionEditor", "EntityDecision", "build_decisions"]

"""Entity reconciliation: similarity scoring, candidate matching, and
classification of extracted mentions against a workspace roster.
"""

from conflux.matching.matcher import CandidateRecord, ScoredCandidate, find_best_match
from conflux.matching.models import MatchResult, MatchVerdict, SuggestedAction, VerdictType
from conflux.matching.reconciler import reconcile
from conflux.matching.similarity import similarity_score

__all__ = [
    "CandidateRecord",
    "MatchResult",
    "MatchVerdict",
    "ScoredCandidate",
    "SuggestedAction",
    "VerdictType",
    "find_best_match",
    "reconcile",
    "similarity_score",
]

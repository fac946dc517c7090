"""Best-candidate lookup over a workspace-scoped candidate list."""

from __future__ import annotations

from dataclasses import dataclass

from conflux.matching.similarity import similarity_score

# Candidates must score strictly above this to be considered at all
MATCH_FLOOR = 0.5


@dataclass(frozen=True, slots=True)
class CandidateRecord:
    """Projection of an existing person or organization used for matching."""

    id: str
    name: str


@dataclass(frozen=True, slots=True)
class ScoredCandidate:
    """A candidate together with its similarity to the searched name."""

    id: str
    name: str
    score: float


def find_best_match(
    name: str, candidates: list[CandidateRecord]
) -> ScoredCandidate | None:
    """Return the highest-scoring candidate above MATCH_FLOOR, or None.

    Ties keep the first candidate encountered (only a strictly greater
    score replaces the current best).
    """
    best: ScoredCandidate | None = None

    for candidate in candidates:
        score = similarity_score(name, candidate.name)
        if score > MATCH_FLOOR and (best is None or score > best.score):
            best = ScoredCandidate(id=candidate.id, name=candidate.name, score=score)

    return best

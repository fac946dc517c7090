"""Two-pass application of reviewed decisions to the database."""

from conflux.commit.applier import CommitApplier, CommitFailure, CommitResult

__all__ = ["CommitApplier", "CommitFailure", "CommitResult"]

"""Pydantic models for reconciliation output."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class VerdictType(str, Enum):
    """How an extracted mention relates to the existing roster."""

    EXACT = "exact"
    PARTIAL = "partial"
    NEW = "new"


class SuggestedAction(str, Enum):
    """What the reconciler proposes doing with a mention."""

    LINK = "link"
    CREATE = "create"
    REVIEW = "review"


class MatchVerdict(BaseModel):
    """Classified match of one mention against the roster.

    existing_id is present iff the verdict is exact or partial; a new
    verdict always scores 0.
    """

    model_config = ConfigDict(frozen=True)

    type: VerdictType
    existing_id: str | None = None
    existing_name: str | None = None
    score: float = Field(ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_consistency(self) -> MatchVerdict:
        if self.type is VerdictType.NEW:
            if self.existing_id is not None:
                raise ValueError("new verdict cannot reference an existing record")
            if self.score != 0:
                raise ValueError("new verdict must score 0")
        elif self.existing_id is None:
            raise ValueError(f"{self.type.value} verdict requires existing_id")
        return self


class MatchResult(BaseModel):
    """Reconciliation outcome for one person or organization mention."""

    model_config = ConfigDict(frozen=True)

    type: Literal["person", "organization"]
    extracted_name: str
    context: str = ""
    confidence: float = Field(ge=0.0, le=1.0)
    match: MatchVerdict
    suggested_action: SuggestedAction
    title: str | None = None
    organization_name: str | None = None
    organization_id: str | None = None

"""Pydantic models for validating entity extraction output.

The extraction model returns loosely-shaped JSON; these models define
the contract the reconciler consumes. Field aliases accept the camelCase
keys the prompt asks for.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExtractedEntity(BaseModel):
    """A single person, organization, or topic mention."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    type: Literal["person", "organization", "topic"]
    name: str = Field(min_length=1)
    context: str = ""
    confidence: float = Field(ge=0.0, le=1.0)
    alternative_names: list[str] = Field(default_factory=list, alias="alternativeNames")
    title: str | None = None
    organization: str | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("context", mode="before")
    @classmethod
    def _coerce_context(cls, v: object) -> str:
        return "" if v is None else str(v)

    @field_validator("title", "organization", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ExtractionResult(BaseModel):
    """Complete extraction result for one capture."""

    entities: list[ExtractedEntity] = Field(default_factory=list)
    summary: str = ""

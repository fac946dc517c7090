"""Conflux relationship manager: smart capture and entity reconciliation."""

__version__ = "0.1.0"

from conflux.models import (
    Affiliation,
    Interaction,
    InteractionType,
    Organization,
    Person,
)

__all__ = [
    "Affiliation",
    "Interaction",
    "InteractionType",
    "Organization",
    "Person",
    "__version__",
]

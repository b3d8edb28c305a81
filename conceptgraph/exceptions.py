"""Custom exceptions for the conceptgraph package."""

from typing import List, Optional


class ConceptGraphError(Exception):
    """Base class for all engine errors."""


class ConceptValidationError(ConceptGraphError, ValueError):
    """Raised when a concept record violates one or more schema constraints.

    ``errors`` lists every violation found, not just the first.
    """

    def __init__(self, concept_id: Optional[str], errors: List[str]):
        self.concept_id = concept_id
        self.errors = list(errors)
        label = concept_id if concept_id else "<unknown>"
        super().__init__(
            f"Invalid concept {label!r}: " + "; ".join(self.errors)
        )


class StoreFrozenError(ConceptGraphError):
    """Raised when registering into a store that has already been frozen."""


class StoreNotFrozenError(ConceptGraphError):
    """Raised when reading the edge index of a store that is still open."""


class GraphIntegrityError(ConceptGraphError):
    """Raised by the strict validation pass (dangling edges, cycles)."""

    def __init__(self, issues: List[str]):
        self.issues = list(issues)
        super().__init__(
            f"{len(self.issues)} graph integrity issue(s): "
            + "; ".join(self.issues)
        )

"""
In-memory concept registry.

Registration is strict: a malformed record is rejected with every
violation listed. Reads are lenient: an unknown id yields ``None`` or an
empty result. The store is built once, then frozen, which also builds the
reverse edge index used by the query engine.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from conceptgraph.config import DEFAULT_SETTINGS, EngineSettings
from conceptgraph.edge_index import EdgeIndex
from conceptgraph.exceptions import (
    ConceptValidationError,
    StoreFrozenError,
    StoreNotFrozenError,
)
from conceptgraph.models import BatchResult, Concept, RegistrationFailure
from conceptgraph.utils import timed
from conceptgraph.validation import assert_valid

logger = logging.getLogger(__name__)

ConceptInput = Union[Concept, Mapping[str, Any]]

_ID_SEQUENCE_FIELDS = ("prerequisites", "enables", "related_concepts")


# =========================================================================
# Validation
# =========================================================================


def _describe_error(err: Dict[str, Any]) -> str:
    """Turn one pydantic error entry into a readable violation message."""
    loc = err.get("loc", ())
    field = str(loc[0]) if loc else "record"
    etype = err.get("type", "")

    if etype in ("missing", "string_too_short") and len(loc) == 1:
        return f"Missing required field: {field}"
    if etype == "literal_error" and len(loc) == 1:
        return f"Invalid {field}: {err.get('input')}"
    if etype == "string_pattern_mismatch" and field == "id":
        return "id must be in kebab-case format (e.g., gradient-descent)"
    if field in _ID_SEQUENCE_FIELDS:
        return f"{field} must be a sequence of concept ids"
    if etype == "model_type" and not loc:
        return "concept record must be a mapping"
    dotted = ".".join(str(part) for part in loc)
    return f"{dotted or field}: {err.get('msg')}"


def validate_concept(record: ConceptInput) -> Concept:
    """Validate *record* and return it as a ``Concept``.

    Raises:
        ConceptValidationError: listing all violations found.
    """
    if isinstance(record, Concept):
        return record

    concept_id = record.get("id") if isinstance(record, Mapping) else None
    try:
        return Concept.model_validate(record)
    except ValidationError as exc:
        errors: List[str] = []
        for err in exc.errors():
            message = _describe_error(err)
            if message not in errors:
                errors.append(message)
        raise ConceptValidationError(
            concept_id if isinstance(concept_id, str) else None, errors
        ) from exc


# =========================================================================
# Store
# =========================================================================


class ConceptStore:
    """Registry of concept records keyed by id, in registration order."""

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or DEFAULT_SETTINGS
        self._concepts: Dict[str, Concept] = {}
        self._edge_index: Optional[EdgeIndex] = None
        self._frozen = False

    # --- Registration ----------------------------------------------------

    def register(self, record: ConceptInput) -> Concept:
        """Validate and insert *record*, replacing any entry with the same id.

        Raises:
            ConceptValidationError: if the record is malformed.
            StoreFrozenError: if the store has already been frozen.
        """
        if self._frozen:
            raise StoreFrozenError(
                "Cannot register concepts after freeze(); build a new store."
            )
        concept = validate_concept(record)
        if concept.id in self._concepts:
            logger.warning("Concept %r re-registered; replacing prior entry.", concept.id)
        self._concepts[concept.id] = concept
        return concept

    def register_batch(self, records: Iterable[ConceptInput]) -> BatchResult:
        """Register every record, collecting failures instead of raising."""
        result = BatchResult()
        for record in records:
            try:
                self.register(record)
                result.successful += 1
            except ConceptValidationError as exc:
                result.failed += 1
                result.errors.append(
                    RegistrationFailure(concept_id=exc.concept_id, errors=exc.errors)
                )
                logger.error("Failed to register concept %r: %s", exc.concept_id, exc.errors)

        logger.info(
            "Batch registration: %d succeeded, %d failed.",
            result.successful, result.failed,
        )
        return result

    # --- Lifecycle -------------------------------------------------------

    def freeze(self, strict: Optional[bool] = None) -> "ConceptStore":
        """Build the edge index and close the store to further registration.

        With *strict* (defaulting to ``settings.strict_validation``) the
        content is checked for dangling prerequisites and cycles first, and
        the store stays open if that check fails.

        Raises:
            GraphIntegrityError: in strict mode, if the content is invalid.
        """
        if self._frozen:
            return self

        concepts = self.get_all()
        with timed("Edge index build"):
            index = EdgeIndex.build(concepts)

        if self.settings.strict_validation if strict is None else strict:
            assert_valid(concepts, index)

        self._edge_index = index
        self._frozen = True
        logger.info(
            "Store frozen: %d concepts, %d edges.",
            len(concepts), index.number_of_edges(),
        )
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def edge_index(self) -> EdgeIndex:
        if self._edge_index is None:
            raise StoreNotFrozenError("Call freeze() before querying the edge index.")
        return self._edge_index

    # --- Lookups ---------------------------------------------------------

    def get(self, concept_id: str) -> Optional[Concept]:
        return self._concepts.get(concept_id)

    def get_all(self) -> Tuple[Concept, ...]:
        return tuple(self._concepts.values())

    def get_by_layer(self, layer: str) -> List[Concept]:
        return [c for c in self._concepts.values() if c.layer == layer]

    def get_by_domain(self, domain: str) -> List[Concept]:
        """Concepts whose primary or secondary domain is *domain*."""
        return [
            c for c in self._concepts.values()
            if c.domain == domain or domain in c.secondary_domains
        ]

    def get_by_layer_and_domain(self, layer: str, domain: str) -> List[Concept]:
        return [c for c in self.get_by_domain(domain) if c.layer == layer]

    def search(self, query: str) -> List[Concept]:
        """Case-insensitive substring search over name, tags, and definition."""
        needle = query.lower()
        return [
            c for c in self._concepts.values()
            if needle in c.name.lower()
            or any(needle in tag.lower() for tag in c.metadata.tags)
            or needle in c.definition.lower()
        ]

    def __len__(self) -> int:
        return len(self._concepts)

    def __contains__(self, concept_id: object) -> bool:
        return concept_id in self._concepts

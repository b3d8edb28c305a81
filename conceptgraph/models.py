"""
Pydantic models for the concept graph engine.

Concept records: layers, domains, metadata, the ``Concept`` itself.
Graph outputs: nodes, edges, subgraphs, dependency trees, breadcrumbs.
Reports: batch registration results, health reports, graph metrics.
"""

from typing import Dict, List, Literal, Optional, Tuple, get_args

from pydantic import BaseModel, ConfigDict, Field


# =========================================================================
# Enumerations
# =========================================================================

Layer = Literal["objects", "structures", "rules", "computation", "applications"]

Domain = Literal[
    "linear-algebra",
    "calculus",
    "probability",
    "statistics",
    "optimization",
    "topology",
    "geometry",
    "information-theory",
    "machine-learning",
    "deep-learning",
]

# Ordered from most elementary to most applied.
LAYER_ORDER: Tuple[str, ...] = get_args(Layer)
DOMAINS: Tuple[str, ...] = get_args(Domain)

LAYER_NAMES: Dict[str, str] = {
    "objects": "Objects",
    "structures": "Structures",
    "rules": "Rules",
    "computation": "Computation",
    "applications": "Applications",
}

DOMAIN_NAMES: Dict[str, str] = {
    "linear-algebra": "Linear Algebra",
    "calculus": "Calculus",
    "probability": "Probability",
    "statistics": "Statistics",
    "optimization": "Optimization",
    "topology": "Topology",
    "geometry": "Geometry",
    "information-theory": "Information Theory",
    "machine-learning": "Machine Learning",
    "deep-learning": "Deep Learning",
}

CONCEPT_ID_PATTERN = r"^[a-z0-9]+(-[a-z0-9]+)*$"


# =========================================================================
# Concept records
# =========================================================================


class ConceptMetadata(BaseModel):
    """Authoring metadata attached to a concept."""

    model_config = ConfigDict(frozen=True)

    difficulty: int = Field(default=1, ge=1, le=5)
    estimated_time: Optional[str] = None
    tags: Tuple[str, ...] = ()
    is_advanced: bool = False


class Concept(BaseModel):
    """A single learnable unit and its declared prerequisite edges."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, pattern=CONCEPT_ID_PATTERN)
    name: str = Field(min_length=1)
    layer: Layer
    domain: Domain
    definition: str = Field(min_length=1)
    visualization: str = Field(min_length=1)

    prerequisites: Tuple[str, ...] = ()
    enables: Tuple[str, ...] = ()
    related_concepts: Tuple[str, ...] = ()
    secondary_domains: Tuple[Domain, ...] = ()

    intuition: Optional[str] = None
    ml_relevance: Optional[str] = None
    metadata: ConceptMetadata = Field(default_factory=ConceptMetadata)


# =========================================================================
# Graph outputs
# =========================================================================


class GraphNode(BaseModel):
    """A concept as a node for graph visualisation consumers."""

    id: str
    label: str
    layer: Layer
    domain: Domain
    group: str


class GraphEdge(BaseModel):
    """A prerequisite edge, pointing from prerequisite to dependent."""

    source: str
    target: str


class Subgraph(BaseModel):
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)


class DependencyTree(BaseModel):
    """Nested view of a concept and everything it rests on."""

    id: str
    name: str
    layer: Layer
    prerequisites: List["DependencyTree"] = Field(default_factory=list)


DependencyTree.model_rebuild()


class Breadcrumb(BaseModel):
    id: str
    name: str
    layer: Layer


# =========================================================================
# Reports
# =========================================================================


class RegistrationFailure(BaseModel):
    concept_id: Optional[str] = None
    errors: List[str] = Field(default_factory=list)


class BatchResult(BaseModel):
    """Outcome of ``ConceptStore.register_batch``."""

    successful: int = 0
    failed: int = 0
    errors: List[RegistrationFailure] = Field(default_factory=list)


class HealthReport(BaseModel):
    """Result of the strict content validation pass."""

    healthy: bool = True
    issues: List[str] = Field(default_factory=list)
    missing_prerequisites: List[Tuple[str, str]] = Field(default_factory=list)
    cycles: List[List[str]] = Field(default_factory=list)
    declared_only_edges: List[Tuple[str, str]] = Field(default_factory=list)


class GraphMetrics(BaseModel):
    """Summary statistics over a frozen store."""

    total_concepts: int = 0
    total_edges: int = 0
    by_layer: Dict[str, int] = Field(default_factory=dict)
    by_domain: Dict[str, int] = Field(default_factory=dict)
    average_prerequisites: float = 0.0
    root_concepts: int = 0
    leaf_concepts: int = 0
    max_depth: int = 0
    depth_distribution: List[int] = Field(default_factory=list)
    is_dag: bool = True

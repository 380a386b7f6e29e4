"""
In-memory shape model.

Shapes are frozen dataclasses: once the reader has built one it never
changes, so a parsed model can be shared by concurrent validation units
and reused across validate() calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Iterator, Optional, Union

from rdf_shapecheck.shacl.patterns import BoundedPattern, PatternCache
from rdf_shapecheck.terms import Term
from rdf_shapecheck.vocabulary import SH

Numeric = Union[int, float]


class Severity(Enum):
    """SHACL validation severity levels."""

    VIOLATION = f"{SH}Violation"
    WARNING = f"{SH}Warning"
    INFO = f"{SH}Info"

    @classmethod
    def from_term(cls, term: Term) -> Optional["Severity"]:
        """The severity named by an IRI term, or None if unknown."""
        for severity in cls:
            if term.is_iri and term.lex == severity.value:
                return severity
        return None


class ShapeKind(Enum):
    """Node shape or property shape."""

    NODE = f"{SH}NodeShape"
    PROPERTY = f"{SH}PropertyShape"


class NodeKind(Enum):
    """SHACL node kinds for sh:nodeKind constraint."""

    IRI = f"{SH}IRI"
    BLANK_NODE = f"{SH}BlankNode"
    LITERAL = f"{SH}Literal"
    BLANK_NODE_OR_IRI = f"{SH}BlankNodeOrIRI"
    BLANK_NODE_OR_LITERAL = f"{SH}BlankNodeOrLiteral"
    IRI_OR_LITERAL = f"{SH}IRIOrLiteral"

    def accepts(self, term: Term) -> bool:
        """Whether a term's kind is admitted by this node kind."""
        if term.is_iri:
            return self in (NodeKind.IRI, NodeKind.BLANK_NODE_OR_IRI, NodeKind.IRI_OR_LITERAL)
        if term.is_bnode:
            return self in (
                NodeKind.BLANK_NODE, NodeKind.BLANK_NODE_OR_IRI, NodeKind.BLANK_NODE_OR_LITERAL
            )
        return self in (NodeKind.LITERAL, NodeKind.BLANK_NODE_OR_LITERAL, NodeKind.IRI_OR_LITERAL)


class ConstraintComponent(Enum):
    """Constraint components reported as sh:sourceConstraintComponent."""

    MIN_COUNT = f"{SH}MinCountConstraintComponent"
    MAX_COUNT = f"{SH}MaxCountConstraintComponent"
    DATATYPE = f"{SH}DatatypeConstraintComponent"
    CLASS = f"{SH}ClassConstraintComponent"
    NODE_KIND = f"{SH}NodeKindConstraintComponent"
    PATTERN = f"{SH}PatternConstraintComponent"
    MIN_LENGTH = f"{SH}MinLengthConstraintComponent"
    MAX_LENGTH = f"{SH}MaxLengthConstraintComponent"
    IN = f"{SH}InConstraintComponent"
    HAS_VALUE = f"{SH}HasValueConstraintComponent"
    MIN_INCLUSIVE = f"{SH}MinInclusiveConstraintComponent"
    MAX_INCLUSIVE = f"{SH}MaxInclusiveConstraintComponent"
    MIN_EXCLUSIVE = f"{SH}MinExclusiveConstraintComponent"
    MAX_EXCLUSIVE = f"{SH}MaxExclusiveConstraintComponent"
    QUALIFIED_MIN_COUNT = f"{SH}QualifiedMinCountConstraintComponent"
    QUALIFIED_MAX_COUNT = f"{SH}QualifiedMaxCountConstraintComponent"
    # Not a SHACL component: a validator raised instead of returning results
    INTERNAL_ERROR = "urn:rdf-shapecheck:InternalErrorComponent"


class ConstraintFamily(Enum):
    """Validator families; each owns a disjoint group of ConstraintSet fields."""

    CARDINALITY = "cardinality"
    TYPE = "type"
    STRING = "string"
    VALUE = "value"
    QUALIFIED = "qualified"


# =============================================================================
# Targets
# =============================================================================

@dataclass(frozen=True)
class ClassTarget:
    """sh:targetClass (and implicit class targets)."""
    cls: Term


@dataclass(frozen=True)
class NodeTarget:
    """sh:targetNode."""
    node: Term


@dataclass(frozen=True)
class SubjectsOfTarget:
    """sh:targetSubjectsOf."""
    predicate: Term


@dataclass(frozen=True)
class ObjectsOfTarget:
    """sh:targetObjectsOf."""
    predicate: Term


Target = Union[ClassTarget, NodeTarget, SubjectsOfTarget, ObjectsOfTarget]


# =============================================================================
# Constraints
# =============================================================================

@dataclass(frozen=True)
class QualifiedConstraint:
    """sh:qualifiedValueShape with its count bounds (either may be absent)."""
    shape: "Shape"
    min_count: Optional[int] = None
    max_count: Optional[int] = None


# ConstraintSet field name -> owning validator family
_FAMILY_FIELDS = {
    ConstraintFamily.CARDINALITY: ("min_count", "max_count"),
    ConstraintFamily.TYPE: ("datatype", "cls", "node_kind"),
    ConstraintFamily.STRING: ("pattern", "min_length", "max_length"),
    ConstraintFamily.VALUE: (
        "in_values", "has_value",
        "min_inclusive", "max_inclusive", "min_exclusive", "max_exclusive",
    ),
    ConstraintFamily.QUALIFIED: ("qualified",),
}


@dataclass(frozen=True)
class ConstraintSet:
    """
    The constraint values declared on one shape.

    Every field is independently optional. A value that failed to parse
    is simply None; there is no partially-built state.
    """
    min_count: Optional[int] = None
    max_count: Optional[int] = None
    datatype: Optional[Term] = None
    cls: Optional[Term] = None
    node_kind: Optional[NodeKind] = None
    pattern: Optional[BoundedPattern] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    in_values: Optional[tuple[Term, ...]] = None
    has_value: Optional[Term] = None
    min_inclusive: Optional[Numeric] = None
    max_inclusive: Optional[Numeric] = None
    min_exclusive: Optional[Numeric] = None
    max_exclusive: Optional[Numeric] = None
    qualified: Optional[QualifiedConstraint] = None

    def families(self) -> list[ConstraintFamily]:
        """Validator families with at least one constraint present, in fixed order."""
        return [
            family
            for family, names in _FAMILY_FIELDS.items()
            if any(getattr(self, name) is not None for name in names)
        ]

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


# =============================================================================
# Shapes
# =============================================================================

@dataclass(frozen=True)
class Shape:
    """
    A node shape or property shape.

    Attributes:
        id: Shape node in the shapes graph
        kind: NODE or PROPERTY
        targets: Target declarations (explicit and implicit)
        path: Single-predicate path; always set for property shapes
        properties: Child property shapes (node shapes only)
        constraints: Constraints applying to this shape's value nodes
        severity: Severity attached to results of this shape
        message: sh:message overriding default result messages
    """
    id: Term
    kind: ShapeKind
    targets: tuple[Target, ...] = ()
    path: Optional[Term] = None
    properties: tuple["Shape", ...] = ()
    constraints: ConstraintSet = field(default_factory=ConstraintSet)
    severity: Severity = Severity.VIOLATION
    message: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    deactivated: bool = False

    @property
    def is_property_shape(self) -> bool:
        return self.kind == ShapeKind.PROPERTY


@dataclass(frozen=True)
class ConstraintParseWarning:
    """A constraint (or shape) dropped while reading the shapes graph."""
    shape_id: Term
    constraint: Optional[Term]
    reason: str

    def __str__(self) -> str:
        where = self.shape_id.n3()
        if self.constraint is not None:
            where = f"{where} {self.constraint.n3()}"
        return f"{where}: {self.reason}"


@dataclass(frozen=True)
class ShapesModel:
    """
    Parsed shapes graph.

    Holds the top-level shapes, the warnings recorded while parsing, and the
    pattern cache scoped to this model.
    """
    shapes: tuple[Shape, ...]
    warnings: tuple[ConstraintParseWarning, ...] = ()
    patterns: Optional[PatternCache] = field(default=None, compare=False, repr=False)

    def get(self, shape_id: Term) -> Optional[Shape]:
        """Top-level shape by id."""
        for shape in self.shapes:
            if shape.id == shape_id:
                return shape
        return None

    def active_shapes(self) -> list[Shape]:
        return [shape for shape in self.shapes if not shape.deactivated]

    def __iter__(self) -> Iterator[Shape]:
        return iter(self.shapes)

    def __len__(self) -> int:
        return len(self.shapes)

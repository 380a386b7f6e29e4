"""
Shapes graph reader.

Turns a shapes graph into a ShapesModel. Parsing is partial-failure
tolerant: a malformed constraint value is dropped (and recorded as a
ConstraintParseWarning) while the rest of the shape, and the rest of the
graph, still parse. Only a graph with no identifiable shapes is fatal.

Guards:
- sh:pattern sources are length-limited and compiled under a deadline
- sh:in lists are walked iteratively with a link limit, so long or
  cyclic lists fail that one constraint instead of hanging
- numeric parameters must be numeric literals
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from rdf_shapecheck.config import ValidationOptions
from rdf_shapecheck.graph import TripleGraph
from rdf_shapecheck.shacl.errors import (
    ConstraintParseError,
    ListDepthExceeded,
    PatternError,
    PatternTimeoutError,
    ShapesParseError,
)
from rdf_shapecheck.shacl.model import (
    ClassTarget,
    ConstraintParseWarning,
    ConstraintSet,
    NodeKind,
    NodeTarget,
    ObjectsOfTarget,
    QualifiedConstraint,
    Severity,
    Shape,
    ShapeKind,
    ShapesModel,
    SubjectsOfTarget,
    Target,
)
from rdf_shapecheck.shacl.patterns import BoundedPattern, PatternCache
from rdf_shapecheck.terms import Term
from rdf_shapecheck.vocabulary import (
    RDF_FIRST,
    RDF_NIL,
    RDF_REST,
    RDFS_CLASS,
    SH_CLASS,
    SH_DATATYPE,
    SH_DEACTIVATED,
    SH_DESCRIPTION,
    SH_FLAGS,
    SH_HAS_VALUE,
    SH_IN,
    SH_MAX_COUNT,
    SH_MAX_EXCLUSIVE,
    SH_MAX_INCLUSIVE,
    SH_MAX_LENGTH,
    SH_MESSAGE,
    SH_MIN_COUNT,
    SH_MIN_EXCLUSIVE,
    SH_MIN_INCLUSIVE,
    SH_MIN_LENGTH,
    SH_NAME,
    SH_NODE_KIND,
    SH_NODE_SHAPE,
    SH_PATH,
    SH_PATTERN,
    SH_PROPERTY,
    SH_PROPERTY_SHAPE,
    SH_QUALIFIED_MAX_COUNT,
    SH_QUALIFIED_MIN_COUNT,
    SH_QUALIFIED_VALUE_SHAPE,
    SH_SEVERITY,
    SH_TARGET_CLASS,
    SH_TARGET_NODE,
    SH_TARGET_OBJECTS_OF,
    SH_TARGET_SUBJECTS_OF,
    TARGET_PREDICATES,
)

logger = logging.getLogger(__name__)


class ShapesReader:
    """
    Parses SHACL shapes out of a TripleGraph.

    Usage:
        reader = ShapesReader(ValidationOptions(max_list_depth=50))
        model = reader.read(shapes_graph)
        for warning in model.warnings:
            print(warning)

    A reader keeps per-read state and is not meant to be shared between
    threads; the model it returns is immutable.
    """

    def __init__(self, options: Optional[ValidationOptions] = None) -> None:
        self.options = options or ValidationOptions()
        self._reset(None)

    def _reset(self, graph: Optional[TripleGraph]) -> None:
        self._graph = graph
        self._warnings: list[ConstraintParseWarning] = []
        self._parsed: dict[Term, Optional[Shape]] = {}
        self._in_progress: set[Term] = set()
        self._property_typed: set[Term] = set()
        self._patterns = PatternCache(
            max_length=self.options.max_pattern_length,
            timeout=self.options.pattern_timeout_seconds,
        )

    def read(self, graph: TripleGraph) -> ShapesModel:
        """
        Parse every shape in the graph.

        Raises:
            ShapesParseError: if the graph declares no shapes, or none of
                its shape candidates could be parsed
        """
        self._reset(graph)

        node_typed = set(graph.instances_of(SH_NODE_SHAPE))
        self._property_typed = set(graph.instances_of(SH_PROPERTY_SHAPE))
        targeted: set[Term] = set()
        for predicate in TARGET_PREDICATES:
            targeted.update(graph.subjects_with_predicate(predicate))
        parents = set(graph.subjects_with_predicate(SH_PROPERTY))
        referenced = set(graph.objects_with_predicate(SH_PROPERTY))

        candidates = node_typed | self._property_typed | targeted | parents | referenced
        if not candidates:
            raise ShapesParseError("No shapes found in shapes graph")

        # Property shapes reached only through sh:property are validated
        # through their parent, not on their own.
        top_level = sorted(
            (
                node for node in candidates
                if node in node_typed
                or node in targeted
                or node in parents
                or (node in self._property_typed and node not in referenced)
            ),
            key=Term.sort_key,
        )

        shapes: list[Shape] = []
        for node in top_level:
            shape = self._parse_shape(node, as_property=node in self._property_typed)
            if shape is not None:
                shapes.append(shape)

        if not shapes:
            raise ShapesParseError(
                f"None of {len(candidates)} shape candidates could be parsed"
            )

        logger.info(
            f"Parsed {len(shapes)} shapes "
            f"({len(self._parsed)} including nested, {len(self._warnings)} warnings, "
            f"{len(self._patterns)} patterns)"
        )
        return ShapesModel(
            shapes=tuple(shapes),
            warnings=tuple(self._warnings),
            patterns=self._patterns,
        )

    # =========================================================================
    # Shapes
    # =========================================================================

    def _parse_shape(self, node: Term, as_property: bool) -> Optional[Shape]:
        """Parse (or fetch the already parsed) shape rooted at node."""
        if node in self._parsed:
            return self._parsed[node]
        if node in self._in_progress:
            self._warn(node, None, "Shape refers to itself; nested reference ignored")
            return None

        self._in_progress.add(node)
        try:
            shape = self._build_shape(node, as_property)
        finally:
            self._in_progress.discard(node)

        self._parsed[node] = shape
        return shape

    def _build_shape(self, node: Term, as_property: bool) -> Optional[Shape]:
        graph = self._graph
        path = graph.value(node, SH_PATH)

        if path is not None:
            if not path.is_iri:
                self._warn(node, SH_PATH, "Only single-predicate paths are supported; shape skipped")
                return None
            kind = ShapeKind.PROPERTY
        elif as_property or node in self._property_typed:
            self._warn(node, SH_PATH, "Property shape has no sh:path; shape skipped")
            return None
        else:
            kind = ShapeKind.NODE

        properties: list[Shape] = []
        if kind == ShapeKind.NODE:
            for child in graph.objects(node, SH_PROPERTY):
                prop = self._parse_shape(child, as_property=True)
                if prop is not None:
                    properties.append(prop)

        shape = Shape(
            id=node,
            kind=kind,
            targets=self._parse_targets(node, kind),
            path=path,
            properties=tuple(properties),
            constraints=self._parse_constraints(node),
            severity=self._parse_severity(node),
            message=self._optional(node, SH_MESSAGE, self._parse_string),
            name=self._optional(node, SH_NAME, self._parse_string),
            description=self._optional(node, SH_DESCRIPTION, self._parse_string),
            deactivated=bool(self._optional(node, SH_DEACTIVATED, self._parse_boolean)),
        )
        logger.debug(
            f"Parsed {kind.name.lower()} shape {node.n3()}: "
            f"{len(shape.targets)} targets, {len(properties)} properties, "
            f"families={[f.value for f in shape.constraints.families()]}"
        )
        return shape

    def _parse_targets(self, node: Term, kind: ShapeKind) -> tuple[Target, ...]:
        graph = self._graph
        targets: list[Target] = []

        for cls in graph.objects(node, SH_TARGET_CLASS):
            if self._check_iri(node, SH_TARGET_CLASS, cls):
                targets.append(ClassTarget(cls))
        for target in graph.objects(node, SH_TARGET_NODE):
            targets.append(NodeTarget(target))
        for predicate in graph.objects(node, SH_TARGET_SUBJECTS_OF):
            if self._check_iri(node, SH_TARGET_SUBJECTS_OF, predicate):
                targets.append(SubjectsOfTarget(predicate))
        for predicate in graph.objects(node, SH_TARGET_OBJECTS_OF):
            if self._check_iri(node, SH_TARGET_OBJECTS_OF, predicate):
                targets.append(ObjectsOfTarget(predicate))

        # A node shape that is also a class targets its own instances
        if kind == ShapeKind.NODE and RDFS_CLASS in graph.types(node):
            targets.append(ClassTarget(node))

        return tuple(dict.fromkeys(targets))

    # =========================================================================
    # Constraints
    # =========================================================================

    def _parse_constraints(self, node: Term) -> ConstraintSet:
        return ConstraintSet(
            min_count=self._optional(node, SH_MIN_COUNT, self._parse_count),
            max_count=self._optional(node, SH_MAX_COUNT, self._parse_count),
            datatype=self._optional(node, SH_DATATYPE, self._parse_iri),
            cls=self._optional(node, SH_CLASS, self._parse_iri),
            node_kind=self._optional(node, SH_NODE_KIND, self._parse_node_kind),
            pattern=self._parse_pattern(node),
            min_length=self._optional(node, SH_MIN_LENGTH, self._parse_count),
            max_length=self._optional(node, SH_MAX_LENGTH, self._parse_count),
            in_values=self._optional(node, SH_IN, self._parse_list),
            has_value=self._graph.value(node, SH_HAS_VALUE),
            min_inclusive=self._optional(node, SH_MIN_INCLUSIVE, self._parse_numeric),
            max_inclusive=self._optional(node, SH_MAX_INCLUSIVE, self._parse_numeric),
            min_exclusive=self._optional(node, SH_MIN_EXCLUSIVE, self._parse_numeric),
            max_exclusive=self._optional(node, SH_MAX_EXCLUSIVE, self._parse_numeric),
            qualified=self._parse_qualified(node),
        )

    def _optional(
        self,
        node: Term,
        predicate: Term,
        parser: Callable[[Term], Any],
    ) -> Any:
        """
        Parse the value of (node, predicate) with parser.

        Returns None when the predicate is absent or its value is rejected;
        rejections are recorded as warnings.
        """
        value = self._graph.value(node, predicate)
        if value is None:
            return None
        try:
            return parser(value)
        except ConstraintParseError as e:
            self._warn(node, predicate, str(e))
            return None

    def _parse_pattern(self, node: Term) -> Optional[BoundedPattern]:
        source = self._optional(node, SH_PATTERN, self._parse_string)
        if source is None:
            return None
        flags = self._optional(node, SH_FLAGS, self._parse_string) or ""
        try:
            return self._patterns.get(source, flags)
        except PatternTimeoutError as e:
            self._warn(node, SH_PATTERN, f"Pattern dropped after timeout: {e}")
        except PatternError as e:
            self._warn(node, SH_PATTERN, f"Pattern dropped: {e}")
        return None

    def _parse_qualified(self, node: Term) -> Optional[QualifiedConstraint]:
        shape_node = self._graph.value(node, SH_QUALIFIED_VALUE_SHAPE)
        if shape_node is None:
            return None

        if shape_node.is_literal:
            self._warn(node, SH_QUALIFIED_VALUE_SHAPE, "Qualified value shape must be a node")
            return None

        nested = self._parse_shape(shape_node, as_property=False)
        if nested is None:
            self._warn(node, SH_QUALIFIED_VALUE_SHAPE, "Qualified value shape could not be parsed")
            return None

        min_count = self._optional(node, SH_QUALIFIED_MIN_COUNT, self._parse_count)
        max_count = self._optional(node, SH_QUALIFIED_MAX_COUNT, self._parse_count)
        if min_count is None and max_count is None:
            self._warn(
                node, SH_QUALIFIED_VALUE_SHAPE,
                "Qualified value shape has neither qualifiedMinCount nor qualifiedMaxCount",
            )
            return None

        return QualifiedConstraint(shape=nested, min_count=min_count, max_count=max_count)

    def _parse_severity(self, node: Term) -> Severity:
        value = self._graph.value(node, SH_SEVERITY)
        if value is None:
            return Severity.VIOLATION
        severity = Severity.from_term(value)
        if severity is None:
            self._warn(node, SH_SEVERITY, f"Unknown severity {value.n3()}; using sh:Violation")
            return Severity.VIOLATION
        return severity

    # =========================================================================
    # Value parsers (raise ConstraintParseError)
    # =========================================================================

    def _parse_count(self, value: Term) -> int:
        """Parse a non-negative integer literal."""
        number = value.to_python() if value.is_literal else None
        if not isinstance(number, int) or isinstance(number, bool):
            raise ConstraintParseError(f"Expected an integer literal, got {value.n3()}")
        if number < 0:
            raise ConstraintParseError(f"Expected a non-negative integer, got {number}")
        return number

    def _parse_numeric(self, value: Term) -> int | float:
        """Parse a numeric literal (integer or float)."""
        number = value.to_python() if value.is_literal else None
        if not isinstance(number, (int, float)) or isinstance(number, bool):
            raise ConstraintParseError(f"Expected a numeric literal, got {value.n3()}")
        return number

    def _parse_string(self, value: Term) -> str:
        if not value.is_literal:
            raise ConstraintParseError(f"Expected a literal, got {value.n3()}")
        return value.lex

    def _parse_boolean(self, value: Term) -> bool:
        parsed = value.to_python() if value.is_literal else None
        if not isinstance(parsed, bool):
            raise ConstraintParseError(f"Expected a boolean literal, got {value.n3()}")
        return parsed

    def _parse_iri(self, value: Term) -> Term:
        if not value.is_iri:
            raise ConstraintParseError(f"Expected an IRI, got {value.n3()}")
        return value

    def _parse_node_kind(self, value: Term) -> NodeKind:
        if value.is_iri:
            for kind in NodeKind:
                if kind.value == value.lex:
                    return kind
        raise ConstraintParseError(f"Unknown node kind {value.n3()}")

    def _parse_list(self, head: Term) -> Optional[tuple[Term, ...]]:
        """
        Parse an RDF list into a tuple of its members.

        The walk is iterative and stops with ListDepthExceeded once
        max_list_depth members have been read and the list still goes on,
        which also ends traversal of a cyclic list. An empty list means no
        constraint and yields None.
        """
        graph = self._graph
        max_depth = self.options.max_list_depth
        items: list[Term] = []
        current = head

        while current != RDF_NIL:
            if len(items) >= max_depth:
                raise ListDepthExceeded(f"RDF list exceeds maximum depth of {max_depth}")
            if current.is_literal:
                raise ConstraintParseError(f"Malformed RDF list at {current.n3()}")
            first = graph.value(current, RDF_FIRST)
            rest = graph.value(current, RDF_REST)
            if first is None or rest is None:
                raise ConstraintParseError(f"Malformed RDF list at {current.n3()}")
            items.append(first)
            current = rest

        return tuple(items) or None

    # =========================================================================
    # Warnings
    # =========================================================================

    def _check_iri(self, node: Term, predicate: Term, value: Term) -> bool:
        if value.is_iri:
            return True
        self._warn(node, predicate, f"Expected an IRI, got {value.n3()}")
        return False

    def _warn(self, shape_id: Term, constraint: Optional[Term], reason: str) -> None:
        warning = ConstraintParseWarning(shape_id, constraint, reason)
        self._warnings.append(warning)
        logger.warning(f"Shapes graph: {warning}")


def read_shapes(graph: TripleGraph, options: Optional[ValidationOptions] = None) -> ShapesModel:
    """Parse a shapes graph into a ShapesModel."""
    return ShapesReader(options).read(graph)


def parse(graph: TripleGraph, options: Optional[ValidationOptions] = None) -> list[Shape]:
    """
    Parse a shapes graph into its top-level shapes.

    Raises:
        ShapesParseError: if the graph has no identifiable shapes
    """
    return list(read_shapes(graph, options).shapes)

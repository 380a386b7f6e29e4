"""
SHACL validation engine.

Parses shapes into an immutable model, selects focus nodes, runs the
constraint validators on a worker pool and aggregates a report.
"""

from rdf_shapecheck.shacl.engine import ValidationEngine, ValidationUnit, validate
from rdf_shapecheck.shacl.errors import (
    ConstraintParseError,
    EngineError,
    ListDepthExceeded,
    PatternError,
    PatternTimeoutError,
    ShaclError,
    ShapesParseError,
)
from rdf_shapecheck.shacl.model import (
    ClassTarget,
    ConstraintComponent,
    ConstraintFamily,
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
)
from rdf_shapecheck.shacl.reader import ShapesReader, parse, read_shapes
from rdf_shapecheck.shacl.report import (
    ValidationReport,
    ValidationResult,
    ValidationState,
    ValidationStats,
)
from rdf_shapecheck.shacl.targets import select_targets

__all__ = [
    # Engine
    "ValidationEngine",
    "ValidationUnit",
    "validate",
    # Reader
    "ShapesReader",
    "parse",
    "read_shapes",
    "select_targets",
    # Model
    "Shape",
    "ShapeKind",
    "ShapesModel",
    "ConstraintSet",
    "ConstraintFamily",
    "ConstraintComponent",
    "ConstraintParseWarning",
    "QualifiedConstraint",
    "NodeKind",
    "Severity",
    "ClassTarget",
    "NodeTarget",
    "SubjectsOfTarget",
    "ObjectsOfTarget",
    # Report
    "ValidationReport",
    "ValidationResult",
    "ValidationState",
    "ValidationStats",
    # Errors
    "ShaclError",
    "ShapesParseError",
    "EngineError",
    "ConstraintParseError",
    "ListDepthExceeded",
    "PatternError",
    "PatternTimeoutError",
]

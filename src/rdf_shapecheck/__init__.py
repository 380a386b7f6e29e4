"""
rdf-shapecheck: SHACL validation over in-memory RDF graphs, powered by Polars.

Validates a data graph against a shapes graph and returns an itemized,
queryable report.
"""

__version__ = "0.1.0"

from rdf_shapecheck.terms import Term, TermKind, TermDict
from rdf_shapecheck.graph import TripleGraph
from rdf_shapecheck.config import ValidationOptions, OptionsValidator, ConfigValidationError
from rdf_shapecheck.shacl import (
    ValidationEngine,
    ValidationReport,
    ValidationResult,
    ShapesModel,
    ShapesReader,
    Severity,
    ShaclError,
    ShapesParseError,
    EngineError,
    validate,
)

__all__ = [
    "Term",
    "TermKind",
    "TermDict",
    "TripleGraph",
    # Options
    "ValidationOptions",
    "OptionsValidator",
    "ConfigValidationError",
    # Validation
    "validate",
    "ValidationEngine",
    "ValidationReport",
    "ValidationResult",
    "ShapesModel",
    "ShapesReader",
    "Severity",
    # Errors
    "ShaclError",
    "ShapesParseError",
    "EngineError",
]

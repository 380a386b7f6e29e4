"""Exceptions raised by the SHACL engine."""

from __future__ import annotations

from typing import Optional

from rdf_shapecheck.terms import Term


class ShaclError(Exception):
    """Base class for engine errors."""
    pass


class ShapesParseError(ShaclError):
    """The shapes graph has no identifiable shapes; validation is meaningless."""
    pass


class EngineError(ShaclError):
    """Validation could not start (bad inputs or options)."""
    pass


class ConstraintParseError(ShaclError):
    """A single constraint value is malformed; only that constraint is dropped."""

    def __init__(self, message: str, shape_id: Optional[Term] = None,
                 constraint: Optional[Term] = None):
        super().__init__(message)
        self.shape_id = shape_id
        self.constraint = constraint


class ListDepthExceeded(ConstraintParseError):
    """An RDF list is longer than the configured bound (or cyclic)."""
    pass


class PatternError(ShaclError):
    """A pattern was rejected: too long, bad flags, or failed to compile."""
    pass


class PatternTimeoutError(PatternError):
    """Compiling or matching a pattern exceeded its deadline."""
    pass

"""Shared pieces for the constraint validators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from rdf_shapecheck.graph import TripleGraph
from rdf_shapecheck.shacl.model import ConstraintComponent, Shape
from rdf_shapecheck.shacl.report import ValidationResult
from rdf_shapecheck.terms import Term


@dataclass(frozen=True)
class ValidatorContext:
    """
    Read-only inputs shared by every validator call in a run.

    Attributes:
        graph: The data graph
        subclass_inference: Honor rdfs:subClassOf for sh:class
    """
    graph: TripleGraph
    subclass_inference: bool = False


def value_nodes(graph: TripleGraph, focus: Term, shape: Shape) -> list[Term]:
    """Values of the shape's path on focus; a node shape's value is the focus itself."""
    if shape.path is None:
        return [focus]
    return graph.objects(focus, shape.path)


def build_result(
    shape: Shape,
    focus: Term,
    component: ConstraintComponent,
    default_message: str,
    value: Optional[Term] = None,
    **details: Any,
) -> ValidationResult:
    """A result carrying the shape's severity; sh:message wins over default_message."""
    return ValidationResult(
        severity=shape.severity,
        focus_node=focus,
        shape_id=shape.id,
        path=shape.path,
        message=shape.message or default_message,
        component=component,
        value=value,
        details=details,
    )

"""
Value type validator: sh:datatype, sh:class and sh:nodeKind.

- datatype: each value must be a literal with exactly that datatype and,
  for numeric and boolean datatypes, a lexical form that parses
- class: each value must be an IRI or blank node with an rdf:type naming
  the class (exact match unless subclass inference is enabled)
- nodeKind: each value's term kind must be admitted
"""

from __future__ import annotations

from rdf_shapecheck.shacl.model import ConstraintComponent, Shape
from rdf_shapecheck.shacl.report import ValidationResult
from rdf_shapecheck.shacl.targets import has_type
from rdf_shapecheck.shacl.validators.helpers import ValidatorContext, build_result
from rdf_shapecheck.terms import NUMERIC_DATATYPES, XSD_BOOLEAN, Term


def _well_formed(value: Term) -> bool:
    """A literal whose lexical form fits its numeric/boolean datatype."""
    if value.datatype in NUMERIC_DATATYPES:
        return value.is_numeric
    if value.datatype == XSD_BOOLEAN:
        return isinstance(value.to_python(), bool)
    return True


def validate(
    ctx: ValidatorContext,
    focus: Term,
    shape: Shape,
    values: list[Term],
) -> list[ValidationResult]:
    constraints = shape.constraints
    results = []

    if constraints.datatype is not None:
        expected = constraints.datatype
        for value in values:
            if value.is_literal and value.datatype == expected.lex and _well_formed(value):
                continue
            results.append(build_result(
                shape, focus, ConstraintComponent.DATATYPE,
                f"Value does not have datatype {expected.n3()}",
                value=value,
                actual=value.datatype if value.is_literal else value.kind.name,
                expected=expected,
            ))

    if constraints.cls is not None:
        expected = constraints.cls
        for value in values:
            if not value.is_literal and has_type(ctx.graph, value, expected, ctx.subclass_inference):
                continue
            results.append(build_result(
                shape, focus, ConstraintComponent.CLASS,
                f"Value is not an instance of {expected.n3()}",
                value=value,
                actual=value,
                expected=expected,
            ))

    if constraints.node_kind is not None:
        kind = constraints.node_kind
        for value in values:
            if kind.accepts(value):
                continue
            results.append(build_result(
                shape, focus, ConstraintComponent.NODE_KIND,
                f"Value does not match node kind {kind.value.rsplit('#', 1)[-1]}",
                value=value,
                actual=value.kind.name,
                expected=kind.value,
            ))

    return results

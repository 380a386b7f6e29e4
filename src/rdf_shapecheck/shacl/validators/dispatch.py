"""
Fixed dispatch from constraint family to validator function.

Every ConstraintFamily has exactly one entry; validate_shape runs each
family present on a shape and concatenates their results, so one failing
check never hides another.
"""

from __future__ import annotations

from typing import Callable

from rdf_shapecheck.shacl.model import ConstraintFamily, Shape
from rdf_shapecheck.shacl.report import ValidationResult
from rdf_shapecheck.shacl.validators import cardinality, qualified, strings, value_type, values
from rdf_shapecheck.shacl.validators.helpers import ValidatorContext, value_nodes
from rdf_shapecheck.terms import Term

Validator = Callable[[ValidatorContext, Term, Shape, list[Term]], list[ValidationResult]]

VALIDATORS: dict[ConstraintFamily, Validator] = {
    ConstraintFamily.CARDINALITY: cardinality.validate,
    ConstraintFamily.TYPE: value_type.validate,
    ConstraintFamily.STRING: strings.validate,
    ConstraintFamily.VALUE: values.validate,
    ConstraintFamily.QUALIFIED: qualified.validate,
}


def validate_constraints(ctx: ValidatorContext, focus: Term, shape: Shape) -> list[ValidationResult]:
    """Results of the shape's own constraints on focus (child property shapes excluded)."""
    families = shape.constraints.families()
    if not families:
        return []
    nodes = value_nodes(ctx.graph, focus, shape)
    results: list[ValidationResult] = []
    for family in families:
        results.extend(VALIDATORS[family](ctx, focus, shape, nodes))
    return results


def validate_shape(ctx: ValidatorContext, focus: Term, shape: Shape) -> list[ValidationResult]:
    """Results of the shape and all of its property shapes on focus."""
    if shape.deactivated:
        return []
    results = validate_constraints(ctx, focus, shape)
    for prop in shape.properties:
        if not prop.deactivated:
            results.extend(validate_constraints(ctx, focus, prop))
    return results


def conforms(ctx: ValidatorContext, focus: Term, shape: Shape) -> bool:
    """Whether focus produces no results at all against shape."""
    return not validate_shape(ctx, focus, shape)

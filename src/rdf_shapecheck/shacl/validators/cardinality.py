"""
Cardinality validator: sh:minCount and sh:maxCount.

Counts the values of the shape's path on the focus node. Node shapes have
no path and are skipped.
"""

from __future__ import annotations

from rdf_shapecheck.shacl.model import ConstraintComponent, Shape
from rdf_shapecheck.shacl.report import ValidationResult
from rdf_shapecheck.shacl.validators.helpers import ValidatorContext, build_result
from rdf_shapecheck.terms import Term


def validate(
    ctx: ValidatorContext,
    focus: Term,
    shape: Shape,
    values: list[Term],
) -> list[ValidationResult]:
    if shape.path is None:
        return []

    constraints = shape.constraints
    count = len(values)
    results = []

    if constraints.min_count is not None and count < constraints.min_count:
        results.append(build_result(
            shape, focus, ConstraintComponent.MIN_COUNT,
            f"Property has too few values (expected at least {constraints.min_count}, found {count})",
            actual=count, expected=constraints.min_count, comparison=">=",
        ))

    if constraints.max_count is not None and count > constraints.max_count:
        results.append(build_result(
            shape, focus, ConstraintComponent.MAX_COUNT,
            f"Property has too many values (expected at most {constraints.max_count}, found {count})",
            actual=count, expected=constraints.max_count, comparison="<=",
        ))

    return results

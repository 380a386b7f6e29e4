"""
Qualified value shape validator.

Counts how many of the focus node's values conform to the nested shape
(validating it recursively, with every validator family) and checks that
count against sh:qualifiedMinCount / sh:qualifiedMaxCount.
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
    # dispatch imports this module for its table
    from rdf_shapecheck.shacl.validators.dispatch import conforms

    qualified = shape.constraints.qualified
    if qualified is None:
        return []

    count = sum(1 for value in values if conforms(ctx, value, qualified.shape))
    nested = qualified.shape.id.n3()
    results = []

    if qualified.min_count is not None and count < qualified.min_count:
        results.append(build_result(
            shape, focus, ConstraintComponent.QUALIFIED_MIN_COUNT,
            f"Property has too few values conforming to {nested} "
            f"(expected at least {qualified.min_count}, found {count})",
            actual=count, expected=qualified.min_count, comparison=">=",
            total_values=len(values),
        ))

    if qualified.max_count is not None and count > qualified.max_count:
        results.append(build_result(
            shape, focus, ConstraintComponent.QUALIFIED_MAX_COUNT,
            f"Property has too many values conforming to {nested} "
            f"(expected at most {qualified.max_count}, found {count})",
            actual=count, expected=qualified.max_count, comparison="<=",
            total_values=len(values),
        ))

    return results

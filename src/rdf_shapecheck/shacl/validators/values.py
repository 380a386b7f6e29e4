"""
Value validator: sh:in, sh:hasValue and the numeric range constraints.

Term equality is structural, so "1"^^xsd:integer and "1" (xsd:string) are
different values for sh:in and sh:hasValue. Range checks apply to numeric
literals only; other values are left to the datatype check.
"""

from __future__ import annotations

import operator
from typing import Callable

from rdf_shapecheck.shacl.model import ConstraintComponent, Numeric, Shape
from rdf_shapecheck.shacl.report import ValidationResult
from rdf_shapecheck.shacl.validators.helpers import ValidatorContext, build_result
from rdf_shapecheck.terms import Term

# field name, component, passes(value, bound), symbol, message template
_RANGE_CHECKS: tuple[tuple[str, ConstraintComponent, Callable[[Numeric, Numeric], bool], str, str], ...] = (
    ("min_inclusive", ConstraintComponent.MIN_INCLUSIVE, operator.ge, ">=",
     "Value is below minimum (expected >= {bound}, found {actual})"),
    ("max_inclusive", ConstraintComponent.MAX_INCLUSIVE, operator.le, "<=",
     "Value exceeds maximum (expected <= {bound}, found {actual})"),
    ("min_exclusive", ConstraintComponent.MIN_EXCLUSIVE, operator.gt, ">",
     "Value is not above minimum (expected > {bound}, found {actual})"),
    ("max_exclusive", ConstraintComponent.MAX_EXCLUSIVE, operator.lt, "<",
     "Value is not below maximum (expected < {bound}, found {actual})"),
)


def validate(
    ctx: ValidatorContext,
    focus: Term,
    shape: Shape,
    values: list[Term],
) -> list[ValidationResult]:
    constraints = shape.constraints
    results = []

    if constraints.in_values is not None:
        allowed = set(constraints.in_values)
        for value in values:
            if value not in allowed:
                results.append(build_result(
                    shape, focus, ConstraintComponent.IN,
                    "Value is not one of the allowed values",
                    value=value,
                    actual=value,
                    expected=constraints.in_values,
                ))

    if constraints.has_value is not None and constraints.has_value not in values:
        results.append(build_result(
            shape, focus, ConstraintComponent.HAS_VALUE,
            f"Required value {constraints.has_value.n3()} is missing",
            actual=tuple(values),
            expected=constraints.has_value,
        ))

    for name, component, passes, symbol, template in _RANGE_CHECKS:
        bound = getattr(constraints, name)
        if bound is None:
            continue
        for value in values:
            if not value.is_literal or not value.is_numeric:
                continue
            actual = value.to_python()
            if passes(actual, bound):
                continue
            results.append(build_result(
                shape, focus, component,
                template.format(bound=bound, actual=actual),
                value=value,
                actual=actual, expected=bound, comparison=symbol,
            ))

    return results

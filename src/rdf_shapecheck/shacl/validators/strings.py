"""
String validator: sh:pattern, sh:minLength and sh:maxLength.

Applies to literal values only. Each failing check is its own result. A
pattern match that runs past its timeout is logged and counts as no
pattern for that value.
"""

from __future__ import annotations

import logging

from rdf_shapecheck.shacl.errors import PatternTimeoutError
from rdf_shapecheck.shacl.model import ConstraintComponent, Shape
from rdf_shapecheck.shacl.report import ValidationResult
from rdf_shapecheck.shacl.validators.helpers import ValidatorContext, build_result
from rdf_shapecheck.terms import Term

logger = logging.getLogger(__name__)


def validate(
    ctx: ValidatorContext,
    focus: Term,
    shape: Shape,
    values: list[Term],
) -> list[ValidationResult]:
    constraints = shape.constraints
    results = []

    for value in values:
        if not value.is_literal:
            continue
        text = value.lex

        if constraints.pattern is not None:
            pattern = constraints.pattern
            try:
                matched = pattern.search(text)
            except PatternTimeoutError as e:
                logger.warning(f"Skipping pattern check on {focus.n3()} for shape {shape.id.n3()}: {e}")
                matched = True
            if not matched:
                results.append(build_result(
                    shape, focus, ConstraintComponent.PATTERN,
                    f"Value does not match pattern {pattern.source!r}",
                    value=value,
                    actual=text,
                    expected=pattern.source,
                ))

        length = len(text)
        if constraints.min_length is not None and length < constraints.min_length:
            results.append(build_result(
                shape, focus, ConstraintComponent.MIN_LENGTH,
                f"Value is too short (expected at least {constraints.min_length} characters, found {length})",
                value=value,
                actual=length, expected=constraints.min_length, comparison=">=",
            ))
        if constraints.max_length is not None and length > constraints.max_length:
            results.append(build_result(
                shape, focus, ConstraintComponent.MAX_LENGTH,
                f"Value is too long (expected at most {constraints.max_length} characters, found {length})",
                value=value,
                actual=length, expected=constraints.max_length, comparison="<=",
            ))

    return results

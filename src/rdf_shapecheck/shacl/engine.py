"""
Validation engine.

Orchestrates a validation run:
1. Obtain the shapes model (parsing the shapes graph if needed)
2. Select focus nodes for every active shape
3. Expand (shape, focus node) pairs into independent units of work
4. Run the units on a bounded worker pool and merge their results

Units share nothing mutable: both graphs are read-only and validators are
pure functions, so no locking is needed. fail_fast and the deadline are
cooperative; they stop scheduling new units but let in-flight units finish.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from rdf_shapecheck.config import ConfigValidationError, OptionsValidator, ValidationOptions
from rdf_shapecheck.graph import TripleGraph
from rdf_shapecheck.shacl.errors import EngineError
from rdf_shapecheck.shacl.model import ConstraintComponent, Severity, Shape, ShapesModel
from rdf_shapecheck.shacl.reader import ShapesReader
from rdf_shapecheck.shacl.report import (
    ValidationReport,
    ValidationResult,
    ValidationState,
    ValidationStats,
)
from rdf_shapecheck.shacl.targets import sorted_targets
from rdf_shapecheck.shacl.validators.dispatch import validate_constraints
from rdf_shapecheck.shacl.validators.helpers import ValidatorContext
from rdf_shapecheck.terms import Term

logger = logging.getLogger(__name__)

ShapesInput = Union[TripleGraph, ShapesModel]


@dataclass(frozen=True)
class ValidationUnit:
    """One shape's own constraints applied to one focus node."""
    shape: Shape
    focus: Term


class ValidationEngine:
    """
    Validates data graphs against shapes.

    Usage:
        engine = ValidationEngine(ValidationOptions(parallelism=4))
        report = engine.validate(data_graph, shapes_graph)
        if not report.conforms:
            for result in report.violations():
                print(result.message)

    A parsed ShapesModel can be passed instead of a shapes graph to reuse
    it (and its compiled patterns) across runs.
    """

    def __init__(self, options: Optional[ValidationOptions] = None) -> None:
        self.options = options or ValidationOptions()
        try:
            OptionsValidator.validate_or_raise(self.options)
        except ConfigValidationError as e:
            raise EngineError(f"Invalid validation options: {e}") from e

    def load_shapes(self, shapes: ShapesInput) -> ShapesModel:
        """
        Return a ShapesModel for shapes, parsing a graph if given one.

        Raises:
            ShapesParseError: if the shapes graph has no identifiable shapes
            EngineError: if shapes is neither a graph nor a model
        """
        if isinstance(shapes, ShapesModel):
            return shapes
        if isinstance(shapes, TripleGraph):
            return ShapesReader(self.options).read(shapes)
        raise EngineError(f"Expected a TripleGraph or ShapesModel, got {type(shapes).__name__}")

    def plan(self, data_graph: TripleGraph, model: ShapesModel) -> tuple[list[ValidationUnit], int]:
        """
        Expand the model into validation units.

        Returns:
            Tuple of (units, number of distinct focus nodes)
        """
        units: list[ValidationUnit] = []
        focus_nodes: set[Term] = set()
        # A property shape shared by several node shapes runs once per focus node
        seen: set[tuple[Term, Term]] = set()
        for shape in model.active_shapes():
            targets = sorted_targets(shape, data_graph, self.options.subclass_inference)
            if not targets:
                continue
            focus_nodes.update(targets)
            members = [shape] if not shape.constraints.is_empty() else []
            members.extend(p for p in shape.properties if not p.deactivated)
            for focus in targets:
                for member in members:
                    key = (member.id, focus)
                    if key in seen:
                        continue
                    seen.add(key)
                    units.append(ValidationUnit(member, focus))
        return units, len(focus_nodes)

    def validate(self, data_graph: TripleGraph, shapes: ShapesInput) -> ValidationReport:
        """
        Validate data_graph against shapes.

        Args:
            data_graph: Graph to validate
            shapes: Shapes graph or pre-parsed ShapesModel

        Returns:
            ValidationReport (flagged truncated/incomplete if stopped early)

        Raises:
            ShapesParseError: if the shapes graph has no identifiable shapes
            EngineError: on invalid inputs
        """
        if not isinstance(data_graph, TripleGraph):
            raise EngineError(f"Expected a TripleGraph data graph, got {type(data_graph).__name__}")

        stats = ValidationStats(start_time=time.monotonic(), state=ValidationState.RUNNING)
        model = self.load_shapes(shapes)
        units, focus_count = self.plan(data_graph, model)
        stats.shapes = len(model.active_shapes())
        stats.focus_nodes = focus_count
        stats.units_total = len(units)

        ctx = ValidatorContext(graph=data_graph, subclass_inference=self.options.subclass_inference)
        deadline = self.options.deadline_seconds
        deadline_at = stats.start_time + deadline if deadline is not None else None

        if self.options.parallelism <= 1:
            results = self._run_sequential(ctx, units, stats, deadline_at)
        else:
            results = self._run_parallel(ctx, units, stats, deadline_at)

        if stats.state == ValidationState.RUNNING:
            stats.state = ValidationState.COMPLETED
        stats.end_time = time.monotonic()

        report = ValidationReport.from_results(
            results,
            truncated=stats.state == ValidationState.TRUNCATED,
            incomplete=stats.state == ValidationState.INCOMPLETE,
            stats=stats,
        )
        logger.info(
            f"Validated {stats.focus_nodes} focus nodes against {stats.shapes} shapes: "
            f"{stats.units_run}/{stats.units_total} units, {len(report)} results, "
            f"conforms={report.conforms} ({stats.duration_ms:.1f}ms)"
        )
        return report

    # =========================================================================
    # Scheduling
    # =========================================================================

    def _run_sequential(
        self,
        ctx: ValidatorContext,
        units: list[ValidationUnit],
        stats: ValidationStats,
        deadline_at: Optional[float],
    ) -> list[ValidationResult]:
        results: list[ValidationResult] = []
        for unit in units:
            if self._past_deadline(deadline_at, stats):
                break
            unit_results = self._run_unit(ctx, unit)
            self._collect(unit_results, results, stats)
            if self._should_stop_early(unit_results, stats, stats.units_run):
                break
        return results

    def _run_parallel(
        self,
        ctx: ValidatorContext,
        units: list[ValidationUnit],
        stats: ValidationStats,
        deadline_at: Optional[float],
    ) -> list[ValidationResult]:
        results: list[ValidationResult] = []
        window = self.options.parallelism * 2
        remaining: Iterator[ValidationUnit] = iter(units)
        pending: set[Future] = set()
        scheduled = 0
        scheduling = True

        with ThreadPoolExecutor(
            max_workers=self.options.parallelism, thread_name_prefix="shacl-validate"
        ) as executor:
            while True:
                while scheduling and len(pending) < window:
                    if self._past_deadline(deadline_at, stats):
                        scheduling = False
                        break
                    unit = next(remaining, None)
                    if unit is None:
                        scheduling = False
                        break
                    pending.add(executor.submit(self._run_unit, ctx, unit))
                    scheduled += 1

                if not pending:
                    break

                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    unit_results = future.result()
                    self._collect(unit_results, results, stats)
                    if scheduling and self._should_stop_early(unit_results, stats, scheduled):
                        scheduling = False

        return results

    def _run_unit(self, ctx: ValidatorContext, unit: ValidationUnit) -> list[ValidationResult]:
        """Run one unit; an exception becomes an internal-error result."""
        try:
            return validate_constraints(ctx, unit.focus, unit.shape)
        except Exception as e:
            logger.error(
                f"Validator failed on {unit.focus.n3()} for shape {unit.shape.id.n3()}: "
                f"{type(e).__name__}: {e}",
                exc_info=True,
            )
            return [ValidationResult(
                severity=Severity.VIOLATION,
                focus_node=unit.focus,
                shape_id=unit.shape.id,
                path=unit.shape.path,
                message=f"Internal error during validation: {type(e).__name__}: {e}",
                component=ConstraintComponent.INTERNAL_ERROR,
                details={"error": type(e).__name__},
            )]

    def _collect(
        self,
        unit_results: list[ValidationResult],
        results: list[ValidationResult],
        stats: ValidationStats,
    ) -> None:
        stats.units_run += 1
        stats.internal_errors += sum(
            1 for r in unit_results if r.component == ConstraintComponent.INTERNAL_ERROR
        )
        results.extend(unit_results)

    def _past_deadline(self, deadline_at: Optional[float], stats: ValidationStats) -> bool:
        if deadline_at is None or time.monotonic() < deadline_at:
            return False
        if stats.state != ValidationState.INCOMPLETE:
            stats.state = ValidationState.INCOMPLETE
            logger.warning(
                f"Deadline reached after {stats.units_run}/{stats.units_total} units; "
                f"report is incomplete"
            )
        return True

    def _should_stop_early(
        self,
        unit_results: list[ValidationResult],
        stats: ValidationStats,
        scheduled: int,
    ) -> bool:
        """fail_fast: stop scheduling once a violation is seen while units are still unscheduled."""
        if not self.options.fail_fast:
            return False
        if not any(r.severity == Severity.VIOLATION for r in unit_results):
            return False
        if scheduled >= stats.units_total:
            return False
        stats.state = ValidationState.TRUNCATED
        logger.warning(
            f"fail_fast: stopping after first violation "
            f"({stats.units_run}/{stats.units_total} units run)"
        )
        return True


def validate(
    data_graph: TripleGraph,
    shapes: ShapesInput,
    options: Optional[ValidationOptions] = None,
) -> ValidationReport:
    """
    Validate data_graph against a shapes graph or pre-parsed ShapesModel.

    Raises:
        ShapesParseError: if the shapes graph has no identifiable shapes
        EngineError: on invalid inputs or options
    """
    return ValidationEngine(options).validate(data_graph, shapes)
